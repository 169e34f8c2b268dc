"""Secret operations behind the CLI commands."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config import ConfigManager, StoreConfig
from .envfile import DEFAULT_ENV_FILE, DEFAULT_ENVIRONMENT, read_env_file, write_env_file
from .store import SecretDescriptor, SecretStoreAdapter
from .sync import SyncMode, SyncPlan, sync_secrets

logger = logging.getLogger(__name__)


class SecretsManager:
    """
    Main interface for managing the key-value pairs stored in one secret.

    Every mutation reads the full mapping, changes it, and writes the full
    mapping back.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        store: Optional[SecretStoreAdapter] = None,
    ):
        """
        Initialize the secrets manager.

        Args:
            config: Store configuration. Loaded with ``ConfigManager`` if not provided.
            store: Adapter to use instead of one built from ``config``.
        """
        if store is None:
            if config is None:
                config = ConfigManager().read()
            store = SecretStoreAdapter(config)
        self.store = store

    def list_secrets(self) -> Dict[str, str]:
        """Return every key-value pair in the secret."""
        return self.store.fetch()

    def list_remote_secrets(self) -> List[SecretDescriptor]:
        """Return the secrets visible to the configured credentials."""
        return self.store.list_all()

    def get_secret(self, key: str) -> Optional[str]:
        """Return the value stored under ``key``, or None if it is absent."""
        return self.store.fetch().get(key)

    def add_secret(self, key: str, value: str) -> Dict[str, str]:
        """Set ``key`` to ``value`` (create or update) and return the new mapping."""
        secrets = self.store.fetch()
        secrets[key] = value
        self.store.update(secrets)
        logger.info("Set %s", key)
        return secrets

    def remove_secret(self, key: str) -> Optional[Dict[str, str]]:
        """
        Delete ``key`` and return the new mapping.

        Returns None without touching the store when the key is not present.
        """
        secrets = self.store.fetch()
        if key not in secrets:
            return None
        del secrets[key]
        self.store.update(secrets)
        logger.info("Removed %s", key)
        return secrets

    def write_env(
        self,
        environment: str = DEFAULT_ENVIRONMENT,
        filename: Union[str, Path] = DEFAULT_ENV_FILE,
    ) -> Dict[str, str]:
        """Write the remote mapping to a ``.env`` file and return it."""
        secrets = self.store.fetch()
        write_env_file(secrets, environment, filename)
        return secrets

    def sync(
        self,
        filename: Union[str, Path] = DEFAULT_ENV_FILE,
        mode: SyncMode = SyncMode.MERGE,
        dry_run: bool = False,
    ) -> SyncPlan:
        """Push a local ``.env`` file to the remote secret."""
        local = read_env_file(filename)
        return sync_secrets(self.store, local, mode=mode, dry_run=dry_run)
