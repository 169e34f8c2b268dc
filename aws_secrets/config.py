"""Configuration model and on-disk persistence for the CLI."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ErrorKind, SecretsError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".secrets-config.json"
CONFIG_PATH_ENV = "AWS_SECRETS_CONFIG_PATH"


class StoreConfig(BaseModel):
    """Connection settings for one AWS Secrets Manager secret.

    Frozen: a changed configuration is a new value, never an edited one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: Optional[str] = None
    secret_name: Optional[str] = Field(default=None, alias="secretName")
    access_key_id: Optional[str] = Field(default=None, alias="accessKeyId")
    secret_access_key: Optional[str] = Field(default=None, alias="secretAccessKey")

    @property
    def has_credentials(self) -> bool:
        """True when both halves of an explicit credential pair are set."""
        return bool(self.access_key_id and self.secret_access_key)

    @property
    def is_complete(self) -> bool:
        """True when the CLI has enough to talk to a secret."""
        return bool(self.region and self.secret_name)

    def to_dict(self) -> dict:
        """Serialize using the on-disk key names, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ConfigManager:
    """Reads and writes the whole configuration file at once."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            path = os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_FILE)
        self.path = Path(path)

    @property
    def _is_yaml(self) -> bool:
        return self.path.suffix in [".yaml", ".yml"]

    def read(self) -> StoreConfig:
        """Load the configuration; a missing file is an empty configuration."""
        if not self.path.exists():
            logger.debug("No config file at %s", self.path)
            return StoreConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self._is_yaml:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise SecretsError.wrap(ErrorKind.CONFIGURATION, "read configuration", e) from e

        if data is None:
            return StoreConfig()
        if not isinstance(data, dict):
            raise SecretsError(
                ErrorKind.CONFIGURATION,
                f"Failed to read configuration: {self.path} must contain an object",
            )

        try:
            return StoreConfig(**data)
        except ValidationError as e:
            raise SecretsError.wrap(ErrorKind.CONFIGURATION, "read configuration", e) from e

    def write(self, config: StoreConfig) -> None:
        """Replace the configuration file with ``config``."""
        data = config.to_dict()
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                if self._is_yaml:
                    yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
                else:
                    f.write(json.dumps(data, indent=2))
        except OSError as e:
            raise SecretsError.wrap(ErrorKind.FILESYSTEM, "write configuration", e) from e
        logger.debug("Wrote config to %s", self.path)
