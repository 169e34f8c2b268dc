"""AWS Secrets Manager adapter.

The whole secret payload is one flat JSON object; every read returns the full
mapping and every write replaces it.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from pydantic import BaseModel

from .config import StoreConfig
from .errors import ErrorKind, SecretsError

logger = logging.getLogger(__name__)

SERVICE_NAME = "secretsmanager"


class SecretDescriptor(BaseModel):
    """One entry reported by ``ListSecrets``."""

    name: str
    arn: Optional[str] = None


class SecretStoreAdapter:
    """Typed access to one AWS Secrets Manager secret.

    ``client_factory`` has the signature of ``boto3.client`` and exists so
    tests can hand in a stubbed client.
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        client_factory: Optional[Callable[..., Any]] = None,
    ):
        self._client_factory = client_factory or boto3.client
        self._client = None
        self._config = StoreConfig()
        self._secret_name: Optional[str] = None
        self.configure(config or StoreConfig())

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def secret_name(self) -> Optional[str]:
        return self._secret_name

    def configure(self, config: StoreConfig) -> None:
        """
        Replace the active configuration and drop the current client.

        The client is rebuilt from ``config`` on the next call. A config
        without a secret name keeps the previously active one.
        """
        self._config = config
        self._client = None
        if config.secret_name:
            self._secret_name = config.secret_name

    @property
    def client(self):
        if self._client is None:
            kwargs: Dict[str, Any] = {"region_name": self._config.region}
            if self._config.has_credentials:
                kwargs["aws_access_key_id"] = self._config.access_key_id
                kwargs["aws_secret_access_key"] = self._config.secret_access_key
            logger.debug(
                "Creating %s client (region=%s, explicit credentials=%s)",
                SERVICE_NAME,
                self._config.region,
                self._config.has_credentials,
            )
            self._client = self._client_factory(SERVICE_NAME, **kwargs)
        return self._client

    def _require_secret_name(self) -> str:
        if not self._secret_name:
            raise SecretsError(ErrorKind.CONFIGURATION, "Secret name is not configured")
        return self._secret_name

    def list_all(self) -> List[SecretDescriptor]:
        """List every secret visible to the configured credentials."""
        secrets: List[SecretDescriptor] = []
        try:
            kwargs: Dict[str, Any] = {}
            while True:
                response = self.client.list_secrets(**kwargs)
                for entry in response.get("SecretList") or []:
                    secrets.append(
                        SecretDescriptor(name=entry.get("Name", ""), arn=entry.get("ARN"))
                    )
                next_token = response.get("NextToken")
                if not next_token:
                    break
                kwargs["NextToken"] = next_token
        except Exception as e:
            raise SecretsError.wrap(ErrorKind.TRANSPORT, "list secrets", e) from e

        logger.debug("Listed %d secrets", len(secrets))
        return secrets

    def create(self, name: str) -> None:
        """Create a secret holding an empty JSON object. Fails if ``name`` exists."""
        try:
            self.client.create_secret(Name=name, SecretString=json.dumps({}))
        except Exception as e:
            raise SecretsError.wrap(ErrorKind.TRANSPORT, "create secret", e) from e
        logger.debug("Created secret %s", name)

    def fetch(self) -> Dict[str, str]:
        """Return the current payload of the active secret as a string mapping."""
        secret_id = self._require_secret_name()
        try:
            response = self.client.get_secret_value(
                SecretId=secret_id, VersionStage="AWSCURRENT"
            )
        except Exception as e:
            raise SecretsError.wrap(ErrorKind.TRANSPORT, "fetch secrets", e) from e

        secrets = _parse_payload(response.get("SecretString"))
        logger.debug("Fetched %d keys from %s", len(secrets), secret_id)
        return secrets

    def update(self, secrets: Dict[str, str]) -> None:
        """Overwrite the active secret with ``secrets`` in a single call."""
        secret_id = self._require_secret_name()
        try:
            self.client.update_secret(SecretId=secret_id, SecretString=json.dumps(secrets))
        except Exception as e:
            raise SecretsError.wrap(ErrorKind.TRANSPORT, "update secrets", e) from e
        logger.debug("Updated %s with %d keys", secret_id, len(secrets))


def _parse_payload(payload: Optional[str]) -> Dict[str, str]:
    if not payload:
        return {}

    try:
        data = json.loads(payload)
    except ValueError as e:
        raise SecretsError.wrap(ErrorKind.FORMAT, "fetch secrets", e) from e

    if not isinstance(data, dict):
        raise SecretsError(
            ErrorKind.FORMAT, "Failed to fetch secrets: secret payload is not a JSON object"
        )

    secrets: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, str):
            secrets[key] = value
        elif isinstance(value, (dict, list)):
            raise SecretsError(
                ErrorKind.FORMAT, f"Failed to fetch secrets: value of '{key}' is not a scalar"
            )
        else:
            secrets[key] = json.dumps(value)
    return secrets
