"""
AWS Secrets CLI

Keep one AWS Secrets Manager secret and a local .env file in sync.
"""

__version__ = "1.0.0"

from .config import ConfigManager, StoreConfig
from .core import SecretsManager
from .errors import ErrorKind, SecretsError
from .store import SecretStoreAdapter
from .sync import SyncMode, SyncPlan

__all__ = [
    "ConfigManager",
    "ErrorKind",
    "SecretStoreAdapter",
    "SecretsError",
    "SecretsManager",
    "StoreConfig",
    "SyncMode",
    "SyncPlan",
]
