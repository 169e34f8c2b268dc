"""Reading and writing ``.env`` files."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import ErrorKind, SecretsError

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"
DEFAULT_ENVIRONMENT = "development"


def _escape(value: str) -> str:
    return value.replace("\n", "\\n").replace('"', '\\"')


def _unescape(value: str) -> str:
    return value.replace("\\n", "\n").replace('\\"', '"')


def _timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def encode_env(
    secrets: Dict[str, str],
    environment: str = DEFAULT_ENVIRONMENT,
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render secrets as ``.env`` text.

    Output starts with a generated-file header, then one ``KEY="VALUE"`` line
    per secret in insertion order. Newlines and double quotes inside values
    are backslash-escaped; nothing else is.
    """
    content = "# This file is auto-generated. Do not edit manually.\n"
    content += f"# Environment: {environment}\n"
    content += f"# Generated at: {_timestamp(generated_at)}\n\n"

    for key, value in secrets.items():
        content += f'{key}="{_escape(value)}"\n'

    return content


def decode_env(text: str) -> Dict[str, str]:
    """
    Parse ``.env`` text into a mapping.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. A value
    wrapped in one matching pair of single or double quotes loses that pair.
    When a key repeats, the last occurrence wins.
    """
    secrets: Dict[str, str] = {}

    for line in text.split("\n"):
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        # Remove quotes if present
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        secrets[key] = _unescape(value)

    return secrets


def read_env_file(filename: Union[str, Path] = DEFAULT_ENV_FILE) -> Dict[str, str]:
    """Read and decode a ``.env`` file. A missing file is an error, an empty one is not."""
    path = Path(filename)
    if not path.exists():
        raise SecretsError(
            ErrorKind.FILESYSTEM, f"Failed to read .env file: File {filename} not found"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SecretsError.wrap(ErrorKind.FILESYSTEM, "read .env file", e) from e

    secrets = decode_env(text)
    logger.debug("Read %d entries from %s", len(secrets), path)
    return secrets


def write_env_file(
    secrets: Dict[str, str],
    environment: str = DEFAULT_ENVIRONMENT,
    filename: Union[str, Path] = DEFAULT_ENV_FILE,
) -> Path:
    """Encode secrets and write them to ``filename``, replacing its contents."""
    path = Path(filename)
    try:
        path.write_text(encode_env(secrets, environment), encoding="utf-8")
    except OSError as e:
        raise SecretsError.wrap(ErrorKind.FILESYSTEM, "write .env file", e) from e

    logger.debug("Wrote %d entries to %s", len(secrets), path)
    return path
