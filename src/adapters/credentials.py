"""Token file reader."""

from __future__ import annotations

import logging
from pathlib import Path

from core.errors import ConfigError

logger = logging.getLogger(__name__)


def mask_token(token: str) -> str:
    """Printable form of a secret: keeps the last 4 characters at most."""

    if len(token) <= 8:
        return "*" * len(token)
    return "*" * (len(token) - 4) + token[-4:]


def read_token(path: Path) -> str:
    """Read the API token (whitespace-trimmed) from `path`."""

    try:
        token = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        raise ConfigError(f"Token file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read token file {path}: {exc}") from exc

    if not token:
        raise ConfigError(f"Token file is empty: {path}")

    logger.info("Token loaded from %s (%s)", path, mask_token(token))
    return token
