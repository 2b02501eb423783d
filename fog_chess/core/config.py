"""
Configuration loading.

Settings come from environment variables (prefix FOG_CHESS_). Anything not set falls back to a default.
The commit secrets fall back to fresh random values: in a real game they must never be shared or reused.
"""

import logging
import os
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Optional

ENV_PREFIX = "FOG_CHESS_"


def _get(name: str, default: Any, cast: Optional[Callable[[str], Any]] = None) -> Any:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or value == "":
        return default
    return cast(value) if cast else value


def _timeout(value: str) -> Optional[float]:
    """A timeout of zero (or below) means: wait for the oracle as long as it takes."""
    seconds = float(value)
    return seconds if seconds > 0 else None


def _random_secret() -> str:
    # The oracle works with field elements, so the secret is passed on as a decimal string
    return str(int(secrets.token_hex(16), 16))


@dataclass(frozen=True)
class Settings:
    # Oracle calls
    oracle_timeout_s: Optional[float]

    # Persistence
    database_url: str

    # Logging
    log_level: str

    # Secrets committed to the game state once per color, before any move
    white_encrypt_secret: str
    white_mask_secret: str
    black_encrypt_secret: str
    black_mask_secret: str


def load_settings() -> Settings:
    """Read the environment (again). Useful in tests that patch os.environ."""
    return Settings(
        oracle_timeout_s=_get("ORACLE_TIMEOUT_S", None, cast=_timeout),
        database_url=_get("DATABASE_URL", "sqlite:///fog_chess.db"),
        log_level=_get("LOG_LEVEL", "INFO").upper(),
        white_encrypt_secret=_get("WHITE_ENCRYPT_SECRET", _random_secret()),
        white_mask_secret=_get("WHITE_MASK_SECRET", _random_secret()),
        black_encrypt_secret=_get("BLACK_ENCRYPT_SECRET", _random_secret()),
        black_mask_secret=_get("BLACK_MASK_SECRET", _random_secret()),
    )


def configure_logging(settings: Settings) -> None:
    """Entry points call this once. Library code only ever asks for named loggers."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


SETTINGS = load_settings()
