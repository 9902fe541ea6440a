"""
Runtime configuration read from the environment.

Values come from process environment variables, optionally seeded from a
.env file in the working directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .env import load_env

DEFAULT_DATABASE_URL = "sqlite:///data/people.db"
DEFAULT_AGIFY_URL = "https://api.agify.io"
DEFAULT_GENDERIZE_URL = "https://api.genderize.io"
DEFAULT_NATIONALIZE_URL = "https://api.nationalize.io"
DEFAULT_LOOKUP_TIMEOUT = 15.0


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    agify_url: str = DEFAULT_AGIFY_URL
    genderize_url: str = DEFAULT_GENDERIZE_URL
    nationalize_url: str = DEFAULT_NATIONALIZE_URL
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    log_level: str = "INFO"
    log_dir: Path = Path("logs")


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_LOOKUP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"LOOKUP_TIMEOUT must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise ValueError(f"LOOKUP_TIMEOUT must be positive, got {raw!r}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None, use_dotenv: bool = True) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)
        use_dotenv: Load .env into os.environ first

    Raises:
        ValueError: If LOOKUP_TIMEOUT is not a positive number
    """
    if environ is None:
        if use_dotenv:
            load_env()
        environ = os.environ

    return Settings(
        database_url=environ.get("PERSONENRICH_DATABASE_URL") or DEFAULT_DATABASE_URL,
        agify_url=environ.get("AGIFY_URL") or DEFAULT_AGIFY_URL,
        genderize_url=environ.get("GENDERIZE_URL") or DEFAULT_GENDERIZE_URL,
        nationalize_url=environ.get("NATIONALIZE_URL") or DEFAULT_NATIONALIZE_URL,
        lookup_timeout=_parse_timeout(environ.get("LOOKUP_TIMEOUT")),
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
        log_dir=Path(environ.get("LOG_DIR") or "logs"),
    )
