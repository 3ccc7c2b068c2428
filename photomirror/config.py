import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# === PATH CONFIGURATION ===
DATA_DIR = Path("data")
DEFAULT_MEDIA_DIR = "media"
DEFAULT_TOKEN_FILE = DATA_DIR / "token.json"

# === SCOPES ===
SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.readonly"
]

# === REMOTE API ===
LIBRARY_API_URL = "https://photoslibrary.googleapis.com/v1"
PAGE_SIZE = 50
DOWNLOAD_SUFFIX = "=w2048-h1024"
DEFAULT_REDIRECT_URI = "http://localhost:3000/oauth2callback"
DEFAULT_TIMEOUT = 120.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SyncConfig:
    """
    Everything a run needs, resolved once at startup and passed down explicitly.
    """
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    auth_code: Optional[str] = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    media_dir: Path = Path(DEFAULT_MEDIA_DIR)
    token_file: Path = DEFAULT_TOKEN_FILE
    download_suffix: str = DOWNLOAD_SUFFIX
    request_timeout: float = DEFAULT_TIMEOUT
    interactive: bool = False
    preserve_timestamps: bool = True
    log_level: str = "INFO"


def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = _get(env, key)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    value = _get(env, key)
    if value is None:
        return default
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{key} must be positive, got {value!r}")
    return number


def load_config(env: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Build a SyncConfig from environment variables.
    When no mapping is given, a .env file in the working directory is loaded
    first and os.environ is read.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    return SyncConfig(
        client_id=_get(env, "CLIENT_ID"),
        client_secret=_get(env, "CLIENT_SECRET"),
        refresh_token=_get(env, "REFRESH_TOKEN"),
        auth_code=_get(env, "CODE"),
        redirect_uri=_get(env, "REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        media_dir=Path(_get(env, "MEDIA_DIR") or DEFAULT_MEDIA_DIR),
        token_file=Path(_get(env, "TOKEN_FILE") or DEFAULT_TOKEN_FILE),
        download_suffix=_get(env, "DOWNLOAD_SUFFIX") or DOWNLOAD_SUFFIX,
        request_timeout=_get_float(env, "REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
        interactive=_get_bool(env, "INTERACTIVE_AUTH", False),
        preserve_timestamps=_get_bool(env, "PRESERVE_TIMESTAMPS", True),
        log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
    )
