"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path

from dotenv import load_dotenv
import os

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _project_root() -> Path:
    """Resolve project root (the directory holding the erp_data package)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Uses override=True to ensure .env values take precedence over existing env vars.
    """
    root = _project_root()
    env_path = root / ".env"
    load_dotenv(env_path, override=True)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_optional_bool(key: str, default: bool) -> bool:
    """Get optional env var as bool (1/true/yes/on, 0/false/no/off); default if missing or unrecognized."""
    load_config()
    raw = os.getenv(key, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return default


# --- Public config accessors ---

def api_base_url() -> str:
    """Optional: base URL of the primary records service. No trailing slash."""
    return get_optional("ERP_API_BASE_URL", "http://localhost:3000/api/v1").rstrip("/")


def api_timeout_seconds() -> int:
    """Optional: HTTP timeout for the primary records service. Default 30."""
    timeout = get_optional_int("ERP_API_TIMEOUT", 30)
    return timeout if timeout > 0 else 30


def api_token() -> str | None:
    """Optional: bearer token sent to the primary records service."""
    val = get_optional("ERP_API_TOKEN", "")
    return val or None


def use_backend() -> bool:
    """
    Optional: whether the primary records service is enabled. Default True.

    Turning it off is the administrative switch that hands reads and writes to
    the managed store (when configured) or to the local store.
    """
    return get_optional_bool("ERP_USE_BACKEND", True)


def supabase_url() -> str | None:
    """Optional: Supabase project URL for the managed store."""
    val = get_optional("SUPABASE_URL", "")
    return val or None


def supabase_key() -> str | None:
    """Optional: Supabase anon key for the managed store."""
    val = get_optional("SUPABASE_ANON_KEY", "")
    return val or None


def has_supabase_config() -> bool:
    return bool(supabase_url() and supabase_key())


def local_store_mode() -> str:
    """
    Optional: local store backend. One of memory (default), file, off.
    Unknown values fall back to memory.
    """
    mode = get_optional("ERP_LOCAL_STORE", "memory").lower()
    return mode if mode in ("memory", "file", "off") else "memory"


def local_store_path() -> Path:
    """Optional: JSON file used when ERP_LOCAL_STORE=file. Default data/local_store.json."""
    raw = get_optional("ERP_LOCAL_STORE_PATH", "")
    if raw:
        return Path(raw)
    return project_root() / "data" / "local_store.json"


def local_store_key() -> str:
    """Optional: name of the single blob holding every module's local records."""
    return get_optional("ERP_LOCAL_STORE_KEY", "orbit-erp-records")


def log_level() -> str:
    """Optional: logging level name. Default INFO."""
    return get_optional("ERP_LOG_LEVEL", "INFO").upper()


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
