"""Key resolution, paths, and constants."""

import json
import os
from pathlib import Path

# ─────────────────────────────────────────────────────
# App home directory: config + logs live here
# ─────────────────────────────────────────────────────
APP_DIR = Path.home() / ".trendformer"
LOGS_DIR = APP_DIR / "logs"
CONFIG_FILE = APP_DIR / "config.json"

# ─────────────────────────────────────────────────────
# Service constants
# ─────────────────────────────────────────────────────
SERVICE_NAME = "trendformer"
SERVICE_VERSION = "1.0.0"
USER_AGENT = f"{SERVICE_NAME}/{SERVICE_VERSION}"

CLAUDE_MODEL = os.environ.get("CLAUDE_MODEL", "claude-sonnet-4-6")

# Keys shown masked by `config show`
SECRET_KEYS = {"ANTHROPIC_API_KEY", "GLASP_API_KEY", "SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_ANON_KEY"}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


# ─────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────
def write_secret_file(path: Path, content: str):
    """Write a file with 0600 permissions (owner read/write only).

    Uses os.open() with explicit mode to avoid a TOCTOU race where the file
    briefly exists with default (world-readable) permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)


def parse_bool(value, default: bool | None = None) -> bool | None:
    """Parse "true"/"false"-style strings. Unknown or empty -> default."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    return default


# ─────────────────────────────────────────────────────
# Key resolution: env → config.json
# ─────────────────────────────────────────────────────
def _get_key(name: str) -> str:
    """Resolve a setting: environment variable first, then config.json."""
    val = os.environ.get(name)
    if val:
        return val
    if CONFIG_FILE.exists():
        try:
            cfg = json.loads(CONFIG_FILE.read_text())
            val = cfg.get(name)
            if val:
                return str(val)
        except Exception:
            pass
    return ""


def get_anthropic_key() -> str:
    return _get_key("ANTHROPIC_API_KEY")


def get_claude_model() -> str:
    return _get_key("CLAUDE_MODEL") or CLAUDE_MODEL


def get_glasp_base_url() -> str:
    return _get_key("GLASP_API_BASE_URL").rstrip("/")


def get_glasp_key() -> str:
    return _get_key("GLASP_API_KEY")


def get_supabase_url() -> str:
    return _get_key("SUPABASE_URL").rstrip("/")


def get_supabase_key() -> str:
    """Service-role key wins over the anon key."""
    return _get_key("SUPABASE_SERVICE_ROLE_KEY") or _get_key("SUPABASE_ANON_KEY")


def use_mock_trends() -> bool:
    """Process-wide mock default. On unless explicitly disabled."""
    return parse_bool(_get_key("USE_MOCK_TRENDS"), default=True)


def mock_fallback_enabled() -> bool:
    return parse_bool(_get_key("MOCK_FALLBACK"), default=True)


def get_request_timeout() -> float:
    raw = _get_key("REQUEST_TIMEOUT")
    try:
        return float(raw) if raw else 10.0
    except ValueError:
        return 10.0


def get_port() -> int:
    raw = _get_key("PORT")
    return int(raw) if raw.isdigit() else 3000


def load_config() -> dict:
    """Load the full config.json."""
    if CONFIG_FILE.exists():
        try:
            return json.loads(CONFIG_FILE.read_text())
        except Exception:
            pass
    return {}


def save_config(config: dict):
    """Save config.json with restricted permissions."""
    APP_DIR.mkdir(parents=True, exist_ok=True)
    write_secret_file(CONFIG_FILE, json.dumps(config, indent=2))


def masked_config() -> dict:
    """config.json contents with secret values masked for display."""
    shown = {}
    for key, value in load_config().items():
        if key in SECRET_KEYS and value:
            value = str(value)
            shown[key] = value[:4] + "…" if len(value) > 8 else "****"
        else:
            shown[key] = value
    return shown
