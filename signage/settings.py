import os


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("SIGNAGE_DATABASE_URL", "sqlite:///./signage.db")

# Users and players sign with disjoint secrets.
JWT_SECRET = os.getenv("SIGNAGE_JWT_SECRET", "dev-user-secret-change-me-0123456789abcdef")
JWT_REFRESH_SECRET = os.getenv("SIGNAGE_JWT_REFRESH_SECRET", "dev-refresh-secret-change-me-0123456789ab")
PLAYER_JWT_SECRET = os.getenv("SIGNAGE_PLAYER_JWT_SECRET", "dev-player-secret-change-me-0123456789abc")
JWT_EXPIRES_MIN = int(os.getenv("SIGNAGE_JWT_EXPIRES_MIN", "60"))
JWT_REFRESH_EXPIRES_DAYS = int(os.getenv("SIGNAGE_JWT_REFRESH_EXPIRES_DAYS", "7"))
PLAYER_JWT_EXPIRES_MIN = int(os.getenv("SIGNAGE_PLAYER_JWT_EXPIRES_MIN", "60"))
PLAYER_REFRESH_EXPIRES_DAYS = int(os.getenv("SIGNAGE_PLAYER_REFRESH_EXPIRES_DAYS", "365"))
ACTIVATION_CODE_TTL_HOURS = int(os.getenv("SIGNAGE_ACTIVATION_CODE_TTL_HOURS", "24"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("SIGNAGE_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("SIGNAGE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
QUIET_ACCESS_LOG = _flag("SIGNAGE_QUIET_ACCESS_LOG", "1")

STORAGE_DIR = os.getenv("SIGNAGE_STORAGE_DIR", "storage")
MAX_UPLOAD_BYTES = int(os.getenv("SIGNAGE_MAX_UPLOAD_BYTES", str(250 * 1024 * 1024)))

PLAYER_HEARTBEAT_TIMEOUT_MIN = int(os.getenv("SIGNAGE_PLAYER_HEARTBEAT_TIMEOUT_MIN", "5"))
PLAYER_STATUS_SWEEP_SEC = int(os.getenv("SIGNAGE_PLAYER_STATUS_SWEEP_SEC", "30"))
PLAYER_STATUS_SWEEP_ENABLED = _flag("SIGNAGE_PLAYER_STATUS_SWEEP", "1")

WEBHOOK_TIMEOUT_SEC = int(os.getenv("SIGNAGE_WEBHOOK_TIMEOUT_SEC", "10"))

DEFAULT_TIMEZONE = (os.getenv("SIGNAGE_DEFAULT_TIMEZONE", "UTC") or "").strip() or "UTC"
