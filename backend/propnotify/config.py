import logging
import logging.handlers
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql://propnotify:propnotify@db:5432/propnotify"
    secret_key: str = "change-me"
    cors_origins: str = "*"
    cors_allow_credentials: bool = True
    trusted_hosts: str = "*"

    # Database pool
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_recycle_seconds: int = 1800

    # Web Push (VAPID)
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:admin@example.com"

    # Firebase-style push (legacy HTTP API)
    fcm_server_key: str = ""
    fcm_send_url: str = "https://fcm.googleapis.com/fcm/send"

    # Delivery
    push_ttl_seconds: int = 86400
    push_timeout_seconds: float = 10.0
    bulk_batch_size: int = Field(10, ge=1, le=100)
    quiet_hours_utc_offset_minutes: int = 0
    default_icon: str = "/icon-192.png"

    # Analytics
    stats_window_days: int = 30

    # Server-to-server callers targeting another user (X-Service-Key header)
    service_api_key: str = ""

    # Rate limiting
    rate_limit_send: str = "30/minute"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_max_bytes: int = 10_485_760  # 10 MB
    log_backup_count: int = 5

    model_config = {"env_file": ".env"}

    @property
    def effective_database_url(self) -> str:
        # Heroku-style URLs use the deprecated "postgres://" scheme
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def trusted_hosts_list(self) -> list[str]:
        return [h.strip() for h in self.trusted_hosts.split(",") if h.strip()]


settings = Settings()


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> None:
    """Configure application-wide logging with rotating file handlers.

    Handlers:
    - Console: INFO+ with brief format (for docker compose logs)
    - app.log: everything at the configured level, detailed format
    - error.log: ERROR+ only
    - delivery.log: INFO+ from the adapters and the dispatcher, so push
      failures and endpoint expiries can be followed without the rest
    """
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))
    root.addHandler(console)

    detail_fmt = logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    root.addHandler(_rotating_handler(log_dir / "app.log", logging.DEBUG, detail_fmt))
    root.addHandler(_rotating_handler(log_dir / "error.log", logging.ERROR, detail_fmt))

    delivery = _rotating_handler(log_dir / "delivery.log", logging.INFO, detail_fmt)
    for name in ("propnotify.integrations", "propnotify.notifications.service"):
        delivery_logger = logging.getLogger(name)
        delivery_logger.handlers.clear()
        delivery_logger.addHandler(delivery)

    # Third-party chatter
    for name in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "urllib3", "pywebpush"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, dir=%s, max=%s MB x %d backups",
        settings.log_level, log_dir, settings.log_max_bytes // 1_048_576, settings.log_backup_count,
    )
