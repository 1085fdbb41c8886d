"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    persistence_enabled: bool
    seed_demo_data: bool
    notification_webhook_url: Optional[str]
    notification_timeout_seconds: float
    notification_sender: str
    default_o_negative_reserve: int
    ranking_preview_limit: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive copies with replace()."""
    return Settings(
        app_name=os.getenv("BLOODLINK_APP_NAME", "BloodLink Matching Engine"),
        app_version=os.getenv("BLOODLINK_APP_VERSION", "1.0.0"),
        log_level=os.getenv("BLOODLINK_LOG_LEVEL", "INFO"),
        database_path=Path(
            os.getenv(
                "BLOODLINK_DATABASE_PATH",
                str(PROJECT_ROOT / "data" / "bloodlink.db"),
            )
        ),
        persistence_enabled=_env_bool("BLOODLINK_PERSISTENCE_ENABLED", True),
        seed_demo_data=_env_bool("BLOODLINK_SEED_DEMO_DATA", True),
        notification_webhook_url=_env_optional("BLOODLINK_NOTIFICATION_WEBHOOK_URL"),
        notification_timeout_seconds=float(
            os.getenv("BLOODLINK_NOTIFICATION_TIMEOUT_SECONDS", "5.0")
        ),
        notification_sender=os.getenv(
            "BLOODLINK_NOTIFICATION_SENDER", "BloodLink <alerts@bloodlink.local>"
        ),
        default_o_negative_reserve=int(os.getenv("BLOODLINK_O_NEGATIVE_RESERVE", "3")),
        ranking_preview_limit=int(os.getenv("BLOODLINK_RANKING_PREVIEW_LIMIT", "20")),
    )
