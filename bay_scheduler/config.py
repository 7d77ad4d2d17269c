"""
Centralized configuration with environment variable overrides.

Shop hours, bays, the service catalog mode, and calendar backend
settings are configurable here. The scheduling engine never reads
this module directly; it receives the values it needs at construction.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from bay_scheduler.logging_context import install_session_filter
from bay_scheduler.schemas.shop_schema import Bay, BusinessHours

load_dotenv()

logger = logging.getLogger(__name__)

_WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tues": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thurs": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def parse_weekdays(raw: str) -> frozenset[int]:
    """Parse a comma-separated list of day names or 0-6 indices (Monday=0).

    Examples:
        >>> sorted(parse_weekdays("Sun"))
        [6]
        >>> sorted(parse_weekdays("saturday, 6"))
        [5, 6]
    """
    days: set[int] = set()
    for token in (t.strip() for t in raw.split(",")):
        if not token:
            continue
        key = token.lower()
        if key in _WEEKDAYS:
            days.add(_WEEKDAYS[key])
            continue
        try:
            idx = int(token)
        except ValueError:
            raise ValueError(f"Unknown weekday: {token!r}") from None
        if not 0 <= idx <= 6:
            raise ValueError(f"Weekday index out of range: {idx}")
        days.add(idx)
    return frozenset(days)


@dataclass(frozen=True)
class BusinessConfig:
    """Shop identity and operating hours."""

    name: str = os.getenv("BUSINESS_NAME", "Bill Mitchell Auto")
    phone: str = os.getenv("BUSINESS_PHONE", "(215) 822-1056")
    address: str = os.getenv("BUSINESS_ADDRESS", "57 Bristol Rd, Chalfont, PA")
    timezone: str = os.getenv("BUSINESS_TIMEZONE", "America/New_York")
    open_hour: int = _safe_int("BUSINESS_OPEN_HOUR", "8")
    close_hour: int = _safe_int("BUSINESS_CLOSE_HOUR", "18")
    closed_days: str = os.getenv("BUSINESS_CLOSED_DAYS", "Sunday")

    def business_hours(self) -> BusinessHours:
        return BusinessHours(
            open_hour=self.open_hour,
            close_hour=self.close_hour,
            closed_weekdays=parse_weekdays(self.closed_days),
        )


@dataclass(frozen=True)
class BayConfig:
    """The two service bays, in assignment priority order."""

    bay1_name: str = os.getenv("BAY1_NAME", "Service Bay 1")
    bay1_calendar_id: str = os.getenv("BAY1_CALENDAR_ID", "")
    bay2_name: str = os.getenv("BAY2_NAME", "Service Bay 2")
    bay2_calendar_id: str = os.getenv("BAY2_CALENDAR_ID", "")

    def bays(self) -> tuple[Bay, ...]:
        return (
            Bay(id="bay1", display_name=self.bay1_name, calendar_id=self.bay1_calendar_id),
            Bay(id="bay2", display_name=self.bay2_name, calendar_id=self.bay2_calendar_id),
        )


@dataclass(frozen=True)
class CatalogConfig:
    """Service catalog behaviour for names outside the catalog."""

    default_duration_hours: int = _safe_int("DEFAULT_SERVICE_HOURS", "1")
    strict_service_names: bool = _safe_bool("STRICT_SERVICE_NAMES", "false")


@dataclass(frozen=True)
class GoogleConfig:
    """Calendar store and call-log sheet settings."""

    backend: str = os.getenv("CALENDAR_BACKEND", "memory")
    credentials_file: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    client_email: str = os.getenv("GOOGLE_CLIENT_EMAIL", "")
    private_key: str = os.getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
    sheet_id: str = os.getenv("CALL_LOG_SHEET_ID", "")
    sheet_range: str = os.getenv("CALL_LOG_SHEET_RANGE", "Sheet1!A:G")
    request_timeout_sec: int = _safe_int("CALENDAR_REQUEST_TIMEOUT", "10")


@dataclass(frozen=True)
class ModelConfig:
    """LLM and voice pipeline model settings."""

    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    stt_model: str = os.getenv("STT_MODEL", "nova-3")
    stt_language: str = os.getenv("STT_LANGUAGE", "en")
    tts_model: str = os.getenv("TTS_MODEL", "sonic-2")
    tts_voice_id: str = os.getenv("TTS_VOICE_ID", "79a125e8-cd45-4c13-8a67-188112f4dd22")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    bays: BayConfig = field(default_factory=BayConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    google: GoogleConfig = field(default_factory=GoogleConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_name: str = os.getenv("AGENT_NAME", "shop-receptionist")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "8080")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    biz = config.business
    if not 0 <= biz.open_hour <= 23:
        raise ValueError(f"BUSINESS_OPEN_HOUR must be between 0 and 23, got {biz.open_hour}")
    if not 1 <= biz.close_hour <= 24:
        raise ValueError(f"BUSINESS_CLOSE_HOUR must be between 1 and 24, got {biz.close_hour}")
    if biz.close_hour <= biz.open_hour:
        raise ValueError(
            "BUSINESS_CLOSE_HOUR must be after BUSINESS_OPEN_HOUR, "
            f"got {biz.open_hour}-{biz.close_hour}"
        )
    parse_weekdays(biz.closed_days)

    if config.catalog.default_duration_hours < 1:
        raise ValueError(
            f"DEFAULT_SERVICE_HOURS must be >= 1, got {config.catalog.default_duration_hours}"
        )
    if config.google.backend not in ("memory", "google"):
        raise ValueError(
            f"CALENDAR_BACKEND must be 'memory' or 'google', got {config.google.backend!r}"
        )
    if config.google.request_timeout_sec < 1:
        raise ValueError(
            "CALENDAR_REQUEST_TIMEOUT must be >= 1, "
            f"got {config.google.request_timeout_sec}"
        )
    if config.google.backend == "google":
        missing = [
            name
            for name, value in [
                ("BAY1_CALENDAR_ID", config.bays.bay1_calendar_id),
                ("BAY2_CALENDAR_ID", config.bays.bay2_calendar_id),
            ]
            if not value
        ]
        if missing:
            raise ValueError(f"Google backend requires: {', '.join(missing)}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_filter()
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
