"""
Centralized configuration with environment variable overrides.

Business display values, session expiry and payment gateway settings
are configurable here. Nothing is hardcoded in engine or adapter logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _default_callback_url() -> str:
    explicit = os.getenv("PAYSTACK_CALLBACK_URL")
    if explicit:
        return explicit
    base = os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/")
    return f"{base}/paystack-webhook"


@dataclass(frozen=True)
class BusinessConfig:
    """Operator-facing settings shown in replies."""

    name: str = os.getenv("BUSINESS_NAME", "Transit Express")
    currency: str = os.getenv("CURRENCY", "NGN")
    display_timezone: str = os.getenv("DISPLAY_TIMEZONE", "Africa/Lagos")
    support_contact: str = os.getenv("SUPPORT_CONTACT", "+234 800 000 0000")


@dataclass(frozen=True)
class SessionConfig:
    """Dialogue session lifecycle settings."""

    inactivity_timeout_minutes: int = _safe_int("SESSION_TIMEOUT_MINUTES", "120")


@dataclass(frozen=True)
class PaymentConfig:
    """Payment gateway settings. An empty secret key disables payment links."""

    secret_key: str = os.getenv("PAYSTACK_SECRET_KEY", "")
    base_url: str = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
    callback_url: str = field(default_factory=_default_callback_url)
    timeout_seconds: float = _safe_float("PAYMENT_TIMEOUT_SECONDS", "10")
    customer_email_domain: str = os.getenv("PAYMENT_EMAIL_DOMAIN", "wa.com")

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    payment: PaymentConfig = field(default_factory=PaymentConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.session.inactivity_timeout_minutes < 1:
        raise ValueError(
            "SESSION_TIMEOUT_MINUTES must be >= 1, "
            f"got {config.session.inactivity_timeout_minutes}"
        )
    if config.payment.timeout_seconds <= 0:
        raise ValueError(
            f"PAYMENT_TIMEOUT_SECONDS must be > 0, got {config.payment.timeout_seconds}"
        )
    if not config.business.currency.strip():
        raise ValueError("CURRENCY must not be empty")
    try:
        ZoneInfo(config.business.display_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"DISPLAY_TIMEZONE is not a known timezone: {config.business.display_timezone!r}"
        ) from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
