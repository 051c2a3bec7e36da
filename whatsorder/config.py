"""
Centralized configuration with environment variable overrides.

Restaurant identity, the operator phone number, session freshness and
display limits are configurable here. Nothing is hardcoded in the
resolver, gate or handler logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from whatsorder.logging_context import MessageIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(message_id)s]: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class RestaurantConfig:
    """Restaurant-specific settings loaded from environment or defaults."""

    name: str = os.getenv("RESTAURANT_NAME", "Spice Garden")
    owner_phone: str = os.getenv("RESTAURANT_OWNER_PHONE", "")
    menu_file: str = os.getenv("MENU_FILE", "data/menu.json")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    upi_id: str = os.getenv("UPI_ID", "spicegarden@upi")


@dataclass(frozen=True)
class SessionConfig:
    """Customer session freshness settings."""

    freshness_minutes: int = _safe_int("SESSION_FRESHNESS_MINUTES", "30")


@dataclass(frozen=True)
class DisplayConfig:
    """Limits applied when rendering order lists into chat replies."""

    recent_orders_limit: int = _safe_int("RECENT_ORDERS_LIMIT", "5")
    owner_orders_display_limit: int = _safe_int("OWNER_ORDERS_DISPLAY_LIMIT", "8")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    restaurant: RestaurantConfig = field(default_factory=RestaurantConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.session.freshness_minutes < 1:
        raise ValueError(
            f"SESSION_FRESHNESS_MINUTES must be >= 1, got {config.session.freshness_minutes}"
        )
    if config.display.recent_orders_limit < 1:
        raise ValueError(
            f"RECENT_ORDERS_LIMIT must be >= 1, got {config.display.recent_orders_limit}"
        )
    if config.display.owner_orders_display_limit < 1:
        raise ValueError(
            "OWNER_ORDERS_DISPLAY_LIMIT must be >= 1, "
            f"got {config.display.owner_orders_display_limit}"
        )
    if not config.restaurant.name.strip():
        raise ValueError("RESTAURANT_NAME must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, MessageIdFilter) for f in handler.filters):
            handler.addFilter(MessageIdFilter())
    if not config.restaurant.owner_phone:
        logger.warning("RESTAURANT_OWNER_PHONE is not set; owner commands are disabled")
    logger.info("Configuration loaded for '%s'", config.restaurant.name)
    return config


# Singleton instance
settings = load_config()
