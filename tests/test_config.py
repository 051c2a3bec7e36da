"""Tests for configuration loading and validation."""

import pytest

from whatsorder.config import (
    AppConfig,
    DisplayConfig,
    RestaurantConfig,
    SessionConfig,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_default_freshness_window(self):
        assert SessionConfig().freshness_minutes >= 1

    def test_zero_freshness_window(self):
        config = AppConfig(session=SessionConfig(freshness_minutes=0))
        with pytest.raises(ValueError, match="SESSION_FRESHNESS_MINUTES"):
            _validate_config(config)

    def test_zero_recent_orders_limit(self):
        config = AppConfig(display=DisplayConfig(recent_orders_limit=0))
        with pytest.raises(ValueError, match="RECENT_ORDERS_LIMIT"):
            _validate_config(config)

    def test_zero_owner_display_limit(self):
        config = AppConfig(display=DisplayConfig(owner_orders_display_limit=0))
        with pytest.raises(ValueError, match="OWNER_ORDERS_DISPLAY_LIMIT"):
            _validate_config(config)

    def test_blank_restaurant_name(self):
        config = AppConfig(restaurant=RestaurantConfig(name="  "))
        with pytest.raises(ValueError, match="RESTAURANT_NAME"):
            _validate_config(config)


class TestSafeInt:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("SESSION_FRESHNESS_MINUTES", "45")
        assert _safe_int("SESSION_FRESHNESS_MINUTES", "30") == 45

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("SESSION_FRESHNESS_MINUTES", raising=False)
        assert _safe_int("SESSION_FRESHNESS_MINUTES", "30") == 30

    def test_bad_value_names_variable(self, monkeypatch):
        monkeypatch.setenv("RECENT_ORDERS_LIMIT", "five")
        with pytest.raises(ValueError, match="RECENT_ORDERS_LIMIT"):
            _safe_int("RECENT_ORDERS_LIMIT", "5")

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"  # type: ignore[misc]
