"""Unit tests for configuration validation"""
import pytest

from microhabits import config


def test_defaults_are_valid():
    config.validate_config()


def test_missing_database_url(monkeypatch):
    monkeypatch.setattr(config, "DATABASE_URL", "")

    with pytest.raises(ValueError, match="DATABASE_URL"):
        config.validate_config()


def test_pool_bounds(monkeypatch):
    monkeypatch.setattr(config, "DB_POOL_MIN_SIZE", 5)
    monkeypatch.setattr(config, "DB_POOL_MAX_SIZE", 2)

    with pytest.raises(ValueError, match="DB_POOL_MAX_SIZE"):
        config.validate_config()
