"""
Tests for environment-driven configuration.
"""

from __future__ import annotations

import pytest

from risk_config import (
    DOCUMENT_PROFILE,
    NEWS_PROFILE,
    VENDOR_PROFILE,
    VendorThresholds,
    get_settings,
)

ENV_VARS = (
    "AUDIT_HIGH_VOLUME_COUNT",
    "AUDIT_LARGE_AMOUNT",
    "AUDIT_RAPID_WINDOW_DAYS",
    "AUDIT_MIN_DOCUMENTS",
    "AUDIT_MARKET_PREMIUM",
    "AUDIT_DOCUMENT_HIGH_VALUE",
    "AUDIT_MAX_WORKERS",
    "AUDIT_LOG_LEVEL",
    "NEWS_API_KEY",
    "NEWS_API_BASE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_thresholds_defaults(clean_env):
    assert VendorThresholds.from_env() == VendorThresholds()


def test_thresholds_from_env(clean_env):
    clean_env.setenv("AUDIT_LARGE_AMOUNT", "5000000")
    clean_env.setenv("AUDIT_RAPID_WINDOW_DAYS", "3.5")
    clean_env.setenv("AUDIT_MIN_DOCUMENTS", "4")

    thresholds = VendorThresholds.from_env()

    assert thresholds.large_amount == 5_000_000
    assert thresholds.rapid_window_days == 3.5
    assert thresholds.min_documents_on_file == 4
    assert thresholds.high_volume_count == 20


def test_invalid_env_values_fall_back(clean_env):
    clean_env.setenv("AUDIT_HIGH_VOLUME_COUNT", "many")
    clean_env.setenv("AUDIT_MARKET_PREMIUM", "  ")

    thresholds = VendorThresholds.from_env()

    assert thresholds.high_volume_count == 20
    assert thresholds.market_premium_threshold == 0.15


def test_settings(clean_env):
    clean_env.setenv("AUDIT_MAX_WORKERS", "4")
    clean_env.setenv("AUDIT_LOG_LEVEL", "debug")
    clean_env.setenv("NEWS_API_KEY", "secret")

    settings = get_settings()

    assert settings.max_workers == 4
    assert settings.log_level == "DEBUG"
    assert settings.news_api_key == "secret"
    assert settings.news_api_base == "https://newsapi.org/v2"


def test_settings_ignore_bad_worker_count(clean_env):
    clean_env.setenv("AUDIT_MAX_WORKERS", "lots")
    assert get_settings().max_workers is None


def test_profiles_match_published_weights():
    assert VENDOR_PROFILE.base_score == 30
    assert sum(VENDOR_PROFILE.weights.values()) == 95
    assert DOCUMENT_PROFILE.base_score == 20
    assert DOCUMENT_PROFILE.weight("extraction_confidence") == 0
    assert NEWS_PROFILE.weight("keyword:fraud") == 10
    assert NEWS_PROFILE.weight("keyword:unknown") == 0


@pytest.mark.parametrize("value", ["0", "00", " 0 "])
def test_settings_ignore_zero_worker_count(clean_env, value):
    clean_env.setenv("AUDIT_MAX_WORKERS", value)
    assert get_settings().max_workers is None
