"""Tests for settings and domain configuration."""

import pytest

from moat.config import Settings
from moat.domains.companies.config import CompanyConfig
from moat.domains.valuation.config import ValuationConfig
from moat.shared.config_helpers import create_domain_config, describe_config
from moat.shared.exceptions import ConfigurationException


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DB_ECHO", "true")

    settings = Settings()

    assert settings.is_test is True
    assert settings.db_echo is True


def test_valuation_defaults(monkeypatch):
    monkeypatch.delenv("SENSITIVITY_DISCOUNT_STEP", raising=False)
    monkeypatch.delenv("SENSITIVITY_GROWTH_STEP", raising=False)

    config = create_domain_config(ValuationConfig)

    assert config.default_scenario_name == "Base Case"
    assert config.get_sensitivity_params() == {"discount_step": 1.0, "growth_step": 0.5}


def test_company_config_from_environment(monkeypatch):
    monkeypatch.setenv("FULL_REFRESH_MAX_AGE_DAYS", "30")

    config = create_domain_config(CompanyConfig)

    assert config.full_refresh_max_age_days == 30


def test_non_positive_refresh_age_is_rejected(monkeypatch):
    monkeypatch.setenv("FULL_REFRESH_MAX_AGE_DAYS", "0")

    with pytest.raises(ConfigurationException) as exc_info:
        create_domain_config(CompanyConfig)

    assert "full_refresh_max_age_days" in exc_info.value.message


def test_unparseable_value_is_a_configuration_error(monkeypatch):
    monkeypatch.setenv("SEARCH_LIMIT", "many")

    with pytest.raises(ConfigurationException):
        create_domain_config(CompanyConfig)


def test_describe_config_masks_database_url():
    values = describe_config(CompanyConfig(database_url="postgresql+asyncpg://user:secret@db/moat"))

    assert values["database_url"] == "set"
    assert values["search_limit"] == 10
