"""
Company Data Domain Configuration

Settings for company profile refreshes and the market-data provider.
"""

# Standard library imports
from functools import lru_cache

# Third-party imports
from pydantic import Field

# App imports
from moat.shared.config_helpers import BaseDomainConfig, create_domain_config


class CompanyConfig(BaseDomainConfig):
    """Configuration for the company data domain."""

    # Cached statements older than this are refetched even without an earnings event
    full_refresh_max_age_days: int = Field(default=90)

    # Market data retrieval
    statement_history_years: int = Field(default=10)
    search_limit: int = Field(default=10)
    market_data_timeout_seconds: float = Field(default=15.0)

    def validate_required_fields(self):
        results = super().validate_required_fields()
        results["full_refresh_max_age_days"] = self.full_refresh_max_age_days > 0
        return results


@lru_cache()
def get_company_config() -> CompanyConfig:
    """Provides a cached singleton instance of the CompanyConfig."""
    return create_domain_config(CompanyConfig)


__all__ = [
    "CompanyConfig",
    "get_company_config",
]
