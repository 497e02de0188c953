"""
Valuation Domain Configuration

Configuration settings and constants for company valuation calculations.
"""

# Standard library imports
from functools import lru_cache
from typing import Dict, Any

# Third-party imports
from pydantic import Field

# App imports
from moat.shared.config_helpers import BaseDomainConfig, create_domain_config


class ValuationConfig(BaseDomainConfig):
    """Configuration for the valuation domain."""

    # DCF scenario defaults
    default_scenario_name: str = Field(default="Base Case")

    # Sensitivity grid: five rows/columns centred on the scenario's rates
    sensitivity_discount_step: float = Field(default=1.0)
    sensitivity_growth_step: float = Field(default=0.5)
    sensitivity_decimals: int = Field(default=2)

    def get_sensitivity_params(self) -> Dict[str, Any]:
        """
        Get sensitivity grid parameters.

        Returns:
            Dictionary of sensitivity parameters
        """
        return {
            "discount_step": self.sensitivity_discount_step,
            "growth_step": self.sensitivity_growth_step,
        }


@lru_cache()
def get_valuation_config() -> ValuationConfig:
    """Get the cached valuation configuration."""
    return create_domain_config(ValuationConfig)


__all__ = [
    "ValuationConfig",
    "get_valuation_config",
]
