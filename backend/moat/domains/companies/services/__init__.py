"""
Company Services

The refresh policy is exported here; CompanyService is imported from its
module directly since it depends on the market-data client.
"""

from .refresh_policy import StalenessSnapshot, should_fetch_full_data

__all__ = [
    "StalenessSnapshot",
    "should_fetch_full_data",
]
