"""
Valuation Services

Stored DCF scenarios and sensitivity grids.
"""

from .valuation_service import ValuationService

__all__ = [
    "ValuationService",
]
