"""
Analysis Services

The metrics module holds the pure ratio and trend functions;
build_quick_analysis assembles them for one company.
"""

from .analysis_service import AnalysisService, build_quick_analysis

__all__ = [
    "AnalysisService",
    "build_quick_analysis",
]
