"""
Shared Domain Utilities

Common utilities and helpers used across multiple domains.
Provides configuration helpers, response models and the exception hierarchy.
"""

from .config_helpers import BaseDomainConfig, create_domain_config, describe_config
from .response_models import (
    APIResponse, ErrorDetail, ErrorResponse, StatusEnum, CompanyResponse, ValuationResponse, AnalysisResponse,
    ERROR_RESPONSES, create_success_response
)
from .exceptions import (
    DomainException, ValuationException, CompanyException,
    InvalidValuationInputException, InvalidProjectionCountException,
    InvalidRateRelationshipException, InvalidShareCountException,
    ValuationNotFoundException, CompanyNotFoundException, InvalidTickerException,
    DataSourceException, ConfigurationException,
    handle_domain_exception, domain_exception_to_http_exception
)

__all__ = [
    # Configuration helpers
    "BaseDomainConfig",
    "create_domain_config",
    "describe_config",

    # Response models and helpers
    "APIResponse", "ErrorDetail", "ErrorResponse", "StatusEnum", "CompanyResponse", "ValuationResponse", "AnalysisResponse",
    "ERROR_RESPONSES", "create_success_response",

    # Exception classes and handlers
    "DomainException", "ValuationException", "CompanyException",
    "InvalidValuationInputException", "InvalidProjectionCountException",
    "InvalidRateRelationshipException", "InvalidShareCountException",
    "ValuationNotFoundException", "CompanyNotFoundException", "InvalidTickerException",
    "DataSourceException", "ConfigurationException",
    "handle_domain_exception", "domain_exception_to_http_exception",
]
