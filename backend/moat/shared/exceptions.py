"""
Domain Errors

Every error the company and valuation domains raise on purpose, plus their
translation into HTTP responses. Each error carries a stable ``error_code``
and the offending values in ``details`` so clients can react without parsing
messages.
"""

# Standard library imports
from typing import Any, Dict, Optional

# Third-party imports
from fastapi import HTTPException


class DomainException(Exception):
    """Root of the application's error tree."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValuationException(DomainException):
    pass


class InvalidValuationInputException(ValuationException):
    """DCF inputs break one of the calculator's invariants."""
    pass


class InvalidProjectionCountException(InvalidValuationInputException):
    """The FCF projections do not cover exactly the forecast horizon."""

    def __init__(self, received: int, expected: int = 10):
        super().__init__(
            message=f"Must provide exactly {expected} years of FCF projections (received {received})",
            error_code="INVALID_PROJECTION_COUNT",
            details={"received": received, "expected": expected}
        )


class InvalidRateRelationshipException(InvalidValuationInputException):
    """The discount rate does not exceed the perpetual growth rate."""

    def __init__(self, discount_rate: float, perpetual_growth_rate: float):
        super().__init__(
            message=(
                f"Discount rate must be greater than perpetual growth rate "
                f"(discount rate {discount_rate}%, growth rate {perpetual_growth_rate}%)"
            ),
            error_code="INVALID_RATE_RELATIONSHIP",
            details={"discount_rate": discount_rate, "perpetual_growth_rate": perpetual_growth_rate}
        )


class InvalidShareCountException(InvalidValuationInputException):
    """Shares outstanding is zero or negative."""

    def __init__(self, shares_outstanding: int):
        super().__init__(
            message=f"Shares outstanding must be positive (received {shares_outstanding})",
            error_code="INVALID_SHARE_COUNT",
            details={"shares_outstanding": shares_outstanding}
        )


class ValuationNotFoundException(ValuationException):
    """No stored scenario matches; without an id the company has none at all."""

    def __init__(self, ticker: str, valuation_id: Optional[int] = None):
        if valuation_id is None:
            message = f"No valuations exist for {ticker}"
        else:
            message = f"No valuation found with ID {valuation_id}"
        super().__init__(
            message=message,
            error_code="VALUATION_NOT_FOUND",
            details={"ticker": ticker, "valuation_id": valuation_id}
        )


class CompanyException(DomainException):
    pass


class CompanyNotFoundException(CompanyException):
    """The ticker has no stored company record."""

    def __init__(self, ticker: str):
        super().__init__(
            message=f"No company found with ticker {ticker}",
            error_code="COMPANY_NOT_FOUND",
            details={"ticker": ticker}
        )


class InvalidTickerException(CompanyException):
    """The market-data provider does not know the ticker."""

    def __init__(self, ticker: str):
        super().__init__(
            message=f"Unknown ticker symbol: '{ticker}'",
            error_code="INVALID_TICKER",
            details={"ticker": ticker}
        )


class DataSourceException(CompanyException):
    """The market-data provider timed out or failed."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            message=f"Market data from '{source}' unavailable: {reason}",
            error_code="DATA_SOURCE_ERROR",
            details={"source": source, "reason": reason}
        )


class ConfigurationException(DomainException):
    """A settings class could not be built or failed its own checks."""

    def __init__(self, config_item: str, reason: str):
        super().__init__(
            message=f"Invalid configuration in {config_item}: {reason}",
            error_code="CONFIGURATION_ERROR",
            details={"config_item": config_item, "reason": reason}
        )


STATUS_CODE_MAP = {
    InvalidProjectionCountException: 400,
    InvalidRateRelationshipException: 400,
    InvalidShareCountException: 400,
    InvalidTickerException: 400,
    CompanyNotFoundException: 404,
    ValuationNotFoundException: 404,
    DataSourceException: 502,
    ConfigurationException: 500,
}


def domain_exception_to_http_exception(exception: DomainException) -> HTTPException:
    """
    Build the HTTPException for a domain error.

    Unlisted domain errors become 500. The detail mirrors ErrorDetail in
    the shared response models.
    """
    return HTTPException(
        status_code=STATUS_CODE_MAP.get(type(exception), 500),
        detail={
            "error": exception.message,
            "error_code": exception.error_code,
            "details": exception.details,
        }
    )


def handle_domain_exception(exception: Exception) -> HTTPException:
    """
    Translate any exception raised while serving a request.

    Args:
        exception: Domain error or unexpected failure

    Returns:
        HTTPException; anything outside the domain tree is an INTERNAL_ERROR
    """
    if isinstance(exception, DomainException):
        return domain_exception_to_http_exception(exception)

    return HTTPException(
        status_code=500,
        detail={
            "error": "Internal server error",
            "error_code": "INTERNAL_ERROR",
            "details": {"message": str(exception)},
        }
    )
