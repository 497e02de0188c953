"""Tests for domain exception to HTTP mapping."""

import pytest
from fastapi import HTTPException

from moat.shared.exceptions import (
    CompanyNotFoundException,
    ConfigurationException,
    DataSourceException,
    DomainException,
    InvalidProjectionCountException,
    InvalidRateRelationshipException,
    InvalidShareCountException,
    InvalidTickerException,
    ValuationNotFoundException,
    domain_exception_to_http_exception,
    handle_domain_exception,
)


@pytest.mark.parametrize("exception, status_code, error_code", [
    (InvalidProjectionCountException(9), 400, "INVALID_PROJECTION_COUNT"),
    (InvalidRateRelationshipException(3, 5), 400, "INVALID_RATE_RELATIONSHIP"),
    (InvalidShareCountException(0), 400, "INVALID_SHARE_COUNT"),
    (InvalidTickerException("???"), 400, "INVALID_TICKER"),
    (CompanyNotFoundException("AAPL"), 404, "COMPANY_NOT_FOUND"),
    (ValuationNotFoundException("AAPL"), 404, "VALUATION_NOT_FOUND"),
    (DataSourceException("yahoo_finance", "timed out"), 502, "DATA_SOURCE_ERROR"),
    (ConfigurationException("CompanyConfig", "bad value"), 500, "CONFIGURATION_ERROR"),
])
def test_status_codes(exception, status_code, error_code):
    http_exc = domain_exception_to_http_exception(exception)

    assert isinstance(http_exc, HTTPException)
    assert http_exc.status_code == status_code
    assert http_exc.detail["error_code"] == error_code
    assert http_exc.detail["error"] == exception.message


def test_unmapped_domain_exception_is_server_error():
    http_exc = domain_exception_to_http_exception(DomainException("odd state", "ODD"))
    assert http_exc.status_code == 500


def test_unexpected_exception_is_internal_error():
    http_exc = handle_domain_exception(ValueError("boom"))

    assert http_exc.status_code == 500
    assert http_exc.detail["error_code"] == "INTERNAL_ERROR"
    assert http_exc.detail["details"] == {"message": "boom"}


def test_valuation_not_found_messages():
    assert ValuationNotFoundException("AAPL").message == "No valuations exist for AAPL"
    assert ValuationNotFoundException("AAPL", 12).message == "No valuation found with ID 12"


def test_rate_relationship_message_names_both_rates():
    message = InvalidRateRelationshipException(3, 5).message
    assert "discount rate 3%" in message
    assert "growth rate 5%" in message
