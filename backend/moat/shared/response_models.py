"""
Shared Response Models

Envelopes returned by the company and valuation endpoints. Successful calls
wrap their payload in an APIResponse subclass; failures carry an ErrorDetail
under the ``detail`` key, as produced by domain_exception_to_http_exception.
"""

# Standard library imports
from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum

# Third-party imports
from pydantic import BaseModel, Field


class StatusEnum(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class APIResponse(BaseModel):
    """Success envelope shared by every endpoint."""
    status: StatusEnum = Field(..., description="Response status")
    message: Optional[str] = Field(None, description="Human-readable summary of the outcome")
    data: Optional[Any] = Field(None, description="Endpoint payload")
    errors: Optional[List[str]] = Field(None, description="Non-fatal problems met while serving the request")
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorDetail(BaseModel):
    error: str = Field(..., description="Error message naming the failed check")
    error_code: Optional[str] = Field(None, description="Machine-readable code, e.g. INVALID_RATE_RELATIONSHIP")
    details: Optional[Dict[str, Any]] = Field(None, description="Offending values")


class ErrorResponse(BaseModel):
    """Body of a 4xx/5xx response."""
    detail: ErrorDetail


class CompanyResponse(APIResponse):
    ticker: Optional[str] = Field(None, description="Stock ticker symbol")
    refresh_type: Optional[str] = Field(None, description="'full' or 'price' on profile reads")


class ValuationResponse(APIResponse):
    ticker: Optional[str] = Field(None, description="Stock ticker symbol")
    company_name: Optional[str] = Field(None, description="Company name")
    valuation_type: Optional[str] = Field("DCF", description="Valuation method")


class AnalysisResponse(APIResponse):
    ticker: Optional[str] = Field(None, description="Stock ticker symbol")
    company_name: Optional[str] = Field(None, description="Company name")


# OpenAPI documentation for the error statuses a router can return
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Rejected input"},
    404: {"model": ErrorResponse, "description": "Company or valuation not found"},
    502: {"model": ErrorResponse, "description": "Market data provider failure"},
}


def create_success_response(
    data: Any = None,
    message: str = "Operation completed successfully",
    response_class: type = APIResponse,
    **kwargs
) -> APIResponse:
    """
    Build a success envelope.

    Args:
        data: Response payload
        message: Summary message
        response_class: APIResponse subclass to instantiate
        **kwargs: Extra fields of that subclass (ticker, refresh_type, ...)
    """
    return response_class(
        status=StatusEnum.SUCCESS,
        message=message,
        data=data,
        **kwargs
    )
