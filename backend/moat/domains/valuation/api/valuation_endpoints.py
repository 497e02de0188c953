"""
Valuation API Endpoints

FastAPI endpoints for stored DCF scenarios and their sensitivity grids.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from moat.api.deps import get_db

# Shared imports
from ....shared.response_models import ERROR_RESPONSES, ValuationResponse, create_success_response
from ....shared.exceptions import DomainException, handle_domain_exception

from moat.domains.companies.services.company_service import CompanyService
from ..schemas.valuation import SensitivityRequest, ValuationCreate, ValuationOut, ValuationUpdate
from ..services.valuation_service import ValuationService

router = APIRouter(responses=ERROR_RESPONSES)

Ticker = Annotated[str, Path(title="Stock Ticker", description="The ticker symbol of the company (e.g., AAPL)", min_length=1, max_length=10)]


def _valuation_response(company, data, message: str) -> ValuationResponse:
    return create_success_response(
        data=data,
        message=message,
        response_class=ValuationResponse,
        ticker=company.ticker,
        company_name=company.name
    )


@router.get("/{ticker}", response_model=ValuationResponse)
async def list_valuations(ticker: Ticker, db: AsyncSession = Depends(get_db)):
    """All stored scenarios for a company, newest first."""
    try:
        company = await CompanyService.require_company(db, ticker)
        valuations = await ValuationService.list_valuations(db, company)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(
        company,
        [ValuationOut.model_validate(v).model_dump() for v in valuations],
        f"Found {len(valuations)} valuations"
    )


@router.get("/{ticker}/latest", response_model=ValuationResponse)
async def get_latest_valuation(ticker: Ticker, db: AsyncSession = Depends(get_db)):
    try:
        company = await CompanyService.require_company(db, ticker)
        valuation = await ValuationService.get_latest(db, company)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(company, ValuationOut.model_validate(valuation).model_dump(), "Latest valuation")


@router.get("/{ticker}/{valuation_id}", response_model=ValuationResponse)
async def get_valuation(
    ticker: Ticker,
    valuation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db)
):
    try:
        company = await CompanyService.require_company(db, ticker)
        valuation = await ValuationService.get_valuation(db, company, valuation_id)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(company, ValuationOut.model_validate(valuation).model_dump(), "Valuation retrieved")


@router.post("/{ticker}", response_model=ValuationResponse, status_code=201)
async def create_valuation(
    payload: ValuationCreate,
    ticker: Ticker,
    db: AsyncSession = Depends(get_db)
):
    """
    Run a DCF calculation and store it as a new scenario.

    Calculator rejections (projection count, rate relationship, share count)
    come back as 400 with the matching error code.
    """
    try:
        company = await CompanyService.require_company(db, ticker)
        valuation, details = await ValuationService.create_valuation(db, company, payload)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(
        company,
        {
            "valuation": ValuationOut.model_validate(valuation).model_dump(),
            "calculation_details": details.model_dump(),
        },
        "DCF valuation calculated successfully"
    )


@router.put("/{ticker}/{valuation_id}", response_model=ValuationResponse)
async def update_valuation(
    payload: ValuationUpdate,
    ticker: Ticker,
    valuation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db)
):
    try:
        company = await CompanyService.require_company(db, ticker)
        valuation, details = await ValuationService.update_valuation(db, company, valuation_id, payload)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(
        company,
        {
            "valuation": ValuationOut.model_validate(valuation).model_dump(),
            "calculation_details": details.model_dump(),
        },
        "Valuation recalculated"
    )


@router.delete("/{ticker}/{valuation_id}", response_model=ValuationResponse)
async def delete_valuation(
    ticker: Ticker,
    valuation_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db)
):
    try:
        company = await CompanyService.require_company(db, ticker)
        await ValuationService.delete_valuation(db, company, valuation_id)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(company, {"id": valuation_id}, "Valuation deleted")


@router.post("/{ticker}/sensitivity", response_model=ValuationResponse)
async def create_sensitivity_analysis(
    payload: SensitivityRequest,
    ticker: Ticker,
    db: AsyncSession = Depends(get_db)
):
    """Intrinsic value per share across discount rates (rows) and growth rates (columns)."""
    try:
        company = await CompanyService.require_company(db, ticker)
        table = await ValuationService.generate_sensitivity(db, company, payload.valuation_id)
    except DomainException as e:
        raise handle_domain_exception(e)

    return _valuation_response(company, table.model_dump(), "Sensitivity analysis generated")
