"""
Analysis API Endpoints

Quick analysis of a stored company and the user's judgements about it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from moat.api.deps import get_db

# Shared imports
from ....shared.response_models import ERROR_RESPONSES, AnalysisResponse, create_success_response
from ....shared.exceptions import DomainException, handle_domain_exception

from ..schemas.analysis import MetadataUpdate
from ..services.analysis_service import AnalysisService

router = APIRouter(responses=ERROR_RESPONSES)

Ticker = Annotated[str, Path(title="Stock Ticker", description="The ticker symbol of the company (e.g., AAPL)", min_length=1, max_length=10)]


@router.get("/{ticker}", response_model=AnalysisResponse)
async def get_quick_analysis(ticker: Ticker, db: AsyncSession = Depends(get_db)):
    """Profitability, cash flow, returns, earnings, debt and share count from stored statements."""
    try:
        company, analysis = await AnalysisService.get_quick_analysis(db, ticker)
    except DomainException as e:
        raise handle_domain_exception(e)

    return create_success_response(
        data=analysis.model_dump(),
        message="Quick analysis generated",
        response_class=AnalysisResponse,
        ticker=company.ticker,
        company_name=company.name
    )


@router.put("/{ticker}", response_model=AnalysisResponse)
async def update_analysis_metadata(
    payload: MetadataUpdate,
    ticker: Ticker,
    db: AsyncSession = Depends(get_db)
):
    """Set the Peter Lynch category and the stability/debt judgements; returns the updated analysis."""
    try:
        company, analysis = await AnalysisService.update_metadata(db, ticker, payload)
    except DomainException as e:
        raise handle_domain_exception(e)

    return create_success_response(
        data=analysis.model_dump(),
        message="Analysis metadata updated",
        response_class=AnalysisResponse,
        ticker=company.ticker,
        company_name=company.name
    )
