"""
Company API Endpoints

Search, profile (with refresh) and stored financial statements.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from moat.api.deps import get_db

# Shared imports
from ....shared.response_models import ERROR_RESPONSES, CompanyResponse, create_success_response
from ....shared.exceptions import DomainException, handle_domain_exception

from ..clients.yahoo_client import YahooFinanceClient, get_yahoo_client
from ..schemas.company import (
    BalanceSheetOut, CashFlowStatementOut, CompanyOut, CompanySearchResult, IncomeStatementOut
)
from ..services.company_service import CompanyService

router = APIRouter(responses=ERROR_RESPONSES)

Ticker = Annotated[str, Path(title="Stock Ticker", description="The ticker symbol of the company (e.g., AAPL)", min_length=1, max_length=10)]


@router.get("/", response_model=CompanyResponse)
async def search_companies(
    term: str = Query(..., min_length=2, description="Ticker or company name fragment"),
    db: AsyncSession = Depends(get_db),
    client: YahooFinanceClient = Depends(get_yahoo_client)
):
    """Search stored companies, falling back to market data when nothing is stored."""
    try:
        matches = await CompanyService.search(db, term, client)
    except DomainException as e:
        raise handle_domain_exception(e)

    return create_success_response(
        data=[CompanySearchResult(**match).model_dump() for match in matches],
        message=f"Found {len(matches)} companies",
        response_class=CompanyResponse
    )


@router.get("/{ticker}", response_model=CompanyResponse)
async def get_company(
    ticker: Ticker,
    db: AsyncSession = Depends(get_db),
    client: YahooFinanceClient = Depends(get_yahoo_client)
):
    """
    Company profile with statements.

    Refetches everything when the stored data is missing or stale (see the
    refresh policy), otherwise only the price is refreshed.
    """
    ticker_upper = ticker.upper()
    try:
        profile, refresh_type = await CompanyService.get_company_profile(db, ticker_upper, client)
    except DomainException as e:
        raise handle_domain_exception(e)

    return create_success_response(
        data=profile.model_dump(),
        message=f"Company data loaded ({refresh_type} refresh)",
        response_class=CompanyResponse,
        ticker=ticker_upper,
        refresh_type=refresh_type
    )


@router.get("/{ticker}/financials", response_model=CompanyResponse)
async def get_company_financials(
    ticker: Ticker,
    db: AsyncSession = Depends(get_db)
):
    """Stored statements only, newest period first. No market data is fetched."""
    ticker_upper = ticker.upper()
    try:
        company = await CompanyService.require_company(db, ticker_upper)
        balance_sheets, income_statements, cash_flows = await CompanyService.get_statements(db, company.id)
    except DomainException as e:
        raise handle_domain_exception(e)

    return create_success_response(
        data={
            "company": CompanyOut.model_validate(company).model_dump(),
            "balance_sheets": [BalanceSheetOut.model_validate(row).model_dump() for row in balance_sheets],
            "income_statements": [IncomeStatementOut.model_validate(row).model_dump() for row in income_statements],
            "cash_flows": [CashFlowStatementOut.model_validate(row).model_dump() for row in cash_flows],
        },
        message="Financial statements retrieved",
        response_class=CompanyResponse,
        ticker=ticker_upper
    )
