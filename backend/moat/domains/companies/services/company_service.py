"""
Company Service

Loads company profiles, deciding per request whether the cached financial
statements must be refetched in full or only the price needs patching.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moat.models import Company, BalanceSheet, IncomeStatement, CashFlowStatement
from moat.shared.exceptions import CompanyNotFoundException
from ..clients.yahoo_client import MarketDataBundle, YahooFinanceClient
from ..config import get_company_config
from ..schemas.company import (
    BalanceSheetOut, CashFlowStatementOut, CompanyOut, CompanyProfile, IncomeStatementOut
)
from .refresh_policy import should_fetch_full_data, utc_now

logger = logging.getLogger(__name__)

REFRESH_FULL = "full"
REFRESH_PRICE = "price"


class CompanyService:

    @staticmethod
    async def get_by_ticker(db: AsyncSession, ticker: str) -> Optional[Company]:
        result = await db.execute(select(Company).where(Company.ticker == ticker.upper()))
        return result.scalar_one_or_none()

    @staticmethod
    async def require_company(db: AsyncSession, ticker: str) -> Company:
        company = await CompanyService.get_by_ticker(db, ticker)
        if not company:
            raise CompanyNotFoundException(ticker.upper())
        return company

    @staticmethod
    async def search(db: AsyncSession, term: str, client: YahooFinanceClient) -> List[Dict[str, Any]]:
        """Search stored companies by ticker or name, falling back to the market-data provider."""
        pattern = f"%{term}%"
        limit = get_company_config().search_limit
        result = await db.execute(
            select(Company.ticker, Company.name, Company.exchange)
            .where(or_(Company.ticker.ilike(pattern), Company.name.ilike(pattern)))
            .limit(limit)
        )
        rows = result.all()
        if rows:
            return [{"ticker": row.ticker, "name": row.name, "exchange": row.exchange} for row in rows]

        logger.info(f"No stored company matches '{term}', searching market data")
        return await client.search(term)

    @staticmethod
    async def get_statements(
        db: AsyncSession, company_id: int
    ) -> Tuple[List[BalanceSheet], List[IncomeStatement], List[CashFlowStatement]]:
        """All statements of a company, newest period first."""
        statements = []
        for model in (BalanceSheet, IncomeStatement, CashFlowStatement):
            result = await db.execute(
                select(model).where(model.company_id == company_id).order_by(model.period_date.desc())
            )
            statements.append(list(result.scalars().all()))
        return statements[0], statements[1], statements[2]

    @staticmethod
    def _add_statements(db: AsyncSession, company_id: int, bundle: MarketDataBundle) -> None:
        for model, records in (
            (BalanceSheet, bundle.balance_sheets),
            (IncomeStatement, bundle.income_statements),
            (CashFlowStatement, bundle.cash_flows),
        ):
            db.add_all([model(company_id=company_id, **record) for record in records])

    @staticmethod
    async def insert_company_with_full_data(db: AsyncSession, bundle: MarketDataBundle) -> Company:
        """Create a company and its statements in one transaction."""
        try:
            company = Company(**bundle.company)
            db.add(company)
            await db.flush()
            CompanyService._add_statements(db, company.id, bundle)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(company)
        logger.info(f"Inserted {company.ticker} with full data")
        return company

    @staticmethod
    async def update_company_with_full_data(db: AsyncSession, company: Company, bundle: MarketDataBundle) -> Company:
        """Replace a company's fields and every statement row in one transaction."""
        try:
            for field, value in bundle.company.items():
                setattr(company, field, value)
            company.updated_at = utc_now()

            for model in (BalanceSheet, IncomeStatement, CashFlowStatement):
                await db.execute(delete(model).where(model.company_id == company.id))

            CompanyService._add_statements(db, company.id, bundle)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(company)
        logger.info(f"Replaced full data for {company.ticker}")
        return company

    @staticmethod
    async def update_price(db: AsyncSession, company: Company, client: YahooFinanceClient) -> Company:
        """Patch only the price; the stored price is kept when the provider returns none."""
        price = await client.get_price(company.ticker)
        if price is not None:
            company.price = price
        company.updated_at = utc_now()
        await db.commit()
        await db.refresh(company)
        return company

    @staticmethod
    async def build_profile(db: AsyncSession, company: Company) -> CompanyProfile:
        balance_sheets, income_statements, cash_flows = await CompanyService.get_statements(db, company.id)
        return CompanyProfile(
            company=CompanyOut.model_validate(company),
            balance_sheets=[BalanceSheetOut.model_validate(row) for row in balance_sheets],
            income_statements=[IncomeStatementOut.model_validate(row) for row in income_statements],
            cash_flows=[CashFlowStatementOut.model_validate(row) for row in cash_flows],
        )

    @staticmethod
    async def get_company_profile(
        db: AsyncSession,
        ticker: str,
        client: YahooFinanceClient,
        now: Optional[datetime] = None
    ) -> Tuple[CompanyProfile, str]:
        """
        Load a company, refreshing it from market data as needed.

        Returns:
            Tuple of (profile, refresh type) where refresh type is "full" or "price"
        """
        ticker = ticker.upper()
        company = await CompanyService.get_by_ticker(db, ticker)
        max_age = get_company_config().full_refresh_max_age_days

        if should_fetch_full_data(company, now=now, max_staleness_days=max_age):
            logger.info(f"Full fetch required for {ticker}")
            bundle = await client.get_full_data(ticker)
            if company is None:
                company = await CompanyService.insert_company_with_full_data(db, bundle)
            else:
                company = await CompanyService.update_company_with_full_data(db, company, bundle)
            refresh_type = REFRESH_FULL
        else:
            logger.info(f"Quick price update for {ticker}")
            company = await CompanyService.update_price(db, company, client)
            refresh_type = REFRESH_PRICE

        return await CompanyService.build_profile(db, company), refresh_type
