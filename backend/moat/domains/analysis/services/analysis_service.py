"""
Analysis Service

Quick analysis of a stored company: size, profitability, cash flow, returns,
earnings, balance sheet and share count, plus the user's own judgements
(Peter Lynch category, business stability, debt understanding). Nothing here
calls market data; the analysis reads whatever statements are stored.
"""
import logging
from datetime import date
from typing import Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from moat.models import BalanceSheet, CashFlowStatement, Company, IncomeStatement
from moat.domains.companies.services.company_service import CompanyService
from moat.domains.companies.services.refresh_policy import utc_now
from ..schemas.analysis import MetadataUpdate, QuickAnalysis
from . import metrics

logger = logging.getLogger(__name__)

DEEP_DIVE_LEVERAGE = 4
DEEP_DIVE_DEBT_TO_EQUITY = 1


def build_quick_analysis(
    company: Company,
    balance_sheets: Sequence[BalanceSheet],
    income_statements: Sequence[IncomeStatement],
    cash_flows: Sequence[CashFlowStatement],
    today: Optional[date] = None
) -> QuickAnalysis:
    """
    Assemble the quick analysis from a company and its statements.

    Leverage and debt figures come from the most recent balance sheet. A
    company needs a deep dive when leverage exceeds 4 or debt exceeds equity.
    """
    today = today or utc_now().date()
    price = float(company.price) if company.price else None
    market_cap = price * company.shares if price and company.shares else None

    latest_balance_sheet = max(balance_sheets, key=lambda bs: bs.period_date, default=None)

    leverage_ratio = None
    debt_to_equity = None
    debt = 0
    if latest_balance_sheet is not None:
        equity = latest_balance_sheet.total_stakeholders_equity
        debt = metrics.total_debt(latest_balance_sheet)
        leverage_ratio = metrics.financial_leverage_ratio(latest_balance_sheet.total_assets, equity)
        debt_to_equity = metrics.debt_to_equity(debt, equity)

    roe = metrics.roe_metrics(income_statements, balance_sheets)
    needs_deep_dive = (
        (leverage_ratio is not None and leverage_ratio > DEEP_DIVE_LEVERAGE)
        or (debt_to_equity is not None and debt_to_equity > DEEP_DIVE_DEBT_TO_EQUITY)
    )

    return QuickAnalysis(
        company_info={
            "ticker": company.ticker,
            "name": company.name,
            "price": company.price,
            "shares": company.shares,
            "market_cap": market_cap,
            "sector": company.sector,
            "category": company.category,
            "exchange": company.exchange,
        },
        metadata={
            "market_cap_category": (
                company.market_cap_category or metrics.market_cap_category(price, company.shares)
            ),
            "peter_lynch_category": company.peter_lynch_category,
            "ipo_date": company.ipo_date,
            "is_recent_ipo": metrics.is_recent_ipo(company.ipo_date, today),
            "is_spinoff": bool(company.is_spinoff),
            "spinoff_date": company.spinoff_date,
        },
        profitability=metrics.analyze_profitability(income_statements),
        cash_flow=metrics.analyze_cash_flow(cash_flows),
        returns={
            **roe,
            "financial_leverage_ratio": leverage_ratio,
            "leverage_level": metrics.leverage_level(leverage_ratio),
            "debt_to_equity": debt_to_equity,
        },
        earnings=metrics.analyze_earnings_consistency(income_statements),
        balance_sheet={
            "has_debt": debt > 0,
            "total_debt": debt,
            "total_assets": latest_balance_sheet.total_assets if latest_balance_sheet else None,
            "total_equity": latest_balance_sheet.total_stakeholders_equity if latest_balance_sheet else None,
            "debt_to_equity": debt_to_equity,
            "financial_leverage_ratio": leverage_ratio,
            "debt_trend": metrics.analyze_debt_trend(balance_sheets),
            "needs_deep_dive": needs_deep_dive,
        },
        shares=metrics.analyze_share_count(income_statements),
        user_inputs={
            "peter_lynch_category": company.peter_lynch_category,
            "is_business_stable": company.is_business_stable,
            "can_understand_debt": company.can_understand_debt,
        },
    )


class AnalysisService:

    @staticmethod
    async def analyze(db: AsyncSession, company: Company) -> QuickAnalysis:
        balance_sheets, income_statements, cash_flows = await CompanyService.get_statements(db, company.id)
        return build_quick_analysis(company, balance_sheets, income_statements, cash_flows)

    @staticmethod
    async def get_quick_analysis(db: AsyncSession, ticker: str) -> Tuple[Company, QuickAnalysis]:
        company = await CompanyService.require_company(db, ticker)
        return company, await AnalysisService.analyze(db, company)

    @staticmethod
    async def update_metadata(
        db: AsyncSession, ticker: str, payload: MetadataUpdate
    ) -> Tuple[Company, QuickAnalysis]:
        """Store the user's judgements and return the refreshed analysis."""
        company = await CompanyService.require_company(db, ticker)

        changes = payload.model_dump(exclude_none=True, mode="json")
        for field, value in changes.items():
            setattr(company, field, value)
        company.updated_at = utc_now()

        await db.commit()
        await db.refresh(company)
        logger.info(f"Updated analysis metadata for {company.ticker}: {sorted(changes)}")

        return company, await AnalysisService.analyze(db, company)
