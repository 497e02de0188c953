"""
Yahoo Finance Client

Client for the Yahoo Finance data behind company profiles: ticker search,
current quotes, company metadata, next earnings date and annual statements.
yfinance is blocking, so every call runs in a worker thread.
"""

# Standard library imports
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Third-party imports
import pandas as pd
import yfinance as yf

# App imports
from moat.shared.exceptions import DomainException, DataSourceException, InvalidTickerException
from ..config import get_company_config, CompanyConfig
from ..services.refresh_policy import utc_now

logger = logging.getLogger(__name__)

SOURCE_NAME = "yahoo_finance"

# Persisted column -> candidate yfinance line items, first non-empty wins
BALANCE_SHEET_FIELDS: Dict[str, Tuple[str, ...]] = {
    # Current assets
    "cash_and_equivalents": ("CashAndCashEquivalents",),
    "accounts_receivable": ("AccountsReceivable",),
    "inventories": ("Inventory",),
    "other_current_assets": ("OtherCurrentAssets",),
    "total_current_assets": ("CurrentAssets",),
    # Non-current assets
    "investments": ("InvestmentsAndAdvances",),
    "property_plant_equipment": ("NetPPE",),
    "goodwill": ("Goodwill",),
    "intangible_assets": ("OtherIntangibleAssets",),
    "other_assets": ("OtherNonCurrentAssets",),
    "total_assets": ("TotalAssets",),
    # Current liabilities
    "short_term_debt": ("CurrentDebt",),
    "accounts_payable": ("AccountsPayable",),
    "income_taxes": ("IncomeTaxPayable",),
    "other_current_liabilities": ("OtherCurrentLiabilities",),
    "total_current_liabilities": ("CurrentLiabilities",),
    # Non-current liabilities
    "long_term_debt": ("LongTermDebt",),
    "other_liabilities": ("OtherNonCurrentLiabilities",),
    "total_liabilities": ("TotalLiabilitiesNetMinorityInterest",),
    # Equity
    "common_stock": ("CommonStock",),
    "retained_capital": ("RetainedEarnings",),
    "accumulated_comprehensive_income": ("GainsLossesNotAffectingRetainedEarnings",),
    "total_stakeholders_equity": ("StockholdersEquity",),
}

INCOME_STATEMENT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "net_sales": ("TotalRevenue", "OperatingRevenue"),
    "cost_of_goods_sold": ("ReconciledCostOfRevenue", "CostOfRevenue"),
    "gross_profit": ("GrossProfit",),
    "selling_general_administrative": ("SellingGeneralAndAdministration",),
    "research_and_development": ("ResearchAndDevelopment",),
    "other_expenses_income": ("OperatingExpense",),
    "operating_income": ("OperatingIncome", "TotalOperatingIncomeAsReported"),
    "interest_expense": ("InterestExpense", "InterestExpenseNonOperating"),
    "other_income_expense": ("OtherIncomeExpense", "OtherNonOperatingIncomeExpenses"),
    "pretax_income": ("PretaxIncome",),
    "income_taxes": ("TaxProvision",),
    "net_income": ("NetIncome", "NetIncomeCommonStockholders"),
    "weighted_avg_shares_outstanding": ("BasicAverageShares",),
    "weighted_avg_shares_outstanding_diluted": ("DilutedAverageShares",),
}

INCOME_STATEMENT_PER_SHARE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "eps_basic": ("BasicEPS",),
    "eps_diluted": ("DilutedEPS",),
}

CASH_FLOW_FIELDS: Dict[str, Tuple[str, ...]] = {
    # Operating activities
    "net_income": ("NetIncomeFromContinuingOperations",),
    "depreciation_amortization": ("DepreciationAndAmortization", "DepreciationAmortizationDepletion"),
    "deferred_income_tax": ("DeferredTax", "DeferredIncomeTax"),
    # Working capital changes
    "accounts_receivable_change": ("ChangesInAccountReceivables", "ChangeInReceivables"),
    "inventories_change": ("ChangeInInventory",),
    "other_current_assets_change": ("ChangeInOtherCurrentAssets",),
    "accounts_payable_change": ("ChangeInAccountPayable", "ChangeInPayable"),
    "other_liabilities_change": ("ChangeInOtherCurrentLiabilities",),
    "net_cash_from_operations": ("OperatingCashFlow", "CashFlowFromContinuingOperatingActivities"),
    # Investing activities
    "capital_expenditures": ("CapitalExpenditure", "PurchaseOfPPE"),
    "acquisitions": ("PurchaseOfBusiness", "NetBusinessPurchaseAndSale"),
    "asset_sales": ("SaleOfInvestment",),
    "net_cash_from_investing": ("InvestingCashFlow", "CashFlowFromContinuingInvestingActivities"),
}


@dataclass
class MarketDataBundle:
    """Everything a full refresh writes for one company."""
    company: Dict[str, Any]
    balance_sheets: List[Dict[str, Any]] = field(default_factory=list)
    income_statements: List[Dict[str, Any]] = field(default_factory=list)
    cash_flows: List[Dict[str, Any]] = field(default_factory=list)


def _is_missing(value: Any) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value))


def first_available(line_items: Mapping[str, Any], keys: Sequence[str]) -> Optional[float]:
    """Return the first non-empty line item among the candidate keys."""
    for key in keys:
        value = line_items.get(key)
        if not _is_missing(value):
            return float(value)
    return None


def _as_int(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(value))


def _map_line_items(line_items: Mapping[str, Any], field_map: Dict[str, Tuple[str, ...]]) -> Dict[str, Optional[int]]:
    return {column: _as_int(first_available(line_items, keys)) for column, keys in field_map.items()}


def build_balance_sheet(period_date: date, line_items: Mapping[str, Any]) -> Dict[str, Any]:
    record = {"period_date": period_date, "payroll": None}
    record.update(_map_line_items(line_items, BALANCE_SHEET_FIELDS))

    total_equity = first_available(line_items, ("TotalEquityGrossMinorityInterest",))
    if total_equity is None:
        record["total_liabilities_and_stakeholders_equity"] = None
    else:
        total_liabilities = first_available(line_items, ("TotalLiabilitiesNetMinorityInterest",)) or 0
        record["total_liabilities_and_stakeholders_equity"] = _as_int(total_liabilities + total_equity)
    return record


def build_income_statement(period_date: date, line_items: Mapping[str, Any]) -> Dict[str, Any]:
    record = {"period_date": period_date}
    record.update(_map_line_items(line_items, INCOME_STATEMENT_FIELDS))
    for column, keys in INCOME_STATEMENT_PER_SHARE_FIELDS.items():
        value = first_available(line_items, keys)
        record[column] = None if value is None else Decimal(str(round(value, 2)))
    return record


def calculate_other_investing_activities(line_items: Mapping[str, Any]) -> Optional[int]:
    """
    Investing cash flow not explained by capex, acquisitions or investment trading.

    Uses the reported figure when present, otherwise derives it from the totals.
    """
    reported = first_available(line_items, ("NetOtherInvestingChanges",))
    if reported is not None:
        return _as_int(reported)

    investing = first_available(line_items, CASH_FLOW_FIELDS["net_cash_from_investing"])
    capital_expenditure = first_available(line_items, CASH_FLOW_FIELDS["capital_expenditures"])
    acquisitions = first_available(line_items, CASH_FLOW_FIELDS["acquisitions"])
    if investing is None or capital_expenditure is None or acquisitions is None:
        return None

    net_investment_activity = first_available(line_items, ("NetInvestmentPurchaseAndSale",)) or 0
    return _as_int(investing - capital_expenditure - acquisitions - net_investment_activity)


def build_cash_flow_statement(period_date: date, line_items: Mapping[str, Any]) -> Dict[str, Any]:
    record = {
        "period_date": period_date,
        "pension_contribution": None,  # not reported by Yahoo
        "other_assets_change": None,
    }
    record.update(_map_line_items(line_items, CASH_FLOW_FIELDS))
    record["other_investing_activities"] = calculate_other_investing_activities(line_items)
    return record


def statements_from_frame(frame: Optional[pd.DataFrame], builder) -> List[Dict[str, Any]]:
    """
    Convert a yfinance statement frame (line items x periods) into records.

    Periods older than the frame's columns are simply absent; empty frames give [].
    """
    if frame is None or frame.empty:
        return []

    records = []
    for period in frame.columns:
        period_date = pd.Timestamp(period).date()
        records.append(builder(period_date, frame[period].to_dict()))
    return records


def extract_next_earnings(calendar: Any) -> Optional[datetime]:
    """Pull the first upcoming earnings date out of a yfinance calendar payload."""
    if calendar is None:
        return None

    if isinstance(calendar, pd.DataFrame):
        if calendar.empty or "Earnings Date" not in calendar.index:
            return None
        earnings_dates = list(calendar.loc["Earnings Date"].values)
    elif isinstance(calendar, Mapping):
        earnings_dates = calendar.get("Earnings Date") or []
    else:
        return None

    if not isinstance(earnings_dates, (list, tuple)):
        earnings_dates = [earnings_dates]

    for value in earnings_dates:
        if _is_missing(value):
            continue
        timestamp = pd.Timestamp(value)
        if timestamp.tzinfo is not None:
            timestamp = timestamp.tz_convert("UTC").tz_localize(None)
        return timestamp.to_pydatetime()
    return None


def build_company_data(ticker: str, info: Mapping[str, Any], next_earnings: Optional[datetime]) -> Dict[str, Any]:
    price = info.get("regularMarketPrice") or info.get("currentPrice")
    return {
        "ticker": (info.get("symbol") or ticker).upper(),
        "exchange": info.get("exchange") or "",
        "name": info.get("longName") or info.get("shortName") or "",
        "sector": info.get("sector"),
        "category": info.get("industry"),
        "price": None if price is None else Decimal(str(round(float(price), 2))),
        "shares": info.get("sharesOutstanding"),
        "website": info.get("website"),
        "description": info.get("longBusinessSummary"),
        "next_earnings": next_earnings,
        "last_full_fetch": utc_now(),
    }


class YahooFinanceClient:
    """Async facade over yfinance."""

    def __init__(self, config: Optional[CompanyConfig] = None):
        self.config = config or get_company_config()
        self.timeout = self.config.market_data_timeout_seconds

    async def _run(self, description: str, func, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out after {self.timeout}s while {description}")
            raise DataSourceException(SOURCE_NAME, f"timed out while {description}") from e
        except DomainException:
            raise
        except Exception as e:
            logger.error(f"Error while {description}: {e}")
            raise DataSourceException(SOURCE_NAME, f"{description} failed: {e}") from e

    async def search(self, term: str) -> List[Dict[str, str]]:
        """
        Search equities matching a free-text term.

        Returns:
            Up to ``search_limit`` results as {ticker, name, exchange}
        """
        limit = self.config.search_limit

        def _search():
            return yf.Search(term, max_results=limit, news_count=0).quotes

        quotes = await self._run(f"searching '{term}'", _search)

        results = [
            {
                "ticker": quote["symbol"],
                "name": quote.get("longname") or quote.get("shortname") or quote["symbol"],
                "exchange": quote.get("exchange") or "",
            }
            for quote in quotes or []
            if quote.get("symbol") and quote.get("quoteType") == "EQUITY"
        ]
        return results[:limit]

    async def get_price(self, ticker: str) -> Optional[Decimal]:
        """Current regular-market price for a ticker."""

        def _price():
            info = yf.Ticker(ticker).info or {}
            return info.get("regularMarketPrice") or info.get("currentPrice")

        price = await self._run(f"fetching price for {ticker}", _price)
        if price is None:
            logger.warning(f"No price returned for {ticker}")
            return None
        return Decimal(str(round(float(price), 2)))

    def _fetch_full_data(self, ticker: str) -> MarketDataBundle:
        yf_ticker = yf.Ticker(ticker)
        info = yf_ticker.info or {}
        if not info.get("symbol") and not info.get("longName") and not info.get("shortName"):
            raise InvalidTickerException(ticker)

        cutoff = date.today() - timedelta(days=365 * self.config.statement_history_years)

        def _recent(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            return [record for record in records if record["period_date"] >= cutoff]

        next_earnings = extract_next_earnings(yf_ticker.calendar)

        return MarketDataBundle(
            company=build_company_data(ticker, info, next_earnings),
            balance_sheets=_recent(statements_from_frame(
                yf_ticker.get_balance_sheet(pretty=False, freq="yearly"), build_balance_sheet)),
            income_statements=_recent(statements_from_frame(
                yf_ticker.get_income_stmt(pretty=False, freq="yearly"), build_income_statement)),
            cash_flows=_recent(statements_from_frame(
                yf_ticker.get_cash_flow(pretty=False, freq="yearly"), build_cash_flow_statement)),
        )

    async def get_full_data(self, ticker: str) -> MarketDataBundle:
        """
        Fetch the full dataset for a company.

        Raises:
            InvalidTickerException: Yahoo has no such symbol
            DataSourceException: provider timeout or failure
        """
        bundle = await self._run(f"fetching full data for {ticker}", self._fetch_full_data, ticker)
        logger.info(
            f"Fetched {ticker}: {len(bundle.balance_sheets)} balance sheets, "
            f"{len(bundle.income_statements)} income statements, {len(bundle.cash_flows)} cash flows"
        )
        return bundle


def get_yahoo_client() -> YahooFinanceClient:
    """Provides a YahooFinanceClient built from the company config."""
    return YahooFinanceClient()
