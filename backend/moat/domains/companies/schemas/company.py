from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

class CompanySearchResult(BaseModel):
    ticker: str
    name: Optional[str] = None
    exchange: Optional[str] = None

class CompanyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticker: str
    exchange: Optional[str] = None
    name: Optional[str] = None
    sector: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    shares: Optional[int] = None
    market_cap: Optional[float] = None
    website: Optional[str] = None
    description: Optional[str] = None
    next_earnings: Optional[datetime] = None
    last_full_fetch: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BalanceSheetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_date: date
    cash_and_equivalents: Optional[int] = None
    accounts_receivable: Optional[int] = None
    inventories: Optional[int] = None
    other_current_assets: Optional[int] = None
    total_current_assets: Optional[int] = None
    investments: Optional[int] = None
    property_plant_equipment: Optional[int] = None
    goodwill: Optional[int] = None
    intangible_assets: Optional[int] = None
    other_assets: Optional[int] = None
    total_assets: Optional[int] = None
    short_term_debt: Optional[int] = None
    accounts_payable: Optional[int] = None
    payroll: Optional[int] = None
    income_taxes: Optional[int] = None
    other_current_liabilities: Optional[int] = None
    total_current_liabilities: Optional[int] = None
    long_term_debt: Optional[int] = None
    other_liabilities: Optional[int] = None
    total_liabilities: Optional[int] = None
    common_stock: Optional[int] = None
    retained_capital: Optional[int] = None
    accumulated_comprehensive_income: Optional[int] = None
    total_stakeholders_equity: Optional[int] = None
    total_liabilities_and_stakeholders_equity: Optional[int] = None

class IncomeStatementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_date: date
    net_sales: Optional[int] = None
    cost_of_goods_sold: Optional[int] = None
    gross_profit: Optional[int] = None
    selling_general_administrative: Optional[int] = None
    research_and_development: Optional[int] = None
    other_expenses_income: Optional[int] = None
    operating_income: Optional[int] = None
    interest_expense: Optional[int] = None
    other_income_expense: Optional[int] = None
    pretax_income: Optional[int] = None
    income_taxes: Optional[int] = None
    net_income: Optional[int] = None
    eps_basic: Optional[Decimal] = None
    eps_diluted: Optional[Decimal] = None
    weighted_avg_shares_outstanding: Optional[int] = None
    weighted_avg_shares_outstanding_diluted: Optional[int] = None

class CashFlowStatementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_date: date
    net_income: Optional[int] = None
    depreciation_amortization: Optional[int] = None
    deferred_income_tax: Optional[int] = None
    pension_contribution: Optional[int] = None
    accounts_receivable_change: Optional[int] = None
    inventories_change: Optional[int] = None
    other_current_assets_change: Optional[int] = None
    other_assets_change: Optional[int] = None
    accounts_payable_change: Optional[int] = None
    other_liabilities_change: Optional[int] = None
    net_cash_from_operations: Optional[int] = None
    capital_expenditures: Optional[int] = None
    acquisitions: Optional[int] = None
    asset_sales: Optional[int] = None
    other_investing_activities: Optional[int] = None
    net_cash_from_investing: Optional[int] = None
    free_cash_flow: Optional[int] = None

class CompanyProfile(BaseModel):
    """A company with its statements, newest period first."""
    company: CompanyOut
    balance_sheets: List[BalanceSheetOut] = []
    income_statements: List[IncomeStatementOut] = []
    cash_flows: List[CashFlowStatementOut] = []
