from sqlalchemy import Column, Date, Integer, BigInteger, Numeric, ForeignKey, DateTime, Index, func
from sqlalchemy.orm import relationship
from moat.db.base_class import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .company import Company

class BalanceSheet(Base):
    """Model for annual balance sheets."""
    __tablename__ = "balance_sheets"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    period_date = Column(Date, nullable=False)

    # Current assets
    cash_and_equivalents = Column(BigInteger)
    accounts_receivable = Column(BigInteger)
    inventories = Column(BigInteger)
    other_current_assets = Column(BigInteger)
    total_current_assets = Column(BigInteger)

    # Non-current assets
    investments = Column(BigInteger)
    property_plant_equipment = Column(BigInteger)
    goodwill = Column(BigInteger)
    intangible_assets = Column(BigInteger)
    other_assets = Column(BigInteger)
    total_assets = Column(BigInteger)

    # Liabilities
    short_term_debt = Column(BigInteger)
    accounts_payable = Column(BigInteger)
    payroll = Column(BigInteger)
    income_taxes = Column(BigInteger)
    other_current_liabilities = Column(BigInteger)
    total_current_liabilities = Column(BigInteger)
    long_term_debt = Column(BigInteger)
    other_liabilities = Column(BigInteger)
    total_liabilities = Column(BigInteger)

    # Equity
    common_stock = Column(BigInteger)
    retained_capital = Column(BigInteger)
    accumulated_comprehensive_income = Column(BigInteger)
    total_stakeholders_equity = Column(BigInteger)
    total_liabilities_and_stakeholders_equity = Column(BigInteger)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="balance_sheets")

    __table_args__ = (
        Index('idx_balance_company_period', 'company_id', 'period_date'),
    )


class IncomeStatement(Base):
    """Model for annual income statements."""
    __tablename__ = "income_statements"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    period_date = Column(Date, nullable=False)

    # Revenue and cost
    net_sales = Column(BigInteger)
    cost_of_goods_sold = Column(BigInteger)
    gross_profit = Column(BigInteger)

    # Operating expenses
    selling_general_administrative = Column(BigInteger)
    research_and_development = Column(BigInteger)
    other_expenses_income = Column(BigInteger)
    operating_income = Column(BigInteger)

    # Non-operating items
    interest_expense = Column(BigInteger)
    other_income_expense = Column(BigInteger)
    pretax_income = Column(BigInteger)

    income_taxes = Column(BigInteger)
    net_income = Column(BigInteger)

    eps_basic = Column(Numeric(10, 2))
    eps_diluted = Column(Numeric(10, 2))

    weighted_avg_shares_outstanding = Column(BigInteger)
    weighted_avg_shares_outstanding_diluted = Column(BigInteger)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="income_statements")

    __table_args__ = (
        Index('idx_income_company_period', 'company_id', 'period_date'),
    )


class CashFlowStatement(Base):
    """Model for annual cash flow statements."""
    __tablename__ = "cash_flow_statements"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    period_date = Column(Date, nullable=False)

    # Operating activities
    net_income = Column(BigInteger)
    depreciation_amortization = Column(BigInteger)
    deferred_income_tax = Column(BigInteger)
    pension_contribution = Column(BigInteger)

    # Working capital changes
    accounts_receivable_change = Column(BigInteger)
    inventories_change = Column(BigInteger)
    other_current_assets_change = Column(BigInteger)
    other_assets_change = Column(BigInteger)
    accounts_payable_change = Column(BigInteger)
    other_liabilities_change = Column(BigInteger)
    net_cash_from_operations = Column(BigInteger)

    # Investing activities
    capital_expenditures = Column(BigInteger)
    acquisitions = Column(BigInteger)
    asset_sales = Column(BigInteger)
    other_investing_activities = Column(BigInteger)
    net_cash_from_investing = Column(BigInteger)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="cash_flow_statements")

    __table_args__ = (
        Index('idx_cashflow_company_period', 'company_id', 'period_date'),
    )

    @property
    def free_cash_flow(self):
        """Operating cash flow plus (negative) capital expenditures."""
        if self.net_cash_from_operations is None:
            return None
        return self.net_cash_from_operations + (self.capital_expenditures or 0)
