from sqlalchemy import Column, String, Text, Numeric, BigInteger, Integer, Boolean, Date, DateTime, func
from sqlalchemy.orm import relationship
from moat.db.base_class import Base
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .financials import BalanceSheet, IncomeStatement, CashFlowStatement
    from .valuation import Valuation

class Company(Base):
    """Model for company information."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    ticker = Column(String(10), unique=True, index=True, nullable=False)
    exchange = Column(String(50), nullable=False, default="")
    name = Column(String(255))
    sector = Column(String(100))
    category = Column(String(100))  # industry as reported by the provider
    price = Column(Numeric(10, 2))
    shares = Column(BigInteger)

    website = Column(String(255))
    description = Column(Text)

    # Refresh bookkeeping
    next_earnings = Column(DateTime)
    last_full_fetch = Column(DateTime)

    # Analysis metadata; the last three are set by the user
    ipo_date = Column(Date)
    is_spinoff = Column(Boolean, default=False)
    spinoff_date = Column(Date)
    market_cap_category = Column(String(20))
    peter_lynch_category = Column(String(50))
    is_business_stable = Column(Boolean)
    can_understand_debt = Column(Boolean)

    # Audit fields
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    balance_sheets = relationship("BalanceSheet", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    income_statements = relationship("IncomeStatement", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    cash_flow_statements = relationship("CashFlowStatement", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)
    valuations = relationship("Valuation", back_populates="company", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def market_cap(self):
        if self.price is None or not self.shares:
            return None
        return float(self.price) * self.shares
