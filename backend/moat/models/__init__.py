from .company import Company
from .financials import BalanceSheet, IncomeStatement, CashFlowStatement
from .valuation import Valuation

__all__ = [
    "Company",
    "BalanceSheet",
    "IncomeStatement",
    "CashFlowStatement",
    "Valuation",
]
