"""
Financial Metrics

Ratios and trend checks computed from a company's stored yearly statements.
Every function is pure and accepts statement rows in any order; rows are
sorted by period where order matters.

Missing figures follow one rule: a ratio whose inputs are missing or zero is
None, while sums and histories treat a missing figure as 0.
"""

# Standard library imports
import math
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

MARKET_CAP_TIERS = (
    (200_000_000_000, "mega"),
    (10_000_000_000, "large"),
    (2_000_000_000, "mid"),
    (300_000_000, "small"),
    (50_000_000, "micro"),
)

CONSISTENT_CASH_FLOW_YEARS = 3
ERRATIC_VOLATILITY = 30
DEBT_TREND_THRESHOLD = 0.05
SHARE_TREND_THRESHOLD = 2
RECENT_IPO_YEARS = 2


def _newest_first(rows: Sequence[Any]) -> List[Any]:
    return sorted(rows, key=lambda row: row.period_date, reverse=True)


def _oldest_first(rows: Sequence[Any]) -> List[Any]:
    return sorted(rows, key=lambda row: row.period_date)


def _cagr(first: float, last: float, years: int) -> Optional[float]:
    """Compound annual growth in percent; only defined for two positive endpoints."""
    if first > 0 and last > 0 and years > 0:
        return ((last / first) ** (1 / years) - 1) * 100
    return None


def market_cap_category(price: Optional[float], shares: Optional[int]) -> Optional[str]:
    """mega ($200B+), large, mid, small, micro, nano (under $50M)."""
    if not price or not shares:
        return None

    market_cap = price * shares
    for threshold, category in MARKET_CAP_TIERS:
        if market_cap >= threshold:
            return category
    return "nano"


def calculate_roe(net_income: Optional[int], equity: Optional[int]) -> Optional[float]:
    """Return on equity in percent."""
    if not net_income or not equity:
        return None
    return net_income / equity * 100


def financial_leverage_ratio(total_assets: Optional[int], equity: Optional[int]) -> Optional[float]:
    """Total assets over shareholders' equity."""
    if not total_assets or not equity:
        return None
    return total_assets / equity


def debt_to_equity(total_debt: Optional[int], equity: Optional[int]) -> Optional[float]:
    if not equity:
        return None
    if not total_debt:
        return 0
    return total_debt / equity


def leverage_level(leverage_ratio: Optional[float]) -> Optional[str]:
    if leverage_ratio is None:
        return None
    if leverage_ratio < 2:
        return "low"
    if leverage_ratio < 3:
        return "moderate"
    if leverage_ratio < 4:
        return "high"
    return "excessive"


def total_debt(balance_sheet: Any) -> int:
    """Short-term plus long-term debt."""
    return (balance_sheet.short_term_debt or 0) + (balance_sheet.long_term_debt or 0)


def analyze_profitability(income_statements: Sequence[Any]) -> Dict[str, Any]:
    """Whether the company has ever earned, and still earns, an operating profit."""
    if not income_statements:
        return {
            "ever_profitable": False,
            "currently_profitable": False,
            "years_of_profit": 0,
            "latest_operating_income": None,
        }

    statements = _newest_first(income_statements)
    latest = statements[0]
    profitable_years = [s for s in statements if (s.operating_income or 0) > 0]

    return {
        "ever_profitable": bool(profitable_years),
        "currently_profitable": (latest.operating_income or 0) > 0,
        "years_of_profit": len(profitable_years),
        "latest_operating_income": latest.operating_income,
    }


def analyze_cash_flow(cash_flows: Sequence[Any]) -> Dict[str, Any]:
    """
    Operating cash flow level, consistency and growth.

    Cash flow counts as consistent with at least three positive years. The
    growth rate is the CAGR between the oldest and the newest year, and the
    history is listed oldest first.
    """
    if not cash_flows:
        return {
            "generates_operating_cf": False,
            "consistent_cash_flow": False,
            "average_operating_cf": None,
            "cf_growth_rate": None,
            "latest_operating_cf": None,
            "cash_flow_history": [],
        }

    statements = _newest_first(cash_flows)
    amounts = [cf.net_cash_from_operations or 0 for cf in statements]
    latest = statements[0]

    growth_rate = None
    if len(statements) >= 2:
        growth_rate = _cagr(amounts[-1], amounts[0], len(statements) - 1)

    return {
        "generates_operating_cf": amounts[0] > 0,
        "consistent_cash_flow": sum(1 for amount in amounts if amount > 0) >= CONSISTENT_CASH_FLOW_YEARS,
        "average_operating_cf": sum(amounts) / len(amounts),
        "cf_growth_rate": growth_rate,
        "latest_operating_cf": latest.net_cash_from_operations,
        "cash_flow_history": [
            {"year": cf.period_date.year, "amount": amount}
            for cf, amount in reversed(list(zip(statements, amounts)))
        ],
    }


def roe_metrics(income_statements: Sequence[Any], balance_sheets: Sequence[Any]) -> Dict[str, Any]:
    """
    Latest and average ROE over the years that have both statements.

    An income statement is paired with the balance sheet of the same period.
    """
    empty = {"latest_roe": None, "avg_roe": None, "roe_above_10": False}
    if not income_statements or not balance_sheets:
        return empty

    equity_by_period = {bs.period_date: bs.total_stakeholders_equity for bs in balance_sheets}
    roe_values = []
    for statement in _newest_first(income_statements):
        roe = calculate_roe(statement.net_income, equity_by_period.get(statement.period_date))
        if roe is not None:
            roe_values.append(roe)

    if not roe_values:
        return empty

    latest_roe = roe_values[0]
    return {
        "latest_roe": latest_roe,
        "avg_roe": sum(roe_values) / len(roe_values),
        "roe_above_10": latest_roe >= 10,
    }


def analyze_earnings_consistency(income_statements: Sequence[Any]) -> Dict[str, Any]:
    """
    Diluted EPS history with its growth and volatility.

    Volatility is the population standard deviation of the year-over-year
    growth rates, taken only where the prior year's EPS is positive. Above
    30 the record is erratic; otherwise the EPS CAGR decides between growing
    (> 10%), declining (< -5%) and stable.
    """
    if len(income_statements) < 2:
        return {
            "eps_history": [],
            "earnings_growth": None,
            "consistency": "insufficient-data",
            "volatility_score": None,
        }

    eps_history = [
        {"year": s.period_date.year, "eps": float(s.eps_diluted or 0)}
        for s in _oldest_first(income_statements)
    ]

    growth_rates = [
        (current["eps"] - previous["eps"]) / previous["eps"] * 100
        for previous, current in zip(eps_history, eps_history[1:])
        if previous["eps"] > 0
    ]

    cagr = _cagr(eps_history[0]["eps"], eps_history[-1]["eps"], len(eps_history) - 1)

    volatility = None
    if growth_rates:
        mean = sum(growth_rates) / len(growth_rates)
        volatility = math.sqrt(sum((rate - mean) ** 2 for rate in growth_rates) / len(growth_rates))

    consistency = "stable"
    if volatility is not None:
        if volatility > ERRATIC_VOLATILITY:
            consistency = "erratic"
        elif cagr is not None and cagr > 10:
            consistency = "growing"
        elif cagr is not None and cagr < -5:
            consistency = "declining"

    return {
        "eps_history": eps_history,
        "earnings_growth": cagr,
        "consistency": consistency,
        "volatility_score": volatility,
    }


def analyze_debt_trend(balance_sheets: Sequence[Any]) -> str:
    """Direction of debt-to-assets across the three most recent years."""
    if len(balance_sheets) < 2:
        return "insufficient-data"

    ratios = [total_debt(bs) / (bs.total_assets or 1) for bs in _oldest_first(balance_sheets)]
    recent = ratios[-3:]
    change = recent[-1] - recent[0]

    if change > DEBT_TREND_THRESHOLD:
        return "increasing"
    if change < -DEBT_TREND_THRESHOLD:
        return "decreasing"
    return "stable"


def analyze_share_count(income_statements: Sequence[Any]) -> Dict[str, Any]:
    """
    Diluted share count history and its change over 1, 3 and 5 years.

    The one-year change sets the trend: above +2% diluting, below -2%
    buying back.
    """
    if not income_statements:
        return {
            "current_shares": None,
            "shares_history": [],
            "change_percent_1yr": None,
            "change_percent_3yr": None,
            "change_percent_5yr": None,
            "trend": None,
        }

    shares_history = [
        {
            "year": s.period_date.year,
            "shares": s.weighted_avg_shares_outstanding_diluted or s.weighted_avg_shares_outstanding or 0,
        }
        for s in _newest_first(income_statements)
    ]
    current_shares = shares_history[0]["shares"] or None

    def change_since(years_ago: int) -> Optional[float]:
        if len(shares_history) <= years_ago:
            return None
        old_shares = shares_history[years_ago]["shares"]
        if not old_shares or not current_shares:
            return None
        return (current_shares - old_shares) / old_shares * 100

    change_1yr = change_since(1)

    trend = None
    if change_1yr is not None:
        if change_1yr > SHARE_TREND_THRESHOLD:
            trend = "diluting"
        elif change_1yr < -SHARE_TREND_THRESHOLD:
            trend = "buying-back"
        else:
            trend = "stable"

    return {
        "current_shares": current_shares,
        "shares_history": shares_history,
        "change_percent_1yr": change_1yr,
        "change_percent_3yr": change_since(3),
        "change_percent_5yr": change_since(5),
        "trend": trend,
    }


def is_recent_ipo(ipo_date: Optional[date], today: date) -> bool:
    """True when the IPO happened within the last two years."""
    if ipo_date is None:
        return False
    try:
        cutoff = today.replace(year=today.year - RECENT_IPO_YEARS)
    except ValueError:
        # 29 February rolls forward like a calendar year subtraction
        cutoff = date(today.year - RECENT_IPO_YEARS, 3, 1)
    return ipo_date > cutoff
