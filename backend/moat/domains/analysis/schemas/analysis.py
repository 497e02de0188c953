from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

class PeterLynchCategory(str, Enum):
    SLOW_GROWER = "slow-grower"
    STALWART = "stalwart"
    FAST_GROWER = "fast-grower"
    CYCLICAL = "cyclical"
    TURNAROUND = "turnaround"
    ASSET_PLAY = "asset-play"

class MetadataUpdate(BaseModel):
    """User judgements about a company; omitted fields keep their stored value."""
    peter_lynch_category: Optional[PeterLynchCategory] = None
    is_business_stable: Optional[bool] = None
    can_understand_debt: Optional[bool] = None

class CompanyInfo(BaseModel):
    ticker: str
    name: Optional[str] = None
    price: Optional[Decimal] = None
    shares: Optional[int] = None
    market_cap: Optional[float] = None
    sector: Optional[str] = None
    category: Optional[str] = None
    exchange: Optional[str] = None

class AnalysisMetadata(BaseModel):
    market_cap_category: Optional[str] = None
    peter_lynch_category: Optional[str] = None
    ipo_date: Optional[date] = None
    is_recent_ipo: bool = False
    is_spinoff: bool = False
    spinoff_date: Optional[date] = None

class Profitability(BaseModel):
    ever_profitable: bool
    currently_profitable: bool
    years_of_profit: int
    latest_operating_income: Optional[int] = None

class YearAmount(BaseModel):
    year: int
    amount: int

class CashFlowAnalysis(BaseModel):
    generates_operating_cf: bool
    consistent_cash_flow: bool
    average_operating_cf: Optional[float] = None
    cf_growth_rate: Optional[float] = None
    latest_operating_cf: Optional[int] = None
    cash_flow_history: List[YearAmount] = []

class Returns(BaseModel):
    latest_roe: Optional[float] = None
    avg_roe: Optional[float] = None
    roe_above_10: bool = False
    financial_leverage_ratio: Optional[float] = None
    leverage_level: Optional[str] = None
    debt_to_equity: Optional[float] = None

class YearEPS(BaseModel):
    year: int
    eps: float

class EarningsAnalysis(BaseModel):
    eps_history: List[YearEPS] = []
    earnings_growth: Optional[float] = None
    consistency: str
    volatility_score: Optional[float] = None

class BalanceSheetHealth(BaseModel):
    has_debt: bool
    total_debt: int
    total_assets: Optional[int] = None
    total_equity: Optional[int] = None
    debt_to_equity: Optional[float] = None
    financial_leverage_ratio: Optional[float] = None
    debt_trend: str
    needs_deep_dive: bool

class YearShares(BaseModel):
    year: int
    shares: int

class ShareCountAnalysis(BaseModel):
    current_shares: Optional[int] = None
    shares_history: List[YearShares] = []
    change_percent_1yr: Optional[float] = None
    change_percent_3yr: Optional[float] = None
    change_percent_5yr: Optional[float] = None
    trend: Optional[str] = None

class UserInputs(BaseModel):
    peter_lynch_category: Optional[str] = None
    is_business_stable: Optional[bool] = None
    can_understand_debt: Optional[bool] = None

class QuickAnalysis(BaseModel):
    """Checklist-style overview of a company built from its stored statements."""
    company_info: CompanyInfo
    metadata: AnalysisMetadata
    profitability: Profitability
    cash_flow: CashFlowAnalysis
    returns: Returns
    earnings: EarningsAnalysis
    balance_sheet: BalanceSheetHealth
    shares: ShareCountAnalysis
    user_inputs: UserInputs
