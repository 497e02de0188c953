from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

class ValuationCreate(BaseModel):
    """
    A new DCF scenario.

    Either ``fcf_projections`` (ten yearly figures) or ``base_fcf`` with
    ``fcf_growth_rate`` must be supplied; the latter is expanded into ten
    compounded years.
    """
    scenario_name: Optional[str] = Field(None, max_length=100)
    discount_rate: float = Field(..., description="Discount rate R in percent, e.g. 10")
    perpetual_growth_rate: float = Field(..., description="Perpetual growth rate g in percent, e.g. 3")
    shares_outstanding: int
    fcf_projections: Optional[List[int]] = Field(None, description="FCF for years 1..10")
    base_fcf: Optional[int] = Field(None, description="Latest FCF to compound forward")
    fcf_growth_rate: Optional[float] = Field(None, description="Yearly FCF growth in percent")
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_projection_source(self):
        if self.fcf_projections is None and (self.base_fcf is None or self.fcf_growth_rate is None):
            raise ValueError("Provide fcf_projections or both base_fcf and fcf_growth_rate")
        return self

class ValuationUpdate(BaseModel):
    scenario_name: Optional[str] = Field(None, max_length=100)
    discount_rate: Optional[float] = None
    perpetual_growth_rate: Optional[float] = None
    shares_outstanding: Optional[int] = None
    fcf_projections: Optional[List[int]] = None
    notes: Optional[str] = None

class SensitivityRequest(BaseModel):
    valuation_id: int

class ValuationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    scenario_name: str
    discount_rate: Decimal
    perpetual_growth_rate: Decimal
    shares_outstanding: int
    fcf_projections: List[Optional[int]]
    total_discounted_fcf: Optional[int] = None
    perpetuity_value: Optional[int] = None
    discounted_perpetuity_value: Optional[int] = None
    total_equity_value: Optional[int] = None
    intrinsic_value_per_share: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class CalculationDetails(BaseModel):
    discounted_fcfs: List[float]
    margin_of_safety: Optional[str] = None

class SensitivityTable(BaseModel):
    base_valuation: Optional[Decimal] = None
    current_price: Optional[Decimal] = None
    discount_rates: List[float]
    growth_rates: List[float]
    sensitivity_table: Dict[str, Dict[str, float]]
