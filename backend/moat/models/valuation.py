from sqlalchemy import Column, String, Text, Integer, BigInteger, Numeric, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from moat.db.base_class import Base
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .company import Company

FCF_YEAR_COLUMNS = [f"fcf_year_{year}" for year in range(1, 11)]

class Valuation(Base):
    """A named DCF scenario: the raw inputs plus the calculated totals."""
    __tablename__ = "valuations"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    scenario_name = Column(String(100), nullable=False, default="Base Case")

    # Assumptions (percentages)
    discount_rate = Column(Numeric(5, 2), nullable=False)
    perpetual_growth_rate = Column(Numeric(5, 2), nullable=False)
    shares_outstanding = Column(BigInteger, nullable=False)

    fcf_year_1 = Column(BigInteger)
    fcf_year_2 = Column(BigInteger)
    fcf_year_3 = Column(BigInteger)
    fcf_year_4 = Column(BigInteger)
    fcf_year_5 = Column(BigInteger)
    fcf_year_6 = Column(BigInteger)
    fcf_year_7 = Column(BigInteger)
    fcf_year_8 = Column(BigInteger)
    fcf_year_9 = Column(BigInteger)
    fcf_year_10 = Column(BigInteger)

    # Results, rounded to whole currency units
    total_discounted_fcf = Column(BigInteger)
    perpetuity_value = Column(BigInteger)
    discounted_perpetuity_value = Column(BigInteger)
    total_equity_value = Column(BigInteger)
    intrinsic_value_per_share = Column(Numeric(10, 2))

    notes = Column(Text)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="valuations")

    @property
    def fcf_projections(self) -> List[int]:
        return [getattr(self, column) for column in FCF_YEAR_COLUMNS]
