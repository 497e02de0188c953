"""
Valuation Service

CRUD for stored DCF scenarios plus the sensitivity grid around a scenario.
Calculation itself lives in the engine; this layer prepares its inputs and
persists the rounded totals.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from moat.models import Company, Valuation
from moat.models.valuation import FCF_YEAR_COLUMNS
from moat.shared.exceptions import ValuationNotFoundException
from ..config import get_valuation_config
from ..engine import (
    ValuationInputs,
    ValuationResult,
    build_sensitivity_rates,
    calculate_dcf,
    calculate_margin_of_safety,
    generate_sensitivity_analysis,
    project_fcf,
    round_half_up,
)
from ..schemas.valuation import CalculationDetails, SensitivityTable, ValuationCreate, ValuationUpdate

logger = logging.getLogger(__name__)


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def format_margin_of_safety(intrinsic_value_per_share: float, price) -> Optional[str]:
    """Margin of safety as a percentage string with two decimals, e.g. '23.40%'."""
    margin = calculate_margin_of_safety(intrinsic_value_per_share, _to_float(price))
    if margin is None:
        return None
    return f"{margin:.2f}%"


def apply_result(valuation: Valuation, fcf_projections: List[int], result: ValuationResult) -> None:
    """Copy projections and rounded results onto a valuation row."""
    for column, fcf in zip(FCF_YEAR_COLUMNS, fcf_projections):
        setattr(valuation, column, fcf)

    valuation.total_discounted_fcf = int(round_half_up(result.total_discounted_fcf))
    valuation.perpetuity_value = int(round_half_up(result.perpetuity_value))
    valuation.discounted_perpetuity_value = int(round_half_up(result.discounted_perpetuity_value))
    valuation.total_equity_value = int(round_half_up(result.total_equity_value))
    valuation.intrinsic_value_per_share = Decimal(f"{round_half_up(result.intrinsic_value_per_share, 2):.2f}")


class ValuationService:

    @staticmethod
    async def list_valuations(db: AsyncSession, company: Company) -> List[Valuation]:
        """Every scenario of a company, newest first."""
        result = await db.execute(
            select(Valuation)
            .where(Valuation.company_id == company.id)
            .order_by(Valuation.created_at.desc(), Valuation.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_latest(db: AsyncSession, company: Company) -> Valuation:
        result = await db.execute(
            select(Valuation)
            .where(Valuation.company_id == company.id)
            .order_by(Valuation.created_at.desc(), Valuation.id.desc())
            .limit(1)
        )
        valuation = result.scalar_one_or_none()
        if not valuation:
            raise ValuationNotFoundException(company.ticker)
        return valuation

    @staticmethod
    async def get_valuation(db: AsyncSession, company: Company, valuation_id: int) -> Valuation:
        result = await db.execute(
            select(Valuation).where(Valuation.id == valuation_id, Valuation.company_id == company.id)
        )
        valuation = result.scalar_one_or_none()
        if not valuation:
            raise ValuationNotFoundException(company.ticker, valuation_id)
        return valuation

    @staticmethod
    async def create_valuation(
        db: AsyncSession,
        company: Company,
        data: ValuationCreate
    ) -> Tuple[Valuation, CalculationDetails]:
        """
        Calculate and store a new scenario.

        When no explicit projections are given, ``base_fcf`` is compounded at
        ``fcf_growth_rate`` for ten years first.

        Raises:
            InvalidValuationInputException: inputs rejected by the calculator;
                nothing is stored
        """
        if data.fcf_projections is not None:
            fcf_projections = list(data.fcf_projections)
        else:
            fcf_projections = project_fcf(data.base_fcf, data.fcf_growth_rate)

        result = calculate_dcf(ValuationInputs(
            fcf_projections=fcf_projections,
            discount_rate=data.discount_rate,
            perpetual_growth_rate=data.perpetual_growth_rate,
            shares_outstanding=data.shares_outstanding,
        ))

        valuation = Valuation(
            company_id=company.id,
            scenario_name=data.scenario_name or get_valuation_config().default_scenario_name,
            discount_rate=data.discount_rate,
            perpetual_growth_rate=data.perpetual_growth_rate,
            shares_outstanding=data.shares_outstanding,
            notes=data.notes,
        )
        apply_result(valuation, fcf_projections, result)

        db.add(valuation)
        await db.commit()
        await db.refresh(valuation)

        logger.info(
            f"Stored valuation {valuation.id} for {company.ticker}: "
            f"{valuation.intrinsic_value_per_share} per share"
        )

        details = CalculationDetails(
            discounted_fcfs=list(result.discounted_fcfs),
            margin_of_safety=format_margin_of_safety(result.intrinsic_value_per_share, company.price),
        )
        return valuation, details

    @staticmethod
    async def update_valuation(
        db: AsyncSession,
        company: Company,
        valuation_id: int,
        data: ValuationUpdate
    ) -> Tuple[Valuation, CalculationDetails]:
        """Merge changed fields over the stored scenario and recalculate it."""
        valuation = await ValuationService.get_valuation(db, company, valuation_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        fcf_projections = changes.get("fcf_projections", valuation.fcf_projections)
        discount_rate = changes.get("discount_rate", _to_float(valuation.discount_rate))
        perpetual_growth_rate = changes.get("perpetual_growth_rate", _to_float(valuation.perpetual_growth_rate))
        shares_outstanding = changes.get("shares_outstanding", valuation.shares_outstanding)

        # Calculate before touching the row so a rejected update leaves it intact
        result = calculate_dcf(ValuationInputs(
            fcf_projections=fcf_projections,
            discount_rate=discount_rate,
            perpetual_growth_rate=perpetual_growth_rate,
            shares_outstanding=shares_outstanding,
        ))

        valuation.discount_rate = discount_rate
        valuation.perpetual_growth_rate = perpetual_growth_rate
        valuation.shares_outstanding = shares_outstanding
        for field in ("scenario_name", "notes"):
            if field in changes:
                setattr(valuation, field, changes[field])
        apply_result(valuation, list(fcf_projections), result)

        await db.commit()
        await db.refresh(valuation)
        logger.info(f"Recalculated valuation {valuation.id} for {company.ticker}")

        details = CalculationDetails(
            discounted_fcfs=list(result.discounted_fcfs),
            margin_of_safety=format_margin_of_safety(result.intrinsic_value_per_share, company.price),
        )
        return valuation, details

    @staticmethod
    async def delete_valuation(db: AsyncSession, company: Company, valuation_id: int) -> None:
        valuation = await ValuationService.get_valuation(db, company, valuation_id)
        await db.delete(valuation)
        await db.commit()
        logger.info(f"Deleted valuation {valuation_id} for {company.ticker}")

    @staticmethod
    async def generate_sensitivity(db: AsyncSession, company: Company, valuation_id: int) -> SensitivityTable:
        """Five-by-five intrinsic value grid around a stored scenario's rates."""
        valuation = await ValuationService.get_valuation(db, company, valuation_id)
        config = get_valuation_config()

        discount_rates, growth_rates = build_sensitivity_rates(
            float(valuation.discount_rate),
            float(valuation.perpetual_growth_rate),
            **config.get_sensitivity_params()
        )
        table = generate_sensitivity_analysis(
            valuation.fcf_projections,
            valuation.shares_outstanding,
            discount_rates,
            growth_rates,
            decimals=config.sensitivity_decimals,
        )

        return SensitivityTable(
            base_valuation=valuation.intrinsic_value_per_share,
            current_price=company.price,
            discount_rates=discount_rates,
            growth_rates=growth_rates,
            sensitivity_table=table,
        )
