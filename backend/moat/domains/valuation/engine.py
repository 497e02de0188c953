"""
DCF Valuation Engine

Pat Dorsey's ten-year discounted cash flow model, the sensitivity grid built
on top of it, and the helpers used to prepare its inputs.

Every function here is pure: no I/O, no shared state. Rates are expressed as
percentages (10 means 10%) and converted to fractions internally.
"""

# Standard library imports
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, List, Optional, Sequence, Tuple, Union

# App imports
from moat.shared.exceptions import (
    InvalidValuationInputException,
    InvalidProjectionCountException,
    InvalidRateRelationshipException,
    InvalidShareCountException,
)

Number = Union[int, float]
SensitivityMatrix = Dict[str, Dict[str, float]]

PROJECTION_YEARS = 10


@dataclass(frozen=True)
class ValuationInputs:
    """Inputs of a single DCF scenario."""
    fcf_projections: Tuple[Number, ...]
    discount_rate: float
    perpetual_growth_rate: float
    shares_outstanding: int

    def __post_init__(self):
        # Accept any sequence but keep the stored value immutable
        object.__setattr__(self, "fcf_projections", tuple(self.fcf_projections))


@dataclass(frozen=True)
class ValuationResult:
    """Derived outputs of a DCF scenario. Nothing here is rounded."""
    discounted_fcfs: Tuple[float, ...]
    total_discounted_fcf: float
    perpetuity_value: float
    discounted_perpetuity_value: float
    total_equity_value: float
    intrinsic_value_per_share: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "discounted_fcfs": list(self.discounted_fcfs),
            "total_discounted_fcf": self.total_discounted_fcf,
            "perpetuity_value": self.perpetuity_value,
            "discounted_perpetuity_value": self.discounted_perpetuity_value,
            "total_equity_value": self.total_equity_value,
            "intrinsic_value_per_share": self.intrinsic_value_per_share,
        }


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round halves towards positive infinity, the way ledger figures are rounded."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def validate_inputs(inputs: ValuationInputs) -> None:
    """
    Check the calculator invariants in a fixed order.

    Raises:
        InvalidProjectionCountException: projections do not cover ten years
        InvalidRateRelationshipException: discount rate <= growth rate
        InvalidShareCountException: shares outstanding <= 0
    """
    if len(inputs.fcf_projections) != PROJECTION_YEARS:
        raise InvalidProjectionCountException(len(inputs.fcf_projections), PROJECTION_YEARS)

    if inputs.discount_rate <= inputs.perpetual_growth_rate:
        raise InvalidRateRelationshipException(inputs.discount_rate, inputs.perpetual_growth_rate)

    if inputs.shares_outstanding <= 0:
        raise InvalidShareCountException(inputs.shares_outstanding)


def discount_factor(rate: float, years: int) -> float:
    """(1 + rate)^years, saturating at infinity instead of raising OverflowError."""
    try:
        return (1 + rate) ** years
    except OverflowError:
        return math.inf


def discount_cash_flows(fcf_projections: Sequence[Number], discount_rate: float) -> List[float]:
    """
    Discount each projected FCF to present value.

    Formula: Discounted FCF = FCF / (1 + R)^N, with N = 1 for the first year.
    """
    r = discount_rate / 100
    return [fcf / discount_factor(r, year) for year, fcf in enumerate(fcf_projections, start=1)]


def calculate_perpetuity_value(
    final_fcf: Number,
    discount_rate: float,
    perpetual_growth_rate: float,
    years: int = PROJECTION_YEARS
) -> Tuple[float, float]:
    """
    Terminal value of the cash flows beyond the forecast horizon.

    Perpetuity Value = FCF_10 x (1 + g) / (R - g), then discounted back
    from year 10 with (1 + R)^10.

    Returns:
        Tuple of (perpetuity value, discounted perpetuity value)
    """
    r = discount_rate / 100
    g = perpetual_growth_rate / 100

    perpetuity_value = (final_fcf * (1 + g)) / (r - g)
    discounted_perpetuity_value = perpetuity_value / discount_factor(r, years)

    return perpetuity_value, discounted_perpetuity_value


def calculate_dcf(inputs: ValuationInputs) -> ValuationResult:
    """
    Run the complete ten-year DCF model.

    Args:
        inputs: Projections, rates and share count of the scenario

    Returns:
        ValuationResult with per-year present values and the equity totals

    Raises:
        InvalidValuationInputException: when an input invariant is broken;
            no partial result is produced
    """
    validate_inputs(inputs)

    discounted_fcfs = discount_cash_flows(inputs.fcf_projections, inputs.discount_rate)
    total_discounted_fcf = sum(discounted_fcfs)

    perpetuity_value, discounted_perpetuity_value = calculate_perpetuity_value(
        inputs.fcf_projections[-1],
        inputs.discount_rate,
        inputs.perpetual_growth_rate,
    )

    total_equity_value = total_discounted_fcf + discounted_perpetuity_value
    intrinsic_value_per_share = total_equity_value / inputs.shares_outstanding

    return ValuationResult(
        discounted_fcfs=tuple(discounted_fcfs),
        total_discounted_fcf=total_discounted_fcf,
        perpetuity_value=perpetuity_value,
        discounted_perpetuity_value=discounted_perpetuity_value,
        total_equity_value=total_equity_value,
        intrinsic_value_per_share=intrinsic_value_per_share,
    )


def format_rate_label(rate: Number) -> str:
    """
    Label a rate the way it was written: 8 -> '8%', 2.5 -> '2.5%'.

    Integral floats print in full (1e16 -> '10000000000000000%'), including
    beyond 1e21 where JavaScript switches to exponent form. Tiny fractions
    keep Python's repr ('1e-07%' rather than JavaScript's '1e-7%').
    """
    if isinstance(rate, float) and rate.is_integer():
        rate = int(rate)
    return f"{rate}%"


def generate_sensitivity_analysis(
    fcf_projections: Sequence[Number],
    shares_outstanding: int,
    discount_rates: Sequence[Number],
    growth_rates: Sequence[Number],
    decimals: int = 2
) -> SensitivityMatrix:
    """
    Intrinsic value per share across every discount/growth rate pair.

    Rows are discount rates and columns growth rates, both in the order given.
    A pair the calculator rejects (typically growth >= discount) is an
    expected outcome of sweeping a range and is recorded as 0, as is a pair
    whose value cannot be represented as a float.

    Returns:
        Nested mapping, e.g. {"10%": {"3%": 182.51, ...}, ...}
    """
    results: SensitivityMatrix = {}

    for discount_rate in discount_rates:
        row = results.setdefault(format_rate_label(discount_rate), {})

        for growth_rate in growth_rates:
            try:
                calculation = calculate_dcf(ValuationInputs(
                    fcf_projections=tuple(fcf_projections),
                    discount_rate=discount_rate,
                    perpetual_growth_rate=growth_rate,
                    shares_outstanding=shares_outstanding,
                ))
                cell = round_half_up(calculation.intrinsic_value_per_share, decimals)
            except (InvalidValuationInputException, ArithmeticError):
                cell = 0

            row[format_rate_label(growth_rate)] = cell

    return results


def _grow_one_period(value: Number, growth_rate: float) -> int:
    """value x (1 + g) rounded half-up; past float range the step is done in Decimal."""
    try:
        return int(round_half_up(value * (1 + growth_rate / 100)))
    except OverflowError:
        grown = Decimal(str(value)) * (1 + Decimal(str(growth_rate)) / 100)
        return int((grown + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def project_fcf(base_fcf: Number, growth_rate: float, years: int = PROJECTION_YEARS) -> List[int]:
    """
    Compound a base FCF forward at a constant yearly growth rate.

    The first element is the base already grown one period. Each value is
    rounded to whole currency units and the rounded figure seeds the next year.
    """
    projections: List[int] = []
    current_fcf = base_fcf

    for _ in range(years):
        current_fcf = _grow_one_period(current_fcf, growth_rate)
        projections.append(current_fcf)

    return projections


def build_sensitivity_rates(
    base_discount_rate: float,
    base_growth_rate: float,
    discount_step: float = 1.0,
    growth_step: float = 0.5
) -> Tuple[List[float], List[float]]:
    """Five discount rates and five growth rates centred on the scenario's base rates."""
    offsets = (-2, -1, 0, 1, 2)
    discount_rates = [base_discount_rate + offset * discount_step for offset in offsets]
    growth_rates = [base_growth_rate + offset * growth_step for offset in offsets]
    return discount_rates, growth_rates


def calculate_margin_of_safety(
    intrinsic_value_per_share: float,
    current_price: Optional[float]
) -> Optional[float]:
    """Percentage gap between intrinsic value and market price; None without a (non-zero) price."""
    if not current_price or intrinsic_value_per_share == 0:
        return None
    return (intrinsic_value_per_share - current_price) / intrinsic_value_per_share * 100
