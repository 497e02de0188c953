"""Unit tests for ValuationService with an in-memory session."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from moat.domains.valuation.schemas.valuation import ValuationCreate, ValuationUpdate
from moat.domains.valuation.services.valuation_service import (
    ValuationService,
    apply_result,
    format_margin_of_safety,
)
from moat.domains.valuation.engine import ValuationInputs, calculate_dcf
from moat.models import Valuation
from moat.shared.exceptions import (
    InvalidProjectionCountException,
    InvalidRateRelationshipException,
    ValuationNotFoundException,
)

SHARES = 1_000_000_000


@pytest.fixture
def stored_valuation(company):
    valuation = Valuation(
        id=7,
        company_id=company.id,
        scenario_name="Base Case",
        discount_rate=Decimal("10.00"),
        perpetual_growth_rate=Decimal("3.00"),
        shares_outstanding=SHARES,
        notes="first pass",
    )
    result = calculate_dcf(ValuationInputs([1_000_000_000] * 10, 10, 3, SHARES))
    apply_result(valuation, [1_000_000_000] * 10, result)
    return valuation


class TestCreateValuation:

    @pytest.mark.asyncio
    async def test_stores_rounded_results(self, fake_db, company, uniform_fcf):
        company.price = Decimal("10.00")
        payload = ValuationCreate(
            discount_rate=10,
            perpetual_growth_rate=3,
            shares_outstanding=SHARES,
            fcf_projections=uniform_fcf,
        )

        valuation, details = await ValuationService.create_valuation(fake_db, company, payload)

        assert fake_db.added == [valuation]
        assert fake_db.commits == 1
        assert valuation.scenario_name == "Base Case"
        assert valuation.fcf_projections == uniform_fcf
        assert valuation.intrinsic_value_per_share == Decimal("11.82")
        assert isinstance(valuation.total_equity_value, int)
        assert len(details.discounted_fcfs) == 10
        assert details.margin_of_safety == "15.38%"

    @pytest.mark.asyncio
    async def test_projects_from_base_fcf(self, fake_db, company):
        payload = ValuationCreate(
            scenario_name="Bull",
            discount_rate=10,
            perpetual_growth_rate=3,
            shares_outstanding=SHARES,
            base_fcf=100_000_000_000,
            fcf_growth_rate=10,
        )

        valuation, _ = await ValuationService.create_valuation(fake_db, company, payload)

        assert valuation.scenario_name == "Bull"
        assert valuation.fcf_year_1 == 110_000_000_000
        assert valuation.fcf_year_5 == 161_051_000_000
        assert all(fcf is not None for fcf in valuation.fcf_projections)

    @pytest.mark.asyncio
    async def test_rejected_inputs_store_nothing(self, fake_db, company):
        payload = ValuationCreate(
            discount_rate=10,
            perpetual_growth_rate=3,
            shares_outstanding=SHARES,
            fcf_projections=[1] * 9,
        )

        with pytest.raises(InvalidProjectionCountException):
            await ValuationService.create_valuation(fake_db, company, payload)

        assert fake_db.added == []
        assert fake_db.commits == 0

    @pytest.mark.asyncio
    async def test_no_margin_without_price(self, fake_db, company, uniform_fcf):
        company.price = None
        payload = ValuationCreate(
            discount_rate=10, perpetual_growth_rate=3, shares_outstanding=SHARES, fcf_projections=uniform_fcf
        )

        _, details = await ValuationService.create_valuation(fake_db, company, payload)
        assert details.margin_of_safety is None

    def test_projection_source_is_required(self):
        with pytest.raises(ValidationError):
            ValuationCreate(discount_rate=10, perpetual_growth_rate=3, shares_outstanding=SHARES, base_fcf=100)


class TestUpdateValuation:

    @pytest.mark.asyncio
    async def test_merges_and_recalculates(self, fake_db, company, stored_valuation, monkeypatch):
        monkeypatch.setattr(ValuationService, "get_valuation", AsyncMock(return_value=stored_valuation))
        before = stored_valuation.intrinsic_value_per_share

        valuation, details = await ValuationService.update_valuation(
            fake_db, company, 7, ValuationUpdate(discount_rate=12, notes="higher hurdle")
        )

        assert valuation.discount_rate == 12
        assert valuation.perpetual_growth_rate == 3.0
        assert valuation.notes == "higher hurdle"
        assert valuation.scenario_name == "Base Case"
        assert valuation.intrinsic_value_per_share < before
        assert len(details.discounted_fcfs) == 10
        assert fake_db.commits == 1

    @pytest.mark.asyncio
    async def test_rejected_update_leaves_row_intact(self, fake_db, company, stored_valuation, monkeypatch):
        monkeypatch.setattr(ValuationService, "get_valuation", AsyncMock(return_value=stored_valuation))
        before = stored_valuation.intrinsic_value_per_share

        with pytest.raises(InvalidRateRelationshipException):
            await ValuationService.update_valuation(
                fake_db, company, 7, ValuationUpdate(perpetual_growth_rate=15)
            )

        assert stored_valuation.perpetual_growth_rate == Decimal("3.00")
        assert stored_valuation.intrinsic_value_per_share == before
        assert fake_db.commits == 0

    @pytest.mark.asyncio
    async def test_missing_valuation(self, fake_db, company, monkeypatch):
        monkeypatch.setattr(
            ValuationService, "get_valuation",
            AsyncMock(side_effect=ValuationNotFoundException(company.ticker, 99))
        )

        with pytest.raises(ValuationNotFoundException) as exc_info:
            await ValuationService.update_valuation(fake_db, company, 99, ValuationUpdate(discount_rate=9))

        assert exc_info.value.message == "No valuation found with ID 99"


class TestSensitivity:

    @pytest.mark.asyncio
    async def test_grid_around_stored_rates(self, fake_db, company, stored_valuation, monkeypatch):
        monkeypatch.setattr(ValuationService, "get_valuation", AsyncMock(return_value=stored_valuation))

        table = await ValuationService.generate_sensitivity(fake_db, company, 7)

        assert table.discount_rates == [8, 9, 10, 11, 12]
        assert table.growth_rates == [2, 2.5, 3, 3.5, 4]
        assert list(table.sensitivity_table) == ["8%", "9%", "10%", "11%", "12%"]
        assert table.sensitivity_table["10%"]["3%"] == float(stored_valuation.intrinsic_value_per_share)
        assert table.base_valuation == stored_valuation.intrinsic_value_per_share
        assert table.current_price == company.price


class TestDeleteValuation:

    @pytest.mark.asyncio
    async def test_deletes_and_commits(self, fake_db, company, stored_valuation, monkeypatch):
        monkeypatch.setattr(ValuationService, "get_valuation", AsyncMock(return_value=stored_valuation))

        await ValuationService.delete_valuation(fake_db, company, 7)

        assert fake_db.deleted == [stored_valuation]
        assert fake_db.commits == 1


def test_format_margin_of_safety():
    assert format_margin_of_safety(200.0, Decimal("150")) == "25.00%"
    assert format_margin_of_safety(0, Decimal("150")) is None
    assert format_margin_of_safety(200.0, None) is None
    assert format_margin_of_safety(200.0, Decimal("0")) is None
