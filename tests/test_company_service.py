"""Unit tests for the company profile refresh flow."""

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from moat.domains.companies.clients.yahoo_client import MarketDataBundle
from moat.domains.companies.services.company_service import CompanyService
from moat.models import BalanceSheet, CashFlowStatement, Company, IncomeStatement
from moat.shared.exceptions import CompanyNotFoundException, DataSourceException


@pytest.fixture
def bundle(fixed_now):
    return MarketDataBundle(
        company={
            "ticker": "AAPL",
            "exchange": "NMS",
            "name": "Apple Inc.",
            "price": Decimal("189.98"),
            "shares": 15_550_061_000,
            "next_earnings": fixed_now + timedelta(days=60),
            "last_full_fetch": fixed_now,
        },
        balance_sheets=[{"period_date": date(2023, 9, 30), "total_assets": 352_583_000_000}],
        income_statements=[{"period_date": date(2023, 9, 30), "net_income": 96_995_000_000}],
        cash_flows=[{"period_date": date(2023, 9, 30), "net_cash_from_operations": 110_543_000_000}],
    )


@pytest.fixture
def client(bundle):
    client = MagicMock()
    client.get_full_data = AsyncMock(return_value=bundle)
    client.get_price = AsyncMock(return_value=Decimal("191.04"))
    return client


@pytest.fixture
def profile_stub(monkeypatch):
    stub = AsyncMock(side_effect=lambda db, company: SimpleNamespace(company=company))
    monkeypatch.setattr(CompanyService, "build_profile", stub)
    return stub


class TestGetCompanyProfile:

    @pytest.mark.asyncio
    async def test_unknown_ticker_gets_full_fetch(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=None))

        profile, refresh_type = await CompanyService.get_company_profile(fake_db, "aapl", client, now=fixed_now)

        assert refresh_type == "full"
        client.get_full_data.assert_awaited_once_with("AAPL")
        client.get_price.assert_not_awaited()
        assert profile.company.ticker == "AAPL"

        companies = [obj for obj in fake_db.added if isinstance(obj, Company)]
        assert len(companies) == 1
        statements = [obj for obj in fake_db.added if not isinstance(obj, Company)]
        assert {type(obj) for obj in statements} == {BalanceSheet, IncomeStatement, CashFlowStatement}
        assert all(obj.company_id == companies[0].id for obj in statements)
        assert fake_db.commits == 1

    @pytest.mark.asyncio
    async def test_fresh_company_gets_price_update(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        stored = Company(
            id=3,
            ticker="AAPL",
            price=Decimal("180.00"),
            next_earnings=fixed_now + timedelta(days=20),
            last_full_fetch=fixed_now - timedelta(days=10),
        )
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=stored))

        profile, refresh_type = await CompanyService.get_company_profile(fake_db, "AAPL", client, now=fixed_now)

        assert refresh_type == "price"
        client.get_full_data.assert_not_awaited()
        assert profile.company.price == Decimal("191.04")
        assert fake_db.added == []

    @pytest.mark.asyncio
    async def test_missing_price_keeps_stored_price(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        client.get_price = AsyncMock(return_value=None)
        stored = Company(
            id=3,
            ticker="AAPL",
            price=Decimal("180.00"),
            next_earnings=fixed_now + timedelta(days=20),
            last_full_fetch=fixed_now - timedelta(days=10),
        )
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=stored))

        profile, _ = await CompanyService.get_company_profile(fake_db, "AAPL", client, now=fixed_now)
        assert profile.company.price == Decimal("180.00")

    @pytest.mark.asyncio
    async def test_stale_company_is_replaced(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        stored = Company(
            id=3,
            ticker="AAPL",
            name="Old name",
            next_earnings=fixed_now + timedelta(days=20),
            last_full_fetch=fixed_now - timedelta(days=120),
        )
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=stored))
        fake_db.execute = AsyncMock()

        profile, refresh_type = await CompanyService.get_company_profile(fake_db, "AAPL", client, now=fixed_now)

        assert refresh_type == "full"
        assert profile.company is stored
        assert stored.name == "Apple Inc."
        # one delete per statement table
        assert fake_db.execute.await_count == 3
        assert len(fake_db.added) == 3
        assert all(obj.company_id == 3 for obj in fake_db.added)
        assert fake_db.commits == 1

    @pytest.mark.asyncio
    async def test_failed_refresh_rolls_back(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        stored = Company(id=3, ticker="AAPL", next_earnings=None, last_full_fetch=None)
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=stored))
        fake_db.execute = AsyncMock(side_effect=RuntimeError("connection lost"))

        with pytest.raises(RuntimeError):
            await CompanyService.get_company_profile(fake_db, "AAPL", client, now=fixed_now)

        assert fake_db.rollbacks == 1
        assert fake_db.commits == 0

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, fake_db, client, profile_stub, monkeypatch, fixed_now):
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=None))
        client.get_full_data = AsyncMock(side_effect=DataSourceException("yahoo_finance", "timed out"))

        with pytest.raises(DataSourceException):
            await CompanyService.get_company_profile(fake_db, "AAPL", client, now=fixed_now)

        assert fake_db.added == []


class TestRequireCompany:

    @pytest.mark.asyncio
    async def test_missing_company(self, fake_db, monkeypatch):
        monkeypatch.setattr(CompanyService, "get_by_ticker", AsyncMock(return_value=None))

        with pytest.raises(CompanyNotFoundException) as exc_info:
            await CompanyService.require_company(fake_db, "msft")

        assert exc_info.value.details == {"ticker": "MSFT"}
