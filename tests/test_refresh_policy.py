"""Unit tests for the full-refresh vs price-update decision."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from moat.domains.companies.services.refresh_policy import (
    StalenessSnapshot,
    should_fetch_full_data,
    utc_now,
)


def _record(now, next_earnings_in_days=30, fetched_days_ago=30):
    return {
        "next_earnings": None if next_earnings_in_days is None else now + timedelta(days=next_earnings_in_days),
        "last_full_fetch": None if fetched_days_ago is None else now - timedelta(days=fetched_days_ago),
    }


class TestShouldFetchFullData:

    def test_unknown_company(self, fixed_now):
        assert should_fetch_full_data(None, now=fixed_now) is True

    def test_record_without_metadata(self, fixed_now):
        assert should_fetch_full_data({"next_earnings": None, "last_full_fetch": None}, now=fixed_now) is True

    def test_missing_next_earnings(self, fixed_now):
        assert should_fetch_full_data(_record(fixed_now, next_earnings_in_days=None), now=fixed_now) is True

    def test_missing_last_full_fetch(self, fixed_now):
        assert should_fetch_full_data(_record(fixed_now, fetched_days_ago=None), now=fixed_now) is True

    def test_stale_after_ninety_days(self, fixed_now):
        assert should_fetch_full_data(_record(fixed_now, fetched_days_ago=91), now=fixed_now) is True

    def test_fresh_within_ninety_days(self, fixed_now):
        assert should_fetch_full_data(_record(fixed_now, fetched_days_ago=30), now=fixed_now) is False

    def test_exactly_ninety_days_is_still_fresh(self, fixed_now):
        assert should_fetch_full_data(_record(fixed_now, fetched_days_ago=90), now=fixed_now) is False

    def test_fractional_days_count(self, fixed_now):
        record = {
            "next_earnings": fixed_now + timedelta(days=10),
            "last_full_fetch": fixed_now - timedelta(days=90, hours=1),
        }
        assert should_fetch_full_data(record, now=fixed_now) is True

    def test_earnings_reported_since_last_fetch(self, fixed_now):
        record = _record(fixed_now, next_earnings_in_days=-2, fetched_days_ago=30)
        assert should_fetch_full_data(record, now=fixed_now) is True

    def test_earnings_reported_before_last_fetch(self, fixed_now):
        record = _record(fixed_now, next_earnings_in_days=-40, fetched_days_ago=30)
        assert should_fetch_full_data(record, now=fixed_now) is False

    def test_earnings_at_this_instant(self, fixed_now):
        record = {"next_earnings": fixed_now, "last_full_fetch": fixed_now - timedelta(days=1)}
        assert should_fetch_full_data(record, now=fixed_now) is True

    def test_reads_attributes_of_orm_like_objects(self, fixed_now):
        company = SimpleNamespace(**_record(fixed_now, fetched_days_ago=5))
        assert should_fetch_full_data(company, now=fixed_now) is False

    def test_custom_staleness_window(self, fixed_now):
        record = _record(fixed_now, fetched_days_ago=30)
        assert should_fetch_full_data(record, now=fixed_now, max_staleness_days=14) is True

    def test_timezone_aware_values_are_normalised(self, fixed_now):
        plus_two = timezone(timedelta(hours=2))
        record = {
            # 2024-06-01 13:00 +02:00 is 11:00 UTC, one hour before now
            "next_earnings": datetime(2024, 6, 1, 13, 0, tzinfo=plus_two),
            "last_full_fetch": fixed_now - timedelta(days=10),
        }
        aware_now = fixed_now.replace(tzinfo=timezone.utc)
        assert should_fetch_full_data(record, now=aware_now) is True

    def test_defaults_to_wall_clock(self):
        record = {
            "next_earnings": utc_now() + timedelta(days=30),
            "last_full_fetch": utc_now() - timedelta(days=1),
        }
        assert should_fetch_full_data(record) is False


class TestStalenessSnapshot:

    def test_days_since_last_full_fetch(self, fixed_now):
        snapshot = StalenessSnapshot.from_company(_record(fixed_now, fetched_days_ago=12), now=fixed_now)
        assert snapshot.days_since_last_full_fetch == pytest.approx(12)

    def test_snapshot_of_missing_company(self, fixed_now):
        snapshot = StalenessSnapshot.from_company(None, now=fixed_now)

        assert snapshot.exists is False
        assert snapshot.days_since_last_full_fetch is None
        assert snapshot.requires_full_fetch() is True

    def test_utc_now_is_naive(self):
        assert utc_now().tzinfo is None
