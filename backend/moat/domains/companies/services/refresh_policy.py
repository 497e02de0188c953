"""
Refresh Policy

Decides whether a company's cached financial statements are stale enough to
require a full refetch from the market-data provider, or whether a cheap
price-only update is enough.
"""

# Standard library imports
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

DEFAULT_MAX_STALENESS_DAYS = 90
SECONDS_PER_DAY = 60 * 60 * 24


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, matching the stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _read_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class StalenessSnapshot:
    """Everything the refresh decision looks at, captured at one instant."""
    exists: bool
    next_earnings: Optional[datetime]
    last_full_fetch: Optional[datetime]
    now: datetime

    @classmethod
    def from_company(cls, company: Any, now: Optional[datetime] = None) -> "StalenessSnapshot":
        """Build a snapshot from an ORM Company, a mapping with the same keys, or None."""
        now = _as_naive_utc(now) if now is not None else utc_now()
        if company is None:
            return cls(exists=False, next_earnings=None, last_full_fetch=None, now=now)

        return cls(
            exists=True,
            next_earnings=_as_naive_utc(_read_field(company, "next_earnings")),
            last_full_fetch=_as_naive_utc(_read_field(company, "last_full_fetch")),
            now=now,
        )

    @property
    def days_since_last_full_fetch(self) -> Optional[float]:
        if self.last_full_fetch is None:
            return None
        return (self.now - self.last_full_fetch).total_seconds() / SECONDS_PER_DAY

    def requires_full_fetch(self, max_staleness_days: float = DEFAULT_MAX_STALENESS_DAYS) -> bool:
        # First match wins
        if not self.exists:
            return True
        if self.next_earnings is None:
            return True
        if self.last_full_fetch is None:
            return True

        # An earnings report has come out since the last full fetch
        if self.next_earnings <= self.now and self.next_earnings > self.last_full_fetch:
            return True

        if self.days_since_last_full_fetch > max_staleness_days:
            return True

        return False


def should_fetch_full_data(
    company: Any,
    now: Optional[datetime] = None,
    max_staleness_days: float = DEFAULT_MAX_STALENESS_DAYS
) -> bool:
    """
    Decide between a full data refetch and a price-only update.

    Args:
        company: Existing company record (or None when the ticker is unknown)
        now: Current time, defaults to the wall clock in UTC
        max_staleness_days: Age after which cached statements are always refetched

    Returns:
        True when the full dataset must be fetched again
    """
    snapshot = StalenessSnapshot.from_company(company, now)
    return snapshot.requires_full_fetch(max_staleness_days)
