"""Test configuration helpers and fixtures."""

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from datetime import datetime
from decimal import Decimal

import pytest

ROOT = Path(__file__).resolve().parents[1]
BACKEND = ROOT / "backend"

if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

os.environ.setdefault("APP_ENV", "test")


@pytest.fixture
def growing_fcf():
    """Ten years of FCF growing 10% a year from 100bn."""
    return [
        100e9, 110e9, 121e9, 133.1e9, 146.41e9,
        161.051e9, 177.1561e9, 194.87171e9, 214.358881e9, 235.7947691e9,
    ]


@pytest.fixture
def uniform_fcf():
    return [1_000_000_000] * 10


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def company():
    """A stored company as the endpoints see it."""
    return SimpleNamespace(
        id=1,
        ticker="AAPL",
        name="Apple Inc.",
        exchange="NMS",
        price=Decimal("150.00"),
    )


class FakeSession:
    """Stands in for an AsyncSession in service and endpoint tests."""

    def __init__(self):
        self.added = []
        self.deleted = []
        self.commits = 0
        self.rollbacks = 0

    def _assign_ids(self):
        for index, obj in enumerate(self.added, start=1):
            if getattr(obj, "id", None) is None:
                obj.id = index

    def add(self, obj):
        self.added.append(obj)

    def add_all(self, objs):
        self.added.extend(objs)

    async def flush(self):
        self._assign_ids()

    async def commit(self):
        self._assign_ids()
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def refresh(self, obj):
        return None

    async def delete(self, obj):
        self.deleted.append(obj)


@pytest.fixture
def fake_db():
    return FakeSession()
