"""
Shared fixtures for application service tests.
"""

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

from domain.models.currency import RateSnapshot


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def snapshot_for(provider_name, base='USD', rates=None, success=True):
    if rates is None:
        rates = {'EUR': '0.85', 'GBP': '0.75'}
    return RateSnapshot(
        base_currency=base,
        as_of_date=date(2025, 11, 5),
        rates={code: Decimal(value) for code, value in rates.items()},
        success=success,
        provider_name=provider_name,
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 11, 5, 12, 0, 0))


@pytest.fixture
def make_snapshot():
    return snapshot_for


@pytest.fixture
def make_provider():
    """Provider double: pass a RateSnapshot to return or an exception to raise."""

    def factory(name, result=None):
        provider = Mock()
        provider.name = name
        if result is None:
            result = snapshot_for(name)
        if isinstance(result, BaseException):
            provider.fetch_latest = AsyncMock(side_effect=result)
        else:
            provider.fetch_latest = AsyncMock(return_value=result)
        provider.close = AsyncMock()
        return provider

    return factory
