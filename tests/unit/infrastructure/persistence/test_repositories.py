# nosec B101


import pytest
import pytest_asyncio
from datetime import datetime, timedelta
from decimal import Decimal

from domain.models.currency import RateSample
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import (
    RateSampleRepository,
    SupportedCurrencyRepository,
)

NOW = datetime(2025, 11, 5, 12, 0, 0)


@pytest_asyncio.fixture
async def database():
    db = Database('sqlite+aiosqlite:///:memory:')
    await db.create_tables()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as session:
        yield session


def sample(target='EUR', rate='0.85', at=NOW, base='USD', source='fixerio'):
    return RateSample(
        base_currency=base,
        target_currency=target,
        rate=Decimal(rate),
        source=source,
        timestamp=at,
    )


# ============================================================================
# TEST: RateSampleRepository
# ============================================================================

@pytest.mark.asyncio
async def test_insert_samples_returns_count(session):
    repo = RateSampleRepository(session)

    saved = await repo.insert_samples([sample('EUR'), sample('GBP', '0.75')])

    assert saved == 2


@pytest.mark.asyncio
async def test_insert_samples_empty_is_noop(session):
    repo = RateSampleRepository(session)

    assert await repo.insert_samples([]) == 0


@pytest.mark.asyncio
async def test_query_range_is_inclusive_and_ordered(session):
    repo = RateSampleRepository(session)
    start = NOW - timedelta(days=7)
    await repo.insert_samples([
        sample(rate='0.95', at=NOW),
        sample(rate='0.85', at=start),
        sample(rate='0.90', at=NOW - timedelta(days=3)),
        sample(rate='0.80', at=start - timedelta(seconds=1)),
        sample(rate='0.99', at=NOW + timedelta(seconds=1)),
    ])

    results = await repo.query_samples_in_range('USD', 'EUR', start, NOW)

    assert [r.rate for r in results] == [Decimal('0.85'), Decimal('0.90'), Decimal('0.95')]
    assert results[0].timestamp == start
    assert results[-1].timestamp == NOW
    assert all(r.id is not None for r in results)


@pytest.mark.asyncio
async def test_query_range_filters_by_ordered_pair(session):
    repo = RateSampleRepository(session)
    await repo.insert_samples([
        sample('EUR', '0.85'),
        sample('GBP', '0.75'),
        sample('USD', '1.17', base='EUR'),
    ])

    results = await repo.query_samples_in_range('USD', 'EUR', NOW - timedelta(hours=1), NOW)

    assert len(results) == 1
    assert results[0].base_currency == 'USD'
    assert results[0].target_currency == 'EUR'
    assert results[0].source == 'fixerio'


@pytest.mark.asyncio
async def test_equal_timestamps_keep_insertion_order(session):
    repo = RateSampleRepository(session)
    await repo.insert_sample(sample(rate='0.85'))
    await repo.insert_sample(sample(rate='0.86'))

    results = await repo.query_samples_in_range('USD', 'EUR', NOW, NOW)

    assert [r.rate for r in results] == [Decimal('0.85'), Decimal('0.86')]


@pytest.mark.asyncio
async def test_delete_samples_older_than_cutoff(session):
    repo = RateSampleRepository(session)
    cutoff = NOW - timedelta(days=395)
    await repo.insert_samples([
        sample(at=cutoff - timedelta(days=1)),
        sample(at=cutoff - timedelta(seconds=1)),
        sample(at=cutoff),
        sample(at=NOW),
    ])

    deleted = await repo.delete_samples_older_than(cutoff)

    assert deleted == 2
    remaining = await repo.query_samples_in_range('USD', 'EUR', cutoff - timedelta(days=10), NOW)
    assert [r.timestamp for r in remaining] == [cutoff, NOW]


@pytest.mark.asyncio
async def test_rollback_discards_uncommitted_samples(session):
    repo = RateSampleRepository(session)
    await repo.insert_samples([sample('EUR'), sample('GBP', '0.75')])

    await repo.rollback()

    assert await repo.query_samples_in_range('USD', 'EUR', NOW - timedelta(days=1), NOW) == []


# ============================================================================
# TEST: SupportedCurrencyRepository
# ============================================================================

@pytest.mark.asyncio
async def test_supported_currencies_add_and_list_sorted(session):
    repo = SupportedCurrencyRepository(session)

    await repo.add('USD')
    await repo.add('EUR')
    await repo.add('GBP')

    assert await repo.list_codes() == ['EUR', 'GBP', 'USD']


@pytest.mark.asyncio
async def test_supported_currencies_exists(session):
    repo = SupportedCurrencyRepository(session)
    await repo.add('USD')

    assert await repo.exists('USD') is True
    assert await repo.exists('EUR') is False


@pytest.mark.asyncio
async def test_session_commits_on_exit(database):
    async with database.session() as session:
        await SupportedCurrencyRepository(session).add('JPY')

    async with database.session() as session:
        assert await SupportedCurrencyRepository(session).list_codes() == ['JPY']


@pytest.mark.asyncio
async def test_session_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        async with database.session() as session:
            await SupportedCurrencyRepository(session).add('JPY')
            raise RuntimeError('boom')

    async with database.session() as session:
        assert await SupportedCurrencyRepository(session).list_codes() == []


@pytest.mark.asyncio
async def test_ping(database):
    assert await database.ping() is True
