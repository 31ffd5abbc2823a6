# nosec B101


import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock, AsyncMock
import httpx

from infrastructure.providers.fixerio import FixerIOProvider
from domain.exceptions.currency import ProviderError


def make_client(payload=None, side_effect=None):
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    if side_effect is not None:
        mock_client.get.side_effect = side_effect
        return mock_client
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    mock_client.get.return_value = mock_response
    return mock_client


@pytest.mark.asyncio
async def test_fetch_latest_success_returns_snapshot():
    mock_client = make_client({
        'success': True,
        'base': 'EUR',
        'date': '2025-11-05',
        'rates': {'USD': 1.1765, 'GBP': 0.8823}
    })

    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    snapshot = await provider.fetch_latest()

    assert snapshot.success
    assert snapshot.is_usable
    assert snapshot.provider_name == 'fixerio'
    assert snapshot.base_currency == 'EUR'
    assert snapshot.as_of_date == date(2025, 11, 5)
    assert snapshot.rates['USD'] == Decimal('1.1765')
    assert isinstance(snapshot.rates['GBP'], Decimal)

    call_args = mock_client.get.call_args
    assert 'http://data.fixer.io/api/latest' in call_args[0][0]
    assert call_args[1]['params'] == {'access_key': 'test_key'}


@pytest.mark.asyncio
async def test_fetch_latest_passes_base_and_symbols():
    mock_client = make_client({'success': True, 'base': 'USD', 'rates': {'EUR': 0.85}})

    provider = FixerIOProvider(api_key='test_key', client=mock_client)
    await provider.fetch_latest(base='USD', symbols=['EUR', 'GBP'])

    params = mock_client.get.call_args[1]['params']
    assert params['base'] == 'USD'
    assert params['symbols'] == 'EUR,GBP'


@pytest.mark.asyncio
async def test_fetch_latest_api_error_returns_failure_snapshot():
    mock_client = make_client({
        'success': False,
        'error': {
            'code': 101,
            'info': 'Invalid API key'
        }
    })

    provider = FixerIOProvider(api_key="invalid_key", client=mock_client)

    snapshot = await provider.fetch_latest()

    assert not snapshot.success
    assert not snapshot.is_usable
    assert snapshot.provider_name == 'fixerio'


@pytest.mark.asyncio
async def test_fetch_latest_missing_rates_returns_failure_snapshot():
    mock_client = make_client({'success': True, 'base': 'EUR', 'rates': {}})

    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    snapshot = await provider.fetch_latest()

    assert not snapshot.success


@pytest.mark.asyncio
async def test_fetch_latest_skips_non_iso_codes():
    mock_client = make_client({
        'success': True,
        'base': 'EUR',
        'rates': {'USD': 1.17, 'BTC': 0.000021}
    })

    provider = FixerIOProvider(api_key='test_key', client=mock_client)
    snapshot = await provider.fetch_latest()

    assert set(snapshot.rates) == {'USD'}


@pytest.mark.asyncio
async def test_fetch_latest_non_numeric_rate_raises():
    mock_client = make_client({'success': True, 'base': 'EUR', 'rates': {'USD': 'n/a'}})

    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'USD' in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize('value', [float('nan'), float('inf'), 'NaN', '-Infinity'])
async def test_fetch_latest_non_finite_rate_raises(value):
    mock_client = make_client({'success': True, 'base': 'EUR', 'rates': {'USD': value}})

    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'non-finite' in str(exc_info.value)
    assert 'USD' in str(exc_info.value)


# ============================================================================
# TEST: fetch_latest() - HTTP and Network Failures
# ============================================================================

@pytest.mark.asyncio
async def test_fetch_latest_http_500_error():
    error_response = Mock()
    error_response.status_code = 500
    error_response.text = 'Internal Server Error'

    mock_client = make_client(side_effect=httpx.HTTPStatusError(
        'Server error',
        request=Mock(),
        response=error_response
    ))

    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'HTTP error 500' in str(exc_info.value)
    assert mock_client.get.call_count == 1


@pytest.mark.asyncio
async def test_fetch_latest_http_429_rate_limit():
    error_response = Mock()
    error_response.status_code = 429
    error_response.text = 'Rate limit exceeded'

    mock_client = make_client(side_effect=httpx.HTTPStatusError(
        'Rate limit',
        request=Mock(),
        response=error_response
    ))
    provider = FixerIOProvider(api_key='test_key', client=mock_client)
    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert '429' in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_latest_network_timeout():
    mock_client = make_client(side_effect=httpx.TimeoutException('Request timed out'))
    provider = FixerIOProvider(api_key='test_key', client=mock_client, retry_attempts=1)
    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'request failed' in str(exc_info.value).lower()


@pytest.mark.asyncio
async def test_fetch_latest_error_message_does_not_leak_api_key():
    mock_client = make_client(side_effect=httpx.ConnectError('Connection refused'))
    provider = FixerIOProvider(api_key='secret_key_123', client=mock_client, retry_attempts=1)
    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'secret_key_123' not in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_latest_retries_transport_errors():
    mock_response = Mock()
    mock_response.json.return_value = {'success': True, 'base': 'EUR', 'rates': {'USD': 1.17}}
    mock_response.raise_for_status = Mock()
    mock_client = make_client(side_effect=[httpx.ConnectError('Connection refused'), mock_response])

    provider = FixerIOProvider(api_key='test_key', client=mock_client, retry_attempts=2)
    snapshot = await provider.fetch_latest()

    assert snapshot.is_usable
    assert mock_client.get.call_count == 2


@pytest.mark.asyncio
async def test_fetch_latest_invalid_json_response():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_response = Mock()
    mock_response.raise_for_status = Mock()

    mock_response.json.side_effect = ValueError('Invalid JSON')
    mock_client.get.return_value = mock_response

    provider = FixerIOProvider(api_key='test_key', client=mock_client)
    with pytest.raises(ProviderError) as exc_info:
        await provider.fetch_latest()

    assert 'not valid json' in str(exc_info.value).lower()


@pytest.mark.asyncio
async def test_close_closes_http_client():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    provider = FixerIOProvider(api_key='test_key', client=mock_client)

    await provider.close()

    mock_client.aclose.assert_awaited_once()
