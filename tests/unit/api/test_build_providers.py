# nosec B101


from datetime import timedelta

from api.dependencies import build_providers
from config.settings import Settings


def make_settings(**overrides):
    values = {
        'FIXERIO_API_KEY': 'fixer_key',
        'OPENEXCHANGE_APP_ID': 'oxr_app',
        'CURRENCYAPI_API_KEY': 'capi_key',
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_providers_follow_configured_order():
    settings = make_settings(PROVIDER_ORDER='currencyapi, fixerio,openexchange')

    providers = build_providers(settings)

    assert [p.name for p in providers] == ['currencyapi', 'fixerio', 'openexchange']


def test_provider_without_credentials_is_skipped():
    settings = make_settings(OPENEXCHANGE_APP_ID='')

    providers = build_providers(settings)

    assert [p.name for p in providers] == ['fixerio', 'currencyapi']


def test_unknown_provider_is_ignored():
    settings = make_settings(PROVIDER_ORDER='fixerio,ecb')

    assert [p.name for p in build_providers(settings)] == ['fixerio']


def test_settings_derived_values():
    settings = make_settings(CACHE_TTL_SECONDS=600, RETENTION_DAYS=30)

    assert settings.cache_ttl == timedelta(minutes=10)
    assert settings.retention == timedelta(days=30)
    assert settings.provider_order == ['fixerio', 'openexchange', 'currencyapi']
