"""
Unit tests for the settings model.
"""
import pytest
from pydantic import ValidationError

from m2m_auth_service.config import Environment, Settings

BASE_ENV = {"M2M_AUTH_DATABASE_URL": "sqlite+aiosqlite:///:memory:"}


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **{**BASE_ENV, **overrides})


def test_defaults():
    settings = _settings()

    assert settings.TOKEN_LIFETIME_SECONDS == 3600
    assert settings.DECISION_CACHE_TTL_SECONDS == 300
    assert settings.SIGNING_ALGORITHM == "HS256"


def test_admin_client_ids_from_csv():
    settings = _settings(M2M_AUTH_ADMIN_CLIENT_IDS="id-1, id-2,,id-3")

    assert settings.ADMIN_CLIENT_IDS == ["id-1", "id-2", "id-3"]


def test_admin_client_ids_from_json_list():
    settings = _settings(M2M_AUTH_ADMIN_CLIENT_IDS='["id-1", "id-2"]')

    assert settings.ADMIN_CLIENT_IDS == ["id-1", "id-2"]


def test_admin_client_ids_from_environment(monkeypatch):
    monkeypatch.setenv("M2M_AUTH_ADMIN_CLIENT_IDS", "id-1,id-2")

    settings = _settings()

    assert settings.ADMIN_CLIENT_IDS == ["id-1", "id-2"]


def test_algorithm_is_normalized():
    assert _settings(M2M_AUTH_SIGNING_ALGORITHM="hs512").SIGNING_ALGORITHM == "HS512"


def test_asymmetric_algorithm_rejected():
    with pytest.raises(ValidationError):
        _settings(M2M_AUTH_SIGNING_ALGORITHM="RS256")


def test_invalid_logging_level_rejected():
    with pytest.raises(ValidationError):
        _settings(M2M_AUTH_LOGGING_LEVEL="chatty")


def test_environment_helpers():
    settings = _settings(M2M_AUTH_ENVIRONMENT="production")

    assert settings.ENVIRONMENT == Environment.PRODUCTION
    assert settings.is_production()
    assert not settings.is_testing()
