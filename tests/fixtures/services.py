"""
Service container fixtures wired to the test database, the fake clock and the
fake secret store.
"""
import pytest

from m2m_auth_service.bootstrap import AuthServices, build_services
from m2m_auth_service.config import settings
from m2m_auth_service.crud.client_registry import ClientRegistry


@pytest.fixture
def services(session_factory, secret_store, fake_clock) -> AuthServices:
    # Deep copy so tests can add admin IDs without leaking into other tests
    test_settings = settings.model_copy(deep=True)
    return build_services(
        test_settings, session_factory, secret_store=secret_store, clock=fake_clock
    )


@pytest.fixture
def registry(services: AuthServices) -> ClientRegistry:
    return services.registry
