"""
Integration tests for POST /auth/token.
"""
import pytest
from fastapi import status
from jose import jwt

from m2m_auth_service.config import settings


def _token_request(client_id, client_secret, grant_type="client_credentials"):
    return {"grant_type": grant_type, "client_id": client_id, "client_secret": client_secret}


@pytest.mark.asyncio
async def test_token_acquisition_successful(client, registry, fake_clock):
    created = await registry.create("svc-a")

    response = await client.post(
        "/auth/token", json=_token_request(created.record.client_id, created.client_secret)
    )

    assert response.status_code == status.HTTP_200_OK
    response_data = response.json()
    assert response_data["token_type"] == "Bearer"
    assert response_data["expires_in"] == 3600
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["pragma"] == "no-cache"

    claims = jwt.get_unverified_claims(response_data["access_token"])
    assert claims["sub"] == created.record.client_id
    assert claims["iss"] == settings.TOKEN_ISSUER
    assert claims["aud"] == settings.TOKEN_AUDIENCE
    assert claims["iat"] == int(fake_clock.now)
    assert claims["exp"] - claims["iat"] == 3600


@pytest.mark.asyncio
async def test_invalid_credentials_are_indistinguishable(client, registry):
    created = await registry.create("svc-a")
    inactive = await registry.create("svc-b")
    await registry.deactivate(inactive.record.client_id)

    attempts = [
        _token_request("00000000-0000-0000-0000-000000000000", created.client_secret),
        _token_request(created.record.client_id, "wrong-secret"),
        _token_request(inactive.record.client_id, inactive.client_secret),
    ]
    responses = [await client.post("/auth/token", json=attempt) for attempt in attempts]

    for response in responses:
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "invalid_client"}
        assert response.headers["www-authenticate"] == "Basic"


@pytest.mark.asyncio
async def test_unsupported_grant_type(client, registry):
    created = await registry.create("svc-a")

    response = await client.post(
        "/auth/token",
        json=_token_request(created.record.client_id, created.client_secret, grant_type="password"),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "unsupported_grant_type"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"client_id": "svc-a", "client_secret": "s3cret"},
        {"grant_type": "client_credentials", "client_secret": "s3cret"},
        {"grant_type": "client_credentials", "client_id": "svc-a"},
        {"grant_type": "client_credentials", "client_id": 42, "client_secret": "s3cret"},
    ],
)
async def test_malformed_requests_are_invalid_request(client, body):
    response = await client.post("/auth/token", json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "invalid_request"}


@pytest.mark.asyncio
async def test_unparseable_body_is_invalid_request(client):
    response = await client.post(
        "/auth/token",
        content="grant_type=client_credentials",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "invalid_request"}


@pytest.mark.asyncio
async def test_secret_store_down_is_server_error(client, registry, secret_store):
    created = await registry.create("svc-a")
    secret_store.fail = True

    response = await client.post(
        "/auth/token", json=_token_request(created.record.client_id, created.client_secret)
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "server_error"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.post(
        "/auth/token",
        json={"grant_type": "password"},
        headers={"X-Request-ID": "req-123"},
    )

    assert response.headers["x-request-id"] == "req-123"
