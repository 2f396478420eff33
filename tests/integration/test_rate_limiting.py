"""
Integration tests for rate limiting on the token endpoint.
"""
import pytest
from fastapi import status

from m2m_auth_service.rate_limiting import limiter


@pytest.fixture
def rate_limited():
    limiter.reset()
    limiter.enabled = True
    try:
        yield limiter
    finally:
        limiter.enabled = False
        limiter.reset()


@pytest.mark.asyncio
async def test_token_endpoint_is_rate_limited(client, rate_limited):
    body = {"grant_type": "client_credentials", "client_id": "svc-a", "client_secret": "nope"}

    statuses = [(await client.post("/auth/token", json=body)).status_code for _ in range(15)]

    assert statuses[0] == status.HTTP_401_UNAUTHORIZED
    assert statuses[-1] == status.HTTP_429_TOO_MANY_REQUESTS

    response = await client.post("/auth/token", json=body)
    assert response.json()["detail"] == "Too many requests"
    assert "retry_after" in response.json()
