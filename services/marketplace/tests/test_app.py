import uuid

import pytest
from httpx import AsyncClient

from shared.middleware.error_handler import _kind_for_status


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json()["service"] == "marketplace"


@pytest.mark.asyncio
async def test_missing_token_returns_unauthenticated_envelope(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/v1/cart")
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "UNAUTHENTICATED"
    assert "request_id" in body


@pytest.mark.asyncio
async def test_bad_token_is_rejected(async_client: AsyncClient) -> None:
    response = await async_client.get(
        "/api/v1/cart", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_malformed_path_id_is_validation_error(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        "/api/v1/lectures/not-a-uuid/progress",
        json={"is_completed": True},
        headers=auth_headers(uuid.uuid4()),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["kind"] == "VALIDATION_ERROR"


def test_unprocessable_status_maps_to_validation_kind() -> None:
    assert _kind_for_status(422) == "VALIDATION_ERROR"
    assert _kind_for_status(418) == "HTTP_ERROR"
    assert _kind_for_status(503) == "INTERNAL_ERROR"
