"""
Tests for the health aggregator and GET /health.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_health_service
from main import create_app
from services.health_service import HealthService

CONNECTED = {'connected': True}


def down(error):
    return {'connected': False, 'error': error}


# =============================================================================
# HealthService
# =============================================================================

@pytest.mark.asyncio
async def test_healthy_when_both_stores_connected():
    service = HealthService(AsyncMock(return_value=CONNECTED), AsyncMock(return_value=CONNECTED))

    result = await service.check_health()

    assert result.is_healthy
    assert result.to_body() == {
        'status': 'healthy',
        'graphdb': {'status': 'connected'},
        'postgresql': {'status': 'connected'},
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("graphdb,postgresql", [
    (down("Connection refused"), CONNECTED),
    (CONNECTED, down("Connection refused")),
    (down("a"), down("b")),
])
async def test_unhealthy_when_any_store_disconnected(graphdb, postgresql):
    service = HealthService(AsyncMock(return_value=graphdb), AsyncMock(return_value=postgresql))

    result = await service.check_health()

    assert not result.is_healthy
    assert result.status == "unhealthy"


@pytest.mark.asyncio
async def test_error_message_is_reported():
    service = HealthService(
        AsyncMock(return_value=down("Connection refused")),
        AsyncMock(return_value=CONNECTED),
    )

    body = (await service.check_health()).to_body()

    assert body['graphdb'] == {'status': 'disconnected', 'error': 'Connection refused'}
    assert 'error' not in body['postgresql']


@pytest.mark.asyncio
async def test_raising_check_is_reported_not_propagated():
    service = HealthService(
        AsyncMock(side_effect=OSError("no route to host")),
        AsyncMock(side_effect=asyncio.TimeoutError()),
    )

    body = (await service.check_health()).to_body()

    assert body['status'] == 'unhealthy'
    assert body['graphdb']['error'] == 'no route to host'
    assert body['postgresql']['error'] == 'TimeoutError'


# =============================================================================
# GET /health
# =============================================================================

def client_with(health_service) -> TestClient:
    app = create_app(use_lifespan=False)
    app.dependency_overrides[get_health_service] = lambda: health_service
    return TestClient(app)


@pytest.mark.parametrize("path", ["/health", "/api/health"])
def test_health_endpoint_healthy(path):
    service = HealthService(AsyncMock(return_value=CONNECTED), AsyncMock(return_value=CONNECTED))

    response = client_with(service).get(path)

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'


def test_health_endpoint_unhealthy():
    service = HealthService(AsyncMock(return_value=CONNECTED), AsyncMock(return_value=down("refused")))

    response = client_with(service).get("/health")

    assert response.status_code == 503
    assert response.json()['postgresql'] == {'status': 'disconnected', 'error': 'refused'}


def test_health_endpoint_without_aggregator():
    response = client_with(None).get("/health")

    assert response.status_code == 503
    assert response.json() == {
        'status': 'unhealthy',
        'graphdb': {'status': 'disconnected'},
        'postgresql': {'status': 'disconnected'},
    }


def test_health_endpoint_when_aggregator_fails():
    service = AsyncMock(spec=HealthService)
    service.check_health.side_effect = RuntimeError("boom")

    response = client_with(service).get("/health")

    assert response.status_code == 503
    assert response.json()['status'] == 'unhealthy'
