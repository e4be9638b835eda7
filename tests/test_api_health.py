"""Tests for health endpoints and the error envelope."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from cardex.main import app
from sample_data import auth


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        """Liveness always answers healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": None}

    async def test_ready(self, client: AsyncClient) -> None:
        """Readiness checks the database."""
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "database": "connected"}


class TestErrorEnvelope:
    async def test_unexpected_error(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Unexpected errors answer 500 without leaking the exception message."""
        monkeypatch.setattr(
            "cardex.api.cards.get_collected_cards",
            AsyncMock(side_effect=RuntimeError("connection string with password")),
        )
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
            response = await raw_client.get("/cards", headers=auth())

        assert response.status_code == 500
        body = response.json()
        assert body["outcome"] == "unknown_failure"
        assert body["failure"]["kind"] == "unknown"
        assert body["failure"]["detail"] == "RuntimeError"
        assert "password" not in response.text

    async def test_blank_user_header(self, client: AsyncClient) -> None:
        """A blank user id counts as unauthenticated."""
        response = await client.get("/cards", headers=auth("   "))

        assert response.status_code == 401
        assert response.json()["failure"]["message"] == "Authentication required"
