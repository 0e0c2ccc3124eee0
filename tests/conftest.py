"""
Shared fixtures for CalorIA tests.

Providers are mocked; no test reaches the OpenAI API.
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from calorai.app import create_app
from calorai.infrastructure.config import Settings
from calorai.metrics.analysis import reset_all


# ═══════════════════════════════════════════════════════════
# DOMAIN FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def rice_analysis() -> Dict[str, Any]:
    """Analysis of a plate with a single cup of rice."""
    return {
        "foods": [
            {"name": "Rice", "calories": 200, "portion": "1 cup", "confidence": "alta"},
        ],
        "totalCalories": 200,
        "notes": "",
    }


@pytest.fixture
def settings() -> Settings:
    """Settings with a configured (fake) API key."""
    return Settings(openai_api_key="sk-test-1234567890abcd")


@pytest.fixture
def settings_without_key() -> Settings:
    return Settings(openai_api_key=None)


# ═══════════════════════════════════════════════════════════
# MOCK PROVIDER FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def mock_provider(rice_analysis: Dict[str, Any]) -> AsyncMock:
    """Mock vision provider.

    Default behavior: answers with the rice analysis as JSON text.
    Override ``complete.return_value`` / ``side_effect`` in tests.
    """
    provider = AsyncMock()
    provider.__aenter__ = AsyncMock(return_value=provider)
    provider.__aexit__ = AsyncMock(return_value=None)
    provider.complete = AsyncMock(return_value=json.dumps(rice_analysis))
    return provider


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    reset_all()


# ═══════════════════════════════════════════════════════════
# APP FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def app(settings: Settings, mock_provider: AsyncMock) -> FastAPI:
    return create_app(settings=settings, provider=mock_provider)


@pytest_asyncio.fixture
async def http_client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
