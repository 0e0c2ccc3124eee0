"""
Tests for the analysis REST endpoint.

Requests go through the full FastAPI stack via httpx.ASGITransport;
only the vision provider is mocked.
"""

import json

import httpx
import pytest
from fastapi import FastAPI

from calorai.api.analyze_food import analysis_error_handler
from calorai.app import create_app
from calorai.domain.meal.analysis.errors import (
    ERROR_MESSAGES,
    ErrorKind,
    GENERIC_ERROR_MESSAGE,
    QuotaError,
    VisionProviderError,
)
from calorai.infrastructure.config import Settings

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD"


@pytest.mark.asyncio
async def test_analyze_food_returns_analysis_verbatim(http_client, mock_provider, rice_analysis):
    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.status_code == 200
    assert response.json() == rice_analysis
    mock_provider.complete.assert_awaited_once()


@pytest.mark.asyncio
async def test_extra_fields_from_model_pass_through(http_client, mock_provider):
    reply = {"foods": [], "totalCalories": 0, "notes": "Sem comida", "mealType": "lanche"}
    mock_provider.complete.return_value = json.dumps(reply)

    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.json() == reply


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"image": ""}, {"image": None}, {"other": IMAGE}])
async def test_missing_image_is_400(http_client, mock_provider, body):
    response = await http_client.post("/api/analyze-food", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": ERROR_MESSAGES[ErrorKind.VALIDATION]}
    mock_provider.complete.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"not json", b"[1, 2]", b""])
async def test_unreadable_body_is_400(http_client, mock_provider, content):
    response = await http_client.post(
        "/api/analyze-food",
        content=content,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"]
    mock_provider.complete.assert_not_called()


@pytest.mark.asyncio
async def test_missing_key_is_500_without_external_call(mock_provider, settings_without_key):
    app = create_app(settings=settings_without_key, provider=mock_provider)

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.status_code == 500
    assert response.json() == {"error": ERROR_MESSAGES[ErrorKind.CONFIGURATION]}
    mock_provider.complete.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc,kind",
    [
        (RuntimeError("You exceeded your current quota"), ErrorKind.QUOTA),
        (VisionProviderError(ErrorKind.AUTH, "401"), ErrorKind.AUTH),
        (VisionProviderError(ErrorKind.NETWORK, "timed out"), ErrorKind.NETWORK),
    ],
)
async def test_provider_failures_map_to_messages(http_client, mock_provider, exc, kind):
    mock_provider.complete.side_effect = exc

    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.status_code == 500
    assert response.json() == {"error": ERROR_MESSAGES[kind]}


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["", "isto não é JSON"])
async def test_unusable_reply_is_generic_500(http_client, mock_provider, reply):
    mock_provider.complete.return_value = reply

    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.status_code == 500
    assert response.json() == {"error": GENERIC_ERROR_MESSAGE}


@pytest.mark.asyncio
@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
async def test_non_standard_json_constants_are_generic_500(http_client, mock_provider, constant):
    mock_provider.complete.return_value = (
        '{"foods": [], "totalCalories": ' + constant + ', "notes": ""}'
    )

    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert response.status_code == 500
    assert response.json() == {"error": GENERIC_ERROR_MESSAGE}


@pytest.mark.asyncio
async def test_error_body_never_leaks_raw_detail(http_client, mock_provider):
    mock_provider.complete.side_effect = VisionProviderError(
        ErrorKind.UNKNOWN, "Traceback sk-secret-key"
    )

    response = await http_client.post("/api/analyze-food", json={"image": IMAGE})

    assert "sk-secret-key" not in response.text


@pytest.mark.asyncio
async def test_health_and_version(http_client, settings):
    health = await http_client.get("/health")
    version = await http_client.get("/version")

    assert health.json() == {"status": "ok"}
    assert version.json() == {"version": settings.app_version}


@pytest.mark.asyncio
async def test_root_serves_single_page(http_client):
    response = await http_client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "CalorIA" in response.text
    assert "/api/analyze-food" in response.text


def test_app_state_is_wired(app: FastAPI, mock_provider, settings: Settings):
    assert app.state.settings is settings
    assert app.state.vision_provider is mock_provider
    assert app.state.analysis_service.provider is mock_provider


@pytest.mark.asyncio
async def test_error_handler_renders_status_and_message():
    response = await analysis_error_handler(None, QuotaError(detail="429"))

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": ERROR_MESSAGES[ErrorKind.QUOTA]}


@pytest.mark.asyncio
async def test_page_ignores_file_read_finishing_while_analyzing(http_client):
    page = (await http_client.get("/")).text

    on_load = page.split("reader.onloadend = () => {", 1)[1].split("};", 1)[0]
    assert 'if (view.state === "ANALYZING") return;' in on_load
