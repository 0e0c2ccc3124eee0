"""
Unit tests for the relay HTTP client.

The relay is simulated with httpx.MockTransport; no network access.
"""

import base64

import httpx
import pytest

from calorai.client.relay_client import (
    FALLBACK_ERROR_MESSAGE,
    RelayClient,
    RelayError,
    encode_image_bytes,
    encode_image_file,
)
from calorai.domain.meal.analysis.errors import ERROR_MESSAGES, ErrorKind, GENERIC_ERROR_MESSAGE

IMAGE = "data:image/jpeg;base64,/9j/4AAQ"


def _relay(handler) -> RelayClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://relay")
    return RelayClient(client=client)


class TestEncoding:
    def test_encode_bytes(self):
        assert encode_image_bytes(b"abc", "image/png") == "data:image/png;base64,YWJj"

    def test_empty_bytes_rejected(self):
        with pytest.raises(ValueError):
            encode_image_bytes(b"")

    def test_encode_file_guesses_mime_type(self, tmp_path):
        path = tmp_path / "prato.png"
        path.write_bytes(b"\x89PNG")

        uri = encode_image_file(path)

        assert uri.startswith("data:image/png;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == b"\x89PNG"

    def test_unknown_extension_defaults_to_jpeg(self, tmp_path):
        path = tmp_path / "foto"
        path.write_bytes(b"raw")

        assert encode_image_file(path).startswith("data:image/jpeg;base64,")


class TestRelayClient:
    @pytest.mark.asyncio
    async def test_posts_image_and_parses_result(self, rice_analysis):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = request.content
            return httpx.Response(200, json=rice_analysis)

        async with _relay(handler) as relay:
            result = await relay.analyze(IMAGE)

        assert seen["path"] == "/api/analyze-food"
        assert b'"image"' in seen["body"]
        assert result.totalCalories == 200
        assert result.foods[0].name == "Rice"

    @pytest.mark.asyncio
    async def test_error_body_message_is_surfaced(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": ERROR_MESSAGES[ErrorKind.QUOTA]})

        async with _relay(handler) as relay:
            with pytest.raises(RelayError) as exc_info:
                await relay.analyze(IMAGE)

        assert exc_info.value.message == "Limite de uso da API OpenAI excedido."
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(502, text="Bad Gateway"),
            httpx.Response(500, json={"detail": "x"}),
            httpx.Response(400, json={"error": ""}),
        ],
    )
    async def test_error_without_message_uses_fallback(self, response):
        async with _relay(lambda request: response) as relay:
            with pytest.raises(RelayError) as exc_info:
                await relay.analyze(IMAGE)

        assert exc_info.value.message == FALLBACK_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _relay(handler) as relay:
            with pytest.raises(RelayError) as exc_info:
                await relay.analyze(IMAGE)

        assert exc_info.value.message == ERROR_MESSAGES[ErrorKind.NETWORK]
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_success_body_not_an_analysis(self):
        async with _relay(lambda request: httpx.Response(200, json=[1, 2])) as relay:
            with pytest.raises(RelayError) as exc_info:
                await relay.analyze(IMAGE)

        assert exc_info.value.message == GENERIC_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_analyze_outside_context_raises(self):
        with pytest.raises(RuntimeError, match="Client not initialized"):
            await RelayClient().analyze(IMAGE)

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(base_url="http://relay")

        async with RelayClient(client=client):
            pass

        assert client.is_closed is False
        await client.aclose()
