"""
HTTP client for the analysis relay.

Encodes local images as data URIs and posts them to
POST /api/analyze-food, turning every non-success answer into a
RelayError carrying the message to display.
"""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path
from typing import Any, Optional, Union

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from calorai.domain.meal.analysis.errors import ERROR_MESSAGES, ErrorKind, GENERIC_ERROR_MESSAGE
from calorai.domain.meal.analysis.models import AnalysisResult

logger = structlog.get_logger(__name__)

ANALYZE_PATH = "/api/analyze-food"
FALLBACK_ERROR_MESSAGE = "Erro ao analisar a imagem"


class RelayError(Exception):
    """Analysis request failed; ``message`` is shown to the user verbatim."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def encode_image_bytes(data: bytes, mime_type: str = "image/jpeg") -> str:
    """
    Encode raw image bytes as a data URI.

    No format or size validation: the external API decides.

    Example:
        >>> encode_image_bytes(b"abc", "image/png")
        'data:image/png;base64,YWJj'
    """
    if not data:
        raise ValueError("A file must be chosen")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def encode_image_file(path: Union[str, Path]) -> str:
    """Read a local image file and encode it as a data URI."""
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    return encode_image_bytes(path.read_bytes(), mime_type or "image/jpeg")


class RelayClient:
    """
    Async client for the CalorIA relay.

    Example:
        >>> async with RelayClient("http://localhost:8000") as relay:
        ...     result = await relay.analyze(encode_image_file("plate.jpg"))
        ...     print(result.totalCalories)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize relay client.

        Args:
            base_url: Relay root URL
            timeout: Request timeout in seconds (above the relay's own
                external-call timeout)
            client: Optional pre-configured httpx client (for testing)
        """
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> RelayClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def analyze(self, image: str) -> AnalysisResult:
        """
        Submit one image for analysis.

        Returns:
            Parsed AnalysisResult

        Raises:
            RelayError: Non-2xx status, transport failure or a body that
                is not an analysis result
            RuntimeError: If used outside the async context
        """
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async with.")

        try:
            response = await self._client.post(ANALYZE_PATH, json={"image": image})
        except httpx.HTTPError as e:
            logger.warning("relay.transport_error", error_type=type(e).__name__)
            raise RelayError(ERROR_MESSAGES[ErrorKind.NETWORK]) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            if not isinstance(message, str) or not message:
                message = FALLBACK_ERROR_MESSAGE
            raise RelayError(message, status_code=response.status_code)

        try:
            return AnalysisResult.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("relay.unexpected_body", errors=e.error_count())
            raise RelayError(GENERIC_ERROR_MESSAGE, status_code=response.status_code) from e
