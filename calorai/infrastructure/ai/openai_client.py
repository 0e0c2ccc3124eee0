"""
OpenAI API client for meal analysis - implements IVisionProvider port.

Async chat completion client with explicit timeout, no automatic
retries and typed error classification.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import httpx
import structlog
from openai import (
    APIConnectionError,
    APIError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from calorai.domain.meal.analysis.errors import (
    ErrorKind,
    VisionProviderError,
    kind_from_message,
)
from calorai.infrastructure.config import DEFAULT_TIMEOUT_S

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

logger = structlog.get_logger(__name__)

_QUOTA_CODES = {"insufficient_quota", "billing_hard_limit_reached"}
_AUTH_CODES = {"invalid_api_key"}


def classify_openai_error(exc: BaseException) -> ErrorKind:
    """
    Map an exception raised by the OpenAI SDK to an ErrorKind.

    Typed SDK exceptions and API error codes decide first; only errors
    without a recognizable type or code fall back to message markers.

    Example:
        >>> classify_openai_error(TimeoutError("read timed out"))
        <ErrorKind.NETWORK: 'NETWORK'>
    """
    if isinstance(exc, AuthenticationError):
        return ErrorKind.AUTH
    if isinstance(exc, RateLimitError):
        return ErrorKind.QUOTA
    # APITimeoutError is an APIConnectionError
    if isinstance(exc, (APIConnectionError, httpx.TransportError, TimeoutError, ConnectionError)):
        return ErrorKind.NETWORK
    if isinstance(exc, APIError):
        code = getattr(exc, "code", None)
        if code in _QUOTA_CODES:
            return ErrorKind.QUOTA
        if code in _AUTH_CODES:
            return ErrorKind.AUTH
    return kind_from_message(str(exc))


class OpenAIVisionClient:
    """
    Async OpenAI client for vision chat completions.

    The underlying AsyncOpenAI client is created on context entry and
    closed on exit, so the app lifespan owns the HTTP session.

    Features:
    - Explicit request timeout (30s default)
    - SDK retries disabled (max_retries=0): one call per analysis
    - Optional JSON response mode
    - Errors raised as VisionProviderError with a typed kind

    Example:
        >>> async with OpenAIVisionClient(api_key="sk-...") as client:
        ...     text = await client.complete(
        ...         messages, max_tokens=1500, temperature=0.3
        ...     )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = DEFAULT_TIMEOUT_S,
        json_mode: bool = True,
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (None when not configured)
            model: Model to use (must support image input)
            timeout: Request timeout in seconds
            json_mode: Send response_format={"type": "json_object"}
            client: Optional pre-configured AsyncOpenAI client (for testing)
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.json_mode = json_mode
        self._client: Optional[AsyncOpenAI] = client

    async def __aenter__(self) -> OpenAIVisionClient:
        """Async context manager entry."""
        # Without a key there is nothing to open; the relay refuses
        # requests before reaching complete().
        if self._client is None and self.api_key:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.close()
            self._client = None

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Run one chat completion.

        Args:
            messages: Chat messages (system + user with image)
            max_tokens: Max tokens in response
            temperature: Sampling temperature

        Returns:
            Reply text ("" when the model returned no content)

        Raises:
            VisionProviderError: On any API or transport failure
            RuntimeError: If used outside the async context
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with.")

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self.json_mode:
            params["response_format"] = {"type": "json_object"}

        start = time.perf_counter()
        try:
            completion: ChatCompletion = await self._client.chat.completions.create(**params)
        except Exception as exc:
            kind = classify_openai_error(exc)
            logger.warning(
                "vision.call_failed",
                model=self.model,
                kind=kind.value,
                error_type=type(exc).__name__,
                elapsed_ms=int((time.perf_counter() - start) * 1000),
            )
            raise VisionProviderError(kind, str(exc)) from exc

        usage = completion.usage
        finish_reason = completion.choices[0].finish_reason if completion.choices else None
        logger.info(
            "vision.call",
            model=self.model,
            elapsed_ms=int((time.perf_counter() - start) * 1000),
            finish_reason=finish_reason,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
        )

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""
