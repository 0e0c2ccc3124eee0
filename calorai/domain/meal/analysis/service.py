"""
Food analysis relay service.

Validates the request, forwards the image to the vision provider with
the fixed analysis prompt and parses the JSON reply.
"""

from __future__ import annotations

import json
import time
from typing import Any

import structlog

from calorai.domain.meal.analysis.errors import (
    AnalysisError,
    ConfigurationError,
    EmptyResponseError,
    ParseError,
    UnknownError,
    ValidationError,
    VisionProviderError,
    kind_from_message,
)
from calorai.domain.meal.analysis.ports import IVisionProvider
from calorai.domain.meal.analysis.prompts import build_analysis_messages
from calorai.infrastructure.config import Settings
from calorai.metrics.analysis import record_error, time_analysis

logger = structlog.get_logger(__name__)


class FoodAnalysisService:
    """
    Relay between the client and the external vision model.

    Stateless: each call to analyze() is independent. No retries, no
    caching. Every failure surfaces as an AnalysisError subclass.

    Example:
        >>> service = FoodAnalysisService(provider, settings)
        >>> result = await service.analyze("data:image/jpeg;base64,...")
        >>> result["totalCalories"]
        200
    """

    def __init__(self, provider: IVisionProvider, settings: Settings) -> None:
        """
        Initialize service.

        Args:
            provider: Vision provider (entered by the app lifespan)
            settings: Relay configuration
        """
        self.provider = provider
        self.settings = settings

    async def analyze(self, image: Any) -> Any:
        """
        Analyze one meal image.

        Args:
            image: Data URI of the photo, as received in the request body

        Returns:
            The model's JSON reply, parsed and otherwise untouched

        Raises:
            ValidationError: Image missing, empty or not a string
            ConfigurationError: Credential not configured
            AuthError, QuotaError, NetworkError: External API failures
            EmptyResponseError: Model returned no text
            ParseError: Model text is not valid JSON
            UnknownError: Anything else
        """
        provider_name = self.settings.vision_provider
        start_time = time.time()

        try:
            with time_analysis(provider=provider_name):
                result = await self._analyze(image)
        except AnalysisError as e:
            record_error(e.kind.value, provider=provider_name)
            logger.warning(
                "analysis.failed",
                kind=e.kind.value,
                status_code=e.status_code,
                detail=e.detail,
            )
            raise

        logger.info(
            "analysis.completed",
            food_count=_food_count(result),
            processing_time_ms=int((time.time() - start_time) * 1000),
        )
        return result

    async def _analyze(self, image: Any) -> Any:
        if not isinstance(image, str) or not image.strip():
            raise ValidationError()

        # Checked before any external call
        if self.settings.vision_provider == "openai" and not self.settings.has_api_key:
            raise ConfigurationError()

        logger.info(
            "analysis.requested",
            model=self.settings.openai_model,
            image_length=len(image),
        )

        try:
            content = await self.provider.complete(
                build_analysis_messages(image),
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except VisionProviderError as e:
            raise AnalysisError.from_kind(e.kind, detail=e.detail) from e
        except Exception as e:
            logger.exception("analysis.provider_error")
            raise AnalysisError.from_kind(kind_from_message(str(e)), detail=str(e)) from e

        return parse_model_reply(content)


def parse_model_reply(content: Any) -> Any:
    """
    Parse the model's reply text as JSON.

    No repair is attempted: text wrapped in markdown fences or followed
    by prose is a ParseError.

    Raises:
        EmptyResponseError: content is None or blank
        ParseError: content is not valid JSON

    Example:
        >>> parse_model_reply('{"foods": [], "totalCalories": 0, "notes": ""}')
        {'foods': [], 'totalCalories': 0, 'notes': ''}
    """
    if content is None or (isinstance(content, str) and not content.strip()):
        raise EmptyResponseError()
    if not isinstance(content, str):
        raise UnknownError(detail=f"unexpected reply type: {type(content).__name__}")
    try:
        return json.loads(content, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(detail=f"invalid JSON at pos {e.pos}: {content[:200]!r}") from e


def _food_count(result: Any) -> int:
    if isinstance(result, dict) and isinstance(result.get("foods"), list):
        return len(result["foods"])
    return 0


def _reject_constant(token: str) -> Any:
    """NaN and Infinity are not JSON and cannot be sent back to the client."""
    raise ParseError(detail=f"non-standard JSON constant {token!r}")
