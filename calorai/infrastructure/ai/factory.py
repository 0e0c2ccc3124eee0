"""Vision provider factory.

Settings-based provider selection:
- VISION_PROVIDER=openai (default): OpenAI chat completions
- VISION_PROVIDER=stub: canned reply, no network

Usage:
    from calorai.infrastructure.ai.factory import create_vision_provider

    provider = create_vision_provider(settings)
    async with provider:
        ...
"""

from calorai.domain.meal.analysis.ports import IVisionProvider
from calorai.infrastructure.ai.openai_client import OpenAIVisionClient
from calorai.infrastructure.ai.stub_client import StubVisionClient
from calorai.infrastructure.config import Settings


def create_vision_provider(settings: Settings) -> IVisionProvider:
    """Create the vision provider selected by settings.

    The OpenAI provider is returned even without an API key: the
    analysis service rejects requests with a configuration error
    instead of the app failing to start.

    Returns:
        IVisionProvider: Provider instance, not yet entered
    """
    if settings.vision_provider == "stub":
        return StubVisionClient()

    return OpenAIVisionClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.timeout_s,
        json_mode=settings.json_mode,
    )
