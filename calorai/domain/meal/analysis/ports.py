"""Port (interface) for vision completion providers.

Defines the contract external multimodal model adapters (e.g. OpenAI
chat completions) implement to be used by the analysis relay.
"""

from typing import Any, Dict, List, Protocol


class IVisionProvider(Protocol):
    """
    Interface for vision completion providers.

    Implementations can be:
    - OpenAI chat completions (production)
    - Stub provider (offline development)
    - Mock provider (tests)

    Providers are async context managers so the app lifespan can open
    and close their HTTP sessions.
    """

    async def __aenter__(self) -> "IVisionProvider":
        ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        ...

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Run one chat completion and return the reply text.

        Args:
            messages: System and user messages (user turn carries the image)
            max_tokens: Upper bound on completion length
            temperature: Sampling temperature

        Returns:
            Reply text, "" when the model returned no content

        Raises:
            VisionProviderError: With AUTH, QUOTA, NETWORK or UNKNOWN kind
        """
        ...
