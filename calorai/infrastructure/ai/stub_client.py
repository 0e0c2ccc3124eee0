"""Stub vision provider for local development.

Returns a fixed, well-formed analysis without calling external APIs.
Enabled with VISION_PROVIDER=stub.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

STUB_ANALYSIS: Dict[str, Any] = {
    "foods": [
        {"name": "Arroz branco", "calories": 200, "portion": "1 xícara", "confidence": "alta"},
        {"name": "Feijão carioca", "calories": 140, "portion": "1 concha", "confidence": "alta"},
        {
            "name": "Bife grelhado",
            "calories": 250,
            "portion": "1 unidade média",
            "confidence": "média",
        },
        {"name": "Salada verde", "calories": 20, "portion": "1 pires", "confidence": "baixa"},
    ],
    "totalCalories": 610,
    "notes": "Resposta de demonstração (VISION_PROVIDER=stub).",
}


class StubVisionClient:
    """
    Stub implementation of IVisionProvider.

    Ignores the image and always answers with STUB_ANALYSIS encoded as
    JSON. Supports the async context manager protocol for lifespan
    compatibility.
    """

    def __init__(self) -> None:
        self.calls = 0

    async def __aenter__(self) -> StubVisionClient:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        return None

    async def complete(
        self,
        messages: List[Dict[str, Any]],
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        self.calls += 1
        return json.dumps(STUB_ANALYSIS, ensure_ascii=False)
