"""
OpenAI prompts for meal calorie analysis.

IMPORTANT: The system prompt is static (cacheable by OpenAI).
The image travels only in the user message.
"""

from typing import Any, Dict, List


# ═══════════════════════════════════════════════════════════
# SYSTEM PROMPT (static instructions)
# ═══════════════════════════════════════════════════════════

ANALYSIS_SYSTEM_PROMPT = """Você é um nutricionista especializado em análise de alimentos por imagem.

Analise a imagem fornecida e identifique TODOS os alimentos visíveis.

Para cada alimento, forneça:
1. Nome do alimento
2. Estimativa de calorias (baseado na porção visível)
3. Descrição da porção estimada
4. Nível de confiança da estimativa (alta/média/baixa)

Retorne APENAS um JSON válido no seguinte formato:
{
  "foods": [
    {
      "name": "Nome do alimento",
      "calories": número_de_calorias,
      "portion": "descrição da porção (ex: 1 unidade média, 100g, 1 xícara)",
      "confidence": "alta/média/baixa"
    }
  ],
  "totalCalories": soma_total_de_calorias,
  "notes": "observações importantes sobre a análise ou recomendações nutricionais"
}

Seja preciso e realista nas estimativas. Se não conseguir identificar algum alimento claramente, mencione nas notas."""

ANALYSIS_USER_PROMPT = (
    "Analise esta imagem e identifique todos os alimentos com suas respectivas calorias."
)


def build_analysis_messages(image: str) -> List[Dict[str, Any]]:
    """
    Build chat messages for one image analysis.

    Args:
        image: Data URI (or URL) of the meal photo

    Returns:
        System message followed by a user turn with image and text

    Example:
        >>> messages = build_analysis_messages("data:image/jpeg;base64,AAAA")
        >>> [m["role"] for m in messages]
        ['system', 'user']
    """
    return [
        {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": image}},
                {"type": "text", "text": ANALYSIS_USER_PROMPT},
            ],
        },
    ]
