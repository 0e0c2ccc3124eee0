"""Display computations for the result and error cards."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional

from calorai.domain.meal.analysis.models import AnalysisResult, FoodItem

API_KEY_HINT = "Configure sua chave da OpenAI nas variáveis de ambiente (OPENAI_API_KEY)"

_API_KEY_PATTERN = re.compile(r"api[\s_-]?key|chave da api", re.IGNORECASE)


def calorie_share_percent(calories: float, total_calories: float) -> float:
    """
    Share of the meal total for one food, as a bar width percentage.

    A zero, negative or non-finite total yields 0.0 instead of a
    division error or NaN. The result is clamped to [0, 100] since the
    model's numbers are not guaranteed to add up.

    Example:
        >>> calorie_share_percent(200, 200)
        100.0
        >>> calorie_share_percent(150, 0)
        0.0
    """
    try:
        calories = float(calories)
        total = float(total_calories)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(calories) or not math.isfinite(total) or total <= 0:
        return 0.0
    return max(0.0, min(100.0, calories / total * 100.0))


def format_kcal(calories: float) -> str:
    """'200 kcal' for whole numbers, '12.5 kcal' otherwise."""
    if float(calories).is_integer():
        return f"{int(calories)} kcal"
    return f"{calories:g} kcal"


def error_hint(message: Optional[str]) -> Optional[str]:
    """Configuration hint for credential errors, None for the rest."""
    if message and _API_KEY_PATTERN.search(message):
        return API_KEY_HINT
    return None


@dataclass(frozen=True)
class FoodRow:
    name: str
    portion: str
    kcal_label: str
    bar_width_percent: float
    confidence: str

    @property
    def bar_width_css(self) -> str:
        return f"{self.bar_width_percent:g}%"


def food_row(food: FoodItem, total_calories: float) -> FoodRow:
    return FoodRow(
        name=food.name,
        portion=food.portion,
        kcal_label=format_kcal(food.calories),
        bar_width_percent=calorie_share_percent(food.calories, total_calories),
        confidence=food.confidence,
    )


def render_food_rows(result: AnalysisResult) -> List[FoodRow]:
    """One row per food, in the model's order."""
    return [food_row(food, result.totalCalories) for food in result.foods]
