"""
Domain models for meal calorie analysis.

These models describe the shape the external model is asked to return.
The relay forwards the reply verbatim; the client parses it into these
models for rendering, leniently, since the values come from an opaque
model and are not validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfidenceLevel(str, Enum):
    """Coarse confidence attached to each food by the model."""

    HIGH = "alta"
    MEDIUM = "média"
    LOW = "baixa"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[ConfidenceLevel]:
        """Map a raw confidence string to a level, or None if unknown.

        Accepts the accent-less spelling "media" too.

        Example:
            >>> ConfidenceLevel.parse(" Alta ")
            <ConfidenceLevel.HIGH: 'alta'>
            >>> ConfidenceLevel.parse("certain") is None
            True
        """
        if not value:
            return None
        normalized = value.strip().lower()
        if normalized == "media":
            return cls.MEDIUM
        for level in cls:
            if level.value == normalized:
                return level
        return None


class FoodItem(BaseModel):
    """
    Single food identified by the model.

    Attributes:
        name: Food name as written by the model
        calories: Estimated calories for the visible portion
        portion: Free-text portion description (e.g. "1 xícara")
        confidence: Raw confidence string (normally alta/média/baixa)
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    calories: float = 0
    portion: str = ""
    confidence: str = ""

    @field_validator("name", "portion", "confidence", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Treat null strings from the model as empty."""
        return "" if v is None else v

    @property
    def confidence_level(self) -> Optional[ConfidenceLevel]:
        return ConfidenceLevel.parse(self.confidence)


class AnalysisResult(BaseModel):
    """
    Complete calorie analysis for one image.

    Field names follow the wire format (``totalCalories``) so a result can
    be rebuilt from the relay response with ``model_validate``.

    Example:
        >>> result = AnalysisResult.model_validate(
        ...     {
        ...         "foods": [{"name": "Arroz", "calories": 200,
        ...                    "portion": "1 xícara", "confidence": "alta"}],
        ...         "totalCalories": 200,
        ...         "notes": "",
        ...     }
        ... )
        >>> result.foods[0].confidence_level
        <ConfidenceLevel.HIGH: 'alta'>
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    foods: List[FoodItem] = Field(default_factory=list)
    totalCalories: float = 0
    notes: str = ""

    @field_validator("foods", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("notes", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class AnalyzeFoodRequest(BaseModel):
    """Request body of POST /api/analyze-food."""

    image: Optional[Any] = Field(None, description="Data URI of the meal photo")


class ErrorResponse(BaseModel):
    """Error body returned by the relay for every failure."""

    error: str
