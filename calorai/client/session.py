"""Capture session: the client view wired to the relay."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

import structlog

from calorai.client.relay_client import (
    RelayClient,
    RelayError,
    encode_image_bytes,
    encode_image_file,
)
from calorai.client.rendering import FoodRow, error_hint, format_kcal, render_food_rows
from calorai.client.state import AnalysisView, ImageSource, ViewState
from calorai.domain.meal.analysis.errors import GENERIC_ERROR_MESSAGE

logger = structlog.get_logger(__name__)


class MealCaptureSession:
    """
    One user's capture → analyze → result/error cycle.

    Drives an AnalysisView through its transitions and talks to the
    relay. Failures are shown, never retried; retrying is a new call to
    request_analysis().

    Example:
        >>> async with RelayClient("http://localhost:8000") as relay:
        ...     session = MealCaptureSession(relay)
        ...     session.select_image("plate.jpg", ImageSource.CAMERA)
        ...     await session.request_analysis()
        ...     for row in session.food_rows():
        ...         print(row.name, row.kcal_label, row.bar_width_css)
    """

    def __init__(self, relay: RelayClient, view: Optional[AnalysisView] = None) -> None:
        self.relay = relay
        self.view = view or AnalysisView()

    @property
    def state(self) -> ViewState:
        return self.view.state

    def select_image(
        self,
        file: Union[str, Path, bytes],
        source: ImageSource = ImageSource.GALLERY,
        mime_type: str = "image/jpeg",
    ) -> None:
        """Encode a picked file (path or raw bytes) and show it."""
        if isinstance(file, bytes):
            image = encode_image_bytes(file, mime_type)
        else:
            image = encode_image_file(file)
        self.view.select_image(image, source)

    async def request_analysis(self) -> ViewState:
        """Send the current image to the relay.

        Ignored while a request is already in flight.
        """
        if self.view.busy:
            logger.info("session.duplicate_submit_ignored")
            return self.view.state

        image = self.view.start_analysis()
        try:
            result = await self.relay.analyze(image)
        except RelayError as e:
            self.view.fail(e.message)
        except Exception:
            self.view.fail(GENERIC_ERROR_MESSAGE)
            logger.exception("session.analysis_crashed")
            raise
        else:
            self.view.succeed(result)
        return self.view.state

    def reset_to_capture(self) -> None:
        self.view.reset()

    def food_rows(self) -> List[FoodRow]:
        if self.view.result is None:
            return []
        return render_food_rows(self.view.result)

    def total_label(self) -> Optional[str]:
        if self.view.result is None:
            return None
        return format_kcal(self.view.result.totalCalories)

    def error_card(self) -> Optional[Tuple[str, Optional[str]]]:
        """(message, hint) when an error is shown, else None."""
        if self.view.error is None:
            return None
        return self.view.error, error_hint(self.view.error)
