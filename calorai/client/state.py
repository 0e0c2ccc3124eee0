"""
Client view state machine.

    IDLE -> IMAGE_SELECTED -> ANALYZING -> RESULT_READY | ERROR_SHOWN

RESULT_READY / ERROR_SHOWN go back to IDLE on reset, or straight to
IMAGE_SELECTED when a new image is picked. No transition leaves
ANALYZING except the outcome of the in-flight request.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from calorai.domain.meal.analysis.models import AnalysisResult


class ViewState(str, Enum):
    IDLE = "IDLE"
    IMAGE_SELECTED = "IMAGE_SELECTED"
    ANALYZING = "ANALYZING"
    RESULT_READY = "RESULT_READY"
    ERROR_SHOWN = "ERROR_SHOWN"


class ImageSource(str, Enum):
    CAMERA = "camera"
    GALLERY = "gallery"


class InvalidTransitionError(Exception):
    """Operation not allowed in the current view state."""

    def __init__(self, state: ViewState, action: str) -> None:
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while {state.value}")


_SELECTABLE = {
    ViewState.IDLE,
    ViewState.IMAGE_SELECTED,
    ViewState.RESULT_READY,
    ViewState.ERROR_SHOWN,
}
_ANALYZABLE = {
    ViewState.IMAGE_SELECTED,
    ViewState.RESULT_READY,
    ViewState.ERROR_SHOWN,
}


class AnalysisView:
    """
    State of the single-page client, free of any rendering concern.

    Holds the current image, result and error; each transition keeps
    them consistent with the state (e.g. a result is only present in
    RESULT_READY).

    Example:
        >>> view = AnalysisView()
        >>> view.select_image("data:image/png;base64,AAAA", ImageSource.GALLERY)
        >>> view.start_analysis()
        'data:image/png;base64,AAAA'
        >>> view.busy
        True
        >>> view.fail("Limite de uso da API OpenAI excedido.")
        >>> view.state
        <ViewState.ERROR_SHOWN: 'ERROR_SHOWN'>
    """

    def __init__(self) -> None:
        self.state = ViewState.IDLE
        self.image: Optional[str] = None
        self.source: Optional[ImageSource] = None
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[str] = None

    @property
    def busy(self) -> bool:
        """True while a request is in flight (analyze trigger disabled)."""
        return self.state is ViewState.ANALYZING

    def select_image(self, image: str, source: ImageSource = ImageSource.GALLERY) -> None:
        """Show a newly picked image, discarding any previous outcome."""
        if self.state not in _SELECTABLE:
            raise InvalidTransitionError(self.state, "select an image")
        if not image:
            raise ValueError("A file must be chosen")
        self.image = image
        self.source = source
        self.result = None
        self.error = None
        self.state = ViewState.IMAGE_SELECTED

    def start_analysis(self) -> str:
        """Enter ANALYZING and return the image to submit.

        Re-analyzing the same image from RESULT_READY or ERROR_SHOWN is
        allowed (manual retry); a second submit while busy is not.
        """
        if self.state not in _ANALYZABLE or self.image is None:
            raise InvalidTransitionError(self.state, "start an analysis")
        self.error = None
        self.state = ViewState.ANALYZING
        return self.image

    def succeed(self, result: AnalysisResult) -> None:
        if self.state is not ViewState.ANALYZING:
            raise InvalidTransitionError(self.state, "show a result")
        self.result = result
        self.error = None
        self.state = ViewState.RESULT_READY

    def fail(self, message: str) -> None:
        if self.state is not ViewState.ANALYZING:
            raise InvalidTransitionError(self.state, "show an error")
        self.result = None
        self.error = message
        self.state = ViewState.ERROR_SHOWN

    def reset(self) -> None:
        """Clear image, result and error, back to the capture screen."""
        if self.state is ViewState.ANALYZING:
            raise InvalidTransitionError(self.state, "reset")
        self.image = None
        self.source = None
        self.result = None
        self.error = None
        self.state = ViewState.IDLE
