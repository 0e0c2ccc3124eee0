"""Client side of CalorIA: view state machine, rendering and relay client."""

from calorai.client.relay_client import (
    RelayClient,
    RelayError,
    encode_image_bytes,
    encode_image_file,
)
from calorai.client.session import MealCaptureSession
from calorai.client.state import AnalysisView, ImageSource, InvalidTransitionError, ViewState

__all__ = [
    "AnalysisView",
    "ImageSource",
    "InvalidTransitionError",
    "MealCaptureSession",
    "RelayClient",
    "RelayError",
    "ViewState",
    "encode_image_bytes",
    "encode_image_file",
]
