"""
Value types shared by the inference pipeline and the overlay renderer.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Detection:
    """A detected face in tensor pixel space.

    Attributes:
        top_left: (x, y) of the top-left corner.
        bottom_right: (x, y) of the bottom-right corner.
        probability: Detection confidence in [0, 1].
    """

    top_left: Tuple[float, float]
    bottom_right: Tuple[float, float]
    probability: float

    @property
    def width(self) -> float:
        return self.bottom_right[0] - self.top_left[0]

    @property
    def height(self) -> float:
        return self.bottom_right[1] - self.top_left[1]


@dataclass(frozen=True)
class Classification:
    """One entry of the top-K classifier output."""

    label: str
    probability: float


@dataclass(frozen=True)
class ScaleFactor:
    """Ratio between display size and tensor size, per axis."""

    x: float
    y: float

    @classmethod
    def between(cls, preview: "PreviewGeometry", tensor_size: Tuple[int, int]) -> "ScaleFactor":
        """Scale from a (width, height) tensor onto the preview rectangle."""
        tensor_width, tensor_height = tensor_size
        return cls(x=preview.width / tensor_width, y=preview.height / tensor_height)


@dataclass(frozen=True)
class PreviewGeometry:
    """Position and size of the camera preview on screen."""

    left: int = 40
    top: int = 20
    width: int = 300
    height: int = 400


@dataclass(frozen=True)
class ScreenBox:
    """A rectangle in display coordinates."""

    left: float
    top: float
    width: float
    height: float

    def corners(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Integer corner points, as cv2.rectangle wants them."""
        return (
            (int(round(self.left)), int(round(self.top))),
            (int(round(self.left + self.width)), int(round(self.top + self.height))),
        )


@dataclass(frozen=True)
class RenderState:
    """Latest inference results, replaced wholesale on every sampled frame."""

    ready: bool = False
    faces: Tuple[Detection, ...] = ()
    classes: Tuple[Classification, ...] = ()
    frame_index: int = -1
    latency_ms: float = 0.0


__all__ = [
    "Detection",
    "Classification",
    "ScaleFactor",
    "PreviewGeometry",
    "ScreenBox",
    "RenderState",
]
