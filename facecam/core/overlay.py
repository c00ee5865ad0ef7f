"""
Mapping of face boxes from tensor space to screen space.

Everything here is pure: no drawing, no state.
"""

from typing import List, Sequence

from .types import Detection, PreviewGeometry, ScaleFactor, ScreenBox


def mirror_x(x: float, width: float) -> float:
    """Reflect ``x`` about the centre of a span of ``width``."""
    return width - x


def scale_box(
    detection: Detection,
    scale: ScaleFactor,
    preview: PreviewGeometry,
    flip_horizontal: bool = False,
) -> ScreenBox:
    """Convert a detection's tensor-space box to screen coordinates.

    ``screen = tensor * scale + offset``. With ``flip_horizontal`` both
    vertical edges are mirrored inside the preview before the offset is
    applied, for cameras whose tensor is mirrored relative to the preview.
    """
    left = detection.top_left[0] * scale.x
    right = detection.bottom_right[0] * scale.x
    top = detection.top_left[1] * scale.y
    bottom = detection.bottom_right[1] * scale.y

    if flip_horizontal:
        left, right = mirror_x(right, preview.width), mirror_x(left, preview.width)

    return ScreenBox(
        left=left + preview.left,
        top=top + preview.top,
        width=right - left,
        height=bottom - top,
    )


def scale_boxes(
    detections: Sequence[Detection],
    scale: ScaleFactor,
    preview: PreviewGeometry,
    flip_horizontal: bool = False,
) -> List[ScreenBox]:
    """``scale_box`` over a sequence of detections."""
    return [scale_box(d, scale, preview, flip_horizontal) for d in detections]
