"""
Core functionality for FaceCam.

This module contains the main processing components:
- Frame sampling and the inference pipeline
- Classifier post-processing
- Bounding-box scaling and overlay rendering
- Application lifecycle
"""

from .types import Classification, Detection, PreviewGeometry, RenderState, ScaleFactor, ScreenBox
from .sampler import FrameSampler
from .overlay import mirror_x, scale_box

__all__ = [
    "Classification",
    "Detection",
    "PreviewGeometry",
    "RenderState",
    "ScaleFactor",
    "ScreenBox",
    "FrameSampler",
    "mirror_x",
    "scale_box",
]
