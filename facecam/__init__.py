"""
FaceCam - live camera preview with on-device face detection and image classification.

Features:
- Decimated per-frame inference loop over a camera stream
- Face detection with bounding-box overlays
- Top-K image classification with a pretrained MobileNet
"""

__version__ = "1.0.0"
__author__ = "FaceCam Team"

# Core modules
from . import core
from . import utils

__all__ = ["core", "utils"]
