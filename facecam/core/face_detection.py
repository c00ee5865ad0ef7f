"""
Face detection for FaceCam.
"""

import cv2
import dlib
import logging
import math
from typing import List

import numpy as np

from .types import Detection

logger = logging.getLogger(__name__)


def score_to_probability(score: float) -> float:
    """Squash a dlib HOG detector score into [0, 1]; score 0 maps to 0.5."""
    return 1.0 / (1.0 + math.exp(-score))


class FaceDetector:
    """Handles face detection using dlib's HOG frontal face detector.

    Args:
        upsample: Times to upsample the image before detecting; finds smaller
            faces at higher cost.
        min_probability: Drop detections below this confidence.
    """

    def __init__(self, upsample: int = 0, min_probability: float = 0.5):
        self.detector = dlib.get_frontal_face_detector()
        self.upsample = upsample
        self.min_probability = min_probability
        logger.info("✓ dlib face detector loaded")

    def estimate_faces(self, frame: np.ndarray) -> List[Detection]:
        """Detect faces in an RGB frame; boxes are in the frame's pixel space."""
        gray = cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY)
        height, width = gray.shape[:2]
        rects, scores, _ = self.detector.run(gray, self.upsample, 0.0)

        faces = []
        for rect, score in zip(rects, scores):
            probability = score_to_probability(score)
            if probability < self.min_probability:
                continue
            # dlib boxes can extend past the image edge
            left = max(0, rect.left())
            top = max(0, rect.top())
            right = min(width, rect.right())
            bottom = min(height, rect.bottom())
            faces.append(Detection((float(left), float(top)), (float(right), float(bottom)), probability))

        logger.debug(f"Detected {len(faces)} face(s)")
        return faces
