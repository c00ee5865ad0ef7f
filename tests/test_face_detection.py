"""
Tests for the dlib face detector wrapper.
"""

import unittest
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from facecam.core.face_detection import FaceDetector, score_to_probability


class TestScoreToProbability(unittest.TestCase):

    def test_threshold_maps_to_half(self):
        self.assertAlmostEqual(score_to_probability(0.0), 0.5)

    def test_monotonic_and_bounded(self):
        scores = [-5.0, -1.0, 0.0, 0.5, 2.0, 10.0]
        probs = [score_to_probability(s) for s in scores]
        self.assertEqual(probs, sorted(probs))
        self.assertTrue(all(0.0 < p < 1.0 for p in probs))


class TestFaceDetector(unittest.TestCase):

    def test_blank_frame_has_no_faces(self):
        detector = FaceDetector()
        frame = np.zeros((300, 400, 3), dtype=np.uint8)
        self.assertEqual(detector.estimate_faces(frame), [])


if __name__ == "__main__":
    unittest.main()
