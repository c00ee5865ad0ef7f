"""
Tests for bounding-box scaling and overlay rendering.
"""

import unittest
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from facecam.core.overlay import mirror_x, scale_box, scale_boxes
from facecam.core.renderer import BOX_COLOR, OverlayRenderer, state_lines
from facecam.core.types import (
    Classification,
    Detection,
    PreviewGeometry,
    RenderState,
    ScaleFactor,
    ScreenBox,
)


class TestScaleBox(unittest.TestCase):

    def setUp(self):
        self.face = Detection(top_left=(100.0, 50.0), bottom_right=(200.0, 150.0), probability=0.9)

    def test_preview_scenario(self):
        """Scale 1.5 with the preview at (40, 20)."""
        box = scale_box(self.face, ScaleFactor(1.5, 1.5), PreviewGeometry(40, 20, 300, 400))
        self.assertEqual(box, ScreenBox(left=190.0, top=95.0, width=150.0, height=150.0))

    def test_linear(self):
        """Scale 2 doubles the corner and the size."""
        origin = PreviewGeometry(0, 0, 300, 400)
        unit = scale_box(self.face, ScaleFactor(1, 1), origin)
        double = scale_box(self.face, ScaleFactor(2, 2), origin)
        self.assertEqual(double.left, 2 * unit.left)
        self.assertEqual(double.top, 2 * unit.top)
        self.assertEqual(double.width, 2 * unit.width)
        self.assertEqual(double.height, 2 * unit.height)

    def test_pure(self):
        args = (self.face, ScaleFactor(0.75, 1.25), PreviewGeometry())
        self.assertEqual(scale_box(*args), scale_box(*args))

    def test_flip_horizontal(self):
        """Mirrored boxes keep their size and reflect inside the preview."""
        face = Detection((10.0, 0.0), (110.0, 40.0), 0.8)
        preview = PreviewGeometry(40, 20, 300, 400)
        box = scale_box(face, ScaleFactor(1, 1), preview, flip_horizontal=True)
        self.assertEqual(box.left, 300 - 110 + 40)
        self.assertEqual(box.width, 100)
        self.assertEqual(box.top, 20)
        self.assertEqual(box.height, 40)

    def test_scale_boxes(self):
        boxes = scale_boxes([self.face, self.face], ScaleFactor(1, 1), PreviewGeometry())
        self.assertEqual(len(boxes), 2)


class TestMirror(unittest.TestCase):

    def test_involution(self):
        for x in (0.0, 12.5, 150.0, 299.0, 300.0):
            with self.subTest(x=x):
                self.assertEqual(mirror_x(mirror_x(x, 300), 300), x)

    def test_centre_is_fixed(self):
        self.assertEqual(mirror_x(150, 300), 150)


class TestScreenBox(unittest.TestCase):

    def test_corners(self):
        box = ScreenBox(190.0, 95.0, 150.0, 150.0)
        self.assertEqual(box.corners(), ((190, 95), (340, 245)))


class TestOverlayRenderer(unittest.TestCase):

    def setUp(self):
        self.preview = PreviewGeometry(40, 20, 300, 400)
        self.renderer = OverlayRenderer(
            preview=self.preview,
            scale=ScaleFactor(300 / 400, 400 / 300),
            show_window=False,
        )

    def test_initializing_screen(self):
        canvas = self.renderer.compose(None)
        self.assertEqual(canvas.shape, (20 + 400 + 200, 40 * 2 + 300, 3))

    def test_draws_boxes_over_preview(self):
        face = Detection((100.0, 50.0), (200.0, 150.0), 0.9)
        self.renderer.update(RenderState(ready=True, faces=(face,)))
        frame = np.zeros((720, 1280, 3), dtype=np.uint8)
        canvas = self.renderer.compose(frame)
        # top-left corner: 100 * 0.75 + 40, 50 * 4/3 + 20
        self.assertEqual(tuple(canvas[87, 115]), BOX_COLOR)
        # inside the preview, away from the box: camera pixels
        self.assertEqual(tuple(canvas[400, 50]), (0, 0, 0))

    def test_flipped_box_covers_face(self):
        """With mirroring on, the box lands over the face in the mirrored preview."""
        renderer = OverlayRenderer(
            preview=self.preview, scale=ScaleFactor(1, 1), flip_horizontal=True, show_window=False
        )
        frame = np.zeros((400, 300, 3), dtype=np.uint8)
        frame[100:200, 50:100] = 255
        renderer.update(RenderState(ready=True, faces=(Detection((50.0, 100.0), (100.0, 200.0), 0.9),)))
        canvas = renderer.compose(frame)
        # mirrored face spans preview x 200..249, canvas x 240..289
        self.assertEqual(tuple(canvas[150 + 20, 265]), (255, 255, 255))
        self.assertEqual(tuple(canvas[150 + 20, 40 + 75]), (0, 0, 0))
        self.assertEqual(tuple(canvas[120, 240]), BOX_COLOR)
        self.assertEqual(tuple(canvas[170, 290]), BOX_COLOR)

    def test_render_headless(self):
        self.renderer.update(RenderState(ready=True))
        self.assertTrue(self.renderer.render(None))
        self.renderer.close()

    def test_state_lines(self):
        state = RenderState(
            ready=True,
            faces=(Detection((1.0, 2.0), (3.0, 4.0), 0.5),),
            classes=(Classification("tabby", 0.25),),
        )
        self.assertEqual(
            state_lines(state),
            [
                "# faces detected: 1",
                "probability: 0.500 | TL: [1.0, 2.0] | BR: [3.0, 4.0]",
                "className: tabby | probability: 0.250",
            ],
        )


if __name__ == "__main__":
    unittest.main()
