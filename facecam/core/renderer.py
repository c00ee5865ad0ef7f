"""
OpenCV presentation layer: camera preview, face boxes and prediction text.
"""

import cv2
import logging
from typing import List, Optional

import numpy as np

from .overlay import scale_boxes
from .types import PreviewGeometry, RenderState, ScaleFactor

logger = logging.getLogger(__name__)

FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.45
LINE_HEIGHT = 18
TEXT_AREA_HEIGHT = 200
BOX_COLOR = (0, 0, 255)
TEXT_COLOR = (0, 0, 0)


def describe_backend() -> List[str]:
    """Library version and inference backend lines for the debug overlay."""
    target = "opencl" if cv2.ocl.useOpenCL() else "cpu"
    return [f"opencv {cv2.__version__}", f"dnn target {target}"]


def state_lines(state: RenderState) -> List[str]:
    """Text summary of a render state, one string per line."""
    lines = [f"# faces detected: {len(state.faces)}"]
    for face in state.faces:
        lines.append(
            f"probability: {face.probability:.3f} | "
            f"TL: [{face.top_left[0]:.1f}, {face.top_left[1]:.1f}] | "
            f"BR: [{face.bottom_right[0]:.1f}, {face.bottom_right[1]:.1f}]"
        )
    for cls in state.classes:
        lines.append(f"className: {cls.label} | probability: {cls.probability:.3f}")
    return lines


class OverlayRenderer:
    """Paints the latest ``RenderState`` over the camera preview.

    Subscribe ``update`` to the pipeline; call ``render`` once per camera
    frame. Results only change on sampled frames, the preview changes on
    every frame.
    """

    def __init__(
        self,
        preview: PreviewGeometry,
        scale: ScaleFactor,
        flip_horizontal: bool = False,
        show_window: bool = True,
        window_name: str = "FaceCam",
        quit_key: str = "q",
    ):
        self.preview = preview
        self.scale = scale
        self.flip_horizontal = flip_horizontal
        self.show_window = show_window
        self.window_name = window_name
        self.quit_key = quit_key
        self._state = RenderState()
        self._window_open = False
        self._backend_lines = describe_backend()

    @property
    def state(self) -> RenderState:
        return self._state

    def update(self, state: RenderState) -> None:
        self._state = state

    def _blank_canvas(self) -> np.ndarray:
        width = self.preview.left * 2 + self.preview.width
        height = self.preview.top + self.preview.height + TEXT_AREA_HEIGHT
        return np.full((height, width, 3), 255, dtype=np.uint8)

    def _put_lines(self, canvas: np.ndarray, lines: List[str], y: int) -> None:
        for line in lines:
            y += LINE_HEIGHT
            if y >= canvas.shape[0]:
                break
            cv2.putText(canvas, line, (10, y), FONT, FONT_SCALE, TEXT_COLOR, 1, cv2.LINE_AA)

    def compose(self, preview_frame: Optional[np.ndarray]) -> np.ndarray:
        """Build the full canvas for one display refresh."""
        canvas = self._blank_canvas()
        state = self._state

        if not state.ready:
            self._put_lines(canvas, ["Initializing models..."] + self._backend_lines, 20)
            return canvas

        p = self.preview
        if preview_frame is not None:
            if self.flip_horizontal:
                # boxes are mirrored too, so they stay over the faces
                preview_frame = cv2.flip(preview_frame, 1)
            canvas[p.top:p.top + p.height, p.left:p.left + p.width] = cv2.resize(
                preview_frame, (p.width, p.height), interpolation=cv2.INTER_LINEAR
            )
        cv2.rectangle(canvas, (p.left, p.top), (p.left + p.width, p.top + p.height), (0, 0, 0), 1)

        for box in scale_boxes(state.faces, self.scale, p, self.flip_horizontal):
            top_left, bottom_right = box.corners()
            cv2.rectangle(canvas, top_left, bottom_right, BOX_COLOR, 2)

        self._put_lines(canvas, self._backend_lines + state_lines(state), p.top + p.height)
        return canvas

    def render(self, preview_frame: Optional[np.ndarray]) -> bool:
        """Compose and show a frame; False if the quit key was pressed."""
        canvas = self.compose(preview_frame)
        if not self.show_window:
            return True
        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            self._window_open = True
        cv2.imshow(self.window_name, canvas)
        return (cv2.waitKey(1) & 0xFF) != ord(self.quit_key)

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
