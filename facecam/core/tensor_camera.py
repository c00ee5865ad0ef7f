"""
Camera capture that hands out frames as model-ready image tensors.
"""

import cv2
import json
import logging
import os
from typing import Iterator, Optional, Tuple

import numpy as np

from ..utils.config import PlatformProfile
from ..utils.exceptions import CameraUnavailableError

logger = logging.getLogger(__name__)

_BACKENDS = {
    "ANY": cv2.CAP_ANY,
    "DSHOW": cv2.CAP_DSHOW,
    "MSMF": cv2.CAP_MSMF,
    "V4L2": cv2.CAP_V4L2,
    "AVFOUNDATION": cv2.CAP_AVFOUNDATION,
}


class FrameTick:
    """One frame-ready notification from the camera.

    ``preview`` is the raw BGR frame for display. ``pull()`` converts it to an
    RGB tensor at the tensor resolution; ticks the sampler skips are never
    converted.
    """

    def __init__(self, index: int, preview: np.ndarray, tensor_size: Tuple[int, int]):
        self.index = index
        self.preview = preview
        self._tensor_size = tensor_size
        self._pulled = False

    def pull(self) -> np.ndarray:
        """Return the frame as an HxWx3 uint8 RGB tensor. One call per tick."""
        if self._pulled:
            raise RuntimeError(f"Frame {self.index} was already pulled")
        self._pulled = True
        rgb = cv2.cvtColor(self.preview, cv2.COLOR_BGR2RGB)
        return cv2.resize(rgb, self._tensor_size, interpolation=cv2.INTER_LINEAR)


class TensorCamera:
    """Opens a camera and streams ``FrameTick`` objects.

    Args:
        platform: Texture (capture) size comes from the platform profile.
        tensor_size: (width, height) of the tensors handed to the models.
        camera_index: Preferred device index.
        backend: Preferred OpenCV backend name (see ``_BACKENDS``).
        cache_path: JSON file remembering the last working index/backend.
    """

    def __init__(
        self,
        platform: PlatformProfile,
        tensor_size: Tuple[int, int] = (400, 300),
        camera_index: int = 0,
        backend: str = "ANY",
        cache_path: Optional[str] = ".camera_cache.json",
    ):
        self.platform = platform
        self.tensor_size = tensor_size
        self.camera_index = camera_index
        self.backend = backend.upper()
        self._cache_path = cache_path
        self.cap: Optional[cv2.VideoCapture] = None
        self._frame_index = 0

    def __enter__(self) -> "TensorCamera":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def _load_cached_camera(self) -> Tuple[int, int]:
        """Load cached camera settings."""
        if not self._cache_path:
            return -1, -1
        try:
            with open(self._cache_path, "r") as f:
                data = json.load(f)
            return int(data.get("index", -1)), int(data.get("backend", -1))
        except (OSError, ValueError):
            return -1, -1

    def _save_cached_camera(self, index: int, backend: int) -> None:
        """Save camera settings to cache."""
        if not self._cache_path:
            return
        try:
            with open(self._cache_path, "w") as f:
                json.dump({"index": index, "backend": backend}, f)
            logger.debug(f"💾 Cached camera settings in {self._cache_path}")
        except OSError as e:
            logger.warning(f"Could not write camera cache: {e}")

    def _clear_cached_camera(self) -> None:
        if self._cache_path and os.path.exists(self._cache_path):
            os.remove(self._cache_path)
            logger.info("🗑️  Cleared camera cache")

    def _try_open(self, index: int, backend: int) -> Optional[cv2.VideoCapture]:
        cap = cv2.VideoCapture(index, backend)
        if not cap.isOpened():
            cap.release()
            return None
        width, height = self.platform.texture_size
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        ret, _ = cap.read()
        if not ret:
            cap.release()
            return None
        return cap

    def _candidates(self):
        preferred = _BACKENDS.get(self.backend, cv2.CAP_ANY)
        yield self.camera_index, preferred
        if preferred != cv2.CAP_ANY:
            yield self.camera_index, cv2.CAP_ANY
        for idx in range(0, 3):
            if idx != self.camera_index:
                yield idx, preferred

    def open(self) -> None:
        """Open the camera, trying the cached device first.

        Raises:
            CameraUnavailableError: No device could be opened or read.
        """
        cached_index, cached_backend = self._load_cached_camera()
        if cached_index >= 0 and cached_backend >= 0:
            logger.info(f"📦 Trying cached camera backend={cached_backend}, index={cached_index}")
            self.cap = self._try_open(cached_index, cached_backend)
            if self.cap is not None:
                logger.info("✅ Using cached camera")
                return
            logger.info("⚠️  Cached camera failed, trying other options...")
            self._clear_cached_camera()

        for idx, backend in self._candidates():
            logger.info(f"… Trying camera backend={backend}, index={idx}")
            self.cap = self._try_open(idx, backend)
            if self.cap is not None:
                logger.info(f"✅ Camera opened using backend={backend}, index={idx}")
                self._save_cached_camera(idx, backend)
                return

        raise CameraUnavailableError("Cannot access camera (no device or permission denied)")

    def reopen(self) -> bool:
        """Release and open again after a read failure."""
        self.release()
        self._clear_cached_camera()
        try:
            self.open()
        except CameraUnavailableError:
            return False
        return True

    def read_tick(self) -> Optional[FrameTick]:
        """Wait for the next frame; None if the camera stopped delivering."""
        if self.cap is None:
            return None
        ret, frame = self.cap.read()
        if not ret or frame is None:
            return None
        tick = FrameTick(self._frame_index, frame, self.tensor_size)
        self._frame_index += 1
        return tick

    def ticks(self) -> Iterator[FrameTick]:
        """Lazy stream of frame ticks, ending when a read fails."""
        while True:
            tick = self.read_tick()
            if tick is None:
                return
            yield tick

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
