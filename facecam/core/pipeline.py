"""
Per-frame inference: face detection, classification and result publishing.

The pipeline holds only inference data (models, labels, K, preprocessing
settings). Presentation code subscribes to the published ``RenderState``.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .classifier import IMAGE_SIZE, preprocess
from .postprocess import classify_logits
from .types import Classification, Detection, RenderState

logger = logging.getLogger(__name__)


class TensorScope:
    """Releases every tracked tensor when the block exits, even on error.

    Objects with a ``release()`` method have it called; all references held
    by the scope are dropped.
    """

    def __init__(self):
        self._tensors: List[object] = []
        self.released = 0

    def track(self, tensor):
        self._tensors.append(tensor)
        return tensor

    @property
    def live(self) -> int:
        return len(self._tensors)

    def __enter__(self) -> "TensorScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        while self._tensors:
            tensor = self._tensors.pop()
            release = getattr(tensor, "release", None)
            if callable(release):
                release()
            self.released += 1
        return False


class InferencePipeline:
    """Runs the face detector and classifier on one frame at a time.

    Args:
        face_detector: Object with ``estimate_faces(frame)``, or None.
        classifier: Object with ``predict(batch)`` returning logits, or None.
        labels: Label table, one entry per non-background class.
        top_k: Number of classes to report.
        input_size: Side of the square classifier input.
        input_range: Range pixel values are normalised into.
        parallel: Run detector and classifier on two worker threads.
    """

    def __init__(
        self,
        face_detector=None,
        classifier=None,
        labels: Sequence[str] = (),
        top_k: int = 3,
        input_size: int = IMAGE_SIZE,
        input_range: Tuple[float, float] = (0.0, 1.0),
        parallel: bool = False,
    ):
        if classifier is not None and not 1 <= top_k <= len(labels):
            raise ValueError(f"top_k must be between 1 and {len(labels)}, got {top_k}")
        self.face_detector = face_detector
        self.classifier = classifier
        self.labels = tuple(labels)
        self.top_k = top_k
        self.input_size = input_size
        self.input_range = input_range
        self._executor = ThreadPoolExecutor(max_workers=2) if parallel else None
        self._state = RenderState()
        self._subscribers: List[Callable[[RenderState], None]] = []

    @property
    def state(self) -> RenderState:
        """The most recently published results."""
        return self._state

    def subscribe(self, callback: Callable[[RenderState], None]) -> None:
        self._subscribers.append(callback)

    def mark_ready(self) -> None:
        """Publish an empty, ready state once the models are in place."""
        self._publish(RenderState(ready=True))

    def _publish(self, state: RenderState) -> None:
        self._state = state
        for callback in self._subscribers:
            callback(state)

    def _detect(self, frame: np.ndarray) -> Tuple[Detection, ...]:
        if self.face_detector is None:
            return ()
        return tuple(self.face_detector.estimate_faces(frame))

    def _classify(self, frame: np.ndarray, scope: TensorScope) -> Tuple[Classification, ...]:
        if self.classifier is None:
            return ()
        batch = scope.track(preprocess(frame, self.input_size, self.input_range))
        logits = scope.track(self.classifier.predict(batch))
        return tuple(classify_logits(logits, self.labels, self.top_k))

    def process(self, frame: np.ndarray, frame_index: int = -1) -> RenderState:
        """Run one inference pass and publish its results.

        The frame and every intermediate tensor are released before
        returning. Model errors propagate to the caller; the previously
        published state is left untouched in that case.
        """
        started = time.perf_counter()
        with TensorScope() as scope:
            scope.track(frame)
            if self._executor is not None:
                faces_future = self._executor.submit(self._detect, frame)
                classes_future = self._executor.submit(self._classify, frame, scope)
                wait([faces_future, classes_future])
                faces, classes = faces_future.result(), classes_future.result()
            else:
                faces = self._detect(frame)
                classes = self._classify(frame, scope)
            del frame

        latency_ms = (time.perf_counter() - started) * 1000.0
        state = RenderState(
            ready=True,
            faces=faces,
            classes=classes,
            frame_index=frame_index,
            latency_ms=latency_ms,
        )
        self._publish(state)
        logger.debug(
            f"Frame {frame_index}: {len(faces)} face(s), "
            f"{len(classes)} class(es) in {latency_ms:.1f} ms"
        )
        return state

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
