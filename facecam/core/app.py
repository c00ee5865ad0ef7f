"""
Application lifecycle: startup, the sampling loop and teardown.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional

from ..utils.config import Config, config as default_config
from ..utils.exceptions import CameraUnavailableError, FaceCamError, ModelLoadError
from ..utils.labels import load_labels
from .pipeline import InferencePipeline
from .sampler import FrameSampler

logger = logging.getLogger(__name__)


class AppState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    RUNNING = "running"
    STOPPED = "stopped"
    PERMISSION_DENIED = "permission_denied"
    LOAD_FAILED = "load_failed"


TERMINAL_STATES = (AppState.STOPPED, AppState.PERMISSION_DENIED, AppState.LOAD_FAILED)


def load_face_detector(cfg: Config):
    """Build the dlib face detector, or None when disabled."""
    if not cfg.ENABLE_FACES:
        return None
    from .face_detection import FaceDetector
    return FaceDetector(upsample=cfg.FACE_UPSAMPLE, min_probability=cfg.FACE_MIN_PROBABILITY)


def load_classifier(cfg: Config):
    """Load the image classifier, or None when disabled."""
    if not cfg.ENABLE_CLASSIFIER:
        return None
    from .classifier import Classifier
    return Classifier.load(cfg.MODEL_PATH, cfg.MODEL_CONFIG_PATH, cfg.MODEL_OUTPUT_LAYER)


def load_label_table(cfg: Config):
    if not cfg.ENABLE_CLASSIFIER:
        return ()
    return load_labels(cfg.LABELS_PATH)


def build_camera(cfg: Config):
    from .tensor_camera import TensorCamera
    backend, index = cfg.get_camera_settings()
    return TensorCamera(
        platform=cfg.get_platform(),
        tensor_size=cfg.get_tensor_size(),
        camera_index=index,
        backend=backend,
        cache_path=cfg.CAMERA_CACHE,
    )


def build_renderer(cfg: Config):
    from .renderer import OverlayRenderer
    return OverlayRenderer(
        preview=cfg.get_preview(),
        scale=cfg.scale_factor(),
        flip_horizontal=cfg.get_platform().flip_horizontal,
        show_window=cfg.SHOW_WINDOW,
        window_name=cfg.WINDOW_NAME,
        quit_key=cfg.QUIT_KEY,
    )


class CameraApp:
    """Owns the camera, models, pipeline and renderer for one session.

    ``start()`` opens the camera and loads the models concurrently;
    ``run()`` drives the frame loop until ``stop()`` is called, the quit key
    is pressed, the camera dies or ``max_frames`` ticks have been read.
    """

    def __init__(
        self,
        cfg: Optional[Config] = None,
        camera=None,
        renderer=None,
        face_detector_loader: Callable = load_face_detector,
        classifier_loader: Callable = load_classifier,
        labels_loader: Callable = load_label_table,
        max_frames: Optional[int] = None,
    ):
        self.config = cfg or default_config
        self.config.validate()
        self.camera = camera if camera is not None else build_camera(self.config)
        self.renderer = renderer if renderer is not None else build_renderer(self.config)
        self._face_detector_loader = face_detector_loader
        self._classifier_loader = classifier_loader
        self._labels_loader = labels_loader
        self.max_frames = max_frames

        self.sampler = FrameSampler(self.config.PREDICT_EVERY_N_FRAMES)
        self.pipeline: Optional[InferencePipeline] = None
        self.state = AppState.UNINITIALIZED
        self.frames_seen = 0
        self.frames_processed = 0
        self.frame_errors = 0

        self._stop_event = threading.Event()
        self._teardown_lock = threading.Lock()
        self._loop_entered = False

    def _set_state(self, state: AppState) -> None:
        logger.info(f"State {self.state.value} → {state.value}")
        self.state = state

    def start(self) -> None:
        """Open the camera and load both models.

        Raises:
            CameraUnavailableError: Camera could not be opened; the app ends
                in PERMISSION_DENIED.
            ModelLoadError: A model or the label table failed to load; the
                app ends in LOAD_FAILED.
        """
        if self.state is not AppState.UNINITIALIZED:
            raise RuntimeError(f"Cannot start from state {self.state.value}")
        self._set_state(AppState.LOADING)

        with ThreadPoolExecutor(max_workers=4) as pool:
            camera_future = pool.submit(self.camera.open)
            detector_future = pool.submit(self._face_detector_loader, self.config)
            classifier_future = pool.submit(self._classifier_loader, self.config)
            labels_future = pool.submit(self._labels_loader, self.config)

        try:
            camera_future.result()
        except CameraUnavailableError:
            self._set_state(AppState.PERMISSION_DENIED)
            logger.error("❌ Cannot access camera")
            raise

        try:
            face_detector = detector_future.result()
            classifier = classifier_future.result()
            labels = labels_future.result()
            self.pipeline = InferencePipeline(
                face_detector=face_detector,
                classifier=classifier,
                labels=labels,
                top_k=self.config.TOP_K,
                input_size=self.config.CLASSIFIER_INPUT_SIZE,
                input_range=self.config.CLASSIFIER_INPUT_RANGE,
                parallel=self.config.PARALLEL_MODELS,
            )
        except Exception as e:
            self._set_state(AppState.LOAD_FAILED)
            self.camera.release()
            logger.error(f"❌ Model loading failed: {e}")
            if isinstance(e, ModelLoadError):
                raise
            raise ModelLoadError(str(e)) from e

        self.pipeline.subscribe(self.renderer.update)
        self.pipeline.mark_ready()
        self._set_state(AppState.READY)

    def _process_tick(self, tick) -> None:
        try:
            frame = tick.pull()
            self.pipeline.process(frame, tick.index)
            self.frames_processed += 1
        except FaceCamError as e:
            self.frame_errors += 1
            logger.warning(f"⚠️  Skipping frame {tick.index}: {e}")
        except Exception as e:
            # A bad frame must not stop the camera feed
            self.frame_errors += 1
            logger.error(f"❌ Inference failed on frame {tick.index}: {e}", exc_info=True)

    def run(self) -> None:
        """Run the frame loop until teardown."""
        with self._teardown_lock:
            if self.state is not AppState.READY:
                raise RuntimeError(f"Cannot run from state {self.state.value}")
            # from here on only the loop tears down
            self._loop_entered = True

        recovery_attempted = False
        try:
            while not self._stop_event.is_set():
                if self.max_frames is not None and self.frames_seen >= self.max_frames:
                    break

                tick = self.camera.read_tick()
                if tick is None:
                    if self._stop_event.is_set():
                        break
                    if not recovery_attempted:
                        logger.error("⚠️  Camera read failed; attempting to recover...")
                        recovery_attempted = True
                        if self.camera.reopen():
                            continue
                    logger.error("❌ Camera failed")
                    break
                recovery_attempted = False

                if self.state is AppState.READY:
                    self._set_state(AppState.RUNNING)
                self.frames_seen += 1

                if self.sampler.tick():
                    self._process_tick(tick)

                if not self.renderer.render(tick.preview):
                    logger.info("Quit key pressed")
                    break
        finally:
            self._teardown()

    def stop(self) -> None:
        """Request teardown; takes effect between frames. Safe from any thread."""
        self._stop_event.set()
        with self._teardown_lock:
            loop_entered = self._loop_entered
        if not loop_entered:
            self._teardown()

    def _teardown(self) -> None:
        with self._teardown_lock:
            if self.state in TERMINAL_STATES:
                return
            self._stop_event.set()
            if self.pipeline is not None:
                self.pipeline.close()
            self.camera.release()
            self.renderer.close()
            self._set_state(AppState.STOPPED)
            logger.info(
                f"✅ Camera stopped ({self.frames_processed}/{self.frames_seen} frames processed, "
                f"{self.frame_errors} errors)"
            )
