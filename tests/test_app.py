"""
Tests for the application lifecycle and frame loop.
"""

import unittest
from pathlib import Path
import sys

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from facecam.core.app import AppState, CameraApp
from facecam.core.types import Detection
from facecam.utils.config import Config
from facecam.utils.exceptions import CameraUnavailableError, ModelLoadError

LABELS = ("cat", "dog", "fox", "owl")


class FakeTick:

    def __init__(self, index):
        self.index = index
        self.preview = np.zeros((72, 128, 3), dtype=np.uint8)

    def pull(self):
        return np.zeros((30, 40, 3), dtype=np.uint8)


class FakeCamera:

    def __init__(self, frames=5, open_error=None):
        self.frames = frames
        self.open_error = open_error
        self.reads = 0
        self.reopened = 0
        self.released = False

    def open(self):
        if self.open_error:
            raise self.open_error

    def read_tick(self):
        if self.reads >= self.frames:
            return None
        tick = FakeTick(self.reads)
        self.reads += 1
        return tick

    def reopen(self):
        self.reopened += 1
        return False

    def release(self):
        self.released = True


class FakeRenderer:

    def __init__(self, quit_after=None, on_render=None):
        self.quit_after = quit_after
        self.on_render = on_render
        self.states = []
        self.renders = 0
        self.closed = False

    def update(self, state):
        self.states.append(state)

    def render(self, preview):
        self.renders += 1
        if self.on_render:
            self.on_render(self.renders)
        return self.quit_after is None or self.renders < self.quit_after

    def close(self):
        self.closed = True


class FakeDetector:

    def __init__(self, error=None):
        self.error = error

    def estimate_faces(self, frame):
        if self.error:
            raise self.error
        return [Detection((1.0, 1.0), (5.0, 5.0), 0.9)]


class FakeClassifier:

    def predict(self, batch):
        return np.array([[0.0, 4.0, 3.0, 2.0, 1.0]], dtype=np.float32)


def make_config(period=2):
    config = Config()
    config.PLATFORM = "desktop"
    config.PREDICT_EVERY_N_FRAMES = period
    config.TOP_K = 3
    config.SHOW_WINDOW = False
    return config


class TestCameraApp(unittest.TestCase):

    def make_app(self, camera=None, renderer=None, detector=None, classifier_loader=None, **kwargs):
        self.camera = camera or FakeCamera()
        self.renderer = renderer or FakeRenderer()
        detector = detector or FakeDetector()
        return CameraApp(
            make_config(),
            camera=self.camera,
            renderer=self.renderer,
            face_detector_loader=lambda cfg: detector,
            classifier_loader=classifier_loader or (lambda cfg: FakeClassifier()),
            labels_loader=lambda cfg: LABELS,
            **kwargs,
        )

    def test_full_lifecycle(self):
        """Five frames at period 2 run inference on three of them."""
        app = self.make_app()
        self.assertEqual(app.state, AppState.UNINITIALIZED)
        app.start()
        self.assertEqual(app.state, AppState.READY)
        self.assertTrue(self.renderer.states[-1].ready)

        app.run()
        self.assertEqual(app.state, AppState.STOPPED)
        self.assertEqual(app.frames_seen, 5)
        self.assertEqual(app.frames_processed, 3)
        self.assertEqual(self.camera.reopened, 1)
        self.assertTrue(self.camera.released)
        self.assertTrue(self.renderer.closed)

        last = self.renderer.states[-1]
        self.assertEqual(last.frame_index, 4)
        self.assertEqual([c.label for c in last.classes], ["cat", "dog", "fox"])
        self.assertEqual(len(last.faces), 1)

    def test_max_frames(self):
        app = self.make_app(camera=FakeCamera(frames=100), max_frames=4)
        app.start()
        app.run()
        self.assertEqual(app.frames_seen, 4)
        self.assertEqual(app.frames_processed, 2)
        self.assertEqual(self.camera.reopened, 0)

    def test_quit_key(self):
        app = self.make_app(renderer=FakeRenderer(quit_after=2))
        app.start()
        app.run()
        self.assertEqual(app.frames_seen, 2)
        self.assertEqual(app.state, AppState.STOPPED)

    def test_stop_takes_effect_between_frames(self):
        holder = {}
        renderer = FakeRenderer(on_render=lambda n: n == 3 and holder["app"].stop())
        app = self.make_app(camera=FakeCamera(frames=100), renderer=renderer)
        holder["app"] = app
        app.start()
        app.run()
        self.assertEqual(app.frames_seen, 3)
        self.assertEqual(app.state, AppState.STOPPED)
        self.assertTrue(self.camera.released)

    def test_stop_before_run(self):
        app = self.make_app()
        app.start()
        app.stop()
        self.assertEqual(app.state, AppState.STOPPED)
        self.assertTrue(self.camera.released)
        with self.assertRaises(RuntimeError):
            app.run()

    def test_stop_during_first_read_leaves_camera_closed(self):
        """A stop that races the first frame does not reopen the camera."""
        holder = {}

        class StoppingCamera(FakeCamera):
            def read_tick(self):
                holder["app"].stop()
                return None

            def reopen(self):
                self.reopened += 1
                self.released = False
                return True

        app = self.make_app(camera=StoppingCamera())
        holder["app"] = app
        app.start()
        app.run()
        self.assertEqual(app.state, AppState.STOPPED)
        self.assertEqual(self.camera.reopened, 0)
        self.assertTrue(self.camera.released)

    def test_stop_is_idempotent(self):
        app = self.make_app()
        app.start()
        app.stop()
        app.stop()
        self.assertEqual(app.state, AppState.STOPPED)

    def test_frame_errors_do_not_stop_loop(self):
        app = self.make_app(detector=FakeDetector(error=RuntimeError("corrupt frame")))
        app.start()
        with self.assertLogs("facecam.core.app", level="ERROR"):
            app.run()
        self.assertEqual(app.frames_seen, 5)
        self.assertEqual(app.frame_errors, 3)
        self.assertEqual(app.frames_processed, 0)
        self.assertEqual(app.state, AppState.STOPPED)

    def test_permission_denied(self):
        camera = FakeCamera(open_error=CameraUnavailableError("denied"))
        app = self.make_app(camera=camera)
        with self.assertRaises(CameraUnavailableError):
            app.start()
        self.assertEqual(app.state, AppState.PERMISSION_DENIED)

    def test_load_failed(self):
        def broken_loader(cfg):
            raise OSError("weights missing")

        app = self.make_app(classifier_loader=broken_loader)
        with self.assertRaises(ModelLoadError):
            app.start()
        self.assertEqual(app.state, AppState.LOAD_FAILED)
        self.assertTrue(self.camera.released)

    def test_start_twice(self):
        app = self.make_app()
        app.start()
        with self.assertRaises(RuntimeError):
            app.start()

    def test_disabled_models(self):
        app = self.make_app(classifier_loader=lambda cfg: None)
        app._labels_loader = lambda cfg: ()
        app.start()
        app.run()
        last = self.renderer.states[-1]
        self.assertEqual(last.classes, ())
        self.assertEqual(len(last.faces), 1)


if __name__ == "__main__":
    unittest.main()
