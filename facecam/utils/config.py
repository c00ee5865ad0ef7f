"""
Configuration management for FaceCam.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.types import PreviewGeometry, ScaleFactor
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class PlatformProfile:
    """Camera capabilities that differ between platforms.

    Resolved once at startup and passed to the camera and the overlay.
    """

    name: str
    texture_size: Tuple[int, int]  # width, height
    flip_horizontal: bool


_PLATFORMS = {
    "ios": PlatformProfile("ios", (1080, 1920), False),
    "android": PlatformProfile("android", (1600, 1200), True),
    "desktop": PlatformProfile("desktop", (1280, 720), False),
}


def resolve_platform(name: str) -> PlatformProfile:
    """Look up the profile for a platform name (case-insensitive)."""
    try:
        return _PLATFORMS[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown platform '{name}', expected one of {sorted(_PLATFORMS)}"
        ) from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_range(name: str, default: Tuple[float, float]) -> Tuple[float, float]:
    value = os.getenv(name)
    if not value:
        return default
    try:
        low, high = (float(part) for part in value.split(","))
    except ValueError:
        raise ConfigurationError(f"{name} must look like 'low,high', got '{value}'") from None
    return low, high


class Config:
    """Configuration settings for FaceCam."""

    def __init__(self):
        # Camera settings
        self.CAMERA_BACKEND = os.getenv("FACECAM_BACKEND", "ANY")
        self.CAMERA_INDEX = int(os.getenv("FACECAM_CAMERA_INDEX", "0"))
        self.PLATFORM = os.getenv("FACECAM_PLATFORM", "desktop")
        self.CAMERA_CACHE = os.getenv("FACECAM_CAMERA_CACHE", ".camera_cache.json")

        # Tensor size fed to the models (width, height)
        self.TENSOR_WIDTH = int(os.getenv("FACECAM_TENSOR_WIDTH", "400"))
        self.TENSOR_HEIGHT = int(os.getenv("FACECAM_TENSOR_HEIGHT", "300"))

        # Camera preview position on screen
        self.PREVIEW_LEFT = 40
        self.PREVIEW_TOP = 20
        self.PREVIEW_WIDTH = 300
        self.PREVIEW_HEIGHT = 400

        # Inference
        self.PREDICT_EVERY_N_FRAMES = int(os.getenv("FACECAM_EVERY_N_FRAMES", "2"))
        self.TOP_K = int(os.getenv("FACECAM_TOP_K", "3"))
        self.CLASSIFIER_INPUT_SIZE = 96
        self.CLASSIFIER_INPUT_RANGE = _env_range("FACECAM_INPUT_RANGE", (0.0, 1.0))
        self.PARALLEL_MODELS = _env_bool("FACECAM_PARALLEL", False)
        self.FACE_UPSAMPLE = int(os.getenv("FACECAM_FACE_UPSAMPLE", "0"))
        self.FACE_MIN_PROBABILITY = float(os.getenv("FACECAM_FACE_MIN_PROBABILITY", "0.5"))

        # Model files
        self.MODEL_DIR = os.getenv("FACECAM_MODEL_DIR", "./models/mobilenetv2")
        self.MODEL_PATH = os.getenv(
            "FACECAM_MODEL_PATH", os.path.join(self.MODEL_DIR, "mobilenet_v2_0.5_96_frozen.pb")
        )
        self.MODEL_CONFIG_PATH: Optional[str] = os.getenv("FACECAM_MODEL_CONFIG_PATH") or None
        # Empty means read the network's final output
        self.MODEL_OUTPUT_LAYER: Optional[str] = os.getenv(
            "FACECAM_MODEL_OUTPUT_LAYER", "MobilenetV2/Logits/output"
        ) or None
        self.LABELS_PATH = os.getenv(
            "FACECAM_LABELS_PATH", os.path.join(self.MODEL_DIR, "imagenet_classes.txt")
        )
        self.ENABLE_CLASSIFIER = _env_bool("FACECAM_ENABLE_CLASSIFIER", True)
        self.ENABLE_FACES = _env_bool("FACECAM_ENABLE_FACES", True)

        # Display
        self.SHOW_WINDOW = _env_bool("FACECAM_SHOW_WINDOW", True)
        self.WINDOW_NAME = "FaceCam"
        self.QUIT_KEY = "q"

        self.LOG_LEVEL = os.getenv("FACECAM_LOG_LEVEL", "INFO")

    def get_platform(self) -> PlatformProfile:
        """Get the platform profile for the configured platform name."""
        return resolve_platform(self.PLATFORM)

    def get_tensor_size(self) -> Tuple[int, int]:
        """Get the (width, height) of the frame tensor."""
        return self.TENSOR_WIDTH, self.TENSOR_HEIGHT

    def get_preview(self) -> PreviewGeometry:
        """Get the preview rectangle."""
        return PreviewGeometry(
            left=self.PREVIEW_LEFT,
            top=self.PREVIEW_TOP,
            width=self.PREVIEW_WIDTH,
            height=self.PREVIEW_HEIGHT,
        )

    def scale_factor(self) -> ScaleFactor:
        """Get the tensor-to-preview scale factor."""
        return ScaleFactor.between(self.get_preview(), self.get_tensor_size())

    def get_camera_settings(self) -> tuple:
        """Get camera backend and index settings."""
        return self.CAMERA_BACKEND, self.CAMERA_INDEX

    def validate(self) -> None:
        """Check values that would otherwise fail deep inside the loop."""
        if self.PREDICT_EVERY_N_FRAMES < 1:
            raise ConfigurationError("Sampling period must be at least 1")
        if self.TOP_K < 1:
            raise ConfigurationError("TOP_K must be at least 1")
        if self.TENSOR_WIDTH <= 0 or self.TENSOR_HEIGHT <= 0:
            raise ConfigurationError("Tensor size must be positive")
        low, high = self.CLASSIFIER_INPUT_RANGE
        if high <= low:
            raise ConfigurationError("Input range upper bound must exceed lower bound")
        self.get_platform()


# Global config instance
config = Config()
