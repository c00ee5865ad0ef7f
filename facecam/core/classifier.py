"""
Image classification with a pretrained MobileNet run through OpenCV DNN.
"""

import cv2
import logging
import os
from typing import Optional, Tuple

import numpy as np

from ..utils.exceptions import ModelLoadError

logger = logging.getLogger(__name__)

IMAGE_SIZE = 96

# Pre-softmax output of the TF-slim MobileNet graphs; their last layer is
# already a softmax.
LOGITS_LAYER = "MobilenetV2/Logits/output"


def resize_bilinear_aligned(image: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Bilinear resize to (width, height) with corner pixels aligned.

    Unlike ``cv2.resize``, the four corner samples of the output coincide
    exactly with the corners of the input.
    """
    out_w, out_h = size
    in_h, in_w = image.shape[:2]
    x_step = (in_w - 1) / (out_w - 1) if out_w > 1 else 0.0
    y_step = (in_h - 1) / (out_h - 1) if out_h > 1 else 0.0
    map_x = np.tile(np.arange(out_w, dtype=np.float32) * x_step, (out_h, 1))
    map_y = np.tile((np.arange(out_h, dtype=np.float32) * y_step)[:, None], (1, out_w))
    return cv2.remap(image, map_x, map_y, interpolation=cv2.INTER_LINEAR,
                     borderMode=cv2.BORDER_REPLICATE)


def preprocess(
    frame: np.ndarray,
    size: int = IMAGE_SIZE,
    input_range: Tuple[float, float] = (0.0, 1.0),
) -> np.ndarray:
    """Resize, normalise and batch a uint8 HxWx3 frame.

    Returns a float32 array of shape (1, size, size, 3) with values mapped
    linearly from [0, 255] to ``input_range``.
    """
    low, high = input_range
    resized = resize_bilinear_aligned(frame.astype(np.float32), (size, size))
    normalized = resized * ((high - low) / 255.0) + low
    return np.expand_dims(normalized, axis=0)


def to_blob(batch: np.ndarray) -> np.ndarray:
    """NHWC batch to the NCHW layout OpenCV DNN expects."""
    return np.ascontiguousarray(batch.transpose(0, 3, 1, 2))


class Classifier:
    """Pretrained image classifier.

    The network outputs one logit per class plus a leading background logit.
    ``output_layer`` names the pre-softmax layer to read; None reads the
    network's final output.
    """

    def __init__(self, net, output_layer: Optional[str] = None):
        self.net = net
        self.output_layer = output_layer

    @classmethod
    def load(
        cls,
        weights_path: str,
        config_path: Optional[str] = None,
        output_layer: Optional[str] = LOGITS_LAYER,
    ) -> "Classifier":
        """Load a model from a weights file and optional architecture file.

        Raises:
            ModelLoadError: A file is missing or OpenCV cannot parse the model.
        """
        for path in (weights_path, config_path):
            if path and not os.path.exists(path):
                raise ModelLoadError(f"Model file not found: {path}")

        logger.info(f"📂 Loading classifier from {weights_path}...")
        try:
            net = cv2.dnn.readNet(weights_path, config_path or "")
        except cv2.error as e:
            raise ModelLoadError(f"OpenCV could not load {weights_path}: {e}") from e
        logger.info("✓ Classifier loaded")
        return cls(net, output_layer)

    def predict(self, batch: np.ndarray) -> np.ndarray:
        """Run one NHWC batch; returns logits of shape (1, num_classes + 1)."""
        self.net.setInput(to_blob(batch))
        if self.output_layer:
            logits = self.net.forward(self.output_layer)
        else:
            logits = self.net.forward()
        return np.asarray(logits, dtype=np.float32).reshape(batch.shape[0], -1)
