"""
Main entry point for FaceCam.
"""

import argparse
import logging
import sys

from facecam.core.app import CameraApp
from facecam.utils.config import Config
from facecam.utils.exceptions import FaceCamError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Live camera preview with face detection and image classification"
    )
    parser.add_argument("--camera", type=int, help="Camera device index")
    parser.add_argument("--platform", help="Platform profile: desktop, ios or android")
    parser.add_argument("--every", type=int, help="Run inference every N frames (default: 2)")
    parser.add_argument("--top-k", type=int, help="Number of classes to show (default: 3)")
    parser.add_argument("--model", help="Classifier weights file")
    parser.add_argument("--model-config", help="Classifier architecture file, if separate")
    parser.add_argument("--output-layer", help="Classifier layer holding the pre-softmax logits")
    parser.add_argument("--labels", help="Label table, one class per line")
    parser.add_argument("--headless", action="store_true", help="Do not open a window")
    parser.add_argument("--max-frames", type=int, help="Stop after this many camera frames")
    parser.add_argument("--no-classifier", action="store_true", help="Disable image classification")
    parser.add_argument("--no-faces", action="store_true", help="Disable face detection")
    parser.add_argument("--parallel", action="store_true", help="Run both models concurrently")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")
    return parser


def apply_args(cfg: Config, args: argparse.Namespace) -> Config:
    """Override config values with the command-line options that were given."""
    overrides = {
        "CAMERA_INDEX": args.camera,
        "PLATFORM": args.platform,
        "PREDICT_EVERY_N_FRAMES": args.every,
        "TOP_K": args.top_k,
        "MODEL_PATH": args.model,
        "MODEL_CONFIG_PATH": args.model_config,
        "MODEL_OUTPUT_LAYER": args.output_layer,
        "LABELS_PATH": args.labels,
        "LOG_LEVEL": args.log_level,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(cfg, name, value)
    if args.headless:
        cfg.SHOW_WINDOW = False
    if args.no_classifier:
        cfg.ENABLE_CLASSIFIER = False
    if args.no_faces:
        cfg.ENABLE_FACES = False
    if args.parallel:
        cfg.PARALLEL_MODELS = True
    return cfg


def main(argv=None):
    """Main entry point for the FaceCam application."""
    args = build_parser().parse_args(argv)
    cfg = apply_args(Config(), args)

    logging.basicConfig(
        level=getattr(logging, cfg.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger.info("🚀 Starting FaceCam...")

    app = None
    try:
        app = CameraApp(cfg, max_frames=args.max_frames)
        app.start()
        app.run()
    except KeyboardInterrupt:
        logger.info("👋 Shutting down...")
        if app is not None:
            app.stop()
    except FaceCamError as e:
        logger.error(f"❌ Startup failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
