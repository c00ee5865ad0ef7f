"""
Class label table for the image classifier.
"""

import logging
import os
from typing import Sequence, Tuple

from .exceptions import LabelTableError

logger = logging.getLogger(__name__)


def load_labels(path: str) -> Tuple[str, ...]:
    """Read one label per line; index 0 is the first non-blank line.

    The background class is not part of the table.
    """
    if not os.path.exists(path):
        raise LabelTableError(f"Label table not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        labels = tuple(line.strip() for line in fh if line.strip())

    if not labels:
        raise LabelTableError(f"Label table is empty: {path}")

    logger.info(f"🏷️  Loaded {len(labels)} labels from {path}")
    return labels


def label_for(labels: Sequence[str], index: int) -> str:
    """Human-readable name for a class index."""
    if 0 <= index < len(labels):
        return labels[index]
    return f"class_{index}"
