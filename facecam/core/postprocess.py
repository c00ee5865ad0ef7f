"""
Post-processing of classifier logits: background removal, softmax and top-K.
"""

from typing import List, Sequence, Tuple

import numpy as np
from scipy import special

from ..utils.exceptions import ClassificationError
from ..utils.labels import label_for
from .types import Classification

# Index 0 of the classifier output is the background class.
BACKGROUND_INDEX = 0


def drop_background(logits) -> np.ndarray:
    """Return the scores after the background logit as a 1-D float array."""
    flat = np.asarray(logits, dtype=np.float64).reshape(-1)
    if flat.size < 2:
        raise ClassificationError(f"Expected at least 2 logits, got {flat.size}")
    return flat[BACKGROUND_INDEX + 1:]


def softmax(scores) -> np.ndarray:
    """Probability distribution over ``scores``."""
    return special.softmax(np.asarray(scores, dtype=np.float64))


def top_k(probs, k: int) -> Tuple[np.ndarray, np.ndarray]:
    """The ``k`` largest values and their indices, largest first."""
    probs = np.asarray(probs).reshape(-1)
    if not 1 <= k <= probs.size:
        raise ValueError(f"k must be between 1 and {probs.size}, got {k}")
    # argpartition keeps this O(n); only the k winners get sorted
    candidates = np.argpartition(-probs, k - 1)[:k]
    order = candidates[np.argsort(-probs[candidates], kind="stable")]
    return probs[order], order


def classify_logits(logits, labels: Sequence[str], k: int = 3) -> List[Classification]:
    """Turn raw classifier output into the top-``k`` labelled probabilities."""
    scores = drop_background(logits)
    if scores.size != len(labels):
        raise ClassificationError(
            f"Classifier produced {scores.size} classes but the label table has {len(labels)}"
        )
    values, indices = top_k(softmax(scores), k)
    return [
        Classification(label=label_for(labels, int(index)), probability=float(value))
        for value, index in zip(values, indices)
    ]
