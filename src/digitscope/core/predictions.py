"""Prediction sets and the dropout-driven blender.

A prediction set is a tuple of ten `PredictionItem`s ordered by digit. The
blender takes the base set (uniform prior or classifier answer) and the
dropout rate and returns the distribution the UI actually shows.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from digitscope.core.errors import MalformedPrediction
from digitscope.core.simulation import clamp_rate

logger = logging.getLogger(__name__)

NUM_DIGITS = 10
SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PredictionItem:
    digit: int
    confidence: float


PredictionSet = tuple[PredictionItem, ...]


def uniform_prior() -> PredictionSet:
    """Resting distribution: 0.1 for every digit."""
    return tuple(PredictionItem(digit, 0.1) for digit in range(NUM_DIGITS))


def confidences(predictions: Sequence[PredictionItem]) -> np.ndarray:
    return np.array([item.confidence for item in predictions], dtype=np.float64)


def is_normalized(predictions: Sequence[PredictionItem], tol: float = SUM_TOLERANCE) -> bool:
    return abs(math.fsum(item.confidence for item in predictions) - 1.0) <= tol


def top_prediction(predictions: Sequence[PredictionItem]) -> PredictionItem:
    return max(predictions, key=lambda item: item.confidence)


def validate_prediction_set(items: Iterable[PredictionItem]) -> PredictionSet:
    """Check a classifier answer and return it ordered by digit.

    Raises `MalformedPrediction` for a wrong item count, missing or repeated
    digits, and confidences that are non-finite or outside [0, 1].
    """
    items = tuple(items)
    if len(items) != NUM_DIGITS:
        raise MalformedPrediction(f"Expected {NUM_DIGITS} predictions, got {len(items)}.")

    digits = sorted(int(item.digit) for item in items)
    if digits != list(range(NUM_DIGITS)):
        raise MalformedPrediction(f"Predictions must cover digits 0-9 exactly once, got {digits}.")

    for item in items:
        conf = float(item.confidence)
        if not math.isfinite(conf) or conf < 0.0 or conf > 1.0:
            raise MalformedPrediction(f"Confidence for digit {item.digit} out of range: {conf!r}.")

    return tuple(
        PredictionItem(int(item.digit), float(item.confidence))
        for item in sorted(items, key=lambda item: int(item.digit))
    )


def from_probabilities(probs: Sequence[float]) -> PredictionSet:
    """Wrap a length-10 probability vector (e.g. softmax output)."""
    return validate_prediction_set(
        PredictionItem(digit, float(p)) for digit, p in enumerate(np.asarray(probs).reshape(-1))
    )


def blend(
    base: Sequence[PredictionItem],
    dropout_rate: float,
    rng: np.random.Generator | None = None,
) -> PredictionSet:
    """Re-noise `base` in proportion to the dropout rate and renormalize.

    Per item: `confidence * (1 - rate) + (u - 0.5) * rate` with `u ~ U(0, 1)`,
    clamped to [0, 1]. The clamped values are then divided by their sum. If
    every value clamps to zero the uniform prior is returned instead.

    The rate is clamped to [0, 1] and a non-finite rate counts as 0. With
    rate 0 and an already normalized base the base comes back unchanged.
    """
    rng = rng if rng is not None else np.random.default_rng()
    rate = clamp_rate(dropout_rate)
    base = tuple(base)

    if rate == 0.0 and is_normalized(base):
        return base

    noise = (rng.random(len(base)) - 0.5) * rate
    adjusted = np.clip(confidences(base) * (1.0 - rate) + noise, 0.0, 1.0)

    total = float(np.sum(adjusted))
    if total <= 0.0:
        logger.debug("All blended confidences clamped to zero at rate %.3f; using uniform prior.", rate)
        return uniform_prior()

    normalized = adjusted / total
    return tuple(PredictionItem(item.digit, float(value)) for item, value in zip(base, normalized))
