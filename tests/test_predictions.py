"""Tests for prediction sets and the dropout blender."""

from __future__ import annotations

import math

import numpy as np
import pytest

from digitscope.core.errors import MalformedPrediction, PredictionUnavailable
from digitscope.core.predictions import (
    PredictionItem,
    blend,
    from_probabilities,
    is_normalized,
    top_prediction,
    uniform_prior,
    validate_prediction_set,
)


def _peaked(digit: int = 3, peak: float = 0.9) -> tuple[PredictionItem, ...]:
    rest = (1.0 - peak) / 9.0
    return tuple(PredictionItem(d, peak if d == digit else rest) for d in range(10))


def _total(predictions) -> float:  # noqa: ANN001
    return math.fsum(item.confidence for item in predictions)


def test_uniform_prior_is_normalized_and_ordered() -> None:
    """The uniform prior covers digits 0-9 at 0.1 each."""
    prior = uniform_prior()
    assert [item.digit for item in prior] == list(range(10))
    assert all(item.confidence == 0.1 for item in prior)
    assert is_normalized(prior)


@pytest.mark.parametrize("base", [uniform_prior(), _peaked()])
def test_blend_at_zero_rate_returns_base_exactly(base, rng: np.random.Generator) -> None:  # noqa: ANN001
    """At rate 0 a normalized base is returned unchanged."""
    assert blend(base, 0.0, rng) == base


def test_blend_at_zero_rate_normalizes_unnormalized_base(rng: np.random.Generator) -> None:
    """At rate 0 a base that does not sum to 1 is renormalized."""
    base = tuple(PredictionItem(d, 0.05) for d in range(10))
    out = blend(base, 0.0, rng)
    assert all(item.confidence == pytest.approx(0.1) for item in out)


@pytest.mark.parametrize("rate", [float("nan"), float("inf"), float("-inf")])
def test_blend_treats_non_finite_rate_as_zero(rate: float, rng: np.random.Generator) -> None:
    """A NaN or infinite rate behaves like rate 0 and never leaks into the output."""
    base = _peaked()
    out = blend(base, rate, rng)
    assert out == base
    assert all(math.isfinite(item.confidence) for item in out)


@pytest.mark.parametrize("rate", np.linspace(0.0, 1.0, 11).tolist())
def test_blend_always_sums_to_one_and_stays_in_range(rate: float, rng: np.random.Generator) -> None:
    """Blended sets always sum to 1 with every confidence in [0, 1]."""
    for base in (uniform_prior(), _peaked()):
        for _ in range(200):
            out = blend(base, rate, rng)
            assert len(out) == 10
            assert abs(_total(out) - 1.0) < 1e-9
            assert all(0.0 <= item.confidence <= 1.0 for item in out)
            assert [item.digit for item in out] == list(range(10))


def test_blend_is_noisy_without_a_pinned_generator() -> None:
    """Without a seeded generator repeated blends differ."""
    base = _peaked()
    draws = {blend(base, 0.5)[3].confidence for _ in range(10)}
    assert len(draws) > 1


def test_blend_is_repeatable_with_seeded_generator() -> None:
    """Equal seeds give equal blends."""
    base = _peaked()
    assert blend(base, 0.4, np.random.default_rng(5)) == blend(base, 0.4, np.random.default_rng(5))


class _ZeroSource:
    """Generator stand-in whose draws push every value below zero."""

    def random(self, n: int) -> np.ndarray:
        return np.zeros(n)


def test_blend_falls_back_to_uniform_when_everything_clamps_to_zero() -> None:
    """When every value clamps to zero the uniform prior is shown."""
    # rate 1 removes the base entirely; u=0 gives noise -0.5 for every digit.
    out = blend(_peaked(), 1.0, _ZeroSource())
    assert out == uniform_prior()


def test_peaked_result_usually_survives_moderate_dropout() -> None:
    """A confident prediction usually keeps its top digit at moderate dropout."""
    rng = np.random.default_rng(3)
    wins = sum(top_prediction(blend(_peaked(), 0.5, rng)).digit == 3 for _ in range(500))
    assert wins > 400


def test_validate_sorts_and_normalizes_types() -> None:
    """Validation orders items by digit and coerces numeric types."""
    items = [PredictionItem(d, 0.1) for d in reversed(range(10))]
    out = validate_prediction_set(items)
    assert [item.digit for item in out] == list(range(10))
    assert all(isinstance(item.confidence, float) for item in out)


@pytest.mark.parametrize(
    "items",
    [
        [PredictionItem(d, 0.1) for d in range(9)],
        [PredictionItem(d % 9, 0.1) for d in range(10)],
        [PredictionItem(d, 1.5 if d == 0 else 0.0) for d in range(10)],
        [PredictionItem(d, -0.1 if d == 0 else 0.1) for d in range(10)],
        [PredictionItem(d, float("nan")) for d in range(10)],
    ],
)
def test_validate_rejects_malformed_sets(items) -> None:  # noqa: ANN001
    """Wrong counts, duplicate digits and bad confidences are rejected."""
    with pytest.raises(MalformedPrediction) as info:
        validate_prediction_set(items)
    assert isinstance(info.value, PredictionUnavailable)


def test_from_probabilities_wraps_softmax_vector() -> None:
    """A softmax vector becomes a ten-item prediction set."""
    probs = np.zeros(10, dtype=np.float32)
    probs[7] = 1.0
    out = from_probabilities(probs)
    assert top_prediction(out) == PredictionItem(7, 1.0)
