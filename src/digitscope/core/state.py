"""Orchestration state for the DigitScope controller.

`AppState` is immutable. Each trigger (drawing submitted, classifier answered,
classifier failed, deadline passed, drawing cleared, dropout changed) is a
plain function from the old state to a new one. The Tk controller only holds
the latest state and hands it to the renderers.

Classifier calls are tagged with `request_token`. Any answer whose token is
not the current one belongs to an older drawing and is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

import numpy as np

from digitscope.core.errors import ClassifierTimeout, PredictionUnavailable
from digitscope.core.predictions import (
    PredictionItem,
    PredictionSet,
    blend,
    top_prediction,
    uniform_prior,
    validate_prediction_set,
)
from digitscope.core.simulation import Snapshot, clamp_rate, revise_for_dropout, simulate
from digitscope.core.topology import DEFAULT_TOPOLOGY, Topology, validate_topology

logger = logging.getLogger(__name__)

DEFAULT_DROPOUT_RATE = 0.1


class Phase(str, Enum):
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    RESULT = "RESULT"


@dataclass(frozen=True)
class AppState:
    phase: Phase
    dropout_rate: float
    base_predictions: PredictionSet
    display_predictions: PredictionSet
    activations: Snapshot
    topology: Topology = DEFAULT_TOPOLOGY
    loading: bool = False
    error: str | None = None
    request_token: int = 0
    submitted_at: float | None = None


def initial_state(
    dropout_rate: float = DEFAULT_DROPOUT_RATE,
    topology: Topology = DEFAULT_TOPOLOGY,
    rng: np.random.Generator | None = None,
) -> AppState:
    """IDLE state: idle activations and the uniform prior, blended once."""
    rate = clamp_rate(dropout_rate)
    topology = validate_topology(topology)
    base = uniform_prior()
    return AppState(
        phase=Phase.IDLE,
        dropout_rate=rate,
        base_predictions=base,
        display_predictions=blend(base, rate, rng),
        activations=simulate(rate, has_input=False, topology=topology, rng=rng),
        topology=topology,
    )


def submit_drawing(
    state: AppState,
    now: float,
    rng: np.random.Generator | None = None,
) -> AppState:
    """Enter PROCESSING for a new drawing.

    Activations switch to the "has input" regime right away. The caller sends
    the classifier request tagged with the returned `request_token`.
    """
    return replace(
        state,
        phase=Phase.PROCESSING,
        loading=True,
        error=None,
        activations=simulate(state.dropout_rate, has_input=True, topology=state.topology, rng=rng),
        request_token=state.request_token + 1,
        submitted_at=now,
    )


def _is_current(state: AppState, token: int) -> bool:
    if state.loading and token == state.request_token:
        return True
    logger.debug(
        "Discarding stale classifier outcome (token %d, current %d, loading=%s).",
        token,
        state.request_token,
        state.loading,
    )
    return False


def receive_prediction(
    state: AppState,
    token: int,
    predictions: Sequence[PredictionItem],
    rng: np.random.Generator | None = None,
) -> AppState:
    """Accept a classifier answer for the in-flight request."""
    if not _is_current(state, token):
        return state
    try:
        base = validate_prediction_set(predictions)
    except PredictionUnavailable as exc:
        return fail_prediction(state, token, exc)

    best = top_prediction(base)
    logger.info("Classifier predicted %d (confidence %.2f%%).", best.digit, best.confidence * 100)
    return replace(
        state,
        phase=Phase.RESULT,
        loading=False,
        error=None,
        base_predictions=base,
        display_predictions=blend(base, state.dropout_rate, rng),
        submitted_at=None,
    )


def fail_prediction(state: AppState, token: int, error: PredictionUnavailable) -> AppState:
    """Record a failed classifier call.

    Base predictions and activations stay as they were. The user has to draw
    again to trigger a new attempt.
    """
    if not _is_current(state, token):
        return state
    logger.warning("Prediction unavailable: %s", error)
    return replace(
        state,
        phase=Phase.RESULT,
        loading=False,
        error=error.user_message,
        submitted_at=None,
    )


def expire_if_overdue(state: AppState, now: float, timeout_s: float) -> AppState:
    """Fail the in-flight request once `timeout_s` has passed since submission."""
    if not state.loading or state.submitted_at is None:
        return state
    elapsed = now - state.submitted_at
    if elapsed < timeout_s:
        return state
    failed = fail_prediction(
        state,
        state.request_token,
        ClassifierTimeout(f"No classifier answer after {elapsed:.1f}s (limit {timeout_s:.1f}s)."),
    )
    # Bump the token so the late answer is ignored when it finally arrives.
    return replace(failed, request_token=failed.request_token + 1)


def clear_drawing(state: AppState, rng: np.random.Generator | None = None) -> AppState:
    """Back to IDLE with the uniform prior; in-flight answers become stale."""
    base = uniform_prior()
    return replace(
        state,
        phase=Phase.IDLE,
        loading=False,
        error=None,
        base_predictions=base,
        display_predictions=blend(base, state.dropout_rate, rng),
        activations=simulate(state.dropout_rate, has_input=False, topology=state.topology, rng=rng),
        request_token=state.request_token + 1,
        submitted_at=None,
    )


def change_dropout(
    state: AppState,
    dropout_rate: float,
    rng: np.random.Generator | None = None,
) -> AppState:
    """Re-derive display predictions and revise activations for a new rate.

    Both derivations read only the current state, so their order does not
    matter. Phase and loading are untouched.
    """
    rate = clamp_rate(dropout_rate)
    activations = revise_for_dropout(state.activations, rate, rng)
    display = blend(state.base_predictions, rate, rng)
    return replace(
        state,
        dropout_rate=rate,
        activations=activations,
        display_predictions=display,
    )
