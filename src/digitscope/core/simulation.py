"""Synthetic per-layer activations for the network visualizer.

Nothing here runs a forward pass. Values are random numbers shaped like what a
small MNIST network would plausibly produce: quiet and sparse while the canvas
is empty, brighter and denser once a digit has been drawn.

Both public functions take an optional `numpy.random.Generator` so tests can
pin the random stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from digitscope.core.topology import DEFAULT_TOPOLOGY, Layer, LayerType, Topology


@dataclass(frozen=True, eq=False)
class LayerActivation:
    """Activation values for one layer of one snapshot.

    `activations` is a read-only float64 array in [0, 1]. Revisions produce new
    arrays instead of writing into this one.
    """

    layer_type: LayerType
    name: str
    activations: np.ndarray

    @property
    def size(self) -> int:
        return int(self.activations.size)


Snapshot = tuple[LayerActivation, ...]


def clamp_rate(rate: float) -> float:
    """Clamp a dropout rate into [0, 1]; non-finite input counts as 0."""
    rate = float(rate)
    if not np.isfinite(rate):
        return 0.0
    return float(np.clip(rate, 0.0, 1.0))


def _frozen(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    values.setflags(write=False)
    return values


def _drop(values: np.ndarray, rate: float, rng: np.random.Generator) -> np.ndarray:
    # Independent Bernoulli(rate) mask per value.
    mask = rng.random(values.shape) < rate
    return np.where(mask, 0.0, values)


def _input_values(layer: Layer, has_input: bool, rng: np.random.Generator) -> np.ndarray:
    # A drawn digit covers roughly a fifth of the MNIST frame.
    ink_prob, low, high = (0.2, 0.5, 1.0) if has_input else (0.02, 0.0, 0.3)
    ink = rng.random(layer.size) < ink_prob
    return np.where(ink, rng.uniform(low, high, size=layer.size), 0.0)


def _feature_map_values(layer: Layer, has_input: bool, rng: np.random.Generator) -> np.ndarray:
    low, high = (0.3, 1.0) if has_input else (0.0, 0.25)
    return rng.uniform(low, high, size=layer.size)


def _dense_values(layer: Layer, has_input: bool, rng: np.random.Generator) -> np.ndarray:
    # Strictly positive so every zero in a dense layer comes from dropout.
    low, high = (0.25, 1.0) if has_input else (0.02, 0.3)
    return rng.uniform(low, high, size=layer.size)


def _output_values(layer: Layer, has_input: bool, rng: np.random.Generator) -> np.ndarray:
    if not has_input:
        return rng.uniform(0.0, 0.15, size=layer.size)
    # Softmax over noisy logits with one clear winner.
    logits = rng.normal(0.0, 1.0, size=layer.size)
    logits[int(rng.integers(layer.size))] += 4.0
    exp = np.exp(logits - np.max(logits))
    return exp / np.sum(exp)


_GENERATORS = {
    LayerType.INPUT: _input_values,
    LayerType.CONV: _feature_map_values,
    LayerType.POOL: _feature_map_values,
    LayerType.DENSE: _dense_values,
    LayerType.OUTPUT: _output_values,
}


def simulate(
    dropout_rate: float,
    has_input: bool = False,
    topology: Topology = DEFAULT_TOPOLOGY,
    rng: np.random.Generator | None = None,
) -> Snapshot:
    """Build a fresh activation snapshot, one entry per topology layer.

    Dropout only touches DENSE layers: each of their values is zeroed with
    probability `dropout_rate`. The rate is clamped rather than rejected.
    """
    rng = rng if rng is not None else np.random.default_rng()
    rate = clamp_rate(dropout_rate)

    snapshot: list[LayerActivation] = []
    for layer in topology:
        values = _GENERATORS[layer.type](layer, has_input, rng)
        if layer.type is LayerType.DENSE:
            values = _drop(values, rate, rng)
        snapshot.append(LayerActivation(layer.type, layer.label, _frozen(values)))
    return tuple(snapshot)


def revise_for_dropout(
    snapshot: Sequence[LayerActivation],
    dropout_rate: float,
    rng: np.random.Generator | None = None,
) -> Snapshot:
    """Apply a new dropout draw to an existing snapshot.

    Surviving DENSE values keep their exact previous value (no resampling).
    Every layer gets a new array, so the input snapshot is left untouched.
    """
    rng = rng if rng is not None else np.random.default_rng()
    rate = clamp_rate(dropout_rate)

    revised: list[LayerActivation] = []
    for layer in snapshot:
        values = np.array(layer.activations, dtype=np.float64, copy=True)
        if layer.layer_type is LayerType.DENSE:
            values = _drop(values, rate, rng)
        revised.append(LayerActivation(layer.layer_type, layer.name, _frozen(values)))
    return tuple(revised)
