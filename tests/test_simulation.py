"""Tests for the activation simulator and the dropout reviser."""

from __future__ import annotations

import numpy as np
import pytest

from digitscope.core.simulation import clamp_rate, revise_for_dropout, simulate
from digitscope.core.topology import CONV_TOPOLOGY, DEFAULT_TOPOLOGY, LayerType


def _dense_values(snapshot) -> np.ndarray:  # noqa: ANN001
    return np.concatenate([layer.activations for layer in snapshot if layer.layer_type is LayerType.DENSE])


def test_simulate_returns_one_entry_per_layer_in_order(rng: np.random.Generator) -> None:
    """One activation entry per layer, in topology order."""
    snapshot = simulate(0.1, topology=DEFAULT_TOPOLOGY, rng=rng)

    assert [layer.layer_type for layer in snapshot] == [layer.type for layer in DEFAULT_TOPOLOGY]
    assert [layer.size for layer in snapshot] == [784, 128, 64, 10]


@pytest.mark.parametrize("has_input", [False, True])
def test_simulated_values_stay_in_unit_range(rng: np.random.Generator, has_input: bool) -> None:
    """Every simulated activation lies in [0, 1]."""
    for _ in range(20):
        for layer in simulate(0.3, has_input=has_input, topology=CONV_TOPOLOGY, rng=rng):
            assert float(layer.activations.min()) >= 0.0
            assert float(layer.activations.max()) <= 1.0


def test_drawn_input_produces_stronger_dense_activity(rng: np.random.Generator) -> None:
    """Dense layers are more active once something is drawn."""
    idle = np.mean([_dense_values(simulate(0.0, False, rng=rng)).mean() for _ in range(50)])
    active = np.mean([_dense_values(simulate(0.0, True, rng=rng)).mean() for _ in range(50)])
    assert active > idle + 0.2


@pytest.mark.parametrize("rate", [0.0, 0.1, 0.5, 0.9, 1.0])
def test_dense_zeroed_fraction_tracks_dropout_rate(rate: float) -> None:
    """The share of zeroed dense units follows the dropout rate."""
    rng = np.random.default_rng(7)
    zeroed = [float(np.mean(_dense_values(simulate(rate, has_input=False, rng=rng)) == 0.0)) for _ in range(1000)]
    assert abs(float(np.mean(zeroed)) - rate) < 0.05


def test_dropout_leaves_non_dense_layers_alone(rng: np.random.Generator) -> None:
    """Dropout never zeroes input, conv, pool or output values."""
    snapshot = simulate(1.0, has_input=True, topology=CONV_TOPOLOGY, rng=rng)
    for layer in snapshot:
        if layer.layer_type is LayerType.DENSE:
            assert np.all(layer.activations == 0.0)
        elif layer.layer_type in (LayerType.CONV, LayerType.POOL, LayerType.OUTPUT):
            assert np.count_nonzero(layer.activations) == layer.size


def test_out_of_range_rates_are_clamped(rng: np.random.Generator) -> None:
    """Rates outside [0, 1] are clamped before use."""
    assert np.all(_dense_values(simulate(5.0, rng=rng)) == 0.0)
    assert np.all(_dense_values(simulate(-1.0, rng=rng)) > 0.0)
    assert clamp_rate(float("nan")) == 0.0
    assert clamp_rate(0.25) == 0.25


def test_snapshots_are_fresh_and_read_only(rng: np.random.Generator) -> None:
    """Each call returns new arrays that cannot be written to."""
    first = simulate(0.1, rng=rng)
    second = simulate(0.1, rng=rng)

    for a, b in zip(first, second):
        assert not np.shares_memory(a.activations, b.activations)
        assert not a.activations.flags.writeable


def test_revise_preserves_shapes_and_non_dense_values(rng: np.random.Generator) -> None:
    """Revision keeps shapes and leaves non-dense layers identical."""
    snapshot = simulate(0.0, has_input=True, topology=CONV_TOPOLOGY, rng=rng)
    revised = revise_for_dropout(snapshot, 0.6, rng=rng)

    assert len(revised) == len(snapshot)
    for before, after in zip(snapshot, revised):
        assert after.layer_type is before.layer_type
        assert after.activations.shape == before.activations.shape
        assert not np.shares_memory(after.activations, before.activations)
        if before.layer_type is not LayerType.DENSE:
            assert np.array_equal(after.activations, before.activations)


def test_revise_only_zeroes_dense_values_never_resamples(rng: np.random.Generator) -> None:
    """Revision only zeroes dense values; surviving values are unchanged."""
    snapshot = simulate(0.0, has_input=True, rng=rng)
    revised = revise_for_dropout(snapshot, 0.5, rng=rng)

    for before, after in zip(snapshot, revised):
        if before.layer_type is LayerType.DENSE:
            kept = after.activations != 0.0
            assert np.array_equal(after.activations[kept], before.activations[kept])
            assert 0 < np.count_nonzero(kept) < before.size


def test_revise_does_not_mutate_input_snapshot(rng: np.random.Generator) -> None:
    """The snapshot passed to revision is left untouched."""
    snapshot = simulate(0.0, has_input=True, rng=rng)
    copies = [layer.activations.copy() for layer in snapshot]

    revise_for_dropout(snapshot, 1.0, rng=rng)

    for layer, original in zip(snapshot, copies):
        assert np.array_equal(layer.activations, original)


def test_revise_extreme_rates(rng: np.random.Generator) -> None:
    """Rate 0 keeps every dense value and rate 1 zeroes them all."""
    snapshot = simulate(0.0, has_input=True, rng=rng)

    untouched = revise_for_dropout(snapshot, 0.0, rng=rng)
    assert np.array_equal(_dense_values(untouched), _dense_values(snapshot))

    dropped = revise_for_dropout(snapshot, 1.0, rng=rng)
    assert np.all(_dense_values(dropped) == 0.0)


def test_revise_zeroed_fraction_tracks_rate() -> None:
    """The share of zeroed dense units after revision follows the rate."""
    rng = np.random.default_rng(11)
    snapshot = simulate(0.0, has_input=True, rng=rng)
    fractions = [float(np.mean(_dense_values(revise_for_dropout(snapshot, 0.3, rng=rng)) == 0.0)) for _ in range(500)]
    assert abs(float(np.mean(fractions)) - 0.3) < 0.05
