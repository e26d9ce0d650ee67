"""Unit tests for the pure render helpers."""

from __future__ import annotations

import numpy as np

from digitscope.ui.render import format_percent, mix_with_background, pick_indices, spread_positions


def test_pick_indices_returns_full_range_when_k_exceeds_n() -> None:
    """Asking for more samples than nodes returns every index."""
    assert np.array_equal(pick_indices(5, 10), np.arange(5, dtype=np.int32))


def test_pick_indices_single_sample_is_middle() -> None:
    """A single sample picks the middle node."""
    assert np.array_equal(pick_indices(9, 1), np.array([4], dtype=np.int32))


def test_pick_indices_empty_layer() -> None:
    """An empty layer yields no indices."""
    assert pick_indices(0, 5).size == 0


def test_pick_indices_spreads_sorted_unique_values() -> None:
    """Samples are sorted, unique and spread across the layer."""
    idx = pick_indices(784, 20)
    assert len(idx) <= 20
    assert np.all(idx[:-1] < idx[1:])
    assert int(idx[0]) == 0
    assert int(idx[-1]) == 783


def test_mix_with_background_endpoints_and_clamping() -> None:
    """Intensity 0 gives the background and 1 gives the colour; larger values are clamped."""
    assert mix_with_background("#123456", 0.0, "#ffffff") == "#ffffff"
    assert mix_with_background("#123456", 1.0, "#ffffff") == "#123456"
    assert mix_with_background("#123456", 7.0, "#ffffff") == "#123456"
    assert mix_with_background("#ff0000", 0.5, "#000000") == "#7f0000"


def test_spread_positions_single_and_multiple() -> None:
    """Node positions are centred for one node and evenly spaced for several."""
    assert np.allclose(spread_positions(10.0, 30.0, 1), [20.0])
    multi = spread_positions(10.0, 30.0, 3)
    assert np.allclose(multi, [10.0, 20.0, 30.0])
    assert multi.dtype == np.float32


def test_format_percent() -> None:
    """Confidences render as percentages."""
    assert format_percent(0.9) == "90.0%"
    assert format_percent(0.0123) == "1.2%"
