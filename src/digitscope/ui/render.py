"""Pure colour and geometry helpers shared by the panels.

No widget state in here, so everything is easy to unit test.
"""

from __future__ import annotations

import numpy as np


def pick_indices(n: int, k: int) -> np.ndarray:
    """Evenly spread subset of at most k indices from range(n).

    A 784-pixel input layer cannot be drawn node by node, so panels sample.
    """
    if n <= 0:
        return np.zeros((0,), dtype=np.int32)
    if k >= n:
        return np.arange(n, dtype=np.int32)
    if k <= 1:
        return np.array([n // 2], dtype=np.int32)
    return np.unique(np.linspace(0, n - 1, num=k, dtype=np.int32))


def mix_with_background(hex_color: str, intensity: float, background: str = "#0f172a") -> str:
    """Linear blend from `background` (intensity 0) to `hex_color` (intensity 1)."""
    t = float(np.clip(intensity, 0.0, 1.0))
    fg = _rgb(hex_color)
    bg = _rgb(background)
    mixed = [int(b * (1.0 - t) + f * t) for f, b in zip(fg, bg)]
    return "#{:02x}{:02x}{:02x}".format(*mixed)


def _rgb(hex_color: str) -> tuple[int, int, int]:
    value = hex_color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def spread_positions(start: float, end: float, count: int) -> np.ndarray:
    """Evenly spaced positions from start to end; a single item is centred."""
    if count <= 1:
        return np.array([(start + end) / 2.0], dtype=np.float32)
    return np.linspace(start, end, num=count, dtype=np.float32)


def format_percent(confidence: float) -> str:
    return f"{float(confidence) * 100:.1f}%"
