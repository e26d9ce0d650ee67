"""Unit tests for the drawing-surface helpers."""

from __future__ import annotations

import numpy as np
import pytest

from digitscope.ui.canvas import cell_at, draw_pixel_grid, paint_brush_stamp


class _FakeCanvas:
    def __init__(self) -> None:
        self.created = 0
        self.configured = 0
        self.deleted = 0

    def delete(self, _what: str) -> None:
        self.deleted += 1

    def create_rectangle(self, *_args, **_kwargs) -> int:
        self.created += 1
        return self.created

    def itemconfigure(self, _item: int, **_kwargs) -> None:
        self.configured += 1


def test_brush_stamp_saturates_and_ignores_out_of_bounds() -> None:
    """Brush stamps cap at 1.0 and ignore cells outside the grid."""
    buffer = np.zeros((5, 5), dtype=np.float32)
    brush = [(0, 0, 0.7), (0, 1, 0.3), (0, 9, 1.0)]

    paint_brush_stamp(buffer, 2, 2, brush)
    paint_brush_stamp(buffer, 2, 2, brush)
    paint_brush_stamp(buffer, -1, 2, brush)

    assert buffer[2, 2] == 1.0
    assert float(buffer[2, 3]) == pytest.approx(0.6)
    assert float(buffer.sum()) == pytest.approx(1.6)


def test_cell_at_maps_screen_to_grid() -> None:
    """Screen coordinates map to the matching grid cell."""
    assert cell_at(0, 0, 280, 28) == (0, 0)
    assert cell_at(279, 15, 280, 28) == (1, 27)


def test_pixel_grid_reuses_items_and_updates_only_changed_cells() -> None:
    """Redraws reuse canvas items and touch only changed cells."""
    canvas = _FakeCanvas()
    image = np.zeros((2, 2), dtype=np.float32)

    draw_pixel_grid(canvas, image, size=20)
    created = canvas.created
    draw_pixel_grid(canvas, image, size=20)
    assert canvas.created == created
    assert canvas.configured == 0

    image[0, 1] = 1.0
    draw_pixel_grid(canvas, image, size=20)
    assert canvas.created == created
    assert canvas.configured == 1


def test_pixel_grid_rebuilds_when_geometry_changes() -> None:
    """A new grid size rebuilds the cached items."""
    canvas = _FakeCanvas()
    image = np.zeros((2, 2), dtype=np.float32)

    draw_pixel_grid(canvas, image, size=20)
    draw_pixel_grid(canvas, image, size=40)

    assert canvas.deleted == 2
    assert canvas.created == 8
