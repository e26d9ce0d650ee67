"""Drawing surface: the 28x28 ink buffer and its on-screen pixel grid."""

from __future__ import annotations

import tkinter as tk

import numpy as np


def paint_brush_stamp(
    draw_buffer: np.ndarray,
    row: int,
    col: int,
    brush: list[tuple[int, int, float]],
) -> None:
    """Add a soft brush stamp centred at (row, col), saturating at 1.0."""
    rows, cols = draw_buffer.shape
    if not (0 <= row < rows and 0 <= col < cols):
        return
    for dr, dc, strength in brush:
        r, c = row + dr, col + dc
        if 0 <= r < rows and 0 <= c < cols:
            draw_buffer[r, c] = min(1.0, float(draw_buffer[r, c]) + strength)


def cell_at(x: float, y: float, canvas_size: int, grid_size: int) -> tuple[int, int]:
    """Map a canvas pixel position to (row, col) in the logical grid."""
    cell = canvas_size / grid_size
    return int(y // cell), int(x // cell)


def draw_pixel_grid(canvas: tk.Canvas, image_2d: np.ndarray, size: int) -> None:
    """Render a grayscale image as a grid of rectangles.

    The rectangles are created once per canvas and recoloured afterwards.
    Only cells whose gray level changed get an `itemconfigure` call, which
    keeps mouse-drag redraws cheap.
    """
    grid = getattr(canvas, "_digitscope_grid", None)
    if grid is None or grid["shape"] != image_2d.shape or grid["size"] != size:
        canvas.delete("all")
        h, w = image_2d.shape
        ch, cw = size / h, size / w
        ids = np.array(
            [
                [
                    canvas.create_rectangle(c * cw, r * ch, (c + 1) * cw, (r + 1) * ch, fill="#000000", outline="")
                    for c in range(w)
                ]
                for r in range(h)
            ],
            dtype=np.int64,
        )
        grid = {"shape": image_2d.shape, "size": size, "ids": ids, "gray": np.zeros((h, w), dtype=np.int16)}
        setattr(canvas, "_digitscope_grid", grid)

    gray = np.rint(np.clip(image_2d, 0.0, 1.0) * 255.0).astype(np.int16)
    for r, c in zip(*np.nonzero(gray != grid["gray"])):
        level = int(gray[r, c])
        canvas.itemconfigure(int(grid["ids"][r, c]), fill=f"#{level:02x}{level:02x}{level:02x}")
    grid["gray"] = gray
