"""Network panel: draws an activation snapshot as layered columns of nodes."""

from __future__ import annotations

import tkinter as tk
from typing import Sequence

import numpy as np

from digitscope.core.simulation import LayerActivation
from digitscope.core.topology import LayerType
from digitscope.ui.constants import (
    COLOR_CARD,
    COLOR_EDGE,
    COLOR_INK,
    COLOR_SUB,
    LAYER_COLORS,
    MAX_NODES_PER_LAYER,
    NETWORK_CANVAS_SIZE,
)
from digitscope.ui.render import mix_with_background, pick_indices, spread_positions

HEADER_H = 48
FOOTER_H = 52
SIDE_PAD = 60


def render_activations(
    canvas: tk.Canvas,
    snapshot: Sequence[LayerActivation],
    dropout_rate: float,
    loading: bool = False,
) -> None:
    """Redraw the whole panel for `snapshot`.

    Node brightness is the activation value. DENSE nodes that dropout zeroed
    are drawn hollow so dropped units stand out from weak ones.
    """
    canvas.delete("all")
    width = max(canvas.winfo_width(), NETWORK_CANVAS_SIZE[0])
    height = max(canvas.winfo_height(), NETWORK_CANVAS_SIZE[1])

    canvas.create_rectangle(0, 0, width, height, fill=COLOR_CARD, outline="")
    canvas.create_text(
        14,
        14,
        text="Simulated Layer Activations",
        anchor="nw",
        font=("Helvetica", 14, "bold"),
        fill=COLOR_INK,
    )
    canvas.create_text(
        14,
        34,
        text=f"Dropout rate {dropout_rate:.2f}  |  hollow nodes = dropped units",
        anchor="nw",
        font=("Helvetica", 10),
        fill=COLOR_SUB,
    )
    if not snapshot:
        return

    top = HEADER_H + 24
    bottom = height - FOOTER_H
    xs = spread_positions(SIDE_PAD, width - SIDE_PAD, len(snapshot))

    columns: list[tuple[np.ndarray, np.ndarray]] = []
    for layer in snapshot:
        idx = pick_indices(layer.size, MAX_NODES_PER_LAYER)
        columns.append((idx, spread_positions(top, bottom, len(idx))))

    # A few representative edges between neighbouring columns.
    for li in range(len(snapshot) - 1):
        ys_a = columns[li][1]
        ys_b = columns[li + 1][1]
        for i in pick_indices(len(ys_a), 6):
            for j in pick_indices(len(ys_b), 6):
                canvas.create_line(float(xs[li]), float(ys_a[i]), float(xs[li + 1]), float(ys_b[j]), fill=COLOR_EDGE)

    for li, layer in enumerate(snapshot):
        x = float(xs[li])
        idx, ys = columns[li]
        color = LAYER_COLORS.get(layer.layer_type.value, COLOR_INK)
        values = layer.activations[idx]
        radius = 6.0 if len(ys) <= 10 else 4.5
        for value, y in zip(values, ys):
            dropped = layer.layer_type is LayerType.DENSE and float(value) == 0.0
            canvas.create_oval(
                x - radius,
                float(y) - radius,
                x + radius,
                float(y) + radius,
                fill="" if dropped else mix_with_background(color, 0.15 + 0.85 * float(value), COLOR_CARD),
                outline=COLOR_SUB if dropped else color,
                dash=(2, 2) if dropped else None,
            )
        canvas.create_text(x, bottom + 18, text=layer.name, anchor="n", font=("Helvetica", 10, "bold"), fill=COLOR_INK)
        canvas.create_text(
            x,
            bottom + 34,
            text=f"{layer.size} {'maps' if layer.layer_type in (LayerType.CONV, LayerType.POOL) else 'units'}",
            anchor="n",
            font=("Helvetica", 9),
            fill=COLOR_SUB,
        )

    if loading:
        canvas.create_text(
            width / 2.0,
            HEADER_H,
            text="Processing drawing...",
            font=("Helvetica", 12, "italic"),
            fill=COLOR_INK,
        )
