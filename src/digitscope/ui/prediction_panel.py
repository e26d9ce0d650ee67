"""Prediction panel: confidence bars for the display predictions."""

from __future__ import annotations

import tkinter as tk
from typing import Sequence

from digitscope.core.predictions import PredictionItem, top_prediction
from digitscope.ui.constants import (
    COLOR_ACCENT,
    COLOR_CARD,
    COLOR_EDGE,
    COLOR_ERROR,
    COLOR_INK,
    COLOR_SUB,
    PREDICTION_CANVAS_SIZE,
)
from digitscope.ui.render import format_percent


def render_predictions(
    canvas: tk.Canvas,
    predictions: Sequence[PredictionItem],
    loading: bool = False,
    error: str | None = None,
) -> None:
    """Redraw the bar chart; loading and error replace the chart body."""
    canvas.delete("all")
    width = max(canvas.winfo_width(), PREDICTION_CANVAS_SIZE[0])
    height = max(canvas.winfo_height(), PREDICTION_CANVAS_SIZE[1])

    canvas.create_rectangle(0, 0, width, height, fill=COLOR_CARD, outline="")
    canvas.create_text(14, 14, text="Prediction", anchor="nw", font=("Helvetica", 14, "bold"), fill=COLOR_INK)

    if loading:
        canvas.create_text(width / 2.0, height / 2.0, text="Analyzing...", font=("Helvetica", 12, "italic"), fill=COLOR_SUB)
        return
    if error:
        canvas.create_text(
            width / 2.0,
            height / 2.0,
            text=error,
            width=width - 40,
            justify="center",
            font=("Helvetica", 11, "bold"),
            fill=COLOR_ERROR,
        )
        return
    if not predictions:
        return

    best = top_prediction(predictions)
    canvas.create_text(
        width - 14,
        14,
        text=f"{best.digit}  ({format_percent(best.confidence)})",
        anchor="ne",
        font=("Helvetica", 14, "bold"),
        fill=COLOR_ACCENT,
    )

    x0, x1 = 40, width - 64
    row_h = (height - 60) / len(predictions)
    for i, item in enumerate(predictions):
        y0 = 48 + i * row_h
        y1 = y0 + row_h - 6
        mid = (y0 + y1) / 2.0
        fill = COLOR_ACCENT if item.digit == best.digit else COLOR_SUB
        canvas.create_text(x0 - 12, mid, text=str(item.digit), font=("Helvetica", 11, "bold"), fill=COLOR_INK)
        canvas.create_rectangle(x0, y0, x1, y1, fill=COLOR_EDGE, outline="")
        canvas.create_rectangle(x0, y0, x0 + (x1 - x0) * item.confidence, y1, fill=fill, outline="")
        canvas.create_text(
            width - 10,
            mid,
            text=format_percent(item.confidence),
            anchor="e",
            font=("Helvetica", 9),
            fill=COLOR_INK,
        )
