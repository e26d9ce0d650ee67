"""Layout, style and key-binding helpers for the DigitScope window."""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from digitscope.ui.constants import (
    COLOR_BG,
    COLOR_CARD,
    COLOR_EDGE,
    COLOR_INK,
    COLOR_NEUTRAL_BTN,
    COLOR_NEUTRAL_BTN_HOVER,
    COLOR_NEUTRAL_BTN_PRESS,
    COLOR_STATUS_INFO_BG,
    COLOR_STATUS_INFO_FG,
    COLOR_SUB,
    DRAW_CANVAS_SIZE,
    NETWORK_CANVAS_SIZE,
    PREDICTION_CANVAS_SIZE,
)


def configure_styles(root: tk.Tk) -> None:
    """ttk style rules shared by every widget."""
    style = ttk.Style(root)
    style.theme_use("clam")

    style.configure("App.TFrame", background=COLOR_BG)
    style.configure("Card.TFrame", background=COLOR_CARD)
    style.configure("Title.TLabel", background=COLOR_BG, foreground=COLOR_INK, font=("Avenir Next", 22, "bold"))
    style.configure("Subtitle.TLabel", background=COLOR_BG, foreground=COLOR_SUB, font=("Avenir Next", 11))
    style.configure("Body.TLabel", background=COLOR_CARD, foreground=COLOR_SUB, font=("Avenir Next", 10))
    style.configure("Value.TLabel", background=COLOR_CARD, foreground=COLOR_INK, font=("Menlo", 11, "bold"))
    style.configure(
        "Card.TLabelframe",
        background=COLOR_CARD,
        foreground=COLOR_INK,
        borderwidth=1,
        relief="solid",
    )
    style.configure(
        "Card.TLabelframe.Label",
        background=COLOR_CARD,
        foreground=COLOR_INK,
        font=("Avenir Next", 10, "bold"),
    )
    style.configure(
        "Neutral.TButton",
        background=COLOR_NEUTRAL_BTN,
        foreground=COLOR_INK,
        borderwidth=1,
        font=("Avenir Next", 10, "bold"),
        padding=(12, 8),
    )
    style.map(
        "Neutral.TButton",
        background=[("active", COLOR_NEUTRAL_BTN_HOVER), ("pressed", COLOR_NEUTRAL_BTN_PRESS)],
    )
    style.configure("Dropout.Horizontal.TScale", background=COLOR_CARD, troughcolor=COLOR_EDGE)


def bind_shortcuts(ui: object) -> None:
    """c / Esc clear the canvas, [ and ] nudge the dropout rate."""
    ui.root.bind("c", lambda _e: ui.clear_drawing())
    ui.root.bind("C", lambda _e: ui.clear_drawing())
    ui.root.bind("<Escape>", lambda _e: ui.clear_drawing())
    ui.root.bind("<bracketleft>", lambda _e: ui.step_dropout(-1))
    ui.root.bind("<bracketright>", lambda _e: ui.step_dropout(+1))


def build_layout(ui: object) -> None:
    """Header, three content columns (input, network, prediction) and status bar."""
    outer = ttk.Frame(ui.root, padding=14, style="App.TFrame")
    outer.pack(fill="both", expand=True)

    header = ttk.Frame(outer, style="App.TFrame")
    header.pack(fill="x", pady=(0, 10))
    ttk.Label(header, text="DigitScope", style="Title.TLabel").pack(anchor="w")
    ttk.Label(
        header,
        text="Draw a digit, watch the simulated layers light up, and drag dropout to see the prediction wobble.",
        style="Subtitle.TLabel",
    ).pack(anchor="w", pady=(2, 0))

    body = ttk.Frame(outer, style="App.TFrame")
    body.pack(fill="both", expand=True)

    left = ttk.Frame(body, style="App.TFrame")
    left.pack(side="left", fill="y", padx=(0, 10))
    _build_draw_panel(ui, left)
    _build_control_panel(ui, left)

    middle = ttk.LabelFrame(body, text="Network", padding=8, style="Card.TLabelframe")
    middle.pack(side="left", fill="both", expand=True, padx=(0, 10))
    ui.network_canvas = tk.Canvas(
        middle,
        width=NETWORK_CANVAS_SIZE[0],
        height=NETWORK_CANVAS_SIZE[1],
        bg=COLOR_CARD,
        highlightthickness=0,
    )
    ui.network_canvas.pack(fill="both", expand=True)

    right = ttk.LabelFrame(body, text="Confidence", padding=8, style="Card.TLabelframe")
    right.pack(side="left", fill="y")
    ui.prediction_canvas = tk.Canvas(
        right,
        width=PREDICTION_CANVAS_SIZE[0],
        height=PREDICTION_CANVAS_SIZE[1],
        bg=COLOR_CARD,
        highlightthickness=0,
    )
    ui.prediction_canvas.pack(fill="both", expand=True)

    ui.status_label = tk.Label(
        outer,
        textvariable=ui.status_var,
        bg=COLOR_STATUS_INFO_BG,
        fg=COLOR_STATUS_INFO_FG,
        font=("Avenir Next", 10, "bold"),
        padx=10,
        pady=8,
        anchor="w",
    )
    ui.status_label.pack(fill="x", pady=(8, 0))


def _build_draw_panel(ui: object, parent: ttk.Frame) -> None:
    frame = ttk.LabelFrame(parent, text="Draw a Digit", padding=8, style="Card.TLabelframe")
    frame.pack(fill="x")

    ui.draw_canvas = tk.Canvas(
        frame,
        width=DRAW_CANVAS_SIZE,
        height=DRAW_CANVAS_SIZE,
        bg="#000000",
        highlightthickness=1,
        highlightbackground=COLOR_EDGE,
        cursor="crosshair",
    )
    ui.draw_canvas.pack()
    ui.draw_canvas.bind("<Button-1>", ui._on_draw)
    ui.draw_canvas.bind("<B1-Motion>", ui._on_draw)
    ui.draw_canvas.bind("<ButtonRelease-1>", ui._on_draw_end)

    ttk.Button(frame, text="Clear", command=ui.clear_drawing, style="Neutral.TButton").pack(fill="x", pady=(8, 0))


def _build_control_panel(ui: object, parent: ttk.Frame) -> None:
    frame = ttk.LabelFrame(parent, text="Controls", padding=8, style="Card.TLabelframe")
    frame.pack(fill="x", pady=(10, 0))

    row = ttk.Frame(frame, style="Card.TFrame")
    row.pack(fill="x")
    ttk.Label(row, text="Dropout rate", style="Body.TLabel").pack(side="left")
    ttk.Label(row, textvariable=ui.dropout_label_var, style="Value.TLabel").pack(side="right")

    ui.dropout_scale = ttk.Scale(
        frame,
        from_=0.0,
        to=1.0,
        orient="horizontal",
        variable=ui.dropout_var,
        command=ui._on_dropout_changed,
        style="Dropout.Horizontal.TScale",
    )
    ui.dropout_scale.pack(fill="x", pady=(6, 0))

    ttk.Label(
        frame,
        text="Shortcuts: [ / ] adjust dropout, C or Esc clears the canvas.",
        style="Body.TLabel",
    ).pack(anchor="w", pady=(8, 0))
