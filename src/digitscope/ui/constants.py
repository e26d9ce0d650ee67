"""Centralized UI constants for DigitScope.

Values only: sizes, colours, timings. The default dropout rate lives in
`digitscope.core.state` and the classifier timeout in `digitscope.settings`.
"""

# Logical drawing resolution (MNIST is 28x28) and its on-screen size.
DRAW_GRID_SIZE = 28
DRAW_CANVAS_SIZE = 280

WINDOW_TITLE = "DigitScope"
WINDOW_SIZE = "1400x820"
WINDOW_MIN_SIZE = (1180, 720)

NETWORK_CANVAS_SIZE = (720, 560)
PREDICTION_CANVAS_SIZE = (300, 420)

# Main palette (dark slate, cyan accent).
COLOR_BG = "#0f172a"
COLOR_CARD = "#1e293b"
COLOR_INK = "#f1f5f9"
COLOR_SUB = "#94a3b8"
COLOR_EDGE = "#334155"
COLOR_ACCENT = "#22d3ee"
COLOR_ERROR = "#f87171"

COLOR_STATUS_INFO_BG = "#083344"
COLOR_STATUS_INFO_FG = "#a5f3fc"
COLOR_STATUS_WARN_BG = "#431407"
COLOR_STATUS_WARN_FG = "#fdba74"

COLOR_NEUTRAL_BTN = "#334155"
COLOR_NEUTRAL_BTN_HOVER = "#475569"
COLOR_NEUTRAL_BTN_PRESS = "#64748b"

# Node colour per layer type name.
LAYER_COLORS = {
    "INPUT": "#38bdf8",
    "CONV": "#a78bfa",
    "POOL": "#f472b6",
    "DENSE": "#34d399",
    "OUTPUT": "#fbbf24",
}

# Most nodes drawn per layer column; bigger layers are sampled evenly.
MAX_NODES_PER_LAYER = 20

# (row_offset, col_offset, paint_strength) for the soft drawing brush.
DRAW_BRUSH = [
    (-1, -1, 0.30),
    (-1, 0, 0.55),
    (-1, 1, 0.30),
    (0, -1, 0.55),
    (0, 0, 1.00),
    (0, 1, 0.55),
    (1, -1, 0.30),
    (1, 0, 0.55),
    (1, 1, 0.30),
]

# How often the Tk loop checks for classifier outcomes and deadlines.
CLASSIFIER_POLL_INTERVAL_MS = 30

# Keyboard step for the dropout slider.
DROPOUT_KEY_STEP = 0.05
