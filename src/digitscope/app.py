"""DigitScope desktop app.

The Tk controller is thin. It turns widget events into state-machine
transitions (`digitscope.core.state`), ships classifier work to the
background worker, and hands each new state to the renderers.
"""

from __future__ import annotations

import logging
import time
import tkinter as tk
from typing import Callable

import numpy as np

from digitscope.core.errors import ClassificationError
from digitscope.core.predictions import PredictionSet, top_prediction
from digitscope.core.simulation import clamp_rate
from digitscope.core.state import (
    AppState,
    Phase,
    change_dropout,
    clear_drawing,
    expire_if_overdue,
    fail_prediction,
    initial_state,
    receive_prediction,
    submit_drawing,
)
from digitscope.model.runtime import KerasDigitClassifier
from digitscope.services.classifier_worker import ClassifierOutcome, ClassifierWorker
from digitscope.services.image_codec import encode_drawing, is_blank
from digitscope.settings import Settings
from digitscope.ui.canvas import cell_at, draw_pixel_grid, paint_brush_stamp
from digitscope.ui.constants import (
    CLASSIFIER_POLL_INTERVAL_MS,
    COLOR_BG,
    COLOR_STATUS_INFO_BG,
    COLOR_STATUS_INFO_FG,
    COLOR_STATUS_WARN_BG,
    COLOR_STATUS_WARN_FG,
    DRAW_BRUSH,
    DRAW_CANVAS_SIZE,
    DRAW_GRID_SIZE,
    DROPOUT_KEY_STEP,
    WINDOW_MIN_SIZE,
    WINDOW_SIZE,
    WINDOW_TITLE,
)
from digitscope.ui.layout import bind_shortcuts, build_layout, configure_styles
from digitscope.ui.network_panel import render_activations
from digitscope.ui.prediction_panel import render_predictions

logger = logging.getLogger(__name__)


class DigitScopeUI:
    """Main window controller.

    `self.state` is the only piece of app state. Every handler replaces it
    through `_apply`, which also triggers a redraw.
    """

    def __init__(self, root: tk.Tk, classify_fn: Callable[[str], PredictionSet], settings: Settings) -> None:
        self.root = root
        self.root.title(WINDOW_TITLE)
        self.root.geometry(WINDOW_SIZE)
        self.root.minsize(*WINDOW_MIN_SIZE)
        self.root.configure(bg=COLOR_BG)

        self.settings = settings
        self.rng = np.random.default_rng(settings.seed)
        self.state: AppState = initial_state(settings.dropout_rate, settings.topology, self.rng)

        self.status_var = tk.StringVar(value="")
        self.dropout_var = tk.DoubleVar(value=self.state.dropout_rate)
        self.dropout_label_var = tk.StringVar(value=f"{self.state.dropout_rate:.2f}")

        self.draw_buffer = np.zeros((DRAW_GRID_SIZE, DRAW_GRID_SIZE), dtype=np.float32)
        self._last_draw_cell: tuple[int, int] | None = None

        configure_styles(self.root)
        build_layout(self)
        bind_shortcuts(self)

        self._worker: ClassifierWorker | None = ClassifierWorker(classify_fn)
        self._worker.start()
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.root.after(CLASSIFIER_POLL_INTERVAL_MS, self._poll_classifier)

        self._draw_digit_canvas()
        self._render()
        self._update_status()

    # ------------------------------
    # Drawing surface
    # ------------------------------
    def _on_draw(self, event: tk.Event) -> None:
        row, col = cell_at(event.x, event.y, DRAW_CANVAS_SIZE, DRAW_GRID_SIZE)
        if self._last_draw_cell == (row, col):
            return
        self._last_draw_cell = (row, col)
        paint_brush_stamp(self.draw_buffer, row=row, col=col, brush=DRAW_BRUSH)
        self._draw_digit_canvas()

    def _on_draw_end(self, _event: tk.Event | None = None) -> None:
        """Stroke finished: encode the canvas and submit it, unless it is blank."""
        self._last_draw_cell = None
        if is_blank(self.draw_buffer):
            return
        self.submit_drawing(encode_drawing(self.draw_buffer))

    def _draw_digit_canvas(self) -> None:
        draw_pixel_grid(self.draw_canvas, self.draw_buffer, size=DRAW_CANVAS_SIZE)

    # ------------------------------
    # Transitions
    # ------------------------------
    def submit_drawing(self, encoded_image: str) -> None:
        self._apply(submit_drawing(self.state, time.monotonic(), self.rng))
        token = self.state.request_token
        if not self._dispatch(token, encoded_image):
            self._apply(fail_prediction(self.state, token, ClassificationError("Classifier worker unavailable.")))

    def _dispatch(self, token: int, encoded_image: str) -> bool:
        worker = getattr(self, "_worker", None)
        if worker is None or worker.is_stopped():
            return False
        return worker.submit(token, encoded_image)

    def apply_outcome(self, outcome: ClassifierOutcome) -> None:
        if outcome.ok:
            self._apply(receive_prediction(self.state, outcome.token, outcome.predictions, self.rng))
        else:
            self._apply(fail_prediction(self.state, outcome.token, outcome.error))

    def clear_drawing(self) -> None:
        """Wipe the canvas and return to IDLE."""
        self._last_draw_cell = None
        self.draw_buffer.fill(0.0)
        self._draw_digit_canvas()
        self._apply(clear_drawing(self.state, self.rng))

    def _on_dropout_changed(self, value: str) -> None:
        """ttk.Scale callback; fires on every slider movement."""
        rate = clamp_rate(float(value))
        self.dropout_label_var.set(f"{rate:.2f}")
        if rate == self.state.dropout_rate:
            return
        self._apply(change_dropout(self.state, rate, self.rng))

    def step_dropout(self, direction: int) -> None:
        rate = clamp_rate(round(self.state.dropout_rate + direction * DROPOUT_KEY_STEP, 4))
        self.dropout_var.set(rate)
        self._on_dropout_changed(str(rate))

    def _poll_classifier(self) -> None:
        """Apply the newest classifier outcome and enforce the deadline.

        Runs on Tk's timer so every state change stays on the main thread.
        """
        worker = getattr(self, "_worker", None)
        if worker is None:
            return
        outcome = worker.poll_latest()
        if outcome is not None:
            self.apply_outcome(outcome)
        self._apply(expire_if_overdue(self.state, time.monotonic(), self.settings.classifier_timeout_s))
        if not worker.is_stopped():
            self.root.after(CLASSIFIER_POLL_INTERVAL_MS, self._poll_classifier)

    def _apply(self, new_state: AppState) -> None:
        if new_state is self.state:
            return
        self.state = new_state
        self._render()
        self._update_status()

    # ------------------------------
    # Rendering
    # ------------------------------
    def _render(self) -> None:
        render_activations(self.network_canvas, self.state.activations, self.state.dropout_rate, self.state.loading)
        render_predictions(
            self.prediction_canvas,
            self.state.display_predictions,
            loading=self.state.loading,
            error=self.state.error,
        )

    def _update_status(self) -> None:
        state = self.state
        if state.error:
            self._set_status(state.error, level="warn")
        elif state.phase is Phase.PROCESSING:
            self._set_status("Classifying drawing...")
        elif state.phase is Phase.RESULT:
            best = top_prediction(state.display_predictions)
            self._set_status(
                f"Prediction: {best.digit} ({best.confidence * 100:.1f}%) at dropout {state.dropout_rate:.2f}."
            )
        else:
            self._set_status("Draw a digit to begin.")

    def _set_status(self, message: str, level: str = "info") -> None:
        self.status_var.set(message)
        if level == "warn":
            self.status_label.configure(bg=COLOR_STATUS_WARN_BG, fg=COLOR_STATUS_WARN_FG)
        else:
            self.status_label.configure(bg=COLOR_STATUS_INFO_BG, fg=COLOR_STATUS_INFO_FG)

    def _on_close(self) -> None:
        if self._worker is not None:
            self._worker.stop()
        self.root.destroy()


def main(settings: Settings) -> None:
    root = tk.Tk()
    classifier = KerasDigitClassifier.from_path(settings.model_path)
    DigitScopeUI(root, classifier.classify, settings)
    root.mainloop()
