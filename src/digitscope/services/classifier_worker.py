"""Background classifier worker.

The classifier call is the only slow operation in the app, so it runs on its
own thread. The Tk side submits work and polls for outcomes and never blocks.
Outcomes carry the request token they were submitted with, and the state
machine decides whether they are still relevant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Full, Queue
from threading import Event, Thread
from typing import Callable

from digitscope.core.errors import ClassificationError, PredictionUnavailable
from digitscope.core.predictions import PredictionSet

logger = logging.getLogger(__name__)

ClassifyFn = Callable[[str], PredictionSet]


@dataclass(frozen=True)
class ClassifierOutcome:
    """Result of one classifier call: exactly one of `predictions`/`error` is set."""

    token: int
    predictions: PredictionSet | None = None
    error: PredictionUnavailable | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_classifier(classify_fn: ClassifyFn, token: int, encoded_image: str) -> ClassifierOutcome:
    """Call the classifier and fold every failure into a `ClassifierOutcome`."""
    try:
        predictions = classify_fn(encoded_image)
    except PredictionUnavailable as exc:
        return ClassifierOutcome(token=token, error=exc)
    except Exception as exc:  # noqa: BLE001 - any collaborator failure ends this request only
        logger.exception("Classifier raised an unexpected error.")
        error = ClassificationError(f"{type(exc).__name__}: {exc}")
        error.__cause__ = exc
        return ClassifierOutcome(token=token, error=error)
    return ClassifierOutcome(token=token, predictions=tuple(predictions))


class ClassifierWorker:
    """Thread that runs classifier calls away from the Tk main thread.

    - the input queue holds one job, so a newer drawing replaces a queued one
    - `submit(...)` is cheap enough for a mouse-release handler
    - `poll_latest()` returns only the freshest outcome
    """

    def __init__(self, classify_fn: ClassifyFn) -> None:
        self._classify_fn = classify_fn
        self._input_queue: Queue[tuple[int, str]] = Queue(maxsize=1)
        self._result_queue: Queue[ClassifierOutcome] = Queue(maxsize=1)
        self._stop_event = Event()
        self._thread: Thread | None = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._run_loop, name="digitscope-classifier", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()

    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def submit(self, token: int, encoded_image: str) -> bool:
        """Queue a classifier job, dropping any job that has not started yet."""
        _drain(self._input_queue)
        try:
            self._input_queue.put_nowait((token, encoded_image))
        except Full:
            return False
        return True

    def poll_latest(self) -> ClassifierOutcome | None:
        latest: ClassifierOutcome | None = None
        try:
            while True:
                latest = self._result_queue.get_nowait()
        except Empty:
            return latest

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                token, encoded_image = self._input_queue.get(timeout=0.1)
            except Empty:
                continue

            outcome = run_classifier(self._classify_fn, token, encoded_image)
            _drain(self._result_queue)
            self._result_queue.put(outcome)


def _drain(queue: Queue) -> None:
    try:
        while True:
            queue.get_nowait()
    except Empty:
        pass
