"""Errors raised around the classifier collaborator.

All of them are `PredictionUnavailable`, the one kind the controller catches.
Renderers only ever see `user_message`.
"""

from __future__ import annotations

DEFAULT_USER_MESSAGE = "Could not get prediction. Please try again."


class PredictionUnavailable(Exception):
    """No usable prediction for the current drawing."""

    user_message = DEFAULT_USER_MESSAGE


class ClassificationError(PredictionUnavailable):
    """The classifier itself failed (decode, model or transport error)."""


class MalformedPrediction(PredictionUnavailable):
    """The classifier answered with something that is not a valid prediction set."""


class ClassifierTimeout(PredictionUnavailable):
    """The classifier did not answer before the deadline."""

    user_message = "Prediction timed out. Please try again."
