"""Keras-backed classifier collaborator.

DigitScope only needs something that turns an encoded drawing into ten
confidences. The default is a small MLP trained on MNIST. It is loaded from
disk when a saved copy exists and trained once (then saved) when it does not.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tensorflow as tf
from tensorflow import keras
from tensorflow.keras import layers

from digitscope.core.errors import ClassificationError
from digitscope.core.predictions import PredictionSet, from_probabilities
from digitscope.services.image_codec import decode_drawing

logger = logging.getLogger(__name__)


def load_data() -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """MNIST as flat float32 vectors in [0, 1] plus integer labels."""
    (x_train, y_train), (x_test, y_test) = keras.datasets.mnist.load_data()
    x_train = x_train.astype("float32").reshape((-1, 28 * 28)) / 255.0
    x_test = x_test.astype("float32").reshape((-1, 28 * 28)) / 255.0
    return x_train, y_train, x_test, y_test


def build_model(input_dim: int = 784, num_classes: int = 10, dropout_rate: float = 0.2) -> keras.Model:
    """784 -> Dense(128) -> Dropout -> Dense(64) -> Softmax(10).

    The visualizer's default topology mirrors these layer sizes.
    """
    model = keras.Sequential(
        [
            layers.Input(shape=(input_dim,)),
            layers.Dense(128, activation="relu"),
            layers.Dropout(dropout_rate),
            layers.Dense(64, activation="relu"),
            layers.Dense(num_classes, activation="softmax"),
        ]
    )
    model.compile(
        optimizer="adam",
        loss="sparse_categorical_crossentropy",
        metrics=["accuracy"],
    )
    return model


def train_model(model_path: Path, epochs: int = 5, seed: int | None = 42) -> keras.Model:
    """Train the classifier on MNIST, report test accuracy and save it."""
    if seed is not None:
        tf.random.set_seed(seed)
        np.random.seed(seed)

    x_train, y_train, x_test, y_test = load_data()
    model = build_model()
    model.fit(
        x_train,
        y_train,
        validation_split=0.1,
        epochs=epochs,
        batch_size=128,
        verbose=2,
    )
    loss, accuracy = model.evaluate(x_test, y_test, verbose=0)
    logger.info("Training complete - test loss: %.4f, test accuracy: %.4f", loss, accuracy)

    model_path.parent.mkdir(parents=True, exist_ok=True)
    model.save(model_path)
    logger.info("Saved classifier model to %s", model_path)
    return model


def load_or_train_model(model_path: Path) -> keras.Model:
    """Load a saved model, or bootstrap one with a short training run.

    First-time users get a working classifier instead of an error. Three
    epochs keep that first start-up bearable.
    """
    if model_path.exists():
        logger.info("Loading classifier model from %s", model_path)
        return keras.models.load_model(model_path)
    logger.info("No classifier model at %s; training a bootstrap model.", model_path)
    return train_model(model_path, epochs=3)


class KerasDigitClassifier:
    """Classifier collaborator: encoded image in, ten confidences out."""

    def __init__(self, model: keras.Model) -> None:
        self._model = model
        # Build the graph up front so the first drawing does not pay for it.
        if not model.built:
            model.build((None, 784))
        _ = model(np.zeros((1, 784), dtype=np.float32), training=False)

    @classmethod
    def from_path(cls, model_path: Path) -> KerasDigitClassifier:
        return cls(load_or_train_model(model_path))

    def predict_vector(self, x: np.ndarray) -> np.ndarray:
        """Softmax output for one flat 784 vector."""
        probs = self._model(np.expand_dims(np.asarray(x, dtype=np.float32), axis=0), training=False)
        return np.asarray(probs)[0]

    def classify(self, encoded_image: str) -> PredictionSet:
        """Decode, run the model and wrap the softmax as a prediction set.

        Decode and model failures surface as `ClassificationError`. An output
        that is not a valid distribution surfaces as `MalformedPrediction`.
        """
        x = decode_drawing(encoded_image)
        try:
            probs = self.predict_vector(x)
        except (tf.errors.OpError, ValueError) as exc:
            raise ClassificationError("Classifier model failed to run.") from exc
        return from_probabilities(np.clip(probs.astype(np.float64), 0.0, 1.0))
