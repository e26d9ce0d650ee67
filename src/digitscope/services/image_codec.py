"""Drawing-surface codec.

The canvas hands the core an opaque encoded image, the same way a browser
canvas would emit a PNG data URL. `encode_drawing` turns the raw 28x28 draw
buffer into that string after MNIST-style cleanup. `decode_drawing` is the
classifier-side inverse and returns a model-ready 784 vector.
"""

from __future__ import annotations

import base64
import binascii

import numpy as np
import tensorflow as tf

from digitscope.core.errors import ClassificationError

MNIST_SIDE = 28
# MNIST digits are scaled so the longest side fits a 20x20 box.
DIGIT_BOX = 20
INK_THRESHOLD = 0.10
DATA_URL_PREFIX = "data:image/png;base64,"


def is_blank(draw_buffer: np.ndarray) -> bool:
    return not bool(np.any(draw_buffer > INK_THRESHOLD))


def translate(image: np.ndarray, dy: int, dx: int) -> np.ndarray:
    """Move image content by (dy, dx); vacated pixels become 0."""
    h, w = image.shape
    dy = int(np.clip(dy, -h, h))
    dx = int(np.clip(dx, -w, w))
    padded = np.pad(image, ((h, h), (w, w)))
    return padded[h - dy : 2 * h - dy, w - dx : 2 * w - dx].copy()


def center_digit(draw_buffer: np.ndarray) -> np.ndarray:
    """Return a 28x28 float32 image that looks like an MNIST sample.

    The inked bounding box is cropped and brightness-normalized. Its longest
    side is scaled to 20 px and it is pasted in the middle of a 28x28 frame.
    The result is then shifted so its centre of mass sits at the frame centre.
    A blank buffer gives a blank frame.
    """
    img = np.asarray(draw_buffer, dtype=np.float32)
    frame = np.zeros((MNIST_SIDE, MNIST_SIDE), dtype=np.float32)
    ink = img > INK_THRESHOLD
    if not ink.any():
        return frame

    rows = np.flatnonzero(ink.any(axis=1))
    cols = np.flatnonzero(ink.any(axis=0))
    crop = img[rows[0] : rows[-1] + 1, cols[0] : cols[-1] + 1]
    crop = crop / max(float(crop.max()), 1e-8)

    h, w = crop.shape
    scale = DIGIT_BOX / max(h, w)
    new_h = max(1, int(round(h * scale)))
    new_w = max(1, int(round(w * scale)))
    resized = tf.image.resize(crop[..., np.newaxis], (new_h, new_w), method="bilinear").numpy()[..., 0]

    top = (MNIST_SIDE - new_h) // 2
    left = (MNIST_SIDE - new_w) // 2
    frame[top : top + new_h, left : left + new_w] = resized

    mass = float(frame.sum())
    if mass > 1e-8:
        rr, cc = np.indices(frame.shape)
        center = (MNIST_SIDE - 1) / 2.0
        dy = int(round(center - float((rr * frame).sum()) / mass))
        dx = int(round(center - float((cc * frame).sum()) / mass))
        frame = translate(frame, dy, dx)
    return np.clip(frame, 0.0, 1.0).astype(np.float32)


def encode_drawing(draw_buffer: np.ndarray) -> str:
    """Preprocess a draw buffer and encode it as a grayscale PNG data URL."""
    pixels = np.rint(center_digit(draw_buffer) * 255.0).astype(np.uint8)
    png = tf.io.encode_png(pixels[..., np.newaxis])
    return DATA_URL_PREFIX + base64.b64encode(png.numpy()).decode("ascii")


def _payload(encoded_image: str) -> bytes:
    text = encoded_image.strip()
    if text.startswith("data:"):
        header, sep, text = text.partition(",")
        if not sep or ";base64" not in header:
            raise ClassificationError("Encoded image is not a base64 data URL.")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ClassificationError("Encoded image is not valid base64.") from exc


def decode_drawing(encoded_image: str) -> np.ndarray:
    """Decode a PNG/JPEG data URL (or bare base64) to a flat 784 float32 vector."""
    raw = _payload(encoded_image)
    try:
        image = tf.io.decode_image(raw, channels=1, expand_animations=False)
    except (tf.errors.InvalidArgumentError, ValueError) as exc:
        raise ClassificationError("Encoded image could not be decoded.") from exc

    image = tf.image.convert_image_dtype(image, tf.float32)
    if tuple(image.shape[:2]) != (MNIST_SIDE, MNIST_SIDE):
        image = tf.image.resize(image, (MNIST_SIDE, MNIST_SIDE), method="bilinear")
    return np.clip(image.numpy(), 0.0, 1.0).astype(np.float32).reshape(-1)
