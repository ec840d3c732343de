"""Framing and Hann windowing."""

import numpy as np

from voice_features.features.cache import cached


def num_frames(n_samples: int, frame_size: int, hop_size: int) -> int:
    """``max(0, 1 + (n_samples - frame_size) // hop_size)``."""
    if n_samples < frame_size:
        return 0
    return 1 + (n_samples - frame_size) // hop_size


def _build_hann(frame_size: int) -> np.ndarray:
    n = np.arange(frame_size, dtype=np.float64)
    # Symmetric Hann (denominator N - 1), not the periodic DFT-even variant.
    w = 0.5 * (1.0 - np.cos(2.0 * np.pi * n / (frame_size - 1)))
    return w.astype(np.float32)


def hann_window(frame_size: int) -> np.ndarray:
    """Cached, read-only symmetric Hann window of length ``frame_size``."""
    return cached(("hann", frame_size), lambda: _build_hann(frame_size))


def frame_signal(x: np.ndarray, frame_size: int, hop_size: int) -> np.ndarray:
    """Split ``x`` into overlapping frames.

    Returns:
        Array of shape (n_frames, frame_size); frame ``f`` is
        ``x[f * hop_size : f * hop_size + frame_size]``. Frames are copies.
    """
    x = np.asarray(x)
    n = num_frames(len(x), frame_size, hop_size)
    if n == 0:
        return np.zeros((0, frame_size), dtype=x.dtype)
    starts = np.arange(n) * hop_size
    indices = starts[:, np.newaxis] + np.arange(frame_size)
    return x[indices]


def windowed_frames(x: np.ndarray, window: np.ndarray, hop_size: int) -> np.ndarray:
    """Frame ``x`` with ``len(window)`` samples per frame and apply ``window``."""
    frames = frame_signal(x, len(window), hop_size)
    return (frames * window).astype(np.float32)
