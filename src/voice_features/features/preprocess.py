"""Signal conditioning: int16 normalization, 100 Hz high-pass, pre-emphasis."""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np
from scipy.signal import lfilter

from voice_features.audio.config import DEFAULT_CONFIG, FeatureConfig
from voice_features.audio.pcm import normalize


def highpass_alpha(sample_rate: float, cutoff_hz: float) -> float:
    """Smoothing factor of the single-pole RC high-pass."""
    rc = 1.0 / (2.0 * math.pi * cutoff_hz)
    return rc / (rc + 1.0 / sample_rate)


def highpass(
    x: np.ndarray,
    alpha: float,
    prev: Optional[Tuple[float, float]] = None,
) -> np.ndarray:
    """Single-pole high-pass over ``x``.

    ``y[i] = alpha * (y[i-1] + x[i] - x[i-1])`` where ``x[i-1]`` is the raw
    previous sample and ``y[i-1]`` the previous filtered value. The first
    sample of a signal passes through unchanged.

    Args:
        x: Input samples (float).
        alpha: Filter coefficient, see ``highpass_alpha``.
        prev: ``(raw, filtered)`` values of the sample preceding ``x`` when
            ``x`` continues an earlier block; None if ``x`` starts the signal.

    Returns:
        Filtered float64 samples, same length as ``x``.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    if prev is None:
        # y[0] = alpha * x[0] + zi == x[0]
        zi = (1.0 - alpha) * x[0]
    else:
        raw, filtered = prev
        zi = alpha * (filtered - raw)
    y, _ = lfilter([alpha, -alpha], [1.0, -alpha], x, zi=[zi])
    return y


def preemphasis(
    y: np.ndarray,
    coeff: float,
    prev: Optional[float] = None,
) -> np.ndarray:
    """Pre-emphasis applied from the last index down to index 1.

    Walking backward, ``y[i] -= coeff * y[i-1]`` always reads the left
    neighbour before it is updated, so every output depends on the
    *unmodified* input only. The slice expression below computes exactly that
    from a snapshot. A forward in-place walk would chain updated values and
    gives different output; do not change the traversal.

    Args:
        y: High-passed samples.
        coeff: Pre-emphasis coefficient.
        prev: Filtered sample preceding ``y`` for block continuation; when
            None, ``y[0]`` is left as is.
    """
    src = np.asarray(y, dtype=np.float64)
    out = src.copy()
    if src.size > 1:
        out[1:] = src[1:] - coeff * src[:-1]
    if prev is not None and src.size > 0:
        out[0] = src[0] - coeff * prev
    return out


def preprocess(samples, config: FeatureConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Normalize int16 PCM and apply high-pass + pre-emphasis.

    Returns:
        float32 working signal, same length as ``samples``.
    """
    x = normalize(samples)
    alpha = highpass_alpha(config.sample_rate, config.highpass_cutoff_hz)
    y = highpass(x, alpha)
    return preemphasis(y, config.preemphasis).astype(np.float32)
