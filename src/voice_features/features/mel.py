"""HTK-style mel scale, triangular filterbank and log-mel projection."""

from typing import Union

import numpy as np

from voice_features.features.cache import cached

ArrayLike = Union[float, np.ndarray]


def hz_to_mel(hz: ArrayLike) -> ArrayLike:
    return 2595.0 * np.log10(1.0 + np.asarray(hz, dtype=np.float64) / 700.0)


def mel_to_hz(mel: ArrayLike) -> ArrayLike:
    return 700.0 * (10.0 ** (np.asarray(mel, dtype=np.float64) / 2595.0) - 1.0)


def mel_bin_edges(n_mels: int, frame_size: int, sample_rate: float) -> np.ndarray:
    """FFT bin index of each of the ``n_mels + 2`` mel points from 0 Hz to Nyquist."""
    mel_points = np.linspace(hz_to_mel(0.0), hz_to_mel(sample_rate / 2.0), n_mels + 2)
    hz_points = mel_to_hz(mel_points)
    return np.floor((frame_size + 1) * hz_points / sample_rate).astype(int)


def _build_filterbank(n_mels: int, frame_size: int, sample_rate: float) -> np.ndarray:
    n_bins = frame_size // 2 + 1
    bins = mel_bin_edges(n_mels, frame_size, sample_rate)
    filters = np.zeros((n_mels, n_bins), dtype=np.float64)
    for m in range(1, n_mels + 1):
        left, center, right = bins[m - 1], bins[m], bins[m + 1]
        # Zero-width segments give empty ranges, so the denominators below are
        # never evaluated as zero.
        for k in range(left, min(center, n_bins)):
            filters[m - 1, k] = (k - left) / (center - left)
        for k in range(center, min(right, n_bins)):
            filters[m - 1, k] = (right - k) / (right - center)
    return filters.astype(np.float32)


def mel_filterbank(n_mels: int, frame_size: int, sample_rate: float) -> np.ndarray:
    """Cached, read-only (n_mels, frame_size // 2 + 1) triangular filterbank.

    Filter ``m`` rises linearly from 0 at ``bins[m-1]`` to 1 at ``bins[m]`` and
    falls back towards 0 at ``bins[m+1]``; neighbouring filters share their
    boundary bins.
    """
    key = ("mel_filterbank", n_mels, frame_size, float(sample_rate))
    return cached(key, lambda: _build_filterbank(n_mels, frame_size, sample_rate))


def project(magnitudes: np.ndarray, filterbank: np.ndarray, epsilon: float = 1e-9) -> np.ndarray:
    """``log(magnitudes @ filterbank.T + epsilon)`` per frame.

    Args:
        magnitudes: (n_frames, n_bins) magnitude spectra.
        filterbank: (n_mels, n_bins).
        epsilon: Keeps silent frames finite.

    Returns:
        float32 (n_frames, n_mels).
    """
    energy = np.asarray(magnitudes, dtype=np.float64) @ filterbank.T.astype(np.float64)
    return np.log(energy + epsilon).astype(np.float32)
