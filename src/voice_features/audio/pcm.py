"""PCM helpers: int16 validation, byte codec and WAV loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np

from voice_features.audio.config import PCM_SCALE

logger = logging.getLogger(__name__)

_PCM_DTYPE = np.dtype("<i2")
_INT16_MIN, _INT16_MAX = -32768, 32767


def as_pcm(samples) -> np.ndarray:
    """Return ``samples`` as a 1-D int16 array without copying when possible.

    Raises:
        ValueError: if the input is not one-dimensional, not integer PCM, or
            holds values outside the int16 range (they are never wrapped).
    """
    pcm = np.asarray(samples)
    if pcm.ndim != 1:
        raise ValueError(f"PCM input must be 1D, got shape {pcm.shape}")
    if pcm.size == 0:
        return pcm.astype(np.int16)
    if not np.issubdtype(pcm.dtype, np.integer):
        raise ValueError(f"PCM input must hold integer samples, got dtype {pcm.dtype}")
    if pcm.dtype != np.int16:
        lo, hi = int(pcm.min()), int(pcm.max())
        if lo < _INT16_MIN or hi > _INT16_MAX:
            raise ValueError(f"PCM samples must fit in int16, got range [{lo}, {hi}]")
        pcm = pcm.astype(np.int16)
    return pcm


def normalize(samples) -> np.ndarray:
    """Scale int16 PCM to float32 in [-1, 1)."""
    return (as_pcm(samples) / PCM_SCALE).astype(np.float32)


def pcm_from_bytes(data: Union[bytes, bytearray, memoryview]) -> np.ndarray:
    """Decode little-endian signed 16-bit PCM bytes."""
    if len(data) % 2:
        raise ValueError(f"PCM byte length must be even, got {len(data)}")
    return np.frombuffer(bytes(data), dtype=_PCM_DTYPE).astype(np.int16)


def pcm_to_bytes(samples) -> bytes:
    """Encode samples as little-endian signed 16-bit PCM bytes."""
    return as_pcm(samples).astype(_PCM_DTYPE).tobytes()


def float_to_pcm(audio: np.ndarray) -> np.ndarray:
    """Convert float audio in [-1, 1] to int16 PCM, clipping out-of-range values."""
    audio = np.clip(np.asarray(audio, dtype=np.float64), -1.0, 1.0 - 1.0 / PCM_SCALE)
    return np.round(audio * PCM_SCALE).astype(np.int16)


def load_wav(path: Union[str, Path], expected_rate: int = 16_000) -> np.ndarray:
    """Load a WAV file as mono int16 PCM.

    Stereo files are averaged to mono; float files are scaled to int16.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: if the file's sample rate differs from ``expected_rate``.
    """
    import scipy.io.wavfile as wavfile

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"WAV file not found: {path}")

    sr, audio = wavfile.read(str(path))
    if sr != expected_rate:
        raise ValueError(f"Expected {expected_rate} Hz, got {sr} Hz. Resample the file.")
    if audio.dtype == np.int16:
        pcm = audio
    elif audio.dtype.kind == "f":
        pcm = float_to_pcm(audio)
    elif audio.dtype == np.int32:
        pcm = (audio >> 16).astype(np.int16)
    elif audio.dtype == np.uint8:
        pcm = ((audio.astype(np.int16) - 128) << 8).astype(np.int16)
    else:
        raise ValueError(f"Unsupported WAV sample format: {audio.dtype}")

    if pcm.ndim > 1:
        pcm = np.round(pcm.mean(axis=1)).astype(np.int16)

    logger.debug("Loaded %s: %d samples at %d Hz", path, len(pcm), sr)
    return pcm
