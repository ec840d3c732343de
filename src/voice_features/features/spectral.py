"""Magnitude spectrum of windowed frames.

Two interchangeable transforms share the ``SpectralTransform`` interface:

- ``DirectDFT``: the direct O(N^2) transform against cached cos/sin bases.
- ``FFTTransform``: ``scipy.fft.rfft``; same magnitudes within float tolerance.

Magnitudes are raw |X[k]| for k = 0..N/2, with no 1/N normalization.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Type, Union

import numpy as np
import scipy.fft

from voice_features.features.cache import cached


class SpectralTransform(ABC):
    """Frames in, one-sided magnitude spectra out."""

    name: str = "base"

    def magnitude(self, frames: np.ndarray) -> np.ndarray:
        """Return |DFT| bins 0..N/2 for each frame.

        Args:
            frames: (n_frames, N) or a single frame of shape (N,).

        Returns:
            float32 array of shape (n_frames, N//2 + 1), or (N//2 + 1,) for a
            single frame.
        """
        frames = np.asarray(frames, dtype=np.float64)
        if frames.ndim not in (1, 2):
            raise ValueError(f"Frames must be 1D or 2D, got shape {frames.shape}")
        single = frames.ndim == 1
        batch = frames[np.newaxis, :] if single else frames
        n = batch.shape[1]
        if batch.shape[0] == 0:
            mag = np.zeros((0, n // 2 + 1), dtype=np.float64)
        else:
            mag = self._magnitude(batch)
        mag = mag.astype(np.float32)
        return mag[0] if single else mag

    @abstractmethod
    def _magnitude(self, frames: np.ndarray) -> np.ndarray:
        """(n_frames, N) float64 -> (n_frames, N//2 + 1) magnitudes."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _build_dft_basis(n: int) -> Tuple[np.ndarray, np.ndarray]:
    k = np.arange(n // 2 + 1)[:, np.newaxis]
    t = np.arange(n)[np.newaxis, :]
    # (k * t) % n keeps the phase argument small for better accuracy.
    phi = -2.0 * np.pi * ((k * t) % n) / n
    return np.cos(phi), np.sin(phi)


def dft_basis(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Cached (cos, sin) bases of shape (N//2 + 1, N)."""
    return cached(("dft_basis", n), lambda: _build_dft_basis(n))


class DirectDFT(SpectralTransform):
    """re = sum x[n] cos(-2 pi k n / N), im = sum x[n] sin(-2 pi k n / N)."""

    name = "dft"

    def _magnitude(self, frames: np.ndarray) -> np.ndarray:
        cos_basis, sin_basis = dft_basis(frames.shape[1])
        re = frames @ cos_basis.T
        im = frames @ sin_basis.T
        return np.sqrt(re * re + im * im)


class FFTTransform(SpectralTransform):
    name = "fft"

    def _magnitude(self, frames: np.ndarray) -> np.ndarray:
        return np.abs(scipy.fft.rfft(frames, axis=-1))


_TRANSFORMS: Dict[str, Type[SpectralTransform]] = {
    DirectDFT.name: DirectDFT,
    FFTTransform.name: FFTTransform,
}


def get_transform(transform: Union[str, SpectralTransform] = "fft") -> SpectralTransform:
    """Resolve a transform name ("fft" or "dft") or pass an instance through."""
    if isinstance(transform, SpectralTransform):
        return transform
    try:
        return _TRANSFORMS[transform]()
    except KeyError:
        raise ValueError(
            f"Unknown spectral transform: {transform!r} (expected one of {sorted(_TRANSFORMS)})"
        ) from None
