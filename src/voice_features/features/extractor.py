"""Log-Mel feature extraction: PCM -> conditioned signal -> frames -> |DFT| -> log-Mel."""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from voice_features.audio.config import DEFAULT_CONFIG, FeatureConfig
from voice_features.features.framing import hann_window, windowed_frames
from voice_features.features.mel import mel_filterbank, project
from voice_features.features.preprocess import preprocess
from voice_features.features.spectral import SpectralTransform, get_transform

logger = logging.getLogger(__name__)


class LogMelExtractor:
    """Extract 80-bin log-Mel features from 16 kHz int16 PCM.

    The extractor owns the Hann window and the Mel filterbank. Both come from
    the process-wide table cache, so every extractor built with the same
    config shares one read-only copy.

    Output layout is frame-major: ``extract`` returns (n_frames, n_mels) and
    ``extract_flat`` returns the same values flattened as ``f * n_mels + m``.
    """

    def __init__(
        self,
        config: Optional[FeatureConfig] = None,
        transform: Union[str, SpectralTransform] = "fft",
    ):
        self.config = (config or DEFAULT_CONFIG).validate()
        self.transform = get_transform(transform)
        self.window = hann_window(self.config.frame_size)
        self.mel_filters = mel_filterbank(
            self.config.n_mels,
            self.config.frame_size,
            float(self.config.sample_rate),
        )

    def empty(self) -> np.ndarray:
        """Feature matrix with zero frames."""
        return np.zeros((0, self.config.n_mels), dtype=np.float32)

    def features_from_signal(self, signal: np.ndarray) -> np.ndarray:
        """Run framing, spectrum and Mel projection on a conditioned signal."""
        frames = windowed_frames(signal, self.window, self.config.hop_size)
        if frames.shape[0] == 0:
            return self.empty()
        magnitudes = self.transform.magnitude(frames)
        return project(magnitudes, self.mel_filters, self.config.epsilon)

    def extract(self, samples) -> np.ndarray:
        """Extract log-Mel features from raw int16 PCM (batch).

        Args:
            samples: 1-D int16 PCM at ``config.sample_rate``.

        Returns:
            float32 (n_frames, n_mels); n_frames is 0 when fewer than
            ``frame_size`` samples are given.
        """
        signal = preprocess(samples, self.config)
        if len(signal) < self.config.frame_size:
            logger.debug(
                "Input of %d samples is shorter than one frame (%d); no features",
                len(signal),
                self.config.frame_size,
            )
            return self.empty()
        return self.features_from_signal(signal)

    def extract_flat(self, samples) -> np.ndarray:
        """Frame-major flattened features, length n_frames * n_mels."""
        return np.ascontiguousarray(self.extract(samples)).reshape(-1)

    def __repr__(self) -> str:
        return f"LogMelExtractor(config={self.config!r}, transform={self.transform!r})"


def extract_log_mel(samples, transform: Union[str, SpectralTransform] = "fft") -> np.ndarray:
    """Extract log-Mel features with the default configuration."""
    return LogMelExtractor(transform=transform).extract(samples)
