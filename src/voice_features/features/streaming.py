"""Incremental log-Mel extraction over PCM chunks of any size."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from voice_features.audio.config import FeatureConfig
from voice_features.audio.pcm import as_pcm, normalize
from voice_features.features.extractor import LogMelExtractor
from voice_features.features.framing import num_frames
from voice_features.features.preprocess import highpass, highpass_alpha, preemphasis
from voice_features.features.spectral import SpectralTransform


class StreamingLogMelExtractor:
    """Feed PCM chunks, get back the feature frames that became complete.

    The high-pass and pre-emphasis state is carried across chunks and at most
    ``frame_size - 1`` conditioned samples are kept between calls, so the
    concatenated output over any chunking matches ``LogMelExtractor.extract``
    on the whole buffer. Not thread-safe; use one instance per stream.
    """

    def __init__(
        self,
        config: Optional[FeatureConfig] = None,
        transform: Union[str, SpectralTransform] = "fft",
        extractor: Optional[LogMelExtractor] = None,
    ):
        self.extractor = extractor or LogMelExtractor(config, transform=transform)
        self.config = self.extractor.config
        self._alpha = highpass_alpha(self.config.sample_rate, self.config.highpass_cutoff_hz)
        self.reset()

    def reset(self) -> None:
        """Forget filter state and pending samples."""
        self._prev_raw: Optional[float] = None
        self._prev_filtered: Optional[float] = None
        self._pending = np.zeros(0, dtype=np.float32)
        self.samples_seen = 0
        self.frames_emitted = 0

    @property
    def pending_samples(self) -> int:
        """Conditioned samples waiting for the next frame boundary."""
        return len(self._pending)

    def _condition(self, pcm: np.ndarray) -> np.ndarray:
        x = normalize(pcm)
        if self._prev_raw is None:
            y = highpass(x, self._alpha)
            out = preemphasis(y, self.config.preemphasis)
        else:
            y = highpass(x, self._alpha, prev=(self._prev_raw, self._prev_filtered))
            out = preemphasis(y, self.config.preemphasis, prev=self._prev_filtered)
        self._prev_raw = float(x[-1])
        self._prev_filtered = float(y[-1])
        return out.astype(np.float32)

    def push(self, chunk) -> np.ndarray:
        """Consume one PCM chunk.

        Returns:
            float32 (n_new_frames, n_mels); zero rows until enough samples
            for the next frame have arrived.
        """
        pcm = as_pcm(chunk)
        if pcm.size == 0:
            return self.extractor.empty()
        self.samples_seen += len(pcm)

        signal = np.concatenate([self._pending, self._condition(pcm)])
        n = num_frames(len(signal), self.config.frame_size, self.config.hop_size)
        if n == 0:
            self._pending = signal
            return self.extractor.empty()

        features = self.extractor.features_from_signal(signal)
        self._pending = signal[n * self.config.hop_size :].copy()
        self.frames_emitted += n
        return features
