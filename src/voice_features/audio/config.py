"""Centralized feature extraction configuration.

Encoding standards:
- Audio: mono 16 kHz, signed 16-bit PCM
- Conditioning: 100 Hz single-pole high-pass, then 0.97 pre-emphasis
- Framing: 25 ms window / 10 ms hop (400 / 160 samples), Hann window
- Features: 80-bin log-Mel, frame-major (n_frames, n_mels)
"""

from dataclasses import dataclass

PCM_SCALE = 32768.0


@dataclass(frozen=True)
class FeatureConfig:
    """Log-Mel front end configuration.

    The defaults are the fixed constants the acoustic model was trained on.
    Instances are hashable and key the process-wide window/filter bank cache.
    """

    # Recording
    sample_rate: int = 16_000
    channels: int = 1  # mono

    # Conditioning
    highpass_cutoff_hz: float = 100.0
    preemphasis: float = 0.97

    # Framing
    frame_size: int = 400
    hop_size: int = 160

    # Mel filterbanks
    n_mels: int = 80
    epsilon: float = 1e-9

    @property
    def n_bins(self) -> int:
        """Number of one-sided spectrum bins (N/2 + 1)."""
        return self.frame_size // 2 + 1

    @property
    def frame_ms(self) -> float:
        return 1000.0 * self.frame_size / self.sample_rate

    @property
    def hop_ms(self) -> float:
        return 1000.0 * self.hop_size / self.sample_rate

    @property
    def frames_per_second(self) -> float:
        """Number of feature frames per second."""
        return self.sample_rate / self.hop_size

    def num_frames(self, n_samples: int) -> int:
        """Frame count for a buffer of ``n_samples`` samples (0 if too short)."""
        if n_samples < self.frame_size:
            return 0
        return 1 + (n_samples - self.frame_size) // self.hop_size

    def validate(self) -> "FeatureConfig":
        """Raise ValueError on sizes the pipeline cannot frame."""
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.frame_size < 2:
            raise ValueError(f"frame_size must be >= 2, got {self.frame_size}")
        if self.hop_size <= 0 or self.hop_size > self.frame_size:
            raise ValueError(
                f"hop_size must be in [1, frame_size={self.frame_size}], got {self.hop_size}"
            )
        if self.n_mels <= 0:
            raise ValueError(f"n_mels must be positive, got {self.n_mels}")
        if self.highpass_cutoff_hz <= 0:
            raise ValueError(f"highpass_cutoff_hz must be positive, got {self.highpass_cutoff_hz}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        return self


DEFAULT_CONFIG = FeatureConfig()
