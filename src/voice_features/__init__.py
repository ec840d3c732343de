"""Voice features - 16 kHz PCM to 80-bin log-Mel spectrogram front end."""

from voice_features.audio.config import FeatureConfig
from voice_features.features import LogMelExtractor, StreamingLogMelExtractor, extract_log_mel

__all__ = ["FeatureConfig", "LogMelExtractor", "StreamingLogMelExtractor", "extract_log_mel"]

__version__ = "0.1.0"
