"""Audio configuration, PCM helpers and microphone capture."""

from voice_features.audio.config import DEFAULT_CONFIG, FeatureConfig
from voice_features.audio.collector import AudioCollector
from voice_features.audio.pcm import as_pcm, load_wav, pcm_from_bytes, pcm_to_bytes

__all__ = [
    "AudioCollector",
    "DEFAULT_CONFIG",
    "FeatureConfig",
    "as_pcm",
    "load_wav",
    "pcm_from_bytes",
    "pcm_to_bytes",
]
