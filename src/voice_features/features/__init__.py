"""Log-Mel front end: conditioning, framing, spectrum, Mel projection."""

from voice_features.features.extractor import LogMelExtractor, extract_log_mel
from voice_features.features.spectral import DirectDFT, FFTTransform, SpectralTransform, get_transform
from voice_features.features.streaming import StreamingLogMelExtractor

__all__ = [
    "DirectDFT",
    "FFTTransform",
    "LogMelExtractor",
    "SpectralTransform",
    "StreamingLogMelExtractor",
    "extract_log_mel",
    "get_transform",
]
