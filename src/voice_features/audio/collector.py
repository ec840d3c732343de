"""Microphone capture as mono 16 kHz int16 PCM."""

import logging
import queue
from typing import Iterator, Optional

import numpy as np

try:
    import sounddevice as sd
except ImportError:
    sd = None  # type: ignore

from voice_features.audio.config import FeatureConfig

logger = logging.getLogger(__name__)

_MISSING_SD = "sounddevice is required for recording. pip install sounddevice"


class AudioCollector:
    """Records mono int16 PCM at ``config.sample_rate`` in streaming or batch mode."""

    def __init__(self, config: Optional[FeatureConfig] = None):
        self.config = config or FeatureConfig()

    def record_chunk(
        self,
        duration_sec: float,
        device: Optional[int] = None,
    ) -> np.ndarray:
        """Record a single chunk of audio.

        Args:
            duration_sec: Recording duration in seconds.
            device: Input device index (None = default).

        Returns:
            Mono int16 array, shape (n_samples,).
        """
        if sd is None:
            raise ImportError(_MISSING_SD)

        samples = int(duration_sec * self.config.sample_rate)
        logger.info("Recording %d samples from device %s", samples, device)
        rec = sd.rec(
            samples,
            samplerate=self.config.sample_rate,
            channels=self.config.channels,
            dtype="int16",
            device=device,
        )
        sd.wait()
        return rec.reshape(-1)

    def record_stream(
        self,
        chunk_duration_sec: float = 0.1,
        device: Optional[int] = None,
    ) -> Iterator[np.ndarray]:
        """Stream audio chunks continuously.

        Args:
            chunk_duration_sec: Duration of each yielded chunk in seconds.
            device: Input device index (None = default).

        Yields:
            Mono int16 chunks, shape (n_samples,).
        """
        if sd is None:
            raise ImportError(_MISSING_SD)

        chunk_samples = int(chunk_duration_sec * self.config.sample_rate)
        q: "queue.Queue[np.ndarray]" = queue.Queue()

        def callback(indata: np.ndarray, _frames: int, _time: object, status: object) -> None:
            if status:
                logger.warning("Input stream status: %s", status)
            q.put(indata.copy().reshape(-1))

        with sd.InputStream(
            samplerate=self.config.sample_rate,
            channels=self.config.channels,
            dtype="int16",
            blocksize=chunk_samples,
            device=device,
            callback=callback,
        ):
            while True:
                yield q.get()

    def record_to_file(
        self,
        filepath: str,
        duration_sec: float,
        device: Optional[int] = None,
    ) -> np.ndarray:
        """Record audio and save it as a mono 16-bit WAV.

        Returns:
            The recorded int16 samples.
        """
        import scipy.io.wavfile as wavfile

        audio = self.record_chunk(duration_sec, device=device)
        wavfile.write(filepath, self.config.sample_rate, audio)
        logger.info("Saved %d samples to %s", len(audio), filepath)
        return audio


def list_devices() -> str:
    """Human-readable list of audio devices."""
    if sd is None:
        raise ImportError(_MISSING_SD)
    return str(sd.query_devices())
