"""Streaming feature loop: PCM chunks -> log-Mel frames -> consumer.

Glue that wires the capture side to whatever consumes features. The consumer
is a callable (on_features) so an inference engine, a file writer or a test
collector can be plugged in without this package knowing about it.

Streaming: microphone chunks every 100 ms, features emitted as soon as
``min_frames`` new frames are complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

import numpy as np

from voice_features.audio import AudioCollector
from voice_features.audio.config import FeatureConfig
from voice_features.features import StreamingLogMelExtractor

logger = logging.getLogger(__name__)


@dataclass
class StreamingConfig:
    """Streaming feature loop parameters."""

    update_interval_sec: float = 0.1
    sample_rate: int = 16_000
    min_frames: int = 1

    @property
    def chunk_samples(self) -> int:
        return int(self.update_interval_sec * self.sample_rate)


# Consumer: receives (n_frames, n_mels) float32 blocks, frame-major
FeatureCallback = Callable[[np.ndarray], None]


class StreamingFeaturePipeline:
    """Runs capture -> streaming log-Mel -> consumer in a loop.

    Components are injected so you can use real or mock audio, and any
    downstream consumer via a callable.

    Interface:
      pipeline = StreamingFeaturePipeline(
          config=StreamingConfig(),
          extractor=StreamingLogMelExtractor(),
          on_features=my_consumer,
      )
      pipeline.run()  # blocks; use stop() from another thread or pass a finite audio_iterator
    """

    def __init__(
        self,
        config: Optional[StreamingConfig] = None,
        feature_config: Optional[FeatureConfig] = None,
        extractor: Optional[StreamingLogMelExtractor] = None,
        on_features: Optional[FeatureCallback] = None,
        audio_collector: Optional[AudioCollector] = None,
    ):
        self.streaming_config = config or StreamingConfig()
        if self.streaming_config.min_frames < 1:
            raise ValueError(f"min_frames must be >= 1, got {self.streaming_config.min_frames}")
        self.extractor = extractor or StreamingLogMelExtractor(feature_config)
        self.feature_config = self.extractor.config
        if self.feature_config.sample_rate != self.streaming_config.sample_rate:
            raise ValueError(
                f"Sample rate mismatch: streaming {self.streaming_config.sample_rate} Hz, "
                f"features {self.feature_config.sample_rate} Hz"
            )
        self.on_features = on_features or (lambda features: None)
        self.audio_collector = audio_collector or AudioCollector(self.feature_config)

        self._held: List[np.ndarray] = []
        self._held_frames = 0
        self._stopped = False

    def stop(self) -> None:
        """Signal the run loop to exit (checked each iteration)."""
        self._stopped = True

    def reset(self) -> None:
        """Drop held frames and extractor state."""
        self.extractor.reset()
        self._held = []
        self._held_frames = 0

    def _process_chunk(self, chunk: np.ndarray) -> Optional[np.ndarray]:
        """Push one chunk; return a feature block once min_frames are ready."""
        features = self.extractor.push(chunk)
        if features.shape[0] > 0:
            self._held.append(features)
            self._held_frames += features.shape[0]
        if self._held_frames < self.streaming_config.min_frames:
            return None
        block = np.concatenate(self._held, axis=0)
        self._held = []
        self._held_frames = 0
        return block

    def _drain(self) -> Optional[np.ndarray]:
        """Return frames still held below min_frames, or None."""
        if self._held_frames == 0:
            return None
        block = np.concatenate(self._held, axis=0)
        self._held = []
        self._held_frames = 0
        return block

    def _emit(self, block: np.ndarray) -> None:
        logger.debug("Emitting %d feature frames", block.shape[0])
        self.on_features(block)

    def run(
        self,
        audio_iterator: Optional[Iterator[np.ndarray]] = None,
        device: Optional[int] = None,
    ) -> None:
        """Run the streaming loop until stopped or iterator exhausted.

        Args:
            audio_iterator: If provided, use this as the source of int16
                chunks. If None, use the microphone via
                audio_collector.record_stream(update_interval_sec).
            device: Microphone device index when using live audio (ignored if
                audio_iterator is provided).
        """
        self._stopped = False
        if audio_iterator is None:
            audio_iterator = self.audio_collector.record_stream(
                chunk_duration_sec=self.streaming_config.update_interval_sec,
                device=device,
            )
        for chunk in audio_iterator:
            if self._stopped:
                break
            block = self._process_chunk(chunk)
            if block is not None:
                self._emit(block)
        # Frames still short of min_frames go out when the source ends.
        block = self._drain()
        if block is not None:
            self._emit(block)
        logger.info(
            "Streaming loop finished: %d samples, %d frames",
            self.extractor.samples_seen,
            self.extractor.frames_emitted,
        )

    def run_for_n_updates(
        self,
        n: int,
        audio_iterator: Iterator[np.ndarray],
    ) -> List[np.ndarray]:
        """Run for exactly n feature updates; used for tests. Returns the emitted blocks."""
        self._stopped = False
        blocks: List[np.ndarray] = []
        if n <= 0:
            return blocks
        for chunk in audio_iterator:
            block = self._process_chunk(chunk)
            if block is not None:
                blocks.append(block)
                self._emit(block)
                if len(blocks) >= n:
                    break
        return blocks
