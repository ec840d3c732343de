"""Streaming feature pipeline."""

from voice_features.pipeline.streaming_loop import StreamingConfig, StreamingFeaturePipeline

__all__ = ["StreamingConfig", "StreamingFeaturePipeline"]
