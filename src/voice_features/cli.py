"""CLI for log-Mel feature extraction and audio capture."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from voice_features.audio import AudioCollector, load_wav
from voice_features.audio.collector import list_devices
from voice_features.audio.config import FeatureConfig
from voice_features.features import LogMelExtractor
from voice_features.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voice-features",
        description="Extract 80-bin log-Mel features from mono 16 kHz PCM",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Extract log-Mel features from a WAV file")
    extract.add_argument("wav", type=Path, help="Input WAV file (16 kHz)")
    extract.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output .npy path (default: print summary only)",
    )
    extract.add_argument(
        "--transform",
        choices=("fft", "dft"),
        default="fft",
        help="Spectral transform (default: fft)",
    )
    extract.add_argument(
        "--flat",
        action="store_true",
        help="Save frame-major flattened features instead of (frames, mels)",
    )

    record = sub.add_parser("record", help="Record audio (mono 16 kHz int16)")
    record.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Recording duration in seconds (default: 5)",
    )
    record.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("recording.wav"),
        help="Output WAV file path",
    )
    record.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with the devices command)",
    )
    record.add_argument(
        "--extract-features",
        action="store_true",
        help="Extract and print log-Mel features after recording",
    )

    sub.add_parser("devices", help="List available audio input devices and exit")
    return parser


def _summarize(features: np.ndarray) -> None:
    print(f"Extracted {features.shape[0]} frames x {features.shape[1]} Mel bins")
    if features.shape[0] > 0:
        print(f"Sample frame (first 5 bins): {features[0, :5]}")


def _cmd_extract(args: argparse.Namespace, config: FeatureConfig) -> int:
    pcm = load_wav(args.wav, expected_rate=config.sample_rate)
    extractor = LogMelExtractor(config, transform=args.transform)
    features = extractor.extract(pcm)
    _summarize(features)
    if args.output is not None:
        out = features.reshape(-1) if args.flat else features
        np.save(args.output, out)
        print(f"Saved: {args.output} shape={out.shape}")
    return 0


def _cmd_record(args: argparse.Namespace, config: FeatureConfig) -> int:
    collector = AudioCollector(config)
    print(f"Recording {args.duration}s to {args.output} (mono {config.sample_rate} Hz)...")
    pcm = collector.record_to_file(str(args.output), args.duration, args.device)
    print(f"Saved: {args.output}")
    if args.extract_features:
        _summarize(LogMelExtractor(config).extract(pcm))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        setup_logging(args.log_level)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    config = FeatureConfig()
    try:
        if args.command == "devices":
            print(list_devices())
            return 0
        if args.command == "extract":
            return _cmd_extract(args, config)
        return _cmd_record(args, config)
    except (FileNotFoundError, ValueError, ImportError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
