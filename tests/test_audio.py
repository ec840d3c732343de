"""Unit tests for FeatureConfig, PCM helpers and WAV loading."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import numpy as np
import scipy.io.wavfile as wavfile

from voice_features.audio import FeatureConfig, load_wav, pcm_from_bytes, pcm_to_bytes
from voice_features.audio import collector as collector_module
from voice_features.audio.collector import AudioCollector, list_devices
from voice_features.audio.pcm import as_pcm, float_to_pcm


class TestFeatureConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        config = FeatureConfig()
        self.assertEqual(config.sample_rate, 16_000)
        self.assertEqual(config.frame_size, 400)
        self.assertEqual(config.hop_size, 160)
        self.assertEqual(config.n_mels, 80)
        self.assertEqual(config.n_bins, 201)
        self.assertAlmostEqual(config.frame_ms, 25.0)
        self.assertAlmostEqual(config.hop_ms, 10.0)
        self.assertAlmostEqual(config.frames_per_second, 100.0)

    def test_frozen_and_hashable(self) -> None:
        config = FeatureConfig()
        with self.assertRaises(AttributeError):
            config.n_mels = 40  # type: ignore[misc]
        self.assertEqual(hash(config), hash(FeatureConfig()))

    def test_validate(self) -> None:
        self.assertEqual(FeatureConfig().validate(), FeatureConfig())
        for bad in (
            FeatureConfig(frame_size=1),
            FeatureConfig(hop_size=0),
            FeatureConfig(hop_size=401),
            FeatureConfig(n_mels=0),
            FeatureConfig(sample_rate=0),
            FeatureConfig(epsilon=0.0),
        ):
            with self.assertRaises(ValueError):
                bad.validate()


class TestPcm(unittest.TestCase):
    def test_little_endian_decode(self) -> None:
        pcm = pcm_from_bytes(b"\x01\x00\xff\xff\x00\x80")
        self.assertEqual(pcm.dtype, np.int16)
        np.testing.assert_array_equal(pcm, [1, -1, -32768])

    def test_encode(self) -> None:
        self.assertEqual(pcm_to_bytes(np.array([1, -1], dtype=np.int16)), b"\x01\x00\xff\xff")
        samples = np.array([0, 123, -4567, 32767], dtype=np.int16)
        np.testing.assert_array_equal(pcm_from_bytes(pcm_to_bytes(samples)), samples)

    def test_odd_length_rejected(self) -> None:
        with self.assertRaises(ValueError):
            pcm_from_bytes(b"\x01\x00\x02")

    def test_as_pcm_converts_lists(self) -> None:
        pcm = as_pcm([1, 2, 3])
        self.assertEqual(pcm.dtype, np.int16)

    def test_as_pcm_rejects_out_of_range(self) -> None:
        for samples in ([0, 40000], [-40000], np.array([32768], dtype=np.int32)):
            with self.assertRaises(ValueError):
                as_pcm(samples)

    def test_as_pcm_accepts_int16_limits(self) -> None:
        pcm = as_pcm(np.array([-32768, 0, 32767], dtype=np.int64))
        self.assertEqual(pcm.dtype, np.int16)
        np.testing.assert_array_equal(pcm, [-32768, 0, 32767])

    def test_float_to_pcm_clips(self) -> None:
        np.testing.assert_array_equal(float_to_pcm(np.array([0.0, 0.5, -1.5, 2.0])), [0, 16384, -32768, 32767])


class TestLoadWav(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_int16_mono(self) -> None:
        path = self.tmp / "mono.wav"
        samples = np.arange(-100, 100, dtype=np.int16)
        wavfile.write(str(path), 16_000, samples)
        np.testing.assert_array_equal(load_wav(path), samples)

    def test_stereo_downmix(self) -> None:
        path = self.tmp / "stereo.wav"
        stereo = np.stack([np.full(10, 100), np.full(10, 300)], axis=1).astype(np.int16)
        wavfile.write(str(path), 16_000, stereo)
        pcm = load_wav(path)
        self.assertEqual(pcm.shape, (10,))
        np.testing.assert_array_equal(pcm, 200)

    def test_float_wav(self) -> None:
        path = self.tmp / "float.wav"
        wavfile.write(str(path), 16_000, np.array([0.0, 0.5, -0.5], dtype=np.float32))
        np.testing.assert_array_equal(load_wav(path), [0, 16384, -16384])

    def test_int32_wav(self) -> None:
        path = self.tmp / "int32.wav"
        samples = np.array([0, 1000, -1000, 32767, -32768], dtype=np.int32)
        wavfile.write(str(path), 16_000, samples << 16)
        pcm = load_wav(path)
        self.assertEqual(pcm.dtype, np.int16)
        np.testing.assert_array_equal(pcm, samples)

    def test_uint8_wav(self) -> None:
        path = self.tmp / "uint8.wav"
        wavfile.write(str(path), 16_000, np.array([128, 0, 255, 129], dtype=np.uint8))
        pcm = load_wav(path)
        self.assertEqual(pcm.dtype, np.int16)
        np.testing.assert_array_equal(pcm, [0, -32768, 127 << 8, 256])

    def test_rate_mismatch(self) -> None:
        path = self.tmp / "44k.wav"
        wavfile.write(str(path), 44_100, np.zeros(10, dtype=np.int16))
        with self.assertRaises(ValueError):
            load_wav(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_wav(self.tmp / "nope.wav")


class _FakeInputStream:
    """Context manager that delivers queued (n, 1) int16 blocks to the callback on entry."""

    def __init__(self, blocks, **kwargs):
        self.blocks = blocks
        self.kwargs = kwargs

    def __enter__(self):
        for i, block in enumerate(self.blocks):
            status = "input overflow" if i == 0 else None
            self.kwargs["callback"](block, len(block), None, status)
        return self

    def __exit__(self, *exc):
        return False


class _FakeSoundDevice:
    """Stand-in for the sounddevice module recording int16 column arrays."""

    def __init__(self, blocks=()):
        self.blocks = list(blocks)
        self.rec_kwargs = None
        self.stream_kwargs = None
        self.waited = False

    def rec(self, frames, **kwargs):
        self.rec_kwargs = kwargs
        return (np.arange(frames, dtype=np.int16) - 50).reshape(-1, 1)

    def wait(self):
        self.waited = True

    def InputStream(self, **kwargs):
        self.stream_kwargs = kwargs
        return _FakeInputStream(self.blocks, **kwargs)

    def query_devices(self):
        return "0 Fake Microphone, 1 in, 0 out"


class TestAudioCollector(unittest.TestCase):
    def setUp(self) -> None:
        self.fake = _FakeSoundDevice(
            blocks=[np.full((1600, 1), 7, dtype=np.int16), np.full((1600, 1), -7, dtype=np.int16)]
        )
        patcher = mock.patch.object(collector_module, "sd", self.fake)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_default_config(self) -> None:
        self.assertEqual(AudioCollector().config, FeatureConfig())

    def test_record_chunk_flattens_int16(self) -> None:
        audio = AudioCollector().record_chunk(0.01, device=3)
        self.assertEqual(audio.shape, (160,))
        self.assertEqual(audio.dtype, np.int16)
        self.assertEqual(audio[0], -50)
        self.assertTrue(self.fake.waited)
        self.assertEqual(self.fake.rec_kwargs["dtype"], "int16")
        self.assertEqual(self.fake.rec_kwargs["samplerate"], 16_000)
        self.assertEqual(self.fake.rec_kwargs["channels"], 1)
        self.assertEqual(self.fake.rec_kwargs["device"], 3)

    def test_record_stream_yields_flat_chunks(self) -> None:
        with self.assertLogs("voice_features.audio.collector", level="WARNING"):
            stream = AudioCollector().record_stream(chunk_duration_sec=0.1)
            first = next(stream)
        second = next(stream)
        stream.close()
        self.assertEqual(first.shape, (1600,))
        self.assertEqual(first.dtype, np.int16)
        np.testing.assert_array_equal(first, 7)
        np.testing.assert_array_equal(second, -7)
        self.assertEqual(self.fake.stream_kwargs["blocksize"], 1600)
        self.assertEqual(self.fake.stream_kwargs["dtype"], "int16")

    def test_record_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "rec.wav"
            audio = AudioCollector().record_to_file(str(path), 0.01)
            rate, stored = wavfile.read(str(path))
        self.assertEqual(rate, 16_000)
        np.testing.assert_array_equal(stored, audio)

    def test_list_devices(self) -> None:
        self.assertIn("Fake Microphone", list_devices())

    def test_missing_sounddevice(self) -> None:
        with mock.patch.object(collector_module, "sd", None):
            collector = AudioCollector()
            with self.assertRaises(ImportError):
                collector.record_chunk(0.1)
            with self.assertRaises(ImportError):
                next(collector.record_stream())
            with self.assertRaises(ImportError):
                list_devices()


if __name__ == "__main__":
    unittest.main()
