"""
Contract tests for output sinks.
"""

import wave

import numpy as np
import pytest

from jukebox.config import PlayerConfig
from jukebox.outputs import NullSink, WavFileSink, create_output_sink
from jukebox.tests.contracts.test_doubles import pcm_frame


class TestNullSink:
    """Tests for NullSink."""

    def test_accepts_and_discards(self):
        sink = NullSink()
        sink.write(pcm_frame(1))
        sink.close()


class TestWavFileSink:
    """Tests for WavFileSink."""

    def test_writes_little_endian_wav(self, tmp_path):
        path = tmp_path / "out.wav"
        sink = WavFileSink(str(path))

        sink.write(pcm_frame(258))
        sink.write(pcm_frame(-2))
        sink.close()

        with wave.open(str(path), "rb") as wav:
            assert wav.getnchannels() == 2
            assert wav.getsampwidth() == 2
            assert wav.getframerate() == 48000
            assert wav.getnframes() == 2 * 960
            data = np.frombuffer(wav.readframes(wav.getnframes()), dtype="<i2")

        assert set(data[:1920].tolist()) == {258}
        assert set(data[1920:].tolist()) == {-2}

    def test_write_after_close_rejected(self, tmp_path):
        sink = WavFileSink(str(tmp_path / "out.wav"))
        sink.close()
        sink.close()

        with pytest.raises(ValueError):
            sink.write(pcm_frame(1))


class TestFactory:
    """Tests for create_output_sink()."""

    def test_null_by_default(self):
        assert isinstance(create_output_sink(PlayerConfig()), NullSink)

    def test_wav_mode(self, tmp_path):
        sink = create_output_sink(PlayerConfig(output_mode="wav", output_path=str(tmp_path / "o.wav")))
        try:
            assert isinstance(sink, WavFileSink)
        finally:
            sink.close()

    def test_wav_without_path_rejected(self):
        with pytest.raises(ValueError):
            create_output_sink(PlayerConfig(output_mode="wav"))

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            create_output_sink(PlayerConfig(output_mode="alsa"))
