"""
Contract tests for the in-place PCM volume transform.
"""

import numpy as np
import pytest

from jukebox.player.volume import PCM_DTYPE, apply_volume


def _buffer(*samples) -> bytearray:
    return bytearray(np.array(samples, dtype=PCM_DTYPE).tobytes())


def _read(buffer) -> list:
    return np.frombuffer(bytes(buffer), dtype=PCM_DTYPE).tolist()


class TestScaling:
    """Tests for per-sample scaling."""

    def test_unity_leaves_buffer_untouched(self):
        buf = _buffer(1, -2, 32767, -32768)
        before = bytes(buf)

        apply_volume(buf, 1.0)

        assert bytes(buf) == before

    def test_scales_in_place(self):
        buf = _buffer(100, -100, 0)

        apply_volume(buf, 2.0)

        assert _read(buf) == [200, -200, 0]

    def test_truncates_toward_zero(self):
        buf = _buffer(3, -3, 1, -1)

        apply_volume(buf, 0.5)

        assert _read(buf) == [1, -1, 0, 0]

    def test_zero_volume_silences(self):
        buf = _buffer(1234, -4321)

        apply_volume(buf, 0.0)

        assert _read(buf) == [0, 0]

    def test_samples_are_big_endian(self):
        buf = bytearray(b"\x00\x64")  # 100 as s16be

        apply_volume(buf, 2.0)

        assert bytes(buf) == b"\x00\xc8"

    def test_trailing_odd_byte_untouched(self):
        buf = bytearray(b"\x00\x64\x7f")

        apply_volume(buf, 2.0)

        assert bytes(buf) == b"\x00\xc8\x7f"

    def test_empty_buffer(self):
        buf = bytearray()
        apply_volume(buf, 2.0)
        assert buf == bytearray()


class TestOverflow:
    """Tests for samples pushed past the 16-bit range."""

    @pytest.mark.parametrize("sample, expected", [
        (20000, 40000 - 65536),
        (-20000, -40000 + 65536),
        (32767, -2),
    ])
    def test_wraps_by_default(self, sample, expected):
        buf = _buffer(sample)

        apply_volume(buf, 2.0)

        assert _read(buf) == [expected]

    @pytest.mark.parametrize("sample, expected", [
        (20000, 32767),
        (-20000, -32768),
        (1000, 2000),
    ])
    def test_saturates_with_clipping(self, sample, expected):
        buf = _buffer(sample)

        apply_volume(buf, 2.0, clipping=True)

        assert _read(buf) == [expected]
