"""
Test doubles (fakes, stubs) for Jukebox contract tests.

These satisfy the AudioSource/AudioStream/BaseSink interfaces without
spawning ffmpeg, touching the network or writing files.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from jukebox.config import FRAME_BYTES
from jukebox.errors import OpenError
from jukebox.outputs.base_sink import BaseSink
from jukebox.source.audio_info import AudioInfo
from jukebox.source.audio_timestamp import AudioTimestamp
from jukebox.source.base import AudioSource, AudioStream


class FakeStream(AudioStream):
    """
    Stream that replays scripted chunks, then reports end of data.

    Each chunk is returned by one read_frame() call (truncated to max_len).
    An entry that is an exception instance is raised instead of read.
    """

    def __init__(self, chunks: Sequence, owner: Optional["FakeSource"] = None):
        self._chunks = list(chunks)
        self._owner = owner
        self.reads = 0
        self.bytes_read = 0
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def read_frame(self, buffer: bytearray, max_len: Optional[int] = None) -> int:
        if self.closed:
            raise AssertionError("read_frame() called on a closed stream")
        self.reads += 1
        if not self._chunks:
            return 0
        chunk = self._chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        if max_len is None:
            max_len = len(buffer)
        data = bytes(chunk)[:max_len]
        buffer[:len(data)] = data
        self.bytes_read += len(data)
        return len(data)

    def current_timestamp(self) -> Optional[AudioTimestamp]:
        return AudioTimestamp.from_milliseconds(self.bytes_read * 1000 // 192000)

    def close(self) -> None:
        self.close_calls += 1
        if self.close_calls > 1:
            raise AssertionError("close() called twice on the same stream")
        if self._owner is not None:
            self._owner.open_streams -= 1


class FakeSource(AudioSource):
    """
    Source whose streams replay the same scripted chunks on every open.

    Tracks every stream it opened and how many are still open. fail_open
    set to True raises OpenError; set to an exception instance raises that.
    """

    def __init__(self, name: str, chunks: Optional[Sequence] = None, fail_open: Union[bool, Exception] = False):
        self.name = name
        self.chunks = list(chunks) if chunks is not None else [pcm_frame(1)]
        self.fail_open = fail_open
        self.streams: List[FakeStream] = []
        self.open_streams = 0

    def locator(self) -> str:
        return f"/fake/{self.name}.mp3"

    def info(self) -> AudioInfo:
        return AudioInfo(title=self.name, origin=self.locator(), extractor="FakeSource")

    def open_stream(self) -> AudioStream:
        if isinstance(self.fail_open, Exception):
            raise self.fail_open
        if self.fail_open:
            raise OpenError(self.locator(), "scripted open failure")
        stream = FakeStream(self.chunks, owner=self)
        self.streams.append(stream)
        self.open_streams += 1
        return stream

    @property
    def last_stream(self) -> Optional[FakeStream]:
        return self.streams[-1] if self.streams else None


class RecordingSink(BaseSink):
    """Sink that keeps every frame written to it."""

    def __init__(self):
        self.frames: List[bytes] = []
        self.closed = False

    def write(self, frame: bytes) -> None:
        self.frames.append(frame)

    def close(self) -> None:
        self.closed = True


def pcm_frame(sample: int, samples: int = FRAME_BYTES // 2) -> bytes:
    """Build s16be PCM where every sample has the same value."""
    return np.full(samples, sample, dtype=">i2").tobytes()


def pcm_samples(data: bytes) -> np.ndarray:
    """Decode s16be bytes to an int array for assertions."""
    return np.frombuffer(bytes(data), dtype=">i2").astype(np.int32)
