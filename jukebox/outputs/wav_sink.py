import wave

import numpy as np

from jukebox.config import CHANNELS, SAMPLE_RATE
from .base_sink import BaseSink


class WavFileSink(BaseSink):
    """
    Simple WAV writer sink for PCM frames.

    WAV stores little-endian samples, so each big-endian frame is
    byte-swapped before it is written.
    """

    def __init__(self, path: str, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS):
        self.path = path
        self._wave = wave.open(path, "wb")
        self._wave.setnchannels(channels)
        self._wave.setsampwidth(2)  # int16
        self._wave.setframerate(sample_rate)
        self._closed = False

    def write(self, frame: bytes) -> None:
        if self._closed:
            raise ValueError("Sink is closed")
        samples = np.frombuffer(frame, dtype=">i2")
        self._wave.writeframes(samples.astype("<i2").tobytes())

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._wave.close()
