"""
Output sinks for Jukebox.

Sinks receive the frames the transport pulls from the player.
"""

from .base_sink import BaseSink
from .null_sink import NullSink
from .wav_sink import WavFileSink
from .factory import create_output_sink

__all__ = [
    "BaseSink",
    "NullSink",
    "WavFileSink",
    "create_output_sink",
]
