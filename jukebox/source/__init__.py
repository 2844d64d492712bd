"""
Audio sources and streams for Jukebox.

Sources describe playable content; streams are the open decoders the
player pulls PCM frames from.
"""

from jukebox.source.audio_timestamp import AudioTimestamp
from jukebox.source.audio_info import AudioInfo
from jukebox.source.base import AudioSource, AudioStream
from jukebox.source.ffmpeg_stream import FFmpegAudioStream
from jukebox.source.local_source import LocalSource
from jukebox.source.remote_source import RemoteSource

__all__ = [
    "AudioTimestamp",
    "AudioInfo",
    "AudioSource",
    "AudioStream",
    "FFmpegAudioStream",
    "LocalSource",
    "RemoteSource",
]
