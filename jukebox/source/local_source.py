"""
Local file source.
"""

import logging
import os
import threading
from typing import Optional

from jukebox.config import PlayerConfig
from jukebox.errors import OpenError
from jukebox.source.audio_info import AudioInfo
from jukebox.source.base import AudioSource, AudioStream
from jukebox.source.ffmpeg_stream import FFmpegAudioStream, build_decode_command
from jukebox.source.probe import probe_info

logger = logging.getLogger(__name__)


class LocalSource(AudioSource):
    """
    Audio file on the local filesystem, decoded through ffmpeg.

    The file is validated once at construction; info is probed lazily with
    ffprobe and cached for the lifetime of the source.
    """

    def __init__(self, path: str, config: Optional[PlayerConfig] = None):
        """
        Args:
            path: Path to an audio file
            config: Decoder settings (ffmpeg/ffprobe paths, probe timeout)

        Raises:
            ValueError: If path is empty
            FileNotFoundError: If the file does not exist
            IsADirectoryError: If path is a directory
            PermissionError: If the file is not readable
        """
        if not path:
            raise ValueError("File path cannot be empty")
        if not os.path.exists(path):
            raise FileNotFoundError(f"Audio file not found: {path}")
        if os.path.isdir(path):
            raise IsADirectoryError(f"Audio path is a directory, must be a file: {path}")
        if not os.access(path, os.R_OK):
            raise PermissionError(f"Audio file not readable: {path}")

        self._path = os.path.realpath(path)
        self._config = config or PlayerConfig()
        self._info: Optional[AudioInfo] = None
        self._info_lock = threading.Lock()

    def locator(self) -> str:
        return self._path

    def info(self) -> AudioInfo:
        with self._info_lock:
            if self._info is None:
                self._info = probe_info(
                    self._config.ffprobe_path,
                    self._path,
                    extractor="LocalSource",
                    timeout=self._config.probe_timeout_sec,
                )
            return self._info

    def open_stream(self) -> AudioStream:
        if not os.path.isfile(self._path):
            raise OpenError(self._path, "file no longer exists")
        logger.debug(f"[SOURCE] Opening local file {self._path}")
        return FFmpegAudioStream(build_decode_command(self._config.ffmpeg_path, self._path), self._path)
