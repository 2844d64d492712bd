"""
HTTP(S) URL source.
"""

import logging
import threading
from typing import Optional
from urllib.parse import urlparse

import httpx

from jukebox.config import PlayerConfig
from jukebox.errors import OpenError
from jukebox.source.audio_info import AudioInfo
from jukebox.source.base import AudioSource, AudioStream
from jukebox.source.ffmpeg_stream import FFmpegAudioStream, build_decode_command
from jukebox.source.probe import probe_info

logger = logging.getLogger(__name__)


class RemoteSource(AudioSource):
    """
    Audio served over HTTP(S), decoded by ffmpeg straight from the URL.

    Reachability is checked with httpx before the decoder is launched, so an
    unreachable URL fails with OpenError instead of an immediately-empty stream.
    """

    def __init__(self, url: str, config: Optional[PlayerConfig] = None):
        """
        Args:
            url: http:// or https:// URL
            config: Decoder and HTTP settings

        Raises:
            ValueError: If url is empty or not an http(s) URL
        """
        if not url:
            raise ValueError("URL cannot be empty")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Unsupported URL (must be http or https): {url}")
        try:
            # urlparse does not check ports or hosts; httpx does
            httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ValueError(f"Invalid URL {url}: {e}") from e

        self._url = url
        self._config = config or PlayerConfig()
        self._info: Optional[AudioInfo] = None
        self._info_lock = threading.Lock()

    def locator(self) -> str:
        return self._url

    def info(self) -> AudioInfo:
        with self._info_lock:
            if self._info is None:
                self._info = probe_info(
                    self._config.ffprobe_path,
                    self._url,
                    extractor="RemoteSource",
                    timeout=self._config.probe_timeout_sec,
                )
            return self._info

    def check_reachable(self) -> None:
        """
        Verify the URL answers with a non-error status.

        Raises:
            OpenError: On an invalid URL, a transport failure or an HTTP status >= 400
        """
        timeout = self._config.http_timeout_sec
        try:
            response = httpx.head(self._url, timeout=timeout, follow_redirects=True)
            status = response.status_code
            if status == 405:
                # Some servers refuse HEAD; open the body without downloading it
                with httpx.stream("GET", self._url, timeout=timeout, follow_redirects=True) as streamed:
                    status = streamed.status_code
        except httpx.InvalidURL as e:
            raise OpenError(self._url, f"invalid URL ({e})") from e
        except httpx.HTTPError as e:
            logger.warning(f"[SOURCE] URL unreachable {self._url}: {e}")
            raise OpenError(self._url, f"unreachable ({e})") from e

        if status >= 400:
            logger.warning(f"[SOURCE] URL returned HTTP {status}: {self._url}")
            raise OpenError(self._url, f"HTTP status {status}")

    def open_stream(self) -> AudioStream:
        self.check_reachable()
        logger.debug(f"[SOURCE] Opening remote stream {self._url}")
        return FFmpegAudioStream(build_decode_command(self._config.ffmpeg_path, self._url), self._url)
