"""
FFmpeg-backed AudioStream.

Decodes any input ffmpeg understands to canonical PCM (s16be, 2ch, 48kHz)
and exposes it through the pull-based read_frame() interface.
"""

import logging
import os
import subprocess
from typing import Optional

from jukebox.config import BYTES_PER_SECOND, CHANNELS, FRAME_BYTES, SAMPLE_RATE
from jukebox.errors import OpenError, StreamReadError
from jukebox.source.audio_timestamp import AudioTimestamp
from jukebox.source.base import AudioStream

logger = logging.getLogger(__name__)


def build_decode_command(ffmpeg_path: str, target: str) -> list[str]:
    """
    Build the ffmpeg command line that decodes target to canonical PCM on stdout.

    Args:
        ffmpeg_path: ffmpeg executable
        target: File path or URL

    Returns:
        Argument list for subprocess
    """
    return [
        ffmpeg_path,
        "-nostdin",
        "-loglevel", "error",
        "-i", target,
        "-f", "s16be",            # PCM, signed, 16bit, big endian
        "-ac", str(CHANNELS),     # stereo
        "-ar", str(SAMPLE_RATE),  # 48kHz
        "-map", "a",              # audio streams only
        "-",                      # stdout
    ]


class FFmpegAudioStream(AudioStream):
    """
    Stream reading decoded PCM from an ffmpeg subprocess pipe.

    The playback position is derived from the number of bytes consumed, so
    it reflects what the player has actually pulled rather than how far
    ffmpeg has decoded ahead.
    """

    def __init__(self, command: list[str], locator: str):
        """
        Launch the decoder.

        Args:
            command: Full ffmpeg argument list (see build_decode_command)
            locator: Source locator, for logs and errors

        Raises:
            OpenError: If the decoder process cannot be started
        """
        self.locator = locator
        self._bytes_read = 0
        self._closed = False

        try:
            # Own process group so Ctrl-C on the parent does not reach ffmpeg
            self.proc: Optional[subprocess.Popen] = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                bufsize=FRAME_BYTES * 4,  # hint
                preexec_fn=os.setsid,
            )
        except FileNotFoundError as e:
            raise OpenError(locator, f"decoder not found ({command[0]})") from e
        except OSError as e:
            raise OpenError(locator, f"decoder failed to launch: {e}") from e

        logger.debug(f"[STREAM] Decoder started (pid={self.proc.pid}) for {locator}")

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    @property
    def closed(self) -> bool:
        return self._closed

    def read_frame(self, buffer: bytearray, max_len: Optional[int] = None) -> int:
        if self._closed or self.proc is None:
            raise StreamReadError(f"Read from closed stream: {self.locator}")
        assert self.proc.stdout is not None

        if max_len is None:
            max_len = len(buffer)
        view = memoryview(buffer)[:max_len]
        try:
            amount = self.proc.stdout.readinto(view)
        finally:
            view.release()

        # readinto returns None only for non-blocking pipes with no data yet
        if amount is None:
            raise StreamReadError(f"Decoder produced no data in time: {self.locator}")
        self._bytes_read += amount
        return amount

    def current_timestamp(self) -> Optional[AudioTimestamp]:
        return AudioTimestamp.from_milliseconds(self._bytes_read * 1000 // BYTES_PER_SECOND)

    def close(self) -> None:
        """
        Clean up the ffmpeg process.

        Closes stdout and terminates/kills the process if still running.
        Safe to call multiple times.
        """
        if self._closed:
            return
        self._closed = True

        proc = self.proc
        self.proc = None
        if proc is None:
            return

        try:
            # Close stdout first
            if proc.stdout:
                proc.stdout.close()
        except OSError as e:
            logger.debug(f"[STREAM] Error closing decoder pipe for {self.locator}: {e}")

        # Terminate the process
        if proc.poll() is None:  # Process is still running
            try:
                proc.terminate()
                proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                # Force kill if terminate didn't work
                logger.warning(f"[STREAM] Decoder didn't terminate, killing: {self.locator}")
                proc.kill()
                try:
                    proc.wait(timeout=1)
                except subprocess.TimeoutExpired:
                    logger.error(f"[STREAM] Decoder did not exit after SIGKILL (pid={proc.pid})")

        logger.debug(f"[STREAM] Decoder closed (pid={proc.pid}) for {self.locator}")
