"""
Source and stream capability interfaces for Jukebox.

An AudioSource is an immutable description of something playable. Opening
it yields an AudioStream: a single-owner, sequential producer of canonical
PCM (s16be, 48kHz, stereo) that must be closed explicitly.

The player only depends on these two interfaces, never on a concrete variant.
"""

from abc import ABC, abstractmethod
from typing import Optional

from jukebox.source.audio_info import AudioInfo
from jukebox.source.audio_timestamp import AudioTimestamp


class AudioStream(ABC):
    """
    Open, stateful byte producer bound to one opened source.

    Contract:
    - read_frame() returns the number of bytes written to the start of the
      buffer; 0 means the source is exhausted (not an error)
    - a short read (0 < n < requested) is valid; the caller zero-pads
    - I/O failures raise OSError
    - no reads are permitted after close()
    """

    @abstractmethod
    def read_frame(self, buffer: bytearray, max_len: Optional[int] = None) -> int:
        """
        Read up to max_len bytes of PCM into buffer.

        Args:
            buffer: Destination buffer, filled from index 0
            max_len: Maximum bytes to read (defaults to len(buffer))

        Returns:
            Number of bytes read, 0 at end of data
        """
        ...

    @abstractmethod
    def current_timestamp(self) -> Optional[AudioTimestamp]:
        """Current playback position, or None if unknown."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resource (process, file handle)."""
        ...


class AudioSource(ABC):
    """
    Immutable descriptor of playable content.

    Sources compare equal when they are the same concrete type with the same
    locator, so they can be shared between the queue and the player slots.
    """

    @abstractmethod
    def locator(self) -> str:
        """Path or URL identifying the content."""
        ...

    @abstractmethod
    def info(self) -> AudioInfo:
        """
        Metadata for this source, computed on first call and memoized.

        Failures are reported through AudioInfo.error, never raised.
        """
        ...

    @abstractmethod
    def open_stream(self) -> AudioStream:
        """
        Open a new stream positioned at the first byte of decoded PCM.

        Raises:
            OpenError: If the locator is unreachable or the decoder cannot start
        """
        ...

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.locator() == other.locator()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.locator()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.locator()!r})"
