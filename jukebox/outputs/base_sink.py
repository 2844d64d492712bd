"""
Frame sink interface.
"""

from abc import ABC, abstractmethod


class BaseSink(ABC):
    """
    Destination for the frames FramePump pulls from the player.

    write() receives an immutable copy of one player frame, so a sink may
    keep it without copying again.
    """

    @abstractmethod
    def write(self, frame: bytes) -> None:
        """
        Consume one frame.

        Args:
            frame: frame_bytes of s16be stereo 48kHz PCM
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush and release whatever the sink holds open."""
        ...
