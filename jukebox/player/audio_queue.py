"""
Playback queue for Jukebox.

FIFO queue of AudioSources waiting to be played. Not thread-safe on its own:
the MusicPlayer lock guards every access.
"""

import logging
import random
from collections import deque
from typing import Iterable, Optional

from jukebox.source.base import AudioSource

logger = logging.getLogger(__name__)


class AudioQueue:
    """
    FIFO queue of not-yet-started sources.

    Insertion order is playback order unless the player pops a random entry
    for shuffle.
    """

    def __init__(self):
        """Initialize the queue."""
        self._queue: deque[AudioSource] = deque()

    def enqueue(self, source: AudioSource) -> None:
        """
        Add a source to the end of the queue.

        Args:
            source: AudioSource to add
        """
        if source is None:
            raise ValueError("Cannot enqueue None")
        self._queue.append(source)
        logger.debug(f"Enqueued: {source.locator()}")

    def enqueue_multiple(self, sources: Iterable[AudioSource]) -> None:
        """
        Add multiple sources to the end of the queue, keeping their order.

        Args:
            sources: Sources to add
        """
        for source in sources:
            self.enqueue(source)

    def dequeue(self) -> Optional[AudioSource]:
        """
        Remove and return the first source.

        Returns:
            Source from front of queue, or None if queue is empty
        """
        if self.empty():
            return None
        source = self._queue.popleft()
        logger.debug(f"Dequeued: {source.locator()}")
        return source

    def pop_random(self, rng: random.Random) -> Optional[AudioSource]:
        """
        Remove and return a uniformly random source.

        Each call draws independently; there is no precomputed shuffle order.

        Args:
            rng: Random generator to draw the index from

        Returns:
            The removed source, or None if queue is empty
        """
        if self.empty():
            return None
        index = rng.randrange(len(self._queue))
        source = self._queue[index]
        del self._queue[index]
        logger.debug(f"Dequeued (shuffle, index={index}): {source.locator()}")
        return source

    def peek(self) -> Optional[AudioSource]:
        """Return the first source without removing it, or None if empty."""
        if self.empty():
            return None
        return self._queue[0]

    def remove(self, source: AudioSource) -> bool:
        """
        Remove the first occurrence of source.

        Returns:
            True if a matching entry was removed
        """
        try:
            self._queue.remove(source)
        except ValueError:
            return False
        logger.debug(f"Removed from queue: {source.locator()}")
        return True

    def empty(self) -> bool:
        return len(self._queue) == 0

    def size(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        """Clear all sources from the queue."""
        self._queue.clear()
        logger.debug("Queue cleared")

    def snapshot(self) -> list[AudioSource]:
        """Copy of the queue contents in playback order."""
        return list(self._queue)

    def dump(self) -> list[str]:
        """
        Dump queue contents for debugging.

        Returns:
            Locators in queue order
        """
        return [source.locator() for source in self._queue]
