"""
Exception hierarchy for Jukebox.

Control-path errors (InvalidStateError, EmptyQueueError, NeverStartedError,
OpenError from play()) surface synchronously to the caller. Errors on the
frame path are logged by the player and never reach the transport.
"""


class JukeboxError(Exception):
    """Base class for all Jukebox errors."""
    pass


class PlayerError(JukeboxError):
    """Operation rejected by the music player."""
    pass


class InvalidStateError(PlayerError):
    """Operation is not allowed in the player's current state (e.g. pause while stopped)."""
    pass


class EmptyQueueError(PlayerError):
    """play() was called with nothing queued and nothing loaded."""
    pass


class NeverStartedError(PlayerError):
    """reload() was called before any source was ever loaded."""
    pass


class OpenError(JukeboxError):
    """A source could not be opened as a stream (unreachable locator or decoder launch failure)."""

    def __init__(self, locator: str, reason: str):
        super().__init__(f"Cannot open {locator}: {reason}")
        self.locator = locator
        self.reason = reason


class StreamReadError(JukeboxError, OSError):
    """A stream failed while producing data."""
    pass


class TimestampParseError(JukeboxError, ValueError):
    """A decoder timestamp string was malformed."""
    pass
