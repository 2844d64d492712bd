"""
Player lifecycle events.

Events are emitted synchronously after a transition has committed, once the
player lock has been released, so listeners may call back into the player.
"""

import enum
from dataclasses import dataclass
from typing import Callable, Optional

from jukebox.source.base import AudioSource


class PlayerState(enum.Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class PlayerEventType(enum.Enum):
    PLAYING = "playing"      # playback started or resumed
    PAUSED = "paused"
    STOPPED = "stopped"
    SKIPPED = "skipped"      # skip_to_next() was called
    RELOADED = "reloaded"    # reload() restarted a source
    NEXT = "next"            # advanced to the next queued source
    REPEATED = "repeated"    # repeat restarted the finished source
    FINISHED = "finished"    # the queue ran dry


@dataclass(frozen=True)
class PlayerEvent:
    """
    A committed player transition.

    Attributes:
        type: What happened
        source: The source the event concerns (may be None, e.g. FINISHED after a skip on an idle player)
        old_state: State before the operation
        new_state: State after the operation
    """
    type: PlayerEventType
    source: Optional[AudioSource]
    old_state: PlayerState
    new_state: PlayerState


PlayerListener = Callable[[PlayerEvent], None]
