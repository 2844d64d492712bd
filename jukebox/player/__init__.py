"""
Playback engine for Jukebox.

Contains the music player state machine, its queue, the volume transform
and the lifecycle event types.
"""

from jukebox.player.audio_queue import AudioQueue
from jukebox.player.events import PlayerEvent, PlayerEventType, PlayerListener, PlayerState
from jukebox.player.music_player import MusicPlayer
from jukebox.player.volume import apply_volume

__all__ = [
    "AudioQueue",
    "MusicPlayer",
    "PlayerEvent",
    "PlayerEventType",
    "PlayerListener",
    "PlayerState",
    "apply_volume",
]
