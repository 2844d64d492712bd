"""
Jukebox - pull-based audio playback controller.

A queue-driven music player that hands fixed-size PCM frames to a transport
polling it on a strict cadence.
"""

__version__ = "1.0.0"
