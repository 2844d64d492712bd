"""
Transport driver for Jukebox.
"""

from jukebox.transport.frame_pump import FRAME_DURATION_SEC, FramePump

__all__ = ["FRAME_DURATION_SEC", "FramePump"]
