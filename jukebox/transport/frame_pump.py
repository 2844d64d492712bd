"""
Fixed-cadence transport driver.

FramePump stands in for the downstream audio transport: every frame period
it asks the player whether it can provide audio and, if so, pulls one frame
and hands a copy to the output sink.
"""

import logging
import threading
import time
from typing import Optional

from jukebox.config import FRAME_DURATION_MS
from jukebox.outputs.base_sink import BaseSink
from jukebox.player.music_player import MusicPlayer

logger = logging.getLogger(__name__)

FRAME_DURATION_SEC = FRAME_DURATION_MS / 1000.0  # 0.020s


class FramePump:
    """
    Polls a MusicPlayer at a fixed cadence and writes frames to a sink.

    Uses absolute monotonic deadlines so scheduling jitter does not
    accumulate; when it falls behind it resyncs instead of bursting.
    Errors are logged and the pump keeps ticking.
    """

    def __init__(self, player: MusicPlayer, sink: BaseSink, frame_duration_sec: float = FRAME_DURATION_SEC):
        """
        Args:
            player: Frame provider to poll
            sink: Destination for provided frames
            frame_duration_sec: Tick period (20ms by default)
        """
        if frame_duration_sec <= 0:
            raise ValueError(f"Invalid frame duration: {frame_duration_sec} (must be > 0)")
        self.player = player
        self.sink = sink
        self.frame_duration_sec = frame_duration_sec
        self.frames_delivered = 0
        self.empty_ticks = 0
        self.errors = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="FramePump", daemon=True)
        self._thread.start()
        logger.info("[PUMP] FramePump started")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=1)
            self._thread = None
        logger.info(
            f"[PUMP] FramePump stopped (delivered={self.frames_delivered}, "
            f"empty={self.empty_ticks}, errors={self.errors})"
        )

    def tick(self) -> bool:
        """
        Run one transport tick.

        Returns:
            True if a frame was delivered to the sink
        """
        if not self.player.can_provide():
            return False

        frame = self.player.provide_frame()
        if frame is None:
            self.empty_ticks += 1
            return False

        # The player reuses its buffer; the sink gets an immutable copy
        self.sink.write(bytes(frame))
        self.frames_delivered += 1
        return True

    def _run(self) -> None:
        next_tick = time.monotonic()

        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                self.errors += 1
                logger.error(f"[PUMP] Tick error: {e}", exc_info=True)

            next_tick += self.frame_duration_sec
            sleep_time = next_tick - time.monotonic()
            if sleep_time > 0:
                self._stop_event.wait(sleep_time)
            else:
                # Resync if behind schedule instead of accumulating delay
                logger.debug("[PUMP] Behind schedule, resyncing")
                next_tick = time.monotonic()
