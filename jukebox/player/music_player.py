"""
Music player engine for Jukebox.

Pull-based playback engine: owns the queue of sources, the single open
stream, the playback state and the shuffle/repeat/volume settings, and
implements the frame-provider contract a transport polls at a fixed cadence.

Threading model:
- The transport thread calls can_provide()/provide_frame() every tick
- Control callers (play/pause/stop/skip/queue edits) may run concurrently
- Every state read and transition happens under one re-entrant lock
- Events are collected under the lock and dispatched after it is released
"""

import logging
import math
import random
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from jukebox.config import FRAME_BYTES, PlayerConfig
from jukebox.errors import EmptyQueueError, InvalidStateError, NeverStartedError
from jukebox.player.audio_queue import AudioQueue
from jukebox.player.events import PlayerEvent, PlayerEventType, PlayerListener, PlayerState
from jukebox.player.volume import apply_volume
from jukebox.source.audio_timestamp import AudioTimestamp
from jukebox.source.base import AudioSource, AudioStream

logger = logging.getLogger(__name__)


class MusicPlayer:
    """
    Queue-driven playback state machine and frame provider.

    States: STOPPED (initial), PLAYING, PAUSED. The player is reusable
    indefinitely; finishing a source only advances the queue.

    Invariants:
    - exactly one of is_playing()/is_paused()/is_stopped() is true
    - a current stream exists iff a current source exists
    - at most one stream is open; it is closed before the next one opens
    - every stream is closed exactly once
    - the queue never contains the current source
    """

    def __init__(
        self,
        frame_bytes: int = FRAME_BYTES,
        volume: float = 1.0,
        shuffle: bool = False,
        repeat: bool = False,
        auto_continue: bool = True,
        volume_clipping: bool = False,
        emit_stop_on_queue_end: bool = False,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the music player.

        Args:
            frame_bytes: Size of one transport frame in bytes (3840 for 20ms s16be stereo 48kHz)
            volume: Initial linear gain
            shuffle: Pick a random queued source when advancing
            repeat: Restart the finished source instead of advancing
            auto_continue: Advance automatically when a stream ends
            volume_clipping: Saturate samples pushed past 16 bits instead of wrapping
            emit_stop_on_queue_end: Also emit STOPPED when the queue runs dry
            rng: Random generator used for shuffle (injectable for tests)
        """
        if frame_bytes <= 0 or frame_bytes % 2 != 0:
            raise ValueError(f"Invalid frame size: {frame_bytes} (must be a positive even number of bytes)")

        self._lock = threading.RLock()
        self._queue = AudioQueue()
        self._previous_source: Optional[AudioSource] = None
        self._current_source: Optional[AudioSource] = None
        self._current_stream: Optional[AudioStream] = None
        self._state = PlayerState.STOPPED
        self._auto_continue = auto_continue
        self._shuffle = shuffle
        self._repeat = repeat
        self._volume = 1.0
        self._volume_clipping = volume_clipping
        self._emit_stop_on_queue_end = emit_stop_on_queue_end
        self._rng = rng or random.Random()

        # Reused for every frame: provide_frame() allocates nothing per tick
        self._buffer = bytearray(frame_bytes)
        self._silence = memoryview(bytes(frame_bytes))

        self._listeners: List[PlayerListener] = []
        self._pending_events: List[PlayerEvent] = []

        self.set_volume(volume)

    @classmethod
    def from_config(cls, config: PlayerConfig, rng: Optional[random.Random] = None) -> "MusicPlayer":
        """Build a player from loaded configuration."""
        return cls(
            frame_bytes=config.frame_bytes,
            volume=config.volume,
            shuffle=config.shuffle,
            repeat=config.repeat,
            auto_continue=config.auto_continue,
            volume_clipping=config.volume_clipping,
            emit_stop_on_queue_end=config.emit_stop_on_queue_end,
            rng=rng,
        )

    # ================================================================== #
    #                             Listeners                              #
    # ================================================================== #

    def add_listener(self, listener: PlayerListener) -> None:
        """
        Register a callable receiving every PlayerEvent.

        Listeners run synchronously on the thread that caused the transition
        (the transport thread for end-of-stream advances), so they must be quick.
        """
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: PlayerListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        with self._lock:
            try:
                yield
            finally:
                events = self._pending_events
                self._pending_events = []
                listeners = list(self._listeners)
        self._dispatch(events, listeners)

    def _emit(self, event_type: PlayerEventType, source: Optional[AudioSource], old_state: PlayerState) -> None:
        self._pending_events.append(PlayerEvent(event_type, source, old_state, self._state))

    def _dispatch(self, events: List[PlayerEvent], listeners: List[PlayerListener]) -> None:
        for event in events:
            for listener in listeners:
                try:
                    listener(event)
                except Exception as e:
                    logger.error(f"[PLAYER] Error in listener for {event.type.name} event: {e}", exc_info=True)

    # ================================================================== #
    #                          Queue management                          #
    # ================================================================== #

    def add_to_queue(self, source: AudioSource) -> None:
        with self._lock:
            self._queue.enqueue(source)
        logger.info(f"[PLAYER] Queued {source.locator()}")

    def add_all_to_queue(self, sources: Iterable[AudioSource]) -> None:
        sources = list(sources)
        with self._lock:
            self._queue.enqueue_multiple(sources)
        logger.info(f"[PLAYER] Queued {len(sources)} source(s)")

    def remove_from_queue(self, source: AudioSource) -> bool:
        with self._lock:
            return self._queue.remove(source)

    def clear_queue(self) -> None:
        with self._lock:
            self._queue.clear()

    def get_queue(self) -> List[AudioSource]:
        """Snapshot of the queued (not yet started) sources in order."""
        with self._lock:
            return self._queue.snapshot()

    # ================================================================== #
    #                         Settings / queries                         #
    # ================================================================== #

    def set_volume(self, volume: float) -> None:
        """
        Set the linear gain applied to every frame.

        Raises:
            ValueError: If volume is negative or not finite
        """
        volume = float(volume)
        if not math.isfinite(volume) or volume < 0:
            raise ValueError(f"Invalid volume: {volume} (must be a finite number >= 0)")
        with self._lock:
            self._volume = volume

    def get_volume(self) -> float:
        with self._lock:
            return self._volume

    def set_shuffle(self, shuffle: bool) -> None:
        with self._lock:
            self._shuffle = shuffle

    def is_shuffle(self) -> bool:
        with self._lock:
            return self._shuffle

    def set_repeat(self, repeat: bool) -> None:
        with self._lock:
            self._repeat = repeat

    def is_repeat(self) -> bool:
        with self._lock:
            return self._repeat

    def set_auto_continue(self, auto_continue: bool) -> None:
        with self._lock:
            self._auto_continue = auto_continue

    def is_auto_continue(self) -> bool:
        with self._lock:
            return self._auto_continue

    def get_current_source(self) -> Optional[AudioSource]:
        with self._lock:
            return self._current_source

    def get_previous_source(self) -> Optional[AudioSource]:
        with self._lock:
            return self._previous_source

    def get_current_timestamp(self) -> Optional[AudioTimestamp]:
        with self._lock:
            if self._current_stream is None:
                return None
            return self._current_stream.current_timestamp()

    def get_state(self) -> PlayerState:
        with self._lock:
            return self._state

    def is_playing(self) -> bool:
        with self._lock:
            return self._state == PlayerState.PLAYING

    def is_paused(self) -> bool:
        with self._lock:
            return self._state == PlayerState.PAUSED

    def is_stopped(self) -> bool:
        with self._lock:
            return self._state == PlayerState.STOPPED

    # ================================================================== #
    #                           Control surface                          #
    # ================================================================== #

    def play(self) -> None:
        """
        Start or resume playback.

        No-op if already playing. Resumes the open stream if there is one
        (paused, or cued by reload(False)); otherwise opens the queue head.

        Raises:
            EmptyQueueError: Nothing loaded and nothing queued
            OpenError: The queue head could not be opened (it is dropped)
        """
        with self._transaction():
            self._play(fire_event=True)

    def pause(self) -> None:
        """
        Pause playback, keeping the stream open at its position.

        Raises:
            InvalidStateError: If the player is stopped
        """
        with self._transaction():
            if self._state == PlayerState.PAUSED:
                return
            if self._state == PlayerState.STOPPED:
                raise InvalidStateError("Cannot pause a stopped player")

            old_state = self._state
            self._state = PlayerState.PAUSED
            logger.info(f"[PLAYER] Paused: {self._current_source.locator()}")
            self._emit(PlayerEventType.PAUSED, self._current_source, old_state)

    def stop(self) -> None:
        """Stop playback and close the current stream. No-op if already stopped."""
        with self._transaction():
            self._stop(fire_event=True)

    def skip_to_next(self) -> None:
        """
        Abandon the current source and start the next queued one.

        Repeat is ignored; shuffle applies. With an empty queue the player
        ends up stopped.
        """
        with self._transaction():
            skipped = self._current_source
            old_state = self._state
            logger.info(f"[PLAYER] Skipping {skipped.locator() if skipped else '<nothing>'}")
            self._play_next(fire_event=False)
            self._emit(PlayerEventType.SKIPPED, skipped, old_state)

    def reload(self, auto_play: bool) -> None:
        """
        Restart the current (or most recent) source from the beginning.

        Args:
            auto_play: Resume playing immediately; otherwise the source is
                cued (stopped, stream open) until play() is called

        Raises:
            NeverStartedError: If no source has ever been loaded
            OpenError: If the source cannot be reopened
        """
        with self._transaction():
            self._reload(auto_play, fire_event=True)

    # ================================================================== #
    #                     Frame-provider contract                        #
    # ================================================================== #

    def can_provide(self) -> bool:
        """True iff the player is playing; the transport must not pull otherwise."""
        with self._lock:
            return self._state == PlayerState.PLAYING

    def provide_frame(self) -> Optional[bytearray]:
        """
        Pull one frame of PCM from the current stream.

        Never raises and never returns a malformed frame:
        - data read: tail zero-filled, volume applied, full-size frame returned
        - end of data: advance/repeat/stop policy runs, None returned
        - read failure: logged, None returned, state unchanged

        The returned buffer is reused by the next call; copy it to keep it.

        Returns:
            The frame buffer (exactly frame_bytes long), or None
        """
        with self._transaction():
            if self._state != PlayerState.PLAYING or self._current_stream is None:
                return None

            stream = self._current_stream
            buffer = self._buffer
            try:
                amount = stream.read_frame(buffer, len(buffer))
            except (OSError, ValueError) as e:
                locator = self._current_source.locator() if self._current_source else "<unknown>"
                logger.error(f"[PLAYER] Stream read failed for {locator}: {e}", exc_info=True)
                return None

            if amount > 0:
                if amount < len(buffer):
                    buffer[amount:] = self._silence[amount:]
                apply_volume(buffer, self._volume, clipping=self._volume_clipping)
                return buffer

            self._on_end_of_stream()
            return None

    # ================================================================== #
    #                        Internal transitions                        #
    # ================================================================== #

    def _play(self, fire_event: bool) -> None:
        if self._state == PlayerState.PLAYING:
            return

        old_state = self._state
        if self._current_stream is None:
            source = self._queue.dequeue()
            if source is None:
                raise EmptyQueueError("The audio queue is empty, cannot start playing")
            self._load(source)

        self._state = PlayerState.PLAYING
        logger.info(f"[PLAYER] Playing: {self._current_source.locator()}")
        if fire_event:
            self._emit(PlayerEventType.PLAYING, self._current_source, old_state)

    def _stop(self, fire_event: bool) -> None:
        if self._state == PlayerState.STOPPED and self._current_stream is None:
            return

        old_state = self._state
        stream = self._current_stream
        source = self._current_source

        self._state = PlayerState.STOPPED
        self._current_stream = None
        self._current_source = None
        if source is not None:
            self._previous_source = source
        if stream is not None:
            self._close_stream(stream, source)

        if source is not None:
            logger.info(f"[PLAYER] Stopped: {source.locator()}")
        if fire_event and old_state != PlayerState.STOPPED:
            self._emit(PlayerEventType.STOPPED, source, old_state)

    def _reload(self, auto_play: bool, fire_event: bool) -> None:
        if self._previous_source is None and self._current_source is None:
            raise NeverStartedError("Cannot restart or reload a player that has never been started")

        old_state = self._state
        self._stop(fire_event=False)
        # _stop moved the current source (if any) into the previous slot
        source = self._previous_source
        self._load(source)

        if auto_play:
            self._play(fire_event=False)

        logger.info(f"[PLAYER] Reloaded: {source.locator()} (auto_play={auto_play})")
        if fire_event:
            self._emit(PlayerEventType.RELOADED, source, old_state)

    def _play_next(
        self,
        fire_event: bool,
        old_state: Optional[PlayerState] = None,
        finished: Optional[AudioSource] = None,
    ) -> bool:
        """
        Stop the current source and start the next queued one.

        Sources that fail to open are logged and dropped, and the next
        candidate is tried.

        Args:
            fire_event: Emit NEXT once a source is playing
            old_state: State to report when the caller already left it
            finished: Source that just ended, when it is no longer current

        Returns:
            True if a new source is playing, False if the queue ran dry
        """
        old_state = self._state if old_state is None else old_state
        finished = self._current_source if finished is None else finished
        self._stop(fire_event=False)

        while True:
            if self._shuffle:
                source = self._queue.pop_random(self._rng)
            else:
                source = self._queue.dequeue()

            if source is None:
                logger.info("[PLAYER] Queue exhausted, player stopped")
                if self._emit_stop_on_queue_end and old_state != PlayerState.STOPPED:
                    self._emit(PlayerEventType.STOPPED, finished, old_state)
                self._emit(PlayerEventType.FINISHED, finished, old_state)
                return False

            try:
                self._load(source)
            except Exception as e:
                # No open failure may escape provide_frame()
                logger.error(f"[PLAYER] Skipping unplayable source {source.locator()}: {e}")
                continue
            break

        self._play(fire_event=False)
        if fire_event:
            self._emit(PlayerEventType.NEXT, source, old_state)
        return True

    def _on_end_of_stream(self) -> None:
        finished = self._current_source
        logger.info(f"[PLAYER] End of stream: {finished.locator() if finished else '<unknown>'}")

        if not self._auto_continue:
            self._stop(fire_event=True)
            return

        if self._repeat:
            old_state = self._state
            try:
                self._reload(auto_play=True, fire_event=False)
            except Exception as e:
                logger.error(f"[PLAYER] Cannot repeat {finished.locator() if finished else '<unknown>'}: {e}")
                self._play_next(fire_event=True, old_state=old_state, finished=finished)
                return
            self._emit(PlayerEventType.REPEATED, finished, old_state)
            return

        self._play_next(fire_event=True)

    def _load(self, source: AudioSource) -> None:
        # One open stream at a time
        if self._current_stream is not None:
            raise InvalidStateError("Cannot load a source while another stream is open")
        stream = source.open_stream()
        self._current_source = source
        self._current_stream = stream

    def _close_stream(self, stream: AudioStream, source: Optional[AudioSource]) -> None:
        try:
            stream.close()
        except Exception as e:
            locator = source.locator() if source else "<unknown>"
            logger.warning(f"[PLAYER] Error closing stream for {locator}: {e}", exc_info=True)
