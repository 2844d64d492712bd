"""
Command-line entry point for Jukebox.

Queues the given files/URLs, starts playback and drives the player with a
FramePump until the queue is exhausted or the process is signalled.
"""

import argparse
import dataclasses
import logging
import signal
import threading
from typing import List, Optional

from jukebox.config import VALID_LOG_LEVELS, VALID_OUTPUT_MODES, PlayerConfig, load_config
from jukebox.errors import EmptyQueueError, OpenError
from jukebox.logging_setup import configure_logging
from jukebox.outputs import create_output_sink
from jukebox.player import MusicPlayer, PlayerEvent, PlayerEventType
from jukebox.source import AudioSource, LocalSource, RemoteSource
from jukebox.transport import FramePump

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jukebox",
        description="Play audio files or URLs through a fixed-cadence frame pump.",
    )
    parser.add_argument("locators", nargs="+", metavar="FILE_OR_URL", help="Audio files or http(s) URLs to queue")
    parser.add_argument("--shuffle", action="store_true", default=None, help="Pick queued sources at random")
    parser.add_argument("--repeat", action="store_true", default=None, help="Repeat each source forever")
    parser.add_argument("--volume", type=float, default=None, help="Linear gain (1.0 = unchanged)")
    parser.add_argument("--output", choices=VALID_OUTPUT_MODES, default=None, help="Output sink")
    parser.add_argument("--output-path", default=None, help="File written by the wav output")
    parser.add_argument("--log-level", choices=VALID_LOG_LEVELS, default=None, help="Logging level")
    return parser


def apply_overrides(config: PlayerConfig, args: argparse.Namespace) -> PlayerConfig:
    """
    Layer command-line options over the environment configuration.

    Raises:
        ValueError: If the resulting configuration is invalid
    """
    overrides = {}
    if args.shuffle is not None:
        overrides["shuffle"] = args.shuffle
    if args.repeat is not None:
        overrides["repeat"] = args.repeat
    if args.volume is not None:
        overrides["volume"] = args.volume
    if args.output is not None:
        overrides["output_mode"] = args.output
    if args.output_path is not None:
        overrides["output_path"] = args.output_path
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    config = dataclasses.replace(config, **overrides)
    config.validate()
    return config


def build_source(locator: str, config: PlayerConfig) -> AudioSource:
    if locator.startswith(("http://", "https://")):
        return RemoteSource(locator, config)
    return LocalSource(locator, config)


def build_sources(locators: List[str], config: PlayerConfig) -> List[AudioSource]:
    """Build a source per locator, logging and skipping the invalid ones."""
    sources = []
    for locator in locators:
        try:
            sources.append(build_source(locator, config))
        except (ValueError, OSError) as e:
            logger.error(f"[JUKEBOX] Skipping {locator}: {e}")
    return sources


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the jukebox until the queue is exhausted or SIGINT/SIGTERM arrives.

    Returns:
        Process exit code (0 on success, 1 if playback could not start,
        2 on configuration or argument errors)
    """
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(), args)
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"[JUKEBOX] Configuration error: {e}")
        return 2

    configure_logging(config)

    sources = build_sources(args.locators, config)
    if not sources:
        logger.error("[JUKEBOX] No playable sources given")
        return 2

    player = MusicPlayer.from_config(config)
    done = threading.Event()

    def on_event(event: PlayerEvent) -> None:
        locator = event.source.locator() if event.source else "-"
        logger.info(f"[JUKEBOX] {event.type.name}: {locator} ({event.old_state.name} -> {event.new_state.name})")
        if event.type in (PlayerEventType.FINISHED, PlayerEventType.STOPPED):
            done.set()

    player.add_listener(on_event)
    player.add_all_to_queue(sources)

    def signal_handler(sig, frame):
        signal_name = "SIGTERM" if sig == signal.SIGTERM else "SIGINT"
        logger.info(f"[JUKEBOX] Received {signal_name} - stopping")
        done.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    sink = create_output_sink(config)
    pump = FramePump(player, sink, frame_duration_sec=config.frame_duration_sec)

    try:
        try:
            player.play()
        except (EmptyQueueError, OpenError) as e:
            logger.error(f"[JUKEBOX] Cannot start playback: {e}")
            return 1

        pump.start()
        while not done.wait(0.1):
            pass
        return 0
    finally:
        pump.stop()
        player.stop()
        sink.close()
