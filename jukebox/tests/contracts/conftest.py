"""
Shared pytest fixtures for Jukebox contract tests.

Contract tests use test doubles so no ffmpeg process, network access or
JUKEBOX_* environment variable is involved.
"""

import os
import random

import pytest

from jukebox.player import MusicPlayer, PlayerEvent
from jukebox.tests.contracts.test_doubles import RecordingSink


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Strip JUKEBOX_* variables and point the .env lookup at a missing file."""
    for name in list(os.environ):
        if name.startswith("JUKEBOX_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JUKEBOX_ENV_FILE", str(tmp_path / "missing.env"))


@pytest.fixture
def events():
    """List collecting every event from a player it is attached to."""
    return []


@pytest.fixture
def player(events):
    """Player with a seeded rng and an event recorder attached."""
    p = MusicPlayer(rng=random.Random(1234))

    def record(event: PlayerEvent) -> None:
        events.append(event)

    p.add_listener(record)
    return p


@pytest.fixture
def sink():
    return RecordingSink()

