"""
Metadata record for audio sources.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from jukebox.source.audio_timestamp import AudioTimestamp


@dataclass
class AudioInfo:
    """
    Best-effort metadata extracted from a source by its probe.

    A failed probe leaves the descriptive fields empty and records the
    failure message in `error`; the source stays playable either way.

    Attributes:
        title: Title tag, if present
        description: Multi-line Title/Artist/Album/Genre summary
        encoding: Container/codec name reported by the probe
        duration: Total duration, whole seconds
        origin: Locator the info was extracted from
        extractor: Name of the source type that produced the info
        error: Failure message when the probe did not succeed
        raw: Parsed probe output
    """
    title: Optional[str] = None
    description: Optional[str] = None
    encoding: Optional[str] = None
    duration: Optional[AudioTimestamp] = None
    origin: Optional[str] = None
    extractor: Optional[str] = None
    error: Optional[str] = None
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def is_error(self) -> bool:
        return self.error is not None
