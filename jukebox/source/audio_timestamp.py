"""
Playback position value type.

AudioTimestamp is an immutable hours/minutes/seconds/milliseconds point in
time, convertible from whole seconds, from a byte-derived millisecond count,
and from the HH:MM:SS.ff strings ffmpeg prints in its progress output.
"""

from dataclasses import dataclass

from jukebox.errors import TimestampParseError


@dataclass(frozen=True)
class AudioTimestamp:
    """
    Immutable point in time within an audio source.

    Attributes:
        hours: Whole hours
        minutes: Minutes, 0-59
        seconds: Seconds, 0-59
        milliseconds: Milliseconds, 0-999
    """
    hours: int
    minutes: int
    seconds: int
    milliseconds: int = 0

    @property
    def total_seconds(self) -> int:
        """Whole seconds represented by this timestamp (milliseconds dropped)."""
        return (self.hours * 3600) + (self.minutes * 60) + self.seconds

    @property
    def timestamp(self) -> str:
        """Short form MM:SS, prefixed with HH: only when hours is non-zero."""
        prefix = f"{self.hours:02d}:" if self.hours != 0 else ""
        return f"{prefix}{self.minutes:02d}:{self.seconds:02d}"

    @property
    def full_timestamp(self) -> str:
        """Full zero-padded form HH:MM:SS.mmm."""
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.milliseconds:03d}"

    def __str__(self) -> str:
        return f"AudioTimestamp({self.full_timestamp})"

    @classmethod
    def from_seconds(cls, seconds: int) -> "AudioTimestamp":
        """
        Build a timestamp from a whole number of seconds.

        Args:
            seconds: Non-negative second count

        Returns:
            AudioTimestamp with milliseconds set to 0

        Raises:
            ValueError: If seconds is negative
        """
        if seconds < 0:
            raise ValueError(f"Timestamp seconds must be non-negative, got {seconds}")
        hours, remainder = divmod(int(seconds), 3600)
        minutes, secs = divmod(remainder, 60)
        return cls(hours, minutes, secs, 0)

    @classmethod
    def from_milliseconds(cls, milliseconds: int) -> "AudioTimestamp":
        """Build a timestamp from a non-negative millisecond count, keeping the remainder."""
        if milliseconds < 0:
            raise ValueError(f"Timestamp milliseconds must be non-negative, got {milliseconds}")
        whole_seconds, millis = divmod(int(milliseconds), 1000)
        base = cls.from_seconds(whole_seconds)
        return cls(base.hours, base.minutes, base.seconds, millis)

    @classmethod
    def from_ffmpeg(cls, text: str) -> "AudioTimestamp":
        """
        Parse an ffmpeg progress timestamp of the form HH:MM:SS.ff.

        ffmpeg reports hundredths of a second, so the fractional field must
        have exactly two digits and is scaled by 10 to milliseconds.

        Args:
            text: Timestamp string, e.g. "00:03:25.48"

        Returns:
            Parsed AudioTimestamp

        Raises:
            TimestampParseError: If the string is not in HH:MM:SS.ff form
        """
        parts = text.strip().split(":")
        if len(parts) != 3:
            raise TimestampParseError(f"Malformed ffmpeg timestamp {text!r}: expected HH:MM:SS.ff")

        sec_parts = parts[2].split(".")
        if len(sec_parts) != 2:
            raise TimestampParseError(f"Malformed ffmpeg timestamp {text!r}: missing fractional seconds")

        hours_str, minutes_str = parts[0], parts[1]
        seconds_str, hundredths_str = sec_parts
        if len(hundredths_str) != 2:
            raise TimestampParseError(
                f"Malformed ffmpeg timestamp {text!r}: fractional seconds must have exactly two digits"
            )

        fields = (hours_str, minutes_str, seconds_str, hundredths_str)
        if not all(field.isdigit() for field in fields):
            raise TimestampParseError(f"Malformed ffmpeg timestamp {text!r}: fields must be digits")

        return cls(
            int(hours_str),
            int(minutes_str),
            int(seconds_str),
            int(hundredths_str) * 10,  # ffmpeg gives .ff, not .fff
        )
