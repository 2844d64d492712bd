"""
ffprobe-based metadata extraction shared by the concrete sources.
"""

import json
import logging
import subprocess
from typing import Any, Dict, Optional

from jukebox.source.audio_info import AudioInfo
from jukebox.source.audio_timestamp import AudioTimestamp

logger = logging.getLogger(__name__)


def build_probe_command(ffprobe_path: str, target: str) -> list[str]:
    return [
        ffprobe_path,
        "-show_format",
        "-print_format", "json",
        "-loglevel", "0",
        "-i", target,
    ]


def _describe(tags: Dict[str, Any]) -> str:
    def tag(name: str) -> str:
        value = tags.get(name)
        return str(value) if value else "N/A"

    return (
        f"Title: {tag('title')}\n"
        f"Artist: {tag('artist')}\n"
        f"Album: {tag('album')}\n"
        f"Genre: {tag('genre')}\n"
    )


def parse_probe_output(data: Dict[str, Any], info: AudioInfo) -> AudioInfo:
    """
    Fill an AudioInfo from parsed `ffprobe -show_format` JSON.

    Args:
        data: Parsed ffprobe output
        info: Record to fill (origin/extractor already set)

    Returns:
        The same AudioInfo instance
    """
    format_info = data.get("format")
    if not isinstance(format_info, dict):
        raise ValueError("ffprobe output has no 'format' section")

    info.raw = data

    # ffprobe nests tags under format; some containers report them at top level
    tags = format_info.get("tags") or data.get("tags")
    if isinstance(tags, dict):
        # Tag keys are upper-case for some containers (e.g. Vorbis comments)
        tags = {str(k).lower(): v for k, v in tags.items()}
        info.title = tags.get("title") or None
        info.description = _describe(tags)

    info.encoding = format_info.get("format_name") or format_info.get("format_long_name") or None

    duration = format_info.get("duration")
    if duration not in (None, "", "N/A"):
        info.duration = AudioTimestamp.from_seconds(int(float(duration)))

    return info


def probe_info(ffprobe_path: str, target: str, extractor: str, timeout: float) -> AudioInfo:
    """
    Run ffprobe against a file path or URL and build an AudioInfo.

    Never raises: every failure (missing binary, timeout, non-zero exit,
    empty or malformed output) is recorded in AudioInfo.error.

    Args:
        ffprobe_path: ffprobe executable
        target: File path or URL to probe
        extractor: Name recorded in AudioInfo.extractor
        timeout: Seconds before the probe is abandoned

    Returns:
        AudioInfo (possibly with error set)
    """
    info = AudioInfo(origin=target, extractor=extractor)
    cmd = build_probe_command(ffprobe_path, target)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        info.error = f"ffprobe not found: {ffprobe_path}"
    except subprocess.TimeoutExpired:
        info.error = f"ffprobe timed out after {timeout}s"
    except OSError as e:
        info.error = f"ffprobe failed to start: {e}"
    else:
        output: Optional[str] = result.stdout
        if result.returncode != 0:
            info.error = f"ffprobe exited with code {result.returncode}"
        elif not output or not output.strip():
            info.error = "ffprobe returned no info"
        else:
            try:
                parse_probe_output(json.loads(output), info)
            except (json.JSONDecodeError, ValueError, TypeError) as e:
                info.error = f"Unreadable ffprobe output: {e}"

    if info.error:
        logger.warning(f"[PROBE] Info extraction failed for {target}: {info.error}")
    else:
        logger.debug(f"[PROBE] {target}: title={info.title!r} encoding={info.encoding} duration={info.duration}")
    return info
