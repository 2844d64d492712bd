"""
Contract tests for LocalSource, RemoteSource and ffprobe metadata.

ffmpeg/ffprobe and HTTP are mocked: no process is spawned and no network
request is made.
"""

import json
import os
import subprocess
from unittest.mock import MagicMock, Mock, patch

import httpx
import pytest

from jukebox.config import PlayerConfig
from jukebox.errors import OpenError
from jukebox.source import AudioTimestamp, LocalSource, RemoteSource
from jukebox.source.audio_info import AudioInfo
from jukebox.source.probe import build_probe_command, parse_probe_output, probe_info

PROBE_OUTPUT = {
    "format": {
        "filename": "song.mp3",
        "format_name": "mp3",
        "format_long_name": "MP2/3 (MPEG audio layer 2/3)",
        "duration": "205.480000",
        "tags": {"title": "Song", "ARTIST": "Band", "album": "Record"},
    }
}


def _completed(stdout="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3fake")
    return path


class TestProbe:
    """Tests for ffprobe output handling."""

    def test_probe_command(self):
        assert build_probe_command("ffprobe", "/a.mp3") == [
            "ffprobe", "-show_format", "-print_format", "json", "-loglevel", "0", "-i", "/a.mp3",
        ]

    def test_parses_tags_encoding_and_duration(self):
        info = parse_probe_output(PROBE_OUTPUT, AudioInfo(origin="song.mp3"))

        assert info.title == "Song"
        assert info.encoding == "mp3"
        assert info.duration == AudioTimestamp(0, 3, 25, 0)
        assert info.description == "Title: Song\nArtist: Band\nAlbum: Record\nGenre: N/A\n"
        assert info.raw is PROBE_OUTPUT
        assert not info.is_error

    def test_top_level_tags_fallback(self):
        data = {"format": {"format_name": "ogg"}, "tags": {"TITLE": "Top"}}

        info = parse_probe_output(data, AudioInfo())

        assert info.title == "Top"
        assert info.duration is None

    def test_missing_format_rejected(self):
        with pytest.raises(ValueError):
            parse_probe_output({}, AudioInfo())

    @patch("jukebox.source.probe.subprocess.run")
    def test_probe_success(self, mock_run):
        mock_run.return_value = _completed(json.dumps(PROBE_OUTPUT))

        info = probe_info("ffprobe", "/a.mp3", extractor="LocalSource", timeout=5.0)

        assert info.title == "Song"
        assert info.origin == "/a.mp3"
        assert info.extractor == "LocalSource"
        assert mock_run.call_args.kwargs["timeout"] == 5.0

    @pytest.mark.parametrize("outcome, message", [
        (FileNotFoundError(), "ffprobe not found"),
        (subprocess.TimeoutExpired(cmd="ffprobe", timeout=5.0), "timed out"),
        (PermissionError("denied"), "failed to start"),
    ])
    @patch("jukebox.source.probe.subprocess.run")
    def test_launch_failures_recorded(self, mock_run, outcome, message):
        mock_run.side_effect = outcome

        info = probe_info("ffprobe", "/a.mp3", extractor="LocalSource", timeout=5.0)

        assert info.is_error
        assert message in info.error
        assert info.title is None

    @pytest.mark.parametrize("result, message", [
        (_completed("", returncode=1), "exited with code 1"),
        (_completed("   "), "no info"),
        (_completed("{not json"), "Unreadable"),
        (_completed("{}"), "Unreadable"),
    ])
    @patch("jukebox.source.probe.subprocess.run")
    def test_bad_results_recorded(self, mock_run, result, message):
        mock_run.return_value = result

        info = probe_info("ffprobe", "/a.mp3", extractor="LocalSource", timeout=5.0)

        assert message in info.error


class TestLocalSource:
    """Tests for LocalSource."""

    def test_locator_is_resolved_path(self, audio_file):
        source = LocalSource(str(audio_file))
        assert source.locator() == os.path.realpath(str(audio_file))

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            LocalSource("")

    def test_missing_file_rejected(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalSource(str(tmp_path / "nope.mp3"))

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(IsADirectoryError):
            LocalSource(str(tmp_path))

    def test_equality_by_type_and_locator(self, audio_file):
        a = LocalSource(str(audio_file))
        b = LocalSource(str(audio_file))

        assert a == b
        assert hash(a) == hash(b)
        assert a != RemoteSource("http://example.com/song.mp3")

    @patch("jukebox.source.probe.subprocess.run")
    def test_info_memoized(self, mock_run, audio_file):
        mock_run.return_value = _completed(json.dumps(PROBE_OUTPUT))
        source = LocalSource(str(audio_file), PlayerConfig(ffprobe_path="/opt/ffprobe"))

        first = source.info()
        second = source.info()

        assert first is second
        assert mock_run.call_count == 1
        assert mock_run.call_args.args[0][0] == "/opt/ffprobe"
        assert first.extractor == "LocalSource"

    @patch("jukebox.source.ffmpeg_stream.subprocess.Popen")
    def test_open_stream_launches_decoder(self, mock_popen, audio_file):
        source = LocalSource(str(audio_file), PlayerConfig(ffmpeg_path="/opt/ffmpeg"))

        stream = source.open_stream()

        cmd = mock_popen.call_args.args[0]
        assert cmd[0] == "/opt/ffmpeg"
        assert source.locator() in cmd
        assert stream.locator == source.locator()

    def test_open_after_file_removed(self, audio_file):
        source = LocalSource(str(audio_file))
        audio_file.unlink()

        with pytest.raises(OpenError) as exc_info:
            source.open_stream()
        assert exc_info.value.locator == source.locator()


class TestRemoteSource:
    """Tests for RemoteSource."""

    @pytest.mark.parametrize("url", ["", "ftp://host/a.mp3", "http://", "/local/path.mp3"])
    def test_invalid_urls_rejected(self, url):
        with pytest.raises(ValueError):
            RemoteSource(url)

    def test_malformed_port_rejected(self):
        with pytest.raises(ValueError):
            RemoteSource("http://example.com:abc/x.mp3")

    @patch("jukebox.source.ffmpeg_stream.subprocess.Popen")
    @patch("jukebox.source.remote_source.httpx.head")
    def test_invalid_url_during_check_raises_open_error(self, mock_head, mock_popen):
        mock_head.side_effect = httpx.InvalidURL("Invalid port: 'abc'")

        with pytest.raises(OpenError) as exc_info:
            RemoteSource("http://example.com/a.mp3").open_stream()

        assert "invalid URL" in exc_info.value.reason
        mock_popen.assert_not_called()

    def test_locator_is_url(self):
        assert RemoteSource("https://example.com/a.mp3").locator() == "https://example.com/a.mp3"

    @patch("jukebox.source.ffmpeg_stream.subprocess.Popen")
    @patch("jukebox.source.remote_source.httpx.head")
    def test_open_when_reachable(self, mock_head, mock_popen):
        mock_head.return_value = Mock(status_code=200)
        source = RemoteSource("http://example.com/a.mp3", PlayerConfig(http_timeout_sec=2.0))

        stream = source.open_stream()

        mock_head.assert_called_once_with("http://example.com/a.mp3", timeout=2.0, follow_redirects=True)
        assert "http://example.com/a.mp3" in mock_popen.call_args.args[0]
        assert stream.locator == "http://example.com/a.mp3"

    @patch("jukebox.source.ffmpeg_stream.subprocess.Popen")
    @patch("jukebox.source.remote_source.httpx.head")
    def test_http_error_status_raises_open_error(self, mock_head, mock_popen):
        mock_head.return_value = Mock(status_code=404)

        with pytest.raises(OpenError) as exc_info:
            RemoteSource("http://example.com/a.mp3").open_stream()

        assert "404" in exc_info.value.reason
        mock_popen.assert_not_called()

    @patch("jukebox.source.remote_source.httpx.head")
    def test_transport_error_raises_open_error(self, mock_head):
        mock_head.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(OpenError) as exc_info:
            RemoteSource("http://example.com/a.mp3").open_stream()

        assert "unreachable" in exc_info.value.reason

    @patch("jukebox.source.remote_source.httpx.stream")
    @patch("jukebox.source.remote_source.httpx.head")
    def test_head_not_allowed_falls_back_to_get(self, mock_head, mock_stream):
        mock_head.return_value = Mock(status_code=405)
        streamed = MagicMock()
        streamed.__enter__.return_value = Mock(status_code=200)
        mock_stream.return_value = streamed

        RemoteSource("http://example.com/a.mp3").check_reachable()

        assert mock_stream.call_args.args == ("GET", "http://example.com/a.mp3")

    @patch("jukebox.source.probe.subprocess.run")
    def test_info_failure_is_not_raised(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ffprobe", timeout=5.0)

        info = RemoteSource("http://example.com/a.mp3").info()

        assert info.is_error
        assert info.extractor == "RemoteSource"
        assert info.origin == "http://example.com/a.mp3"
