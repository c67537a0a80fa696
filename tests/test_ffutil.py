"""Unit tests for ffutil — command building and the ffmpeg retry protocol."""

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from clipsmith.errors import FFmpegError, FFmpegNotFoundError
from clipsmith.ffutil import (
    AudioCodec,
    FFmpegCommand,
    check_ffmpeg,
    format_number,
    is_audio_error,
    run_clip,
)


def _cmd(**kwargs) -> FFmpegCommand:
    params = dict(input=Path("input.mp4"), output=Path("output.mp4"), start=10.0, duration=30.0)
    params.update(kwargs)
    return FFmpegCommand(**params)


def _audio_tokens(args: list[str]) -> list[str]:
    start = args.index("-c:a")
    return args[start:args.index("-avoid_negative_ts")]


# ---------------------------------------------------------------------------
# Argument construction (pure)
# ---------------------------------------------------------------------------

class TestPrimaryArgs:
    def test_full_token_order(self):
        assert _cmd(start=15.0, duration=45.0).primary_args() == [
            "-i", "input.mp4",
            "-ss", "15",
            "-t", "45",
            "-map", "0:v?",
            "-map", "0:a?",
            "-c:v", "copy",
            "-c:a", "copy",
            "-avoid_negative_ts", "make_zero",
            "-async", "1",
            "-vsync", "2",
            "-y", "output.mp4",
        ]

    @pytest.mark.parametrize(
        "codec, preserve, expected",
        [
            (AudioCodec.COPY, True, ["-c:a", "copy"]),
            (AudioCodec.AUTO, True, ["-c:a", "copy"]),
            (AudioCodec.AUTO, False, ["-c:a", "copy"]),
            (AudioCodec.AAC, True, ["-c:a", "aac", "-b:a", "128k"]),
            (AudioCodec.AAC, False, ["-c:a", "aac"]),
            (AudioCodec.MP3, True, ["-c:a", "mp3", "-b:a", "128k"]),
            (AudioCodec.MP3, False, ["-c:a", "mp3"]),
        ],
    )
    def test_audio_policy(self, codec, preserve, expected):
        args = _cmd(audio_codec=codec, preserve_audio_quality=preserve).primary_args()
        assert _audio_tokens(args) == expected

    def test_defaults_are_auto_with_quality(self):
        cmd = _cmd()
        assert cmd.audio_codec is AudioCodec.AUTO
        assert cmd.preserve_audio_quality is True

    def test_fractional_times(self):
        args = _cmd(start=5.5, duration=25.75).primary_args()
        assert args[args.index("-ss") + 1] == "5.5"
        assert args[args.index("-t") + 1] == "25.75"

    def test_builds_fresh_list_each_call(self):
        cmd = _cmd()
        first = cmd.primary_args()
        first.append("junk")
        assert "junk" not in cmd.primary_args()


class TestFallbackArgs:
    @pytest.mark.parametrize("codec", list(AudioCodec))
    def test_always_forces_aac(self, codec):
        args = _cmd(audio_codec=codec, preserve_audio_quality=False).fallback_args()
        assert _audio_tokens(args) == ["-c:a", "aac", "-b:a", "128k"]

    def test_same_structure_as_primary(self):
        cmd = _cmd(audio_codec=AudioCodec.COPY)
        primary, fallback = cmd.primary_args(), cmd.fallback_args()
        assert fallback[:12] == primary[:12]
        assert fallback[-8:] == primary[-8:]


class TestCommandString:
    def test_prefixed_with_tool(self):
        s = _cmd().command_string()
        assert s == (
            "ffmpeg -i input.mp4 -ss 10 -t 30 -map 0:v? -map 0:a? -c:v copy "
            "-c:a copy -avoid_negative_ts make_zero -async 1 -vsync 2 -y output.mp4"
        )

    def test_paths_not_quoted(self):
        s = _cmd(
            input=Path("my video (2023) - final.mp4"),
            output=Path("output [clipped].mp4"),
        ).command_string()
        assert "-i my video (2023) - final.mp4 " in s
        assert s.endswith("-y output [clipped].mp4")

    def test_small_and_large_values(self):
        assert "-t 0.001" in _cmd(start=100.0, duration=0.001).command_string()
        assert "-t 0.00005 " in _cmd(duration=0.00005).command_string()
        s = _cmd(start=3661.5, duration=7200.0).command_string()
        assert "-ss 3661.5" in s
        assert "-t 7200" in s


class TestFormatNumber:
    def test_integral(self):
        assert format_number(0.0) == "0"
        assert format_number(90.0) == "90"

    def test_fractional(self):
        assert format_number(0.5) == "0.5"

    def test_tiny_values_stay_fixed_point(self):
        assert format_number(0.00005) == "0.00005"
        assert format_number(1.5e-07) == "0.00000015"


class TestIsAudioError:
    @pytest.mark.parametrize(
        "stderr",
        [
            "codec not currently supported in container",
            "Could Not Find Codec Parameters For Stream",
            "Invalid codec tag",
            "Audio codec error occurred",
            "Stream copy failed",
            "Container does not support codec",
        ],
    )
    def test_matches(self, stderr):
        assert is_audio_error(stderr)

    @pytest.mark.parametrize("stderr", ["File not found", "Permission denied", "Network error", ""])
    def test_no_match(self, stderr):
        assert not is_audio_error(stderr)


# ---------------------------------------------------------------------------
# Subprocess wrappers (mocked)
# ---------------------------------------------------------------------------

class TestCheckFFmpeg:
    @patch("clipsmith.ffutil.subprocess.run")
    def test_installed(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        check_ffmpeg()
        assert mock_run.call_args[0][0] == ["ffmpeg", "-version"]

    @patch("clipsmith.ffutil.subprocess.run", side_effect=FileNotFoundError("ffmpeg"))
    def test_missing(self, mock_run):
        with pytest.raises(FFmpegNotFoundError, match="not installed"):
            check_ffmpeg()


class TestRunClip:
    @patch("clipsmith.ffutil.subprocess.run")
    def test_success_runs_once(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stderr="")
        cmd = _cmd()
        run_clip(cmd)
        mock_run.assert_called_once()
        assert mock_run.call_args[0][0] == ["ffmpeg", *cmd.primary_args()]

    @patch("clipsmith.ffutil.subprocess.run")
    def test_audio_failure_retries_with_fallback(self, mock_run):
        ok = MagicMock(returncode=0, stderr="")
        mock_run.side_effect = [
            MagicMock(returncode=1, stderr="Could not find codec parameters for stream 1"),
            ok,
        ]
        cmd = _cmd()
        assert run_clip(cmd) is ok
        assert mock_run.call_count == 2
        assert mock_run.call_args_list[1] == call(
            ["ffmpeg", *cmd.fallback_args()], capture_output=True, text=True
        )

    @patch("clipsmith.ffutil.subprocess.run")
    def test_fallback_failure_is_final(self, mock_run):
        mock_run.side_effect = [
            MagicMock(returncode=1, stderr="stream copy failed"),
            MagicMock(returncode=1, stderr="audio codec still broken"),
        ]
        with pytest.raises(FFmpegError, match="even with fallback: audio codec still broken") as exc_info:
            run_clip(_cmd())
        assert mock_run.call_count == 2
        assert exc_info.value.stderr == "audio codec still broken"

    @patch("clipsmith.ffutil.subprocess.run")
    def test_non_audio_failure_does_not_retry(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stderr="input.mp4: Permission denied")
        with pytest.raises(FFmpegError, match="FFmpeg failed: input.mp4: Permission denied"):
            run_clip(_cmd())
        mock_run.assert_called_once()

    @patch("clipsmith.ffutil.subprocess.run", side_effect=OSError("exec format error"))
    def test_spawn_failure(self, mock_run):
        with pytest.raises(FFmpegError, match="exec format error"):
            run_clip(_cmd())
