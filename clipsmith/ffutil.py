"""FFmpeg command building and subprocess helpers."""

import enum
import logging
import subprocess
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from clipsmith.errors import FFmpegError, FFmpegNotFoundError

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FALLBACK_AUDIO_BITRATE = "128k"

# Lower-cased fragments of ffmpeg stderr that point at an audio/container
# incompatibility rather than a broken input.
AUDIO_ERROR_INDICATORS = (
    "codec not currently supported in container",
    "could not find codec parameters for stream",
    "invalid codec tag",
    "audio codec",
    "stream copy",
    "does not support codec",
)


class AudioCodec(str, enum.Enum):
    COPY = "copy"
    AAC = "aac"
    MP3 = "mp3"
    AUTO = "auto"  # stream copy first, AAC on an audio-related failure


def format_number(value: float) -> str:
    """Render a float the way ffmpeg arguments expect: ``10``, ``5.5``."""
    if float(value).is_integer():
        return str(int(value))
    # Always fixed-point, never exponent notation
    return format(Decimal(repr(float(value))), "f")


def is_audio_error(stderr: str) -> bool:
    """Return True if ffmpeg's stderr looks like an audio compatibility failure."""
    text = stderr.lower()
    return any(indicator in text for indicator in AUDIO_ERROR_INDICATORS)


@dataclass(frozen=True)
class FFmpegCommand:
    """An ffmpeg invocation that cuts ``duration`` seconds from ``start``."""

    input: Path
    output: Path
    start: float
    duration: float
    audio_codec: AudioCodec = AudioCodec.AUTO
    preserve_audio_quality: bool = True

    def _audio_args(self) -> list[str]:
        codec = self.audio_codec
        if codec in (AudioCodec.COPY, AudioCodec.AUTO):
            return ["-c:a", "copy"]
        args = ["-c:a", codec.value]
        if self.preserve_audio_quality:
            args += ["-b:a", FALLBACK_AUDIO_BITRATE]
        return args

    def _build(self, audio_args: list[str]) -> list[str]:
        return [
            "-i", str(self.input),
            "-ss", format_number(self.start),
            "-t", format_number(self.duration),
            # "?" keeps single-stream inputs from aborting the cut
            "-map", "0:v?",
            "-map", "0:a?",
            "-c:v", "copy",
            *audio_args,
            "-avoid_negative_ts", "make_zero",
            "-async", "1",
            "-vsync", "2",
            "-y", str(self.output),
        ]

    def primary_args(self) -> list[str]:
        return self._build(self._audio_args())

    def fallback_args(self) -> list[str]:
        """Same cut, but always re-encoding audio to AAC."""
        return self._build(["-c:a", "aac", "-b:a", FALLBACK_AUDIO_BITRATE])

    def command_string(self) -> str:
        """Human-readable command line. Paths are not shell-quoted."""
        return " ".join([FFMPEG, *self.primary_args()])


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ``ffmpeg -version`` cannot be spawned."""
    try:
        subprocess.run([FFMPEG, "-version"], capture_output=True, text=True)
    except OSError as e:
        logger.debug("ffmpeg version probe failed: %s", e)
        raise FFmpegNotFoundError() from e


def _run(args: list[str]) -> subprocess.CompletedProcess:
    try:
        return subprocess.run([FFMPEG, *args], capture_output=True, text=True)
    except OSError as e:
        raise FFmpegError(str(e)) from e


def run_clip(command: FFmpegCommand) -> subprocess.CompletedProcess:
    """Run the cut, retrying once with AAC audio if stream copy fails.

    Any failure that does not look audio-related is raised immediately with
    ffmpeg's stderr embedded; a failing fallback is raised as final.
    """
    logger.info("Running: %s", command.command_string())
    result = _run(command.primary_args())
    if result.returncode == 0:
        return result

    stderr = result.stderr or ""
    if not is_audio_error(stderr):
        logger.error("ffmpeg failed (rc=%d)", result.returncode)
        raise FFmpegError(f"FFmpeg failed: {stderr}", stderr=stderr)

    logger.warning("Audio copy failed, attempting fallback with AAC encoding")
    fallback = _run(command.fallback_args())
    if fallback.returncode != 0:
        fallback_stderr = fallback.stderr or ""
        logger.error("ffmpeg fallback failed (rc=%d)", fallback.returncode)
        raise FFmpegError(
            f"FFmpeg failed even with fallback: {fallback_stderr}",
            stderr=fallback_stderr,
        )
    return fallback
