"""Orchestrator — turns a ClipRequest into an ffmpeg cut."""

import logging
from pathlib import Path

from clipsmith import ffutil, timeparse
from clipsmith.errors import ClipIOError, InputNotFoundError, InvalidPathError
from clipsmith.ffutil import AudioCodec, FFmpegCommand
from clipsmith.manifest import Manifest
from clipsmith.models import ClipRequest, ClipResult

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("downloads")


class VideoClipper:
    """Parses clip requests, names outputs and runs ffmpeg.

    Args:
        output_dir: Where clips are written unless a request overrides it.
        audio_codec: Audio policy passed to every FFmpegCommand.
        preserve_audio_quality: Add ``-b:a 128k`` when re-encoding audio.
    """

    def __init__(
        self,
        output_dir: str | Path = DEFAULT_OUTPUT_DIR,
        audio_codec: AudioCodec = AudioCodec.AUTO,
        preserve_audio_quality: bool = True,
    ):
        self.output_dir = Path(output_dir)
        self.audio_codec = audio_codec
        self.preserve_audio_quality = preserve_audio_quality

    def ensure_output_dir(self, output_dir: Path | None = None) -> Path:
        target = output_dir or self.output_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ClipIOError(e) from e
        return target

    def resolve_input_file(self, path: str | Path) -> Path:
        """Return the path to read from, also looking inside the output dir."""
        # Path("") collapses to ".", so check the raw value too
        if not str(path).strip() or Path(path).name in ("", ".", ".."):
            raise InvalidPathError(path)

        path = Path(path)
        if path.is_file():
            return path

        candidate = self.output_dir / path.name
        if candidate.is_file():
            logger.debug("Input %s found at %s", path, candidate)
            return candidate
        raise InputNotFoundError(path)

    def output_filename(
        self,
        input_file: str | Path,
        start: float,
        end: float,
        output_dir: Path | None = None,
    ) -> Path:
        stem = Path(input_file).stem or "clip"
        name = (
            f"{stem}_clip_{timeparse.format_compact(start)}"
            f"_to_{timeparse.format_compact(end)}.mp4"
        )
        return (output_dir or self.output_dir) / name

    def _command(self, input_path: Path, output_path: Path, start: float, duration: float) -> FFmpegCommand:
        return FFmpegCommand(
            input=input_path,
            output=output_path,
            start=start,
            duration=duration,
            audio_codec=self.audio_codec,
            preserve_audio_quality=self.preserve_audio_quality,
        )

    @staticmethod
    def _parse_range(request: ClipRequest) -> tuple[float, float, float]:
        start = timeparse.parse_time(request.start_time)
        end = timeparse.parse_time(request.end_time)
        return start, end, timeparse.validate_range(start, end)

    def prepare(self, request: ClipRequest) -> ClipResult:
        """Build the clip command without touching the filesystem or ffmpeg."""
        start, end, duration = self._parse_range(request)
        output_dir = Path(request.output_dir) if request.output_dir else None
        output_path = self.output_filename(request.input_file, start, end, output_dir)
        command = self._command(Path(request.input_file), output_path, start, duration)

        return ClipResult(
            input_file=request.input_file,
            output_file=str(output_path),
            start_seconds=start,
            end_seconds=end,
            duration=duration,
            command=command.command_string(),
        )

    def clip(self, request: ClipRequest) -> ClipResult:
        """Cut the requested range and report the produced file."""
        start, end, duration = self._parse_range(request)
        input_path = self.resolve_input_file(request.input_file)

        output_dir = self.ensure_output_dir(
            Path(request.output_dir) if request.output_dir else None
        )
        output_path = self.output_filename(input_path, start, end, output_dir)

        command = self._command(input_path, output_path, start, duration)
        ffutil.check_ffmpeg()
        logger.info(
            "Clipping %s [%s -> %s] to %s",
            input_path,
            timeparse.format_readable(start),
            timeparse.format_readable(end),
            output_path,
        )
        ffutil.run_clip(command)

        try:
            file_size_mb = output_path.stat().st_size / (1024 * 1024)
        except OSError as e:
            logger.debug("Could not read size of %s: %s", output_path, e)
            file_size_mb = None

        return ClipResult(
            input_file=request.input_file,
            output_file=str(output_path),
            start_seconds=start,
            end_seconds=end,
            duration=duration,
            command=command.command_string(),
            file_size_mb=file_size_mb,
        )


def clip_from_manifest(manifest: Manifest) -> ClipResult:
    """Run a clip described by a manifest."""
    clipper = VideoClipper(
        output_dir=manifest.output_dir or DEFAULT_OUTPUT_DIR,
        audio_codec=manifest.audio.codec,
        preserve_audio_quality=manifest.audio.preserve_quality,
    )
    request = ClipRequest(
        input_file=str(manifest.input),
        start_time=manifest.start,
        end_time=manifest.end,
    )
    return clipper.clip(request)
