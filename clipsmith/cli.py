"""Thin CLI entry point — collects a ClipRequest and calls the engine."""

import argparse
import logging
import sys
from pathlib import Path

from clipsmith.engine import VideoClipper, clip_from_manifest
from clipsmith.errors import ClipError
from clipsmith.ffutil import AudioCodec
from clipsmith.manifest import load_manifest
from clipsmith.models import ClipRequest


def _prompt(label: str) -> str:
    value = input(f"{label}: ")
    return value.strip().strip('"').strip("'")


def _add_clip_options(p: argparse.ArgumentParser, required: bool = False) -> None:
    p.add_argument("--start", "-s", type=str, required=required, help="Start time (e.g. 36:07, 2167 or 1h2m)")
    p.add_argument("--end", "-e", type=str, required=required, help="End time (e.g. 37:19, 2239 or 1h3m)")
    p.add_argument("--output-dir", "-o", type=Path, help="Output directory (default: downloads)")
    p.add_argument(
        "--audio-codec",
        choices=[c.value for c in AudioCodec],
        default=AudioCodec.AUTO.value,
        help="Audio handling: copy, re-encode to aac/mp3, or auto (copy with AAC fallback)",
    )
    p.add_argument(
        "--no-preserve-quality",
        action="store_true",
        help="Do not force a 128k bitrate when re-encoding audio",
    )


def _clipper(args: argparse.Namespace) -> VideoClipper:
    kwargs = {}
    if args.output_dir:
        kwargs["output_dir"] = args.output_dir
    return VideoClipper(
        audio_codec=AudioCodec(args.audio_codec),
        preserve_audio_quality=not args.no_preserve_quality,
        **kwargs,
    )


def _collect_request(args: argparse.Namespace) -> ClipRequest:
    video = str(args.video) if args.video else _prompt("Video file path")
    if not video:
        print("Error: no file path provided.", file=sys.stderr)
        sys.exit(1)

    start = args.start
    if start is None:
        start = _prompt("Start (e.g. 36:07 or 2167)") or "0"

    end = args.end if args.end is not None else _prompt("End (e.g. 37:19 or 2239)")
    if not end:
        print("Error: end time required.", file=sys.stderr)
        sys.exit(1)

    return ClipRequest(input_file=video, start_time=start, end_time=end)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="clipsmith",
        description="ClipSmith — cut a time range out of a video with ffmpeg.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log ffmpeg commands")
    sub = parser.add_subparsers(dest="command")

    clip = sub.add_parser("clip", help="Cut a clip from a video file")
    clip.add_argument("video", nargs="?", type=Path, help="Input video file")
    clip.add_argument("--manifest", "-m", type=Path, help="Path to a JSON manifest file")
    _add_clip_options(clip)

    show = sub.add_parser("command", help="Print the ffmpeg command without running it")
    show.add_argument("video", type=Path, help="Input video file")
    _add_clip_options(show, required=True)

    serve = sub.add_parser("serve", help="Launch the JSON API")
    serve.add_argument("--port", type=int, default=8321, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from clipsmith.web import create_app
        app = create_app()
        print(f"ClipSmith API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    try:
        if args.command == "command":
            request = ClipRequest(
                input_file=str(args.video),
                start_time=args.start,
                end_time=args.end,
            )
            print(_clipper(args).prepare(request).command)
            return

        if args.manifest:
            try:
                manifest = load_manifest(args.manifest)
            except (OSError, ValueError) as e:
                print(f"Error: cannot load manifest {args.manifest}: {e}", file=sys.stderr)
                sys.exit(1)
            result = clip_from_manifest(manifest)
        else:
            request = _collect_request(args)
            print(f"Clipping {request.input_file} [{request.start_time} -> {request.end_time}] ...")
            result = _clipper(args).clip(request)
    except ClipError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print()
    print(f"Done! Clip saved: {result.output_file}")
    if result.file_size_mb is not None:
        print(f"  Size: {result.file_size_mb:.1f} MB")
    print(f"  Duration: {result.duration:.1f}s")
