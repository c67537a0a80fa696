"""JSON API routes for ClipSmith.

These endpoints expose the time parser and command builder to browser
clients; nothing here runs ffmpeg.
"""

import math
from pathlib import Path

from flask import Blueprint, abort, current_app, jsonify, request

from clipsmith import timeparse
from clipsmith.engine import VideoClipper
from clipsmith.ffutil import FFmpegCommand
from clipsmith.models import ClipRequest

bp = Blueprint("api", __name__)


def _json_fields(*fields: str) -> dict:
    """Return the JSON object body, aborting with 400 if it lacks ``fields``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object")
    absent = [f for f in fields if f not in data]
    if absent:
        abort(400, description=f"Missing field(s): {', '.join(absent)}")
    return data


def _finite(data: dict, field: str) -> float:
    try:
        value = float(data[field])
    except (TypeError, ValueError):
        value = math.nan
    if not math.isfinite(value):
        abort(400, description=f"'{field}' must be a finite number")
    return value


def _clipper() -> VideoClipper:
    return VideoClipper(output_dir=current_app.config["OUTPUT_DIR"])


@bp.route("/api/time/parse", methods=["POST"])
def parse_time():
    data = _json_fields("time")
    return jsonify({"seconds": timeparse.parse_time(str(data["time"]))})


@bp.route("/api/time/format", methods=["POST"])
def format_time():
    data = _json_fields("seconds")
    seconds = _finite(data, "seconds")
    return jsonify({
        "compact": timeparse.format_compact(seconds),
        "readable": timeparse.format_readable(seconds),
    })


@bp.route("/api/time/validate", methods=["POST"])
def validate_range():
    data = _json_fields("start", "end")
    start, end = _finite(data, "start"), _finite(data, "end")
    return jsonify({"duration": timeparse.validate_range(start, end)})


@bp.route("/api/command", methods=["POST"])
def command():
    data = _json_fields("input_file", "output_file", "start_time", "end_time")

    start = timeparse.parse_time(str(data["start_time"]))
    end = timeparse.parse_time(str(data["end_time"]))
    duration = timeparse.validate_range(start, end)
    cmd = FFmpegCommand(
        input=Path(data["input_file"]),
        output=Path(data["output_file"]),
        start=start,
        duration=duration,
    )
    return jsonify({"command": cmd.command_string()})


@bp.route("/api/clips/prepare", methods=["POST"])
def prepare_clip():
    data = _json_fields("input_file", "start_time", "end_time")

    clip_request = ClipRequest(
        input_file=str(data["input_file"]),
        start_time=str(data["start_time"]),
        end_time=str(data["end_time"]),
        output_dir=data.get("output_dir"),
    )
    return jsonify(_clipper().prepare(clip_request).to_dict())


@bp.route("/api/clips/filename", methods=["POST"])
def output_filename():
    data = _json_fields("input_file", "start_time", "end_time")

    start = timeparse.parse_time(str(data["start_time"]))
    end = timeparse.parse_time(str(data["end_time"]))
    path = _clipper().output_filename(data["input_file"], start, end)
    return jsonify({"output_file": str(path)})
