"""JSON manifest schema — the contract between CLI/API and engine."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from clipsmith.ffutil import AudioCodec


@dataclass
class AudioConfig:
    """Audio handling for the cut."""

    codec: AudioCodec = AudioCodec.AUTO
    preserve_quality: bool = True


@dataclass
class Manifest:
    """Top-level clip manifest."""

    input: Path
    end: str
    start: str = "0"
    output_dir: Path | None = None
    version: str = "1"
    audio: AudioConfig = field(default_factory=AudioConfig)


def _load_audio(data: dict) -> AudioConfig:
    try:
        codec = AudioCodec(data.get("codec", AudioCodec.AUTO.value))
    except ValueError:
        raise ValueError(f"Unknown audio codec: {data.get('codec')!r}") from None
    return AudioConfig(codec=codec, preserve_quality=bool(data.get("preserve_quality", True)))


def load_manifest(path: str | Path) -> Manifest:
    """Load and validate a manifest from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    if "input" not in data or "end" not in data:
        raise ValueError("Manifest must contain 'input' and 'end' fields")

    audio = _load_audio(data["audio"]) if "audio" in data else AudioConfig()
    output_dir = data.get("output_dir")

    return Manifest(
        version=data.get("version", "1"),
        input=Path(data["input"]),
        start=str(data.get("start", "0")),
        end=str(data["end"]),
        output_dir=Path(output_dir) if output_dir else None,
        audio=audio,
    )
