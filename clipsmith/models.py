"""Shared data types used across ClipSmith."""

from dataclasses import asdict, dataclass


@dataclass
class ClipRequest:
    """A clip as entered by the user: raw time expressions, not seconds."""

    input_file: str
    start_time: str
    end_time: str
    output_dir: str | None = None


@dataclass
class ClipResult:
    """Outcome of a prepared or executed clip."""

    input_file: str
    output_file: str
    start_seconds: float
    end_seconds: float
    duration: float
    command: str
    file_size_mb: float | None = None

    def to_dict(self) -> dict:
        return asdict(self)
