"""Exceptions raised by ClipSmith.

Every error derives from :class:`ClipError` so callers (CLI, web API) can
report any failure with a single handler. Messages always carry the
offending text, time pair or ffmpeg diagnostic.
"""


class ClipError(Exception):
    """Base class for all clipping errors."""


class InvalidTimeFormatError(ClipError, ValueError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid time format: {text}")


class InvalidTimeRangeError(ClipError, ValueError):
    def __init__(self, start: float, end: float):
        self.start = start
        self.end = end
        super().__init__(f"End time ({end}) must be after start time ({start})")


class InputNotFoundError(ClipError):
    """Raised when the input video cannot be located."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"File not found: {path}")


class FFmpegNotFoundError(ClipError, RuntimeError):
    def __init__(self, message: str = "FFmpeg not installed or not in PATH"):
        super().__init__(message)


class FFmpegError(ClipError, RuntimeError):
    """Raised when ffmpeg exits unsuccessfully; ``stderr`` holds its output."""

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(f"FFmpeg execution failed: {message}")


class ClipIOError(ClipError):
    def __init__(self, cause: OSError):
        self.cause = cause
        super().__init__(f"IO error: {cause}")


class InvalidPathError(ClipError, ValueError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Invalid file path: {path}")
