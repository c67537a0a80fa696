"""ClipSmith — cut time ranges out of videos with ffmpeg."""

__version__ = "0.1.0"
