"""Locating, running, and probing with the ffmpeg/ffprobe binaries."""

import logging
import shlex
import shutil
import subprocess
import sys

from pydub.utils import mediainfo

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


def check_ffmpeg():
    """Verify ffmpeg and ffprobe are installed."""
    missing = [name for name in (FFMPEG, FFPROBE) if not shutil.which(name)]
    if missing:
        print(f"Error: {' and '.join(missing)} required but not found.", file=sys.stderr)
        print("Install with: apt install ffmpeg (or brew install ffmpeg)", file=sys.stderr)
        raise SystemExit(1)


def fmt(value: float) -> str:
    """Render a number for an ffmpeg option or filter argument.

    5.0 -> "5", 0.5 -> "0.5"
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_command(args: list[str]) -> str:
    """Render an ffmpeg invocation as a copy-pasteable shell line."""
    return shlex.join([FFMPEG, *args])


def run_ffmpeg(args: list[str]) -> None:
    """Run ffmpeg with the given arguments.

    Arguments are passed as a list, so filter graphs need no shell quoting.
    ffmpeg's stdout/stderr go straight to ours. A non-zero exit raises
    subprocess.CalledProcessError.
    """
    logger.debug("Running: %s", format_command(args))
    subprocess.run([FFMPEG, *args], check=True)


def probe_duration(path: str) -> float:
    """Return the container duration of a media file in seconds.

    Raises ValueError if ffprobe reports no usable duration.
    """
    info = mediainfo(path)
    raw = info.get("duration")
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Failed to get duration of {path}") from None
    if duration != duration or duration < 0:  # NaN or negative
        raise ValueError(f"Failed to get duration of {path}")
    return duration
