"""Title (still image) and ending (black screen) clips."""

from immich_slideshow.constants import (
    TITLE_DURATION,
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
)
from immich_slideshow.ffmpeg import fmt, run_ffmpeg


def ensure_mp4(name: str) -> str:
    return name if name.endswith(".mp4") else f"{name}.mp4"


def build_title_command(
    image_path: str,
    output_file: str,
    duration: float = TITLE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> list[str]:
    return [
        "-loop", "1",
        "-i", image_path,
        "-c:v", "libx264",
        "-t", fmt(duration),
        "-vf", f"scale={width}x{height},format=yuv420p,fps={fps}",
        "-pix_fmt", "yuv420p",
        "-r", str(fps),
        "-y", output_file,
    ]


def build_ending_command(
    output_file: str,
    duration: float = TITLE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> list[str]:
    return [
        "-f", "lavfi",
        "-i", f"color=black:s={width}x{height}:d={fmt(duration)}",
        "-c:v", "libx264",
        "-vf", f"fps={fps},format=yuv420p",
        "-pix_fmt", "yuv420p",
        "-r", str(fps),
        "-y", output_file,
    ]


def generate_title_and_ending(
    image_path: str,
    title_file: str,
    ending_file: str,
    duration: float = TITLE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> tuple[str, str]:
    """Render both clips. Returns (title_path, ending_path)."""
    title_file = ensure_mp4(title_file)
    ending_file = ensure_mp4(ending_file)

    print(f"Generating title video: {title_file}")
    run_ffmpeg(build_title_command(image_path, title_file, duration, width, height, fps))

    print(f"Generating ending video: {ending_file}")
    run_ffmpeg(build_ending_command(ending_file, duration, width, height, fps))

    print(f"Done! Created: {title_file} and {ending_file}")
    return title_file, ending_file
