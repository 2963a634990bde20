"""Slideshow assembly: zoom + crossfade batches joined into one video."""

import logging
import os
import re
import tempfile

from immich_slideshow.constants import (
    PHOTO_DURATION,
    FADE_DURATION,
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    BATCH_SIZE,
    ZOOM_STEP,
    ENCODER_THREADS,
    IMAGE_EXTENSIONS,
    BATCH_PREFIX,
    MERGE_PREFIX,
    ALBUM_IMAGE_PREFIX,
    PHOTO_IMAGE_PREFIX,
    TRANSITIONS,
)
from immich_slideshow.ffmpeg import fmt, run_ffmpeg, probe_duration

logger = logging.getLogger(__name__)


def _natural_key(name: str) -> list:
    """Sort key: "image_2" before "image_10", case-insensitive."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", name)]


def list_images(image_dir: str) -> list[str]:
    """Return supported images in image_dir, naturally sorted, as full paths."""
    names = [
        f for f in os.listdir(image_dir)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
        and os.path.isfile(os.path.join(image_dir, f))
    ]
    names.sort(key=_natural_key)
    return [os.path.join(image_dir, f) for f in names]


def batch_duration(count: int, img_duration: float, fade_duration: float) -> float:
    """Length of a batch of `count` images where each pair overlaps by the fade."""
    return (img_duration - fade_duration) * count + fade_duration


def split_batches(images: list[str], batch_size: int = BATCH_SIZE) -> list[list[str]]:
    """Split images into batches of batch_size.

    A crossfade needs two inputs, so a trailing single image is folded into
    the previous batch.
    """
    if batch_size < 2:
        raise ValueError(f"Batch size must be at least 2, got {batch_size}")
    batches = [images[i:i + batch_size] for i in range(0, len(images), batch_size)]
    if len(batches) > 1 and len(batches[-1]) == 1:
        batches[-2].extend(batches.pop())
    return batches


def build_batch_filter(
    count: int,
    img_duration: float,
    fade_duration: float,
    width: int,
    height: int,
    fps: int,
) -> str:
    """Build the filter graph for one batch.

    Every input is scaled/cropped to fill the frame and slowly zoomed into
    [v<i>]; neighbours are then chained with xfade into [xf0]..[xf<count-2>].
    """
    frames = fmt(img_duration * fps)
    graph = ""
    for i in range(count):
        graph += (
            f"[{i}:v]scale={width}:{height}:force_original_aspect_ratio=increase,"
            f"crop={width}:{height},"
            f"zoompan=z='zoom+{ZOOM_STEP}':x='iw/2-(iw/zoom/2)':y='ih/2-(ih/zoom/2)'"
            f":d={frames}:fps={fps},setsar=1[v{i}];"
        )

    for i in range(count - 1):
        offset = fmt((img_duration - fade_duration) * (i + 1))
        source = "[v0]" if i == 0 else f"[xf{i - 1}]"
        graph += (
            f"{source}[v{i + 1}]xfade=transition=fade:duration={fmt(fade_duration)}"
            f":offset={offset}[xf{i}];"
        )
    return graph


def build_batch_command(
    images: list[str],
    output_file: str,
    img_duration: float = PHOTO_DURATION,
    fade_duration: float = FADE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> list[str]:
    """ffmpeg arguments rendering one batch of looped stills into a video."""
    count = len(images)
    if count < 2:
        raise ValueError("Need at least 2 images to create a slideshow with transitions.")

    args = []
    for image in images:
        args += ["-loop", "1", "-t", fmt(img_duration), "-i", image]

    args += [
        "-filter_complex", build_batch_filter(count, img_duration, fade_duration, width, height, fps),
        "-map", f"[xf{count - 2}]",
        "-c:v", "libx264",
        "-r", str(fps),
        "-pix_fmt", "yuv420p",
        "-t", fmt(batch_duration(count, img_duration, fade_duration)),
        "-shortest",
        "-y",
        "-threads", str(ENCODER_THREADS),
        output_file,
    ]
    return args


def create_partial_video(
    images: list[str],
    output_file: str,
    img_duration: float = PHOTO_DURATION,
    fade_duration: float = FADE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
) -> str:
    """Render one batch to output_file and return its path."""
    args = build_batch_command(images, output_file, img_duration, fade_duration, width, height, fps)
    run_ffmpeg(args)
    total = batch_duration(len(images), img_duration, fade_duration)
    print(f"Batch video created: {output_file} (Duration: {fmt(total)}s)")
    return output_file


def _escape_concat_path(path: str) -> str:
    return path.replace("'", "'\\''")


def merge_plain_concat(video_files: list[str], output_file: str) -> str:
    """Join videos end to end with the concat demuxer (stream copy).

    The list file is written next to the output with paths relative to it and
    is removed afterwards whether or not ffmpeg succeeds.
    """
    if len(video_files) < 2:
        raise ValueError("At least two video files are required to merge.")

    output_dir = os.path.dirname(os.path.abspath(output_file))
    lines = [
        f"file '{_escape_concat_path(os.path.relpath(os.path.abspath(v), output_dir))}'"
        for v in video_files
    ]

    with tempfile.NamedTemporaryFile(
        "w", dir=output_dir, prefix="concat_list_", suffix=".txt", delete=False,
    ) as f:
        f.write("\n".join(lines))
        list_file = f.name

    print(f"Merging {len(video_files)} videos into: {output_file}")
    try:
        run_ffmpeg([
            "-f", "concat",
            "-safe", "0",
            "-i", list_file,
            "-c", "copy",
            "-y",
            output_file,
        ])
    finally:
        os.remove(list_file)
    return output_file


def build_crossfade_command(
    video1: str,
    video2: str,
    output_file: str,
    offset: float,
    fade_duration: float = FADE_DURATION,
    fps: int = VIDEO_FPS,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
) -> list[str]:
    return [
        "-i", video1,
        "-i", video2,
        "-filter_complex",
        f"[0:v][1:v]xfade=transition=fade:duration={fmt(fade_duration)}:offset={offset:.2f}[v]",
        "-map", "[v]",
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-r", str(fps),
        "-s", f"{width}x{height}",
        "-y", output_file,
    ]


def merge_two_crossfade(
    video1: str,
    video2: str,
    output_file: str,
    fade_duration: float = FADE_DURATION,
    fps: int = VIDEO_FPS,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
) -> str:
    """Crossfade the tail of video1 into the head of video2."""
    offset = probe_duration(video1) - fade_duration
    print(
        f"Merging {os.path.basename(video1)} + {os.path.basename(video2)}"
        f" -> {os.path.basename(output_file)}"
    )
    run_ffmpeg(build_crossfade_command(
        video1, video2, output_file, offset, fade_duration, fps, width, height,
    ))
    return output_file


def merge_all_crossfade(
    video_files: list[str],
    output_file: str,
    fade_duration: float = FADE_DURATION,
    fps: int = VIDEO_FPS,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
) -> str:
    """Fold a list of videos into one, crossfading at every join.

    Intermediate merge_<n>.mp4 files are deleted as soon as they are consumed.
    """
    if len(video_files) < 2:
        raise ValueError("Need at least two videos to merge.")

    output_dir = os.path.dirname(output_file) or "."
    current = video_files[0]
    for counter, next_input in enumerate(video_files[1:]):
        next_output = os.path.join(output_dir, f"{MERGE_PREFIX}{counter}.mp4")
        merge_two_crossfade(current, next_input, next_output, fade_duration, fps, width, height)
        if current != video_files[0]:
            os.remove(current)
        current = next_output

    os.replace(current, output_file)
    print(f"Final merged video saved as: {output_file}")
    return output_file


def create_slideshow(
    image_dir: str,
    output_file: str,
    img_duration: float = PHOTO_DURATION,
    fade_duration: float = FADE_DURATION,
    width: int = VIDEO_WIDTH,
    height: int = VIDEO_HEIGHT,
    fps: int = VIDEO_FPS,
    title: str | None = None,
    ending: str | None = None,
    batch_size: int = BATCH_SIZE,
    transition: str = "concat",
) -> str:
    """Build the full slideshow from every image in image_dir.

    Images are rendered in batches (one ffmpeg process each, sequentially)
    into batch_<k>.mp4 beside output_file. The optional title and ending
    clips are added around the batches, and everything is joined either by
    stream-copy concat or by crossfading.
    """
    if transition not in TRANSITIONS:
        raise ValueError(f"Unknown transition '{transition}' (expected one of {', '.join(TRANSITIONS)})")
    if img_duration <= 0:
        raise ValueError(f"Photo duration must be positive, got {img_duration}")
    if fade_duration < 0 or fade_duration >= img_duration:
        raise ValueError(
            f"Fade duration must be between 0 and the photo duration ({img_duration}), got {fade_duration}"
        )

    images = list_images(image_dir)
    print(f"Found {len(images)} images in the directory.")
    if len(images) < 2:
        raise ValueError("Need at least 2 images to create a slideshow with transitions.")

    output_dir = os.path.dirname(output_file) or "."
    os.makedirs(output_dir, exist_ok=True)

    batches = split_batches(images, batch_size)
    videos = []
    for number, batch in enumerate(batches, start=1):
        print(f"Processing batch {number} of {len(batches)}...")
        batch_file = os.path.join(output_dir, f"{BATCH_PREFIX}{number}.mp4")
        create_partial_video(batch, batch_file, img_duration, fade_duration, width, height, fps)
        videos.append(batch_file)

    if title:
        videos.insert(0, title)
    if ending:
        videos.append(ending)

    if len(videos) == 1:
        os.replace(videos[0], output_file)
    elif transition == "crossfade":
        merge_all_crossfade(videos, output_file, fade_duration, fps, width, height)
    else:
        merge_plain_concat(videos, output_file)

    return output_file


def cleanup_files(output_dir: str, remove_images: bool = False) -> list[str]:
    """Delete temporary batch videos (and optionally downloaded images).

    Failures are logged and skipped. Returns the deleted paths.
    """
    deleted = []
    if not os.path.isdir(output_dir):
        return deleted
    for name in sorted(os.listdir(output_dir)):
        ext = os.path.splitext(name)[1].lower()
        is_batch = name.startswith(BATCH_PREFIX) and ext == ".mp4"
        is_image = (
            remove_images
            and name.startswith((ALBUM_IMAGE_PREFIX, PHOTO_IMAGE_PREFIX))
            and ext in IMAGE_EXTENSIONS
        )
        if not (is_batch or is_image):
            continue
        path = os.path.join(output_dir, name)
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Error deleting temporary file %s: %s", path, e)
            continue
        deleted.append(path)
    return deleted
