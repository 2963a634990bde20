"""CLI interface with subcommand routing and standalone tool entry points."""

import argparse
import logging
import math
import os
import subprocess
import sys

import requests

from immich_slideshow.constants import (
    PHOTO_DURATION,
    FADE_DURATION,
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    BATCH_SIZE,
    TRANSITIONS,
    TITLE_DURATION,
    OUTPUT_DIR,
    VIDEO_OUTPUT,
    AUDIO_CONFIG_OUTPUT,
    MERGE_OUTPUT,
    TITLE_OUTPUT,
    ENDING_OUTPUT,
    VERSION,
)
from immich_slideshow.ffmpeg import check_ffmpeg
from immich_slideshow.immich import fetch_album_images, fetch_photos, load_photo_config
from immich_slideshow.slideshow import create_slideshow, cleanup_files
from immich_slideshow.audio_config import (
    directory_audio_files,
    xspf_audio_files,
    build_audio_config,
    write_audio_config,
)
from immich_slideshow.merge import merge_video_and_audio
from immich_slideshow.titles import generate_title_and_ending

logger = logging.getLogger(__name__)


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _require_file(path: str, what: str) -> None:
    if not os.path.isfile(path):
        _fail(f"{what} not found: {path}")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value}") from None
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"must be a finite number: {value}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _run(func, args):
    """Run a command, turning expected failures into exit code 1."""
    try:
        func(args)
    except subprocess.CalledProcessError as e:
        _fail(f"ffmpeg exited with code {e.returncode}")
    except requests.RequestException as e:
        _fail(f"Immich request failed: {e}")
    except (ValueError, OSError) as e:
        _fail(str(e))


# --- video ---

def _resolve_video_source(args) -> str:
    """Decide where images come from: "input", "photo-config", or "album"."""
    if args.photo_config:
        if args.input_dir:
            _fail("Input directory cannot be combined with photo config")
        if args.album:
            _fail("Album ID cannot be combined with photo config")
        if not args.url or not args.token:
            _fail("Missing required options: --url, --token")
        _require_file(args.photo_config, "Photo config")
        return "photo-config"

    if args.input_dir:
        if not os.path.isdir(args.input_dir):
            _fail(f"Input directory does not exist: {args.input_dir}")
        return "input"

    if not args.url or not args.album or not args.token:
        _fail("Missing required options: --url, --album, --token (or --input-dir, or --photo-config)")
    return "album"


def cmd_video(args):
    """Fetch images (or use a local directory) and render the slideshow."""
    source = _resolve_video_source(args)

    for path, what in ((args.title, "Title video"), (args.ending, "Ending video")):
        if path:
            _require_file(path, what)
            print(f"Found {what.lower()}: {path}")

    check_ffmpeg()

    if source == "input":
        print(f"Using input directory: {args.input_dir}")
        image_dir = args.input_dir
    elif source == "photo-config":
        print(f"Using photo config: {args.photo_config}")
        asset_ids = load_photo_config(args.photo_config)
        fetch_photos(args.url, args.token, args.output_dir, asset_ids)
        image_dir = args.output_dir
    else:
        print("Fetching album...")
        fetch_album_images(args.url, args.album, args.token, args.output_dir)
        image_dir = args.output_dir

    print("Creating video...")
    create_slideshow(
        image_dir,
        args.video,
        img_duration=args.photo_duration,
        fade_duration=args.fade_duration,
        width=args.width,
        height=args.height,
        fps=args.fps,
        title=args.title,
        ending=args.ending,
        batch_size=args.batch_size,
        transition=args.transition,
    )
    print(f"Video created successfully at {args.video}")

    # Downloaded images live in output_dir; a user's input_dir is never touched.
    remove_images = args.remove_images and source != "input"
    deleted = cleanup_files(os.path.dirname(args.video) or ".")
    if remove_images:
        deleted += cleanup_files(args.output_dir, remove_images=True)
    for path in deleted:
        logger.info("Deleted temporary file: %s", path)


def _add_video_arguments(parser):
    parser.add_argument("-u", "--url", help="Immich API base URL (e.g. https://photos.example/api)")
    parser.add_argument("-a", "--album", help="Album ID")
    parser.add_argument("-t", "--token", help="Immich API key")
    parser.add_argument("--photo-config", "--photoConfig", dest="photo_config",
                        help="JSON file with an ordered list of {\"id\": ...} assets")
    parser.add_argument("-i", "--input-dir", "--inputDir", dest="input_dir",
                        help="Use local images instead of downloading")
    parser.add_argument("-o", "--output-dir", "--outputDir", dest="output_dir", default=OUTPUT_DIR,
                        help=f"Download directory (default: {OUTPUT_DIR})")
    parser.add_argument("--photo-duration", "--photoDuration", dest="photo_duration",
                        type=_non_negative_float, default=PHOTO_DURATION,
                        help=f"Seconds per photo (default: {PHOTO_DURATION:g})")
    parser.add_argument("--fade-duration", "--fadeDuration", dest="fade_duration",
                        type=_non_negative_float, default=FADE_DURATION,
                        help=f"Crossfade seconds (default: {FADE_DURATION:g})")
    parser.add_argument("-v", "--video", default=VIDEO_OUTPUT,
                        help=f"Output video file (default: {VIDEO_OUTPUT})")
    parser.add_argument("--width", type=_positive_int, default=VIDEO_WIDTH, help="Video width")
    parser.add_argument("--height", type=_positive_int, default=VIDEO_HEIGHT, help="Video height")
    parser.add_argument("--fps", type=_positive_int, default=VIDEO_FPS, help="Frames per second")
    parser.add_argument("--batch-size", dest="batch_size", type=_positive_int, default=BATCH_SIZE,
                        help=f"Images per ffmpeg run (default: {BATCH_SIZE})")
    parser.add_argument("--transition", choices=TRANSITIONS, default="concat",
                        help="How batches are joined (default: concat)")
    parser.add_argument("--title", help="Optional title video to prepend")
    parser.add_argument("--ending", help="Optional ending video to append")
    parser.add_argument("--remove-images", dest="remove_images", action="store_true",
                        help="Delete downloaded images when done")


# --- audio-config ---

def cmd_audio_config(args):
    """Write a back-to-back audio plan for a directory or XSPF playlist."""
    if args.audio_dir:
        if not os.path.isdir(args.audio_dir):
            _fail(f"Directory does not exist: {os.path.abspath(args.audio_dir)}")
        files = directory_audio_files(args.audio_dir)
    else:
        _require_file(args.xspf_file, "XSPF file")
        files = xspf_audio_files(args.xspf_file)

    if not files:
        logger.warning("No .mp3 files found; writing an empty audio config")
    else:
        check_ffmpeg()

    tracks = build_audio_config(files, fade_in=args.fade_in, fade_out=args.fade_out)
    write_audio_config(tracks, args.output)
    total = tracks[-1].end if tracks else 0.0
    print(f"Audio config written to: {args.output} ({len(tracks)} tracks, {total:.1f}s)")


def _add_audio_config_arguments(parser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--audio-dir", dest="audio_dir", help="Directory of .mp3 audio files")
    source.add_argument("--xspf-file", dest="xspf_file", help="Path to XSPF playlist")
    parser.add_argument("--fade-in", dest="fade_in", type=_non_negative_float, default=0.0,
                        help="Fade in seconds (default: 0)")
    parser.add_argument("--fade-out", dest="fade_out", type=_non_negative_float, default=0.0,
                        help="Fade out seconds (default: 0)")
    parser.add_argument("--output", default=AUDIO_CONFIG_OUTPUT,
                        help=f"Output JSON file (default: {AUDIO_CONFIG_OUTPUT})")


# --- merge ---

def cmd_merge(args):
    """Merge a video with the audio plan."""
    _require_file(args.video_file, "Video file")
    _require_file(args.config_file, "Config file")
    check_ffmpeg()
    merge_video_and_audio(args.video_file, args.config_file, args.output_file)


def _add_merge_arguments(parser):
    parser.add_argument("-v", "--video-file", "--videoFile", dest="video_file", required=True,
                        help="Input video file (mp4)")
    parser.add_argument("-c", "--config-file", "--configFile", dest="config_file", required=True,
                        help="JSON audio config")
    parser.add_argument("-o", "--output-file", "--outputFile", dest="output_file", default=MERGE_OUTPUT,
                        help=f"Output file (default: {MERGE_OUTPUT})")


# --- title ---

def cmd_title(args):
    """Generate the title and ending clips."""
    _require_file(args.image_path, "Image")
    if args.duration <= 0:
        _fail(f"Duration must be positive, got {args.duration:g}")
    check_ffmpeg()
    generate_title_and_ending(
        args.image_path, args.title, args.ending,
        duration=args.duration, width=args.width, height=args.height,
    )


def _add_title_arguments(parser):
    parser.add_argument("-i", "--image-path", "--imagePath", dest="image_path", required=True,
                        help="Image for the title video")
    parser.add_argument("-d", "--duration", type=_non_negative_float, default=TITLE_DURATION,
                        help=f"Seconds per clip (default: {TITLE_DURATION:g})")
    parser.add_argument("--width", type=_positive_int, default=VIDEO_WIDTH, help="Video width")
    parser.add_argument("--height", type=_positive_int, default=VIDEO_HEIGHT, help="Video height")
    parser.add_argument("--title", default=TITLE_OUTPUT, help=f"Title file (default: {TITLE_OUTPUT})")
    parser.add_argument("--ending", default=ENDING_OUTPUT, help=f"Ending file (default: {ENDING_OUTPUT})")


COMMANDS = {
    "video": (cmd_video, _add_video_arguments, "immich-video-gen",
              "Fetch an Immich album and create a slideshow video"),
    "audio-config": (cmd_audio_config, _add_audio_config_arguments, "audio-config-gen",
                     "Generate an audio config JSON from mp3s"),
    "merge": (cmd_merge, _add_merge_arguments, "video-and-audio-merge",
              "Merge a video with multiple audio files with timing and fades"),
    "title": (cmd_title, _add_title_arguments, "title-gen",
              "Generate title and ending videos from an image"),
}


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="immich-slideshow",
        description="Immich slideshow tools: album download, video assembly, audio plan, merge",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--verbose", action="store_true", help="Log ffmpeg command lines")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for name, (func, add_arguments, _, description) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=description, description=description)
        add_arguments(sub)
        sub.set_defaults(func=func)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    _setup_logging(args.verbose)
    _run(args.func, args)


def _standalone(name: str):
    """Build a main() for one tool so it also works as its own command."""
    func, add_arguments, prog, description = COMMANDS[name]

    def entry():
        parser = argparse.ArgumentParser(prog=prog, description=description)
        parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
        parser.add_argument("--verbose", action="store_true", help="Log ffmpeg command lines")
        add_arguments(parser)
        args = parser.parse_args()
        _setup_logging(args.verbose)
        _run(func, args)

    entry.__doc__ = f"Entry point for {prog}."
    return entry


video_gen_main = _standalone("video")
audio_config_gen_main = _standalone("audio-config")
video_audio_merge_main = _standalone("merge")
title_gen_main = _standalone("title")
