"""Merge a silent slideshow with an audio plan (trim, fade, delay, mix)."""

import logging
import os

from immich_slideshow.constants import (
    TIME_TOLERANCE,
    SILENCE_SAMPLE_RATE,
    SILENCE_CHANNEL_LAYOUT,
)
from immich_slideshow.audio_config import load_audio_config
from immich_slideshow.ffmpeg import fmt, run_ffmpeg, probe_duration
from immich_slideshow.models import AudioTrack

logger = logging.getLogger(__name__)


def validate_tracks(tracks: list[AudioTrack], probe=None) -> None:
    """Check every track can actually be cut from its file.

    `probe` maps a path to its duration in seconds (ffprobe by default).
    Raises FileNotFoundError for a missing file and ValueError for an empty
    or over-long time span.
    """
    probe = probe or probe_duration
    for idx, track in enumerate(tracks, start=1):
        if not os.path.exists(track.file):
            raise FileNotFoundError(f"Audio track #{idx}: audio file not found: {track.file}")

        requested = track.duration
        if requested <= 0:
            raise ValueError(f"Invalid duration: audio track #{idx} ({track.file}) has end <= start")

        usable = probe(track.file) - track.file_start
        if requested > usable + TIME_TOLERANCE:
            raise ValueError(
                f"Audio track #{idx} ({track.file}) from {fmt(track.start)}s to {fmt(track.end)}s "
                f"({requested:.3f}s) exceeds actual file duration ({usable:.3f}s)."
            )


def find_gaps_and_overlaps(tracks: list[AudioTrack]) -> list[tuple[str, AudioTrack, AudioTrack, float]]:
    """Scan tracks in start order for silence between them or double-booked time.

    Returns (kind, previous, next, seconds) tuples where kind is "gap" or
    "overlap".
    """
    ordered = sorted(tracks, key=lambda t: t.start)
    issues = []
    for prev, nxt in zip(ordered, ordered[1:]):
        gap = nxt.start - prev.end
        if gap > TIME_TOLERANCE:
            issues.append(("gap", prev, nxt, gap))
        elif gap < -TIME_TOLERANCE:
            issues.append(("overlap", prev, nxt, -gap))
    return issues


def report_gaps_and_overlaps(tracks: list[AudioTrack]) -> int:
    """Log a warning per gap/overlap. Returns how many were found."""
    issues = find_gaps_and_overlaps(tracks)
    for kind, prev, nxt, amount in issues:
        if kind == "gap":
            logger.warning(
                'Gap detected: between "%s" (ends at %ss) and "%s" (starts at %ss), gap of %.3fs',
                prev.file, fmt(prev.end), nxt.file, fmt(nxt.start), amount,
            )
        else:
            logger.warning(
                '"%s" (ends at %ss) overlaps with "%s" (starts at %ss), overlap of %.3fs',
                prev.file, fmt(prev.end), nxt.file, fmt(nxt.start), amount,
            )
    return len(issues)


def build_merge_filter(tracks: list[AudioTrack]) -> str:
    """Filter graph that places every track on the timeline and mixes them.

    Input 0 is the video, inputs 1..n the tracks, input n+1 a silent bed that
    spans the whole video so gaps stay filled.
    """
    filters = []
    labels = []
    for index, track in enumerate(tracks):
        duration = track.duration
        delay_ms = round(track.start * 1000)

        last = f"atrim{index}"
        filters.append(
            f"[{index + 1}:a]atrim=start={fmt(track.file_start)}:duration={fmt(duration)},"
            f"asetpts=PTS-STARTPTS[{last}]"
        )

        if 0 < track.fade_in < duration:
            label = f"fadein{index}"
            filters.append(f"[{last}]afade=t=in:st=0:d={fmt(track.fade_in)}[{label}]")
            last = label

        if 0 < track.fade_out < duration:
            label = f"fadeout{index}"
            filters.append(
                f"[{last}]afade=t=out:st={fmt(duration - track.fade_out)}:d={fmt(track.fade_out)}[{label}]"
            )
            last = label

        filters.append(f"[{last}]adelay={delay_ms}|{delay_ms}[a{index}]")
        labels.append(f"[a{index}]")

    labels.insert(0, f"[{len(tracks) + 1}:a]")
    mix = f"{''.join(labels)}amix=inputs={len(labels)}:duration=longest[aout]"
    return ";".join(filters + [mix])


def build_merge_command(
    video_file: str,
    tracks: list[AudioTrack],
    output_file: str,
    video_duration: float,
) -> list[str]:
    args = ["-i", video_file]
    for track in tracks:
        args += ["-i", track.file]
    args += [
        "-f", "lavfi",
        "-t", fmt(video_duration),
        "-i", f"anullsrc=channel_layout={SILENCE_CHANNEL_LAYOUT}:sample_rate={SILENCE_SAMPLE_RATE}",
        "-filter_complex", build_merge_filter(tracks),
        "-map", "0:v",
        "-map", "[aout]",
        "-c:v", "copy",
        "-c:a", "aac",
        "-shortest",
        "-y",
        output_file,
    ]
    return args


def merge_video_and_audio(video_file: str, config_file: str, output_file: str) -> str:
    """Validate the audio plan and mux it under the video.

    Returns the absolute output path.
    """
    video_duration = probe_duration(video_file)
    tracks = load_audio_config(config_file)
    validate_tracks(tracks)
    report_gaps_and_overlaps(tracks)

    output_path = os.path.abspath(output_file)
    print("Merging:")
    print(f"  Video:  {video_file}")
    print(f"  Config: {config_file}")
    print(f"  Output: {output_path}")

    run_ffmpeg(build_merge_command(video_file, tracks, output_path, video_duration))
    print(f"Video and audio merged successfully! Output: {output_path}")
    return output_path
