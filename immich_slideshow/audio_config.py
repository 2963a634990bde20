"""Audio plan generation: lay audio files back to back on the video timeline."""

import json
import os
import xml.etree.ElementTree as ET
from urllib.parse import unquote

from immich_slideshow.constants import AUDIO_EXTENSION
from immich_slideshow.ffmpeg import probe_duration
from immich_slideshow.models import AudioTrack, PlaylistEntry


def _local_name(tag: str) -> str:
    """Strip an XML namespace: "{http://xspf.org/ns/0/}track" -> "track"."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str | None:
    for child in element.iter():
        if child is not element and _local_name(child.tag) == name:
            return child.text
    return None


def parse_xspf(content: str) -> list[PlaylistEntry]:
    """Parse XSPF playlist XML into entries, one per <track>.

    Raises ValueError on malformed XML.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Malformed XSPF playlist: {e}") from None

    entries = []
    for track in root.iter():
        if _local_name(track.tag) != "track":
            continue
        entries.append(PlaylistEntry(
            location=unquote((_child_text(track, "location") or "").strip()),
            title=_child_text(track, "title"),
            creator=_child_text(track, "creator"),
            album=_child_text(track, "album"),
        ))
    return entries


def _is_audio(path: str) -> bool:
    return path.lower().endswith(AUDIO_EXTENSION)


def xspf_audio_files(xspf_path: str) -> list[str]:
    """Absolute paths of the mp3 tracks in an XSPF playlist, in playlist order."""
    with open(xspf_path, encoding="utf-8") as f:
        entries = parse_xspf(f.read())

    files = []
    for entry in entries:
        location = entry.location
        if location.startswith("file://"):
            location = location[len("file://"):]
        path = os.path.abspath(location)
        if _is_audio(path):
            files.append(path)
    return files


def directory_audio_files(audio_dir: str) -> list[str]:
    """Absolute paths of the mp3 files in a directory, sorted by name."""
    dir_path = os.path.abspath(audio_dir)
    names = sorted(f for f in os.listdir(dir_path) if _is_audio(f))
    return [os.path.join(dir_path, f) for f in names]


def build_audio_config(
    files: list[str],
    fade_in: float = 0.0,
    fade_out: float = 0.0,
    durations: list[float] | None = None,
) -> list[AudioTrack]:
    """Place each file directly after the previous one, starting at 0.

    Durations are probed with ffprobe unless given.
    """
    if durations is None:
        durations = [probe_duration(f) for f in files]
    if len(durations) != len(files):
        raise ValueError("Need exactly one duration per audio file.")

    tracks = []
    current_start = 0.0
    for path, duration in zip(files, durations):
        tracks.append(AudioTrack(
            file=path,
            start=current_start,
            end=current_start + duration,
            file_start=0.0,
            fade_in=fade_in,
            fade_out=fade_out,
        ))
        current_start += duration
    return tracks


def write_audio_config(tracks: list[AudioTrack], path: str) -> str:
    with open(path, "w") as f:
        json.dump([t.to_dict() for t in tracks], f, indent=2)
    return path


def load_audio_config(path: str) -> list[AudioTrack]:
    """Read an audio plan JSON file.

    Raises ValueError if it is not valid JSON, not an array, or an entry is
    malformed.
    """
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed audio config {path}: {e}") from None

    if not isinstance(data, list):
        raise ValueError(f"Malformed audio config {path}: expected a JSON array")
    return [AudioTrack.from_dict(entry) for entry in data]
