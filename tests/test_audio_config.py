"""Tests for audio_config module."""

import json
import os
from unittest.mock import patch

import pytest

from immich_slideshow.audio_config import (
    build_audio_config,
    directory_audio_files,
    load_audio_config,
    parse_xspf,
    write_audio_config,
    xspf_audio_files,
)
from immich_slideshow.models import AudioTrack


XSPF = """<?xml version="1.0" encoding="UTF-8"?>
<playlist version="1" xmlns="http://xspf.org/ns/0/">
  <trackList>
    <track>
      <location>file:///music/Morning%20Light.mp3</location>
      <title>Morning Light</title>
      <creator>Someone</creator>
      <album>Dawn</album>
    </track>
    <track>
      <location>file:///music/cover.flac</location>
    </track>
    <track>
      <location>/music/Evening.MP3</location>
      <title>Evening</title>
    </track>
  </trackList>
</playlist>
"""


# --- XSPF ---

def test_parse_xspf_entries():
    entries = parse_xspf(XSPF)
    assert len(entries) == 3
    first = entries[0]
    assert first.location == "file:///music/Morning Light.mp3"
    assert first.title == "Morning Light"
    assert first.creator == "Someone"
    assert first.album == "Dawn"
    assert entries[1].title is None


def test_parse_xspf_without_namespace():
    content = "<playlist><trackList><track><location>a.mp3</location></track></trackList></playlist>"
    assert [e.location for e in parse_xspf(content)] == ["a.mp3"]


def test_parse_xspf_track_without_location():
    content = "<playlist><trackList><track><title>x</title></track></trackList></playlist>"
    assert parse_xspf(content)[0].location == ""


def test_parse_xspf_malformed():
    with pytest.raises(ValueError, match="Malformed XSPF"):
        parse_xspf("<playlist><track>")


def test_xspf_audio_files_filters_and_resolves(tmp_path):
    path = tmp_path / "list.xspf"
    path.write_text(XSPF, encoding="utf-8")
    assert xspf_audio_files(str(path)) == [
        os.path.abspath("/music/Morning Light.mp3"),
        os.path.abspath("/music/Evening.MP3"),
    ]


def test_xspf_audio_files_relative_location(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "list.xspf"
    path.write_text(
        "<playlist><trackList><track><location>songs/a.mp3</location></track></trackList></playlist>"
    )
    assert xspf_audio_files(str(path)) == [str(tmp_path / "songs" / "a.mp3")]


# --- Directory ---

def test_directory_audio_files_sorted(tmp_path):
    for name in ["b.mp3", "A.MP3", "c.wav", "notes.txt"]:
        (tmp_path / name).write_bytes(b"x")
    files = directory_audio_files(str(tmp_path))
    assert [os.path.basename(f) for f in files] == ["A.MP3", "b.mp3"]
    assert all(os.path.isabs(f) for f in files)


# --- Plan building ---

def test_build_audio_config_back_to_back():
    tracks = build_audio_config(["a.mp3", "b.mp3", "c.mp3"], durations=[10.0, 20.5, 3.0])
    assert [(t.start, t.end) for t in tracks] == [(0.0, 10.0), (10.0, 30.5), (30.5, 33.5)]
    assert all(t.file_start == 0.0 for t in tracks)


def test_build_audio_config_fades():
    tracks = build_audio_config(["a.mp3"], fade_in=1.5, fade_out=2.0, durations=[30.0])
    assert tracks[0].fade_in == 1.5
    assert tracks[0].fade_out == 2.0


@patch("immich_slideshow.audio_config.probe_duration", side_effect=[12.0, 8.25])
def test_build_audio_config_probes_durations(mock_probe):
    tracks = build_audio_config(["a.mp3", "b.mp3"])
    assert tracks[1].end == 20.25
    assert mock_probe.call_count == 2


def test_build_audio_config_empty():
    assert build_audio_config([], durations=[]) == []


def test_build_audio_config_duration_mismatch():
    with pytest.raises(ValueError):
        build_audio_config(["a.mp3", "b.mp3"], durations=[1.0])


# --- Persistence ---

def test_write_audio_config_json_shape(tmp_path):
    path = tmp_path / "audio-config.json"
    write_audio_config([AudioTrack(file="/m/a.mp3", start=0.0, end=9.5, fade_in=1.0)], str(path))
    data = json.loads(path.read_text())
    assert data == [{
        "file": "/m/a.mp3", "start": 0.0, "end": 9.5,
        "fileStart": 0.0, "fadeIn": 1.0, "fadeOut": 0.0,
    }]
    assert path.read_text().startswith("[\n  {")


def test_load_audio_config_written_file(tmp_path, sample_tracks):
    path = tmp_path / "audio-config.json"
    write_audio_config(sample_tracks, str(path))
    assert load_audio_config(str(path)) == sample_tracks


def test_load_audio_config_hand_written(tmp_path):
    path = tmp_path / "audio-config.json"
    path.write_text('[{"file": "a.mp3", "start": 5, "end": 65, "fileStart": 30}]')
    tracks = load_audio_config(str(path))
    assert tracks == [AudioTrack(file="a.mp3", start=5.0, end=65.0, file_start=30.0)]


@pytest.mark.parametrize("content", [
    "{not json",
    '{"file": "a.mp3"}',
    '[{"file": "a.mp3", "start": 0}]',
])
def test_load_audio_config_malformed(tmp_path, content):
    path = tmp_path / "audio-config.json"
    path.write_text(content)
    with pytest.raises(ValueError):
        load_audio_config(str(path))
