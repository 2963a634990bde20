"""Tests for models module."""

import pytest

from immich_slideshow.models import AlbumAsset, AudioTrack, PlaylistEntry


def test_audio_track_defaults():
    """Optional timing fields default to zero."""
    track = AudioTrack(file="a.mp3", start=1.0, end=4.5)
    assert track.file_start == 0.0
    assert track.fade_in == 0.0
    assert track.fade_out == 0.0
    assert track.duration == 3.5


def test_audio_track_to_dict_uses_json_keys():
    track = AudioTrack(file="a.mp3", start=0, end=5, file_start=1, fade_in=2, fade_out=3)
    assert track.to_dict() == {
        "file": "a.mp3", "start": 0, "end": 5,
        "fileStart": 1, "fadeIn": 2, "fadeOut": 3,
    }


def test_audio_track_from_dict_optional_keys_missing():
    track = AudioTrack.from_dict({"file": "a.mp3", "start": 2, "end": 7})
    assert track == AudioTrack(file="a.mp3", start=2.0, end=7.0)


def test_audio_track_from_dict_null_optional_key():
    """A null fade is treated as no fade."""
    track = AudioTrack.from_dict({"file": "a.mp3", "start": 0, "end": 7, "fadeIn": None})
    assert track.fade_in == 0.0


@pytest.mark.parametrize("data", [
    {"start": 0, "end": 1},
    {"file": "a.mp3", "end": 1},
    {"file": "a.mp3", "start": 0},
    {"file": "", "start": 0, "end": 1},
    {"file": "a.mp3", "start": "zero", "end": 1},
    {"file": "a.mp3", "start": 0, "end": 1, "fadeOut": "2"},
    {"file": "a.mp3", "start": True, "end": 1},
    {"file": "a.mp3", "start": None, "end": 5},
    {"file": "a.mp3", "start": 0, "end": None},
    ["a.mp3", 0, 1],
])
def test_audio_track_from_dict_malformed(data):
    with pytest.raises(ValueError):
        AudioTrack.from_dict(data)


def test_album_asset_fields():
    asset = AlbumAsset(id="abc", type="IMAGE")
    assert asset.id == "abc"
    assert asset.type == "IMAGE"


def test_playlist_entry_optional_metadata():
    entry = PlaylistEntry(location="/music/a.mp3")
    assert entry.title is None
    assert entry.creator is None
    assert entry.album is None
