"""Shared fixtures for immich slideshow tests."""

import pytest

from immich_slideshow.models import AudioTrack


class FakeFFmpeg:
    """Stands in for run_ffmpeg: records calls and creates the output file.

    Every command this package builds ends with its output path.
    """

    def __init__(self):
        self.calls = []
        self.concat_lists = []

    def __call__(self, args):
        self.calls.append(list(args))
        if "concat" in args:
            list_file = args[args.index("-i") + 1]
            with open(list_file) as f:
                self.concat_lists.append(f.read())
        with open(args[-1], "w") as f:
            f.write("video")


@pytest.fixture
def fake_ffmpeg():
    return FakeFFmpeg()


@pytest.fixture
def image_dir(tmp_path):
    """Directory with five placeholder JPEGs named like album downloads."""
    path = tmp_path / "images"
    path.mkdir()
    for i in range(1, 6):
        (path / f"image_{i}.jpg").write_bytes(b"jpeg")
    return path


@pytest.fixture
def audio_files(tmp_path):
    """Two placeholder mp3 files."""
    paths = []
    for name in ("a.mp3", "b.mp3"):
        path = tmp_path / name
        path.write_bytes(b"mp3")
        paths.append(str(path))
    return paths


@pytest.fixture
def sample_tracks(audio_files):
    return [
        AudioTrack(file=audio_files[0], start=0.0, end=10.0),
        AudioTrack(file=audio_files[1], start=10.0, end=25.0, fade_in=2.0, fade_out=3.0),
    ]
