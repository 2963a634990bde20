"""Tests for titles module."""

from unittest.mock import patch

from immich_slideshow.titles import (
    build_ending_command,
    build_title_command,
    ensure_mp4,
    generate_title_and_ending,
)


def test_ensure_mp4():
    assert ensure_mp4("title") == "title.mp4"
    assert ensure_mp4("title.mp4") == "title.mp4"


def test_build_title_command():
    args = build_title_command("cover.jpg", "title.mp4", 5.0, 1920, 1080, 30)
    assert args == [
        "-loop", "1", "-i", "cover.jpg",
        "-c:v", "libx264", "-t", "5",
        "-vf", "scale=1920x1080,format=yuv420p,fps=30",
        "-pix_fmt", "yuv420p", "-r", "30",
        "-y", "title.mp4",
    ]


def test_build_ending_command():
    args = build_ending_command("ending.mp4", 2.5, 1280, 720, 30)
    assert args[:4] == ["-f", "lavfi", "-i", "color=black:s=1280x720:d=2.5"]
    assert args[args.index("-vf") + 1] == "fps=30,format=yuv420p"
    assert args[-1] == "ending.mp4"


def test_generate_title_and_ending(tmp_path, fake_ffmpeg):
    title = tmp_path / "intro"
    ending = tmp_path / "outro.mp4"
    with patch("immich_slideshow.titles.run_ffmpeg", fake_ffmpeg):
        result = generate_title_and_ending("cover.jpg", str(title), str(ending), duration=3)

    assert result == (str(title) + ".mp4", str(ending))
    assert len(fake_ffmpeg.calls) == 2
    assert fake_ffmpeg.calls[0][:4] == ["-loop", "1", "-i", "cover.jpg"]
    assert fake_ffmpeg.calls[1][3].startswith("color=black:s=1920x1080:d=3")
