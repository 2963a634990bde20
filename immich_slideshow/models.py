"""Data models for album assets and audio plans."""

from dataclasses import dataclass


@dataclass
class AlbumAsset:
    id: str
    type: str          # "IMAGE", "VIDEO", ...


@dataclass
class PlaylistEntry:
    location: str      # URL-decoded path or file:// URL
    title: str | None = None
    creator: str | None = None
    album: str | None = None


@dataclass
class AudioTrack:
    file: str
    start: float       # seconds in the video timeline
    end: float
    file_start: float = 0.0   # offset inside the audio file
    fade_in: float = 0.0      # 0 = no fade
    fade_out: float = 0.0

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "start": self.start,
            "end": self.end,
            "fileStart": self.file_start,
            "fadeIn": self.fade_in,
            "fadeOut": self.fade_out,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AudioTrack":
        """Build a track from its JSON form.

        Raises ValueError if a required key is missing or a time is not a number.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Audio track must be an object, got: {data!r}")
        for key in ("file", "start", "end"):
            if key not in data:
                raise ValueError(f"Audio track is missing '{key}': {data!r}")
        if not isinstance(data["file"], str) or not data["file"]:
            raise ValueError(f"Audio track has an invalid 'file': {data!r}")

        times = {}
        for key in ("start", "end", "fileStart", "fadeIn", "fadeOut"):
            value = data.get(key)
            if value is None and key not in ("start", "end"):
                value = 0
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Audio track '{key}' must be a number: {data!r}")
            times[key] = float(value)

        return cls(
            file=data["file"],
            start=times["start"],
            end=times["end"],
            file_start=times["fileStart"],
            fade_in=times["fadeIn"],
            fade_out=times["fadeOut"],
        )
