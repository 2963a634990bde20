"""Immich HTTP API: album listing and original-asset downloads."""

import json
import os

import requests

from immich_slideshow.constants import (
    API_KEY_HEADER,
    HTTP_TIMEOUT,
    DOWNLOAD_CHUNK_SIZE,
    ALBUM_IMAGE_PREFIX,
    PHOTO_IMAGE_PREFIX,
)
from immich_slideshow.models import AlbumAsset


def _headers(token: str) -> dict:
    return {API_KEY_HEADER: token}


def _base(api_url: str) -> str:
    return api_url.rstrip("/")


def fetch_album(
    api_url: str,
    album_id: str,
    token: str,
    session: requests.Session | None = None,
) -> dict:
    """GET /albums/{id} and return the decoded JSON body."""
    http = session or requests
    response = http.get(
        f"{_base(api_url)}/albums/{album_id}",
        headers=_headers(token),
        timeout=HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def album_image_assets(album: dict) -> list[AlbumAsset]:
    """Pick the image assets out of an album response, in display order.

    Immich lists assets newest first; albums sorted ascending are reversed.
    Raises ValueError when the album has no assets at all.
    """
    raw_assets = album.get("assets") or []
    if not raw_assets:
        raise ValueError("No assets found in the album.")

    assets = []
    for a in raw_assets:
        if not isinstance(a, dict) or not a.get("id"):
            raise ValueError(f"Malformed album asset: {a!r}")
        if a.get("type") == "IMAGE":
            assets.append(AlbumAsset(id=str(a["id"]), type=a["type"]))
    if album.get("order") == "asc":
        assets.reverse()
    return assets


def download_asset(
    api_url: str,
    asset_id: str,
    output_path: str,
    token: str,
    session: requests.Session | None = None,
) -> str:
    """Stream GET /assets/{id}/original to output_path.

    Returns output_path. A partially written file is removed on failure.
    """
    http = session or requests
    url = f"{_base(api_url)}/assets/{asset_id}/original"
    with http.get(url, headers=_headers(token), stream=True, timeout=HTTP_TIMEOUT) as response:
        response.raise_for_status()
        try:
            with open(output_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except (OSError, requests.RequestException):
            if os.path.exists(output_path):
                os.remove(output_path)
            raise
    return output_path


def _download_all(
    api_url: str,
    token: str,
    output_dir: str,
    asset_ids: list[str],
    prefix: str,
    session: requests.Session,
) -> list[str]:
    """Download assets one at a time as <prefix><n>.jpg (1-based)."""
    os.makedirs(output_dir, exist_ok=True)
    total = len(asset_ids)
    print(f"Downloading {total} images to {output_dir}...")

    paths = []
    for index, asset_id in enumerate(asset_ids, start=1):
        output_path = os.path.join(output_dir, f"{prefix}{index}.jpg")
        download_asset(api_url, asset_id, output_path, token, session=session)
        print(f"  Downloaded {index} of {total}: {output_path}")
        paths.append(output_path)
    return paths


def fetch_album_images(api_url: str, album_id: str, token: str, output_dir: str) -> list[str]:
    """Download every image of an album into output_dir.

    Returns the list of written file paths.
    """
    with requests.Session() as session:
        album = fetch_album(api_url, album_id, token, session=session)
        assets = album_image_assets(album)
        print(f"Found {len(assets)} photos in the album.")
        return _download_all(
            api_url, token, output_dir, [a.id for a in assets], ALBUM_IMAGE_PREFIX, session,
        )


def fetch_photos(api_url: str, token: str, output_dir: str, asset_ids: list[str]) -> list[str]:
    """Download an explicit, ordered list of assets into output_dir."""
    with requests.Session() as session:
        return _download_all(api_url, token, output_dir, asset_ids, PHOTO_IMAGE_PREFIX, session)


def load_photo_config(path: str) -> list[str]:
    """Read a photo config: a JSON array of objects with an "id" key.

    Returns the asset ids in file order. Raises ValueError if the file is not
    a non-empty array or an entry has no id.
    """
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid photo config: {path} ({e})") from None

    if not isinstance(data, list) or not data:
        raise ValueError(f"Invalid photo config: {path}")

    ids = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ValueError(f"Invalid photo config entry in {path}: {entry!r}")
        ids.append(str(entry["id"]))
    return ids
