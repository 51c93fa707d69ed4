"""Thumbnail storage on local disk: allow-listed image types, random filenames, public URL."""
import re
import secrets
import shutil
from pathlib import Path
from typing import BinaryIO
from app.config import get_settings

# Declared media type -> extension. The client's filename is never used.
THUMBNAIL_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
}

_TOKEN = r"[!#$%&'*+.^_`|~0-9a-z-]+"
_MEDIA_TYPE_RE = re.compile(rf"^{_TOKEN}/{_TOKEN}$")


def assets_dir() -> Path:
    settings = get_settings()
    if settings.assets_root:
        return Path(settings.assets_root)
    return Path(__file__).resolve().parent.parent.parent / "assets"


def parse_media_type(content_type: str | None) -> str | None:
    """Lower-cased type/subtype without parameters, or None if the header is malformed."""
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    if not _MEDIA_TYPE_RE.match(media_type):
        return None
    return media_type


def random_asset_name(ext: str) -> str:
    # 32 random bytes, URL-safe base64 without padding
    return secrets.token_urlsafe(32) + ext


def save_thumbnail(src: BinaryIO, filename: str) -> Path:
    directory = assets_dir()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    with path.open("wb") as f:
        shutil.copyfileobj(src, f)
    return path


def thumbnail_url(filename: str) -> str:
    settings = get_settings()
    return f"http://{settings.asset_host}:{settings.port}/assets/{filename}"
