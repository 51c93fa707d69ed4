"""Shared helpers for video upload: size limit, staging temp files and S3 keys."""
import secrets
import tempfile
from pathlib import Path
from typing import BinaryIO
from app.config import get_settings
from app.services.storage import VIDEO_KEY_PREFIX

MAX_UPLOAD_SIZE = 1 << 30  # 1 GiB
CHUNK_SIZE = 1024 * 1024  # 1 MB
TEMP_PREFIX = "tubely-upload-"


def upload_temp_dir() -> str | None:
    """Staging folder from UPLOAD_TEMP_DIR, or None for the OS temp dir."""
    settings = get_settings()
    if not settings.upload_temp_dir:
        return None
    path = Path(settings.upload_temp_dir)
    path.mkdir(parents=True, exist_ok=True)
    return str(path)


def staging_file():
    """Temp file removed as soon as it is closed, whatever the outcome of the upload."""
    return tempfile.NamedTemporaryFile(prefix=TEMP_PREFIX, suffix=".mp4", dir=upload_temp_dir())


def copy_to_staging(src: BinaryIO, dst: BinaryIO) -> int:
    """Copy src into dst in chunks, stopping once MAX_UPLOAD_SIZE is exceeded. Returns bytes written."""
    written = 0
    while chunk := src.read(CHUNK_SIZE):
        dst.write(chunk)
        written += len(chunk)
        if written > MAX_UPLOAD_SIZE:
            break
    dst.flush()
    return written


def new_video_key() -> str:
    # 16 random bytes, hex encoded
    return f"{VIDEO_KEY_PREFIX}{secrets.token_hex(16)}.mp4"
