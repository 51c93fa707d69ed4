"""Public thumbnail files under the assets folder."""
from pathlib import Path
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from app.services.thumbnail_upload import THUMBNAIL_EXTENSIONS, assets_dir

router = APIRouter(prefix="/assets", tags=["assets"])

_MEDIA_TYPES = {ext: media_type for media_type, ext in THUMBNAIL_EXTENSIONS.items()}


def _safe_asset_path(filename: str) -> Path | None:
    """Resolve filename under assets dir. Return None if invalid (path traversal)."""
    base = assets_dir().resolve()
    try:
        full = (base / filename).resolve()
        full.relative_to(base)  # raises ValueError if path escaped
    except (ValueError, OSError):
        return None
    if not full.is_file():
        return None
    return full


@router.get("/{filename}")
def get_asset(filename: str):
    path = _safe_asset_path(filename)
    if not path:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return FileResponse(path, media_type=_MEDIA_TYPES.get(path.suffix, "application/octet-stream"))
