"""
Asset uploads for a video record (owner only).
Thumbnails are kept on local disk under the assets folder; videos are staged in a
temp file and pushed to S3. Ownership is checked before the form is read.
Blocking work (disk, S3, database) runs in the threadpool.
"""
import logging
import uuid
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from app.auth import get_current_user
from app.config import get_settings
from app.core.errors import PlainTextHTTPException
from app.database import get_db
from app.models.user import User
from app.models.video import Video
from app.schemas.video import VideoResponse, VideoUploadResponse
from app.services.storage import get_s3_client, public_object_url, put_video_object
from app.services.thumbnail_upload import (
    THUMBNAIL_EXTENSIONS,
    parse_media_type,
    random_asset_name,
    save_thumbnail,
    thumbnail_url,
)
from app.services.video_upload import MAX_UPLOAD_SIZE, copy_to_staging, new_video_key, staging_file
from app.utils.sniff import SNIFF_LEN, detect_content_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])


def _too_large() -> PlainTextHTTPException:
    return PlainTextHTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail="Request body too large",
    )


async def limit_upload_size(request: Request):
    """
    Cap the whole request body at MAX_UPLOAD_SIZE. A declared Content-Length is
    checked up front; every body chunk read afterwards (chunked bodies included)
    is counted and the request fails with 413 as soon as the total passes the cap.
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_UPLOAD_SIZE:
        raise _too_large()

    receive = request._receive
    received = 0

    async def limited_receive():
        nonlocal received
        message = await receive()
        if message["type"] == "http.request":
            received += len(message.get("body", b""))
            if received > MAX_UPLOAD_SIZE:
                raise _too_large()
        return message

    request._receive = limited_receive


def thumbnail_video_id(video_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(video_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ID")


def upload_video_id(video_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(video_id)
    except ValueError:
        raise PlainTextHTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid video ID")


def _find_video(db: Session, video_uuid: uuid.UUID) -> Video | None:
    return db.query(Video).filter(Video.id == str(video_uuid)).first()


async def _read_form(request: Request):
    try:
        return await request.form()
    except PlainTextHTTPException:
        # body limit hit while parsing
        raise
    except (MultiPartException, StarletteHTTPException, ValueError) as e:
        logger.warning("Multipart parse failed for %s: %s", request.url.path, e)
        return None


def _stage_and_upload(src, s3_client, bucket: str, key: str, video_id: str) -> int:
    """Copy src to a temp file and put it to S3. The temp file is gone when this returns."""
    try:
        staged = staging_file()
    except OSError:
        logger.exception("Creating temp file for video %s failed", video_id)
        raise PlainTextHTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create temp file",
        )
    with staged as tmp:
        try:
            size = copy_to_staging(src, tmp)
        except OSError:
            logger.exception("Staging upload for video %s failed", video_id)
            raise PlainTextHTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save file",
            )
        if size > MAX_UPLOAD_SIZE:
            raise _too_large()
        tmp.seek(0)

        try:
            put_video_object(s3_client, bucket, key, tmp)
        except (BotoCoreError, ClientError):
            logger.exception("S3 put of %s failed", key)
            raise PlainTextHTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload to S3",
            )
    return size


# ---------- Thumbnail ----------


@router.post("/thumbnail_upload/{video_id}", response_model=VideoResponse)
async def upload_thumbnail(
    request: Request,
    video_uuid: uuid.UUID = Depends(thumbnail_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Owner: upload a PNG/JPEG thumbnail (form field "thumbnail"). Returns the updated video."""
    video = await run_in_threadpool(_find_video, db, video_uuid)
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    if video.user_id != user.id:
        logger.warning("User %s tried to set thumbnail of video %s", user.id, video.id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You do not have permission to modify this video",
        )

    logger.info("Uploading thumbnail for video %s by user %s", video.id, user.id)
    form = await _read_form(request)
    if form is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to parse form data")
    try:
        file = form.get("thumbnail")
        if not isinstance(file, UploadFile):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to retrieve file from form")

        media_type = parse_media_type(file.content_type)
        if media_type is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid Content-Type")
        ext = THUMBNAIL_EXTENSIONS.get(media_type)
        if ext is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported file type")

        try:
            filename = random_asset_name(ext)
        except NotImplementedError:
            # os.urandom has no entropy source
            logger.exception("Random source unavailable")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to generate random filename",
            )

        try:
            await run_in_threadpool(save_thumbnail, file.file, filename)
        except OSError:
            logger.exception("Writing thumbnail %s failed", filename)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save file")
    finally:
        await form.close()

    url = thumbnail_url(filename)
    video.thumbnail_url = url
    try:
        await run_in_threadpool(db.commit)
    except SQLAlchemyError:
        await run_in_threadpool(db.rollback)
        logger.exception("Updating thumbnail_url of video %s failed", video.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update video metadata",
        )
    await run_in_threadpool(db.refresh, video)

    logger.info("Successfully uploaded thumbnail for video %s at %s", video.id, url)
    return video


# ---------- Video ----------


@router.post(
    "/video_upload/{video_id}",
    response_model=VideoUploadResponse,
    dependencies=[Depends(limit_upload_size)],
)
async def upload_video(
    request: Request,
    video_uuid: uuid.UUID = Depends(upload_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    s3_client=Depends(get_s3_client),
):
    """
    Owner: upload an MP4 (form field "video", max 1 GiB).
    The type is sniffed from the first 512 bytes; the client's Content-Type is ignored.
    Errors are plain text.
    """
    video = await run_in_threadpool(_find_video, db, video_uuid)
    if not video:
        raise PlainTextHTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    if video.user_id != user.id:
        logger.warning("User %s tried to upload video file for video %s", user.id, video.id)
        raise PlainTextHTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    form = await _read_form(request)
    if form is None:
        raise PlainTextHTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file upload")
    try:
        file = form.get("video")
        if not isinstance(file, UploadFile):
            raise PlainTextHTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid file upload")

        try:
            head = await file.read(SNIFF_LEN)
            await file.seek(0)
        except OSError:
            head = b""
        if not head:
            raise PlainTextHTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to read file")

        mime_type = detect_content_type(head)
        if mime_type != "video/mp4":
            logger.warning("Rejected upload for video %s: sniffed %s", video.id, mime_type)
            raise PlainTextHTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid file type, must be MP4",
            )

        settings = get_settings()
        key = new_video_key()
        size = await run_in_threadpool(
            _stage_and_upload, file.file, s3_client, settings.s3_bucket, key, video.id
        )
    finally:
        await form.close()

    s3_url = public_object_url(settings.s3_bucket, settings.s3_region, key)
    video.video_url = s3_url
    try:
        await run_in_threadpool(db.commit)
    except SQLAlchemyError:
        await run_in_threadpool(db.rollback)
        logger.exception("Updating video_url of video %s failed", video.id)
        raise PlainTextHTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update database",
        )

    logger.info("Uploaded video %s to %s (%d bytes)", video.id, s3_url, size)
    return VideoUploadResponse(message="Video uploaded successfully", s3_url=s3_url)
