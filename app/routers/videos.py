"""Video metadata records. Each record belongs to the user who created it."""
import uuid
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.models.video import Video
from app.schemas.video import VideoCreate, VideoResponse

router = APIRouter(prefix="/api/videos", tags=["videos"])


def _get_video_or_404(video_id: str, db: Session) -> Video:
    try:
        video_uuid = uuid.UUID(video_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ID")
    video = db.query(Video).filter(Video.id == str(video_uuid)).first()
    if not video:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return video


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    body: VideoCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a draft video record owned by the caller; assets are uploaded separately."""
    title = body.title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    video = Video(user_id=user.id, title=title, description=(body.description or "").strip() or None)
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


@router.get("", response_model=list[VideoResponse])
def list_videos(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(Video)
        .filter(Video.user_id == user.id)
        .order_by(Video.created_at.desc())
        .all()
    )


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str,
    _user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _get_video_or_404(video_id, db)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Owner: delete the record. Stored assets are left in place."""
    video = _get_video_or_404(video_id, db)
    if video.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You do not have permission to delete this video",
        )
    db.delete(video)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
