"""S3 client and object URL helpers for video assets."""
from functools import lru_cache
import boto3
from app.config import get_settings

VIDEO_KEY_PREFIX = "videos/"


@lru_cache
def get_s3_client():
    """Shared boto3 S3 client (FastAPI dependency; overridden in tests)."""
    settings = get_settings()
    kwargs = {"region_name": settings.s3_region}
    if settings.s3_endpoint_url:
        kwargs["endpoint_url"] = settings.s3_endpoint_url
    return boto3.client("s3", **kwargs)


def put_video_object(client, bucket: str, key: str, body, content_type: str = "video/mp4") -> None:
    client.put_object(
        Bucket=bucket,
        Key=key,
        Body=body,
        ContentType=content_type,
    )


def public_object_url(bucket: str, region: str, key: str) -> str:
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"
