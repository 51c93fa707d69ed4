import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import get_settings
from app.core.errors import PlainTextHTTPException, plain_text_http_exception_handler
from app.routers import assets, auth, uploads, videos
from app.services.thumbnail_upload import assets_dir

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    assets_dir().mkdir(parents=True, exist_ok=True)
    if not settings.s3_bucket:
        logger.warning("S3_BUCKET is not set; video uploads will fail")
    yield


app = FastAPI(title="Tubely API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(PlainTextHTTPException, plain_text_http_exception_handler)

app.include_router(auth.router)
app.include_router(videos.router)
app.include_router(uploads.router)
app.include_router(assets.router)


@app.get("/")
def root():
    return {"message": "Tubely API", "docs": "/docs"}
