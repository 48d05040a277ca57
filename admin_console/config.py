# admin_console/config.py
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables (optional for local dev)
load_dotenv()


@dataclass(frozen=True)
class MediaConfig:
    """Everything the media package needs to know about image storage."""
    root: str
    url_prefix: str
    public_base_url: str
    fallback_image_url: str
    max_upload_bytes: int = 5 * 1024 * 1024
    max_gallery_images: int = 5
    allowed_extensions: Tuple[str, ...] = (".jpeg", ".jpg", ".png", ".gif")
    allowed_mime_types: Tuple[str, ...] = ("image/jpeg", "image/jpg", "image/png", "image/gif")


class Settings(BaseSettings):
    # Project
    PROJECT_NAME: str = "Shop Admin Console API"
    API_PREFIX: str = "/api/admin"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./admin_console.db"

    # Product images
    MEDIA_ROOT: str = "./public/productImages"
    MEDIA_URL_PREFIX: str = "/productImages"
    PUBLIC_BASE_URL: str = "http://localhost:5000"
    FALLBACK_IMAGE_URL: Optional[str] = None
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024  # 5 MB
    MAX_GALLERY_IMAGES: int = 5

    # Frontend URL(s) allowed by CORS, comma separated
    CORS_ORIGINS: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def media(self) -> MediaConfig:
        base = self.PUBLIC_BASE_URL.rstrip("/")
        return MediaConfig(
            root=self.MEDIA_ROOT,
            url_prefix="/" + self.MEDIA_URL_PREFIX.strip("/"),
            public_base_url=base,
            fallback_image_url=self.FALLBACK_IMAGE_URL or f"{base}/fallback-image.png",
            max_upload_bytes=self.MAX_UPLOAD_BYTES,
            max_gallery_images=self.MAX_GALLERY_IMAGES,
        )
