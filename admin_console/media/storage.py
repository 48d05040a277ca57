# admin_console/media/storage.py
import logging
import os
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from fastapi import UploadFile
from PIL import Image

from ..config import MediaConfig
from ..errors import MediaError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
IMAGE_FORMATS = ("JPEG", "PNG", "GIF")


@dataclass
class StagedFile:
    field: str            # "thumbnail" or "additional_images"
    original_name: str
    storage_path: str     # /productImages/<filename>
    disk_path: str
    size: int = 0


@dataclass
class StagedUploads:
    thumbnail: Optional[StagedFile] = None
    gallery: List[StagedFile] = field(default_factory=list)

    @property
    def files(self) -> List[StagedFile]:
        staged = [self.thumbnail] if self.thumbnail else []
        return staged + list(self.gallery)

    def __bool__(self):
        return bool(self.files)


class MediaStorage:
    """Writes uploaded product images under the media root and removes them again."""

    def __init__(self, config: MediaConfig):
        self.config = config

    def ensure_root(self) -> None:
        os.makedirs(self.config.root, exist_ok=True)

    def make_filename(self, original_name: str) -> str:
        name = os.path.basename(original_name.replace("\\", "/"))
        name = re.sub(r"\s+", "-", name.strip())
        name = _UNSAFE_CHARS.sub("", name) or "image"
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{name}"

    def check_type(self, upload: UploadFile) -> None:
        extension = os.path.splitext(upload.filename or "")[1].lower()
        content_type = (upload.content_type or "").lower()
        if extension not in self.config.allowed_extensions or content_type not in self.config.allowed_mime_types:
            raise MediaError("Only image files are allowed")

    def check_content(self, disk_path: str, original_name: str) -> None:
        """Make sure the bytes really are a JPEG, PNG or GIF image."""
        try:
            with Image.open(disk_path) as img:
                image_format = img.format
                img.verify()
        except Exception as e:
            logger.warning(f"Rejected upload {original_name}: not a readable image ({e})")
            raise MediaError("Only image files are allowed") from e
        if image_format not in IMAGE_FORMATS:
            logger.warning(f"Rejected upload {original_name}: unsupported image format {image_format}")
            raise MediaError("Only image files are allowed")

    async def stage(
        self,
        thumbnail: Optional[Iterable[UploadFile]] = None,
        additional_images: Optional[Iterable[UploadFile]] = None,
    ) -> StagedUploads:
        """
        Validate and write the request's files to disk.

        At most one thumbnail and max_gallery_images gallery files are kept,
        extras are skipped. If any file is rejected every file already written
        for this request is removed and MediaError is raised.
        """
        thumbnails = [f for f in (thumbnail or []) if f is not None and f.filename]
        gallery = [f for f in (additional_images or []) if f is not None and f.filename]

        limit = self.config.max_gallery_images
        if len(thumbnails) > 1:
            logger.warning(f"Ignoring {len(thumbnails) - 1} extra thumbnail file(s)")
        if len(gallery) > limit:
            logger.warning(f"Ignoring {len(gallery) - limit} additional image(s) over the limit of {limit}")

        # Reject bad types before anything touches the disk
        selected = [("thumbnail", f) for f in thumbnails[:1]] + [("additional_images", f) for f in gallery[:limit]]
        for _, upload in selected:
            self.check_type(upload)

        staged = StagedUploads()
        try:
            if selected:
                self.ensure_root()
            for field_name, upload in selected:
                staged_file = await self._write(field_name, upload)
                if field_name == "thumbnail":
                    staged.thumbnail = staged_file
                else:
                    staged.gallery.append(staged_file)
        except Exception:
            self.discard(staged)
            raise
        return staged

    async def _write(self, field_name: str, upload: UploadFile) -> StagedFile:
        filename = self.make_filename(upload.filename)
        disk_path = os.path.join(self.config.root, filename)
        size = 0
        try:
            with open(disk_path, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.config.max_upload_bytes:
                        raise MediaError(
                            f"File '{upload.filename}' exceeds the "
                            f"{self.config.max_upload_bytes // (1024 * 1024)} MB limit"
                        )
                    out.write(chunk)
            self.check_content(disk_path, upload.filename)
        except Exception:
            self._unlink(disk_path)
            raise

        logger.info(f"Stored {field_name} image {upload.filename} as {filename} ({size} bytes)")
        return StagedFile(
            field=field_name,
            original_name=upload.filename,
            storage_path=f"{self.config.url_prefix}/{filename}",
            disk_path=disk_path,
            size=size,
        )

    def discard(self, staged: StagedUploads) -> None:
        """Remove files staged for a request that did not go through."""
        for staged_file in staged.files:
            self._unlink(staged_file.disk_path)

    def disk_path_for(self, storage_path: str) -> Optional[str]:
        """Map /productImages/<name> to a file under the media root, or None if it lies outside."""
        prefix = self.config.url_prefix + "/"
        if not storage_path or not storage_path.startswith(prefix):
            return None

        root = os.path.realpath(self.config.root)
        candidate = os.path.realpath(os.path.join(root, storage_path[len(prefix):]))
        if os.path.commonpath([root, candidate]) != root or candidate == root:
            return None
        return candidate

    def delete(self, storage_path: str) -> bool:
        """Best-effort removal. Failures are logged, never raised."""
        disk_path = self.disk_path_for(storage_path)
        if disk_path is None:
            logger.warning(f"Not deleting {storage_path!r}: outside of the media directory")
            return False
        return self._unlink(disk_path)

    def _unlink(self, disk_path: str) -> bool:
        try:
            os.remove(disk_path)
            logger.info(f"Deleted image file {disk_path}")
            return True
        except OSError as e:
            logger.warning(f"Could not delete image file {disk_path}: {e}")
            return False
