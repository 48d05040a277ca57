# admin_console/media/lifecycle.py
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from ..config import MediaConfig
from ..errors import ValidationError
from .codec import ImageCodec
from .storage import MediaStorage, StagedUploads

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaPlan:
    """
    The image side of a product write, computed before anything is persisted.

    thumbnail_url / additional_images are the values to store on the row.
    files_to_delete are previously referenced files nothing refers to any more.
    unused_uploads are files staged for this request that were not used.
    """
    thumbnail_url: Optional[str] = None
    additional_images: List[str] = field(default_factory=list)
    files_to_delete: List[str] = field(default_factory=list)
    unused_uploads: List[str] = field(default_factory=list)

    def values(self) -> dict:
        return {
            "thumbnail_url": self.thumbnail_url,
            "additional_images": ImageCodec.encode(self.additional_images),
        }

    @property
    def cleanup(self) -> List[str]:
        return list(self.files_to_delete) + list(self.unused_uploads)


def _unique(paths: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for path in paths:
        if path and path not in seen:
            seen.add(path)
            result.append(path)
    return result


class ProductMediaLifecycle:
    """Decides which image files a product keeps, gains and loses on each write."""

    def __init__(self, config: MediaConfig, storage: Optional[MediaStorage] = None):
        self.config = config
        self.codec = ImageCodec(config)
        self.storage = storage or MediaStorage(config)

    def plan_create(self, staged: StagedUploads) -> MediaPlan:
        """
        New product: staged thumbnail and gallery become its images.

        MediaStorage.stage already caps the gallery for HTTP requests; the cap
        here covers direct callers, whose extra files end up in unused_uploads
        and are removed by apply().
        """
        limit = self.config.max_gallery_images
        gallery = [f.storage_path for f in staged.gallery]
        if len(gallery) > limit:
            logger.warning(f"Keeping the first {limit} of {len(gallery)} additional images")

        return MediaPlan(
            thumbnail_url=staged.thumbnail.storage_path if staged.thumbnail else None,
            additional_images=gallery[:limit],
            unused_uploads=gallery[limit:],
        )

    def plan_update(self, product: Any, staged: StagedUploads, retained: Any = None) -> MediaPlan:
        """
        Work out the product's images after an update.

        `retained` lists the current gallery paths to keep (JSON or comma
        separated, public URLs accepted). Anything of the current gallery
        left out of it is dropped. New gallery uploads go after the
        retained ones. A new thumbnail replaces the old one.
        """
        current_gallery = self.codec.decode(product.additional_images)
        current_thumbnail = product.thumbnail_url

        keep = []
        for path in self.codec.decode(retained):
            path = self.codec.to_storage_path(path)
            if path not in current_gallery:
                logger.warning(f"Product {product.id}: ignoring retained image {path!r}, not in its gallery")
                continue
            if path not in keep:
                keep.append(path)

        gallery = keep + [f.storage_path for f in staged.gallery]
        limit = self.config.max_gallery_images
        if len(gallery) > limit:
            raise ValidationError(
                f"A product can have at most {limit} additional images "
                f"({len(keep)} kept + {len(staged.gallery)} new)"
            )

        thumbnail = staged.thumbnail.storage_path if staged.thumbnail else current_thumbnail

        still_referenced = set(gallery)
        if thumbnail:
            still_referenced.add(thumbnail)
        previous = ([current_thumbnail] if current_thumbnail else []) + current_gallery

        return MediaPlan(
            thumbnail_url=thumbnail,
            additional_images=gallery,
            files_to_delete=[p for p in _unique(previous) if p not in still_referenced],
        )

    def plan_delete(self, product: Any) -> MediaPlan:
        previous = ([product.thumbnail_url] if product.thumbnail_url else []) + self.codec.decode(
            product.additional_images
        )
        return MediaPlan(files_to_delete=_unique(previous))

    def remove_files(self, paths: Iterable[str]) -> int:
        """Best-effort deletion; returns how many files were removed."""
        removed = 0
        for path in paths:
            try:
                if self.storage.delete(path):
                    removed += 1
            except Exception as e:
                logger.warning(f"Image cleanup failed for {path!r}: {e}")
        return removed

    def apply(self, plan: MediaPlan) -> int:
        return self.remove_files(plan.cleanup)

    def discard(self, staged: StagedUploads) -> None:
        self.storage.discard(staged)
