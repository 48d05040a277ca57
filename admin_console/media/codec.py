# admin_console/media/codec.py
import json
import logging
from typing import Any, List, Optional

from ..config import MediaConfig

logger = logging.getLogger(__name__)


def decode(raw: Any) -> List[str]:
    """
    Turn a persisted image list into an ordered list of paths.

    Accepts None, an already decoded list, a JSON array string or a legacy
    comma separated string. Never raises: anything unusable yields [].
    """
    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        return list(raw)

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Image list is not valid UTF-8, treating it as empty")
            return []

    if not isinstance(raw, str) or not raw.strip():
        return []

    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        # Legacy rows: "a.png, b.png"
        return [segment.strip() for segment in raw.split(",") if segment.strip()]

    if isinstance(parsed, list):
        return [item for item in parsed if isinstance(item, str)]
    return []


def encode(images: Any) -> str:
    """Serialize paths as a JSON array, verbatim."""
    if not isinstance(images, (list, tuple)):
        return "[]"
    return json.dumps(list(images))


def to_public_url(path: Optional[str], base: str, fallback: str) -> str:
    if not path:
        return fallback
    if path.startswith("/"):
        return base + path
    return path


class ImageCodec:
    """Codec bound to a media configuration (public base and fallback image)."""

    def __init__(self, config: MediaConfig):
        self.config = config

    decode = staticmethod(decode)
    encode = staticmethod(encode)

    def to_public_url(self, path: Optional[str], base: Optional[str] = None) -> str:
        return to_public_url(
            path,
            base if base is not None else self.config.public_base_url,
            self.config.fallback_image_url,
        )

    def public_gallery(self, raw: Any) -> List[str]:
        return [self.to_public_url(path) for path in decode(raw)]

    def to_storage_path(self, url: str) -> str:
        """Undo to_public_url for paths served by this application."""
        base = self.config.public_base_url
        if base and url.startswith(base + "/"):
            return url[len(base):]
        return url
