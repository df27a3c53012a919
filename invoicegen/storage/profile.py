"""Last-used business profile, reloaded at startup."""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

from invoicegen.documents.models import BusinessProfile
from invoicegen.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "business_profile"

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class ProfileStore:
    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def load(self) -> BusinessProfile:
        raw = self.kv.get(STORAGE_KEY)
        if not raw:
            return BusinessProfile()
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            return BusinessProfile.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable business profile: {e}")
            return BusinessProfile()

    def save(self, profile: BusinessProfile):
        self.kv.set(STORAGE_KEY, json.dumps(profile.to_dict()))


def encode_logo_bytes(data: bytes, media_type: str = "image/png") -> str:
    """Inline an uploaded image as a data URL."""
    encoded = base64.standard_b64encode(data).decode("utf-8")
    return f"data:{media_type};base64,{encoded}"


def encode_logo(image_path: str | Path) -> str:
    """Read an image file and return it as a data URL, media type by suffix."""
    path = Path(image_path)
    media_type = MEDIA_TYPES.get(path.suffix.lower(), "image/png")
    with open(path, "rb") as f:
        return encode_logo_bytes(f.read(), media_type)
