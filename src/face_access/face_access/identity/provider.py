from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from ..common.validators import text_field
from ..core.exceptions import ValidationError

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


@dataclass(frozen=True)
class FaceMatch:
    face_token: str
    similarity: float


class FaceIdentityProvider(Protocol):
    """External face recognition service.

    Matching thresholds are the provider's business; callers only see a match or None.
    """

    def identify(self, image: bytes) -> Optional[FaceMatch]:
        raise NotImplementedError


def decode_image_payload(image_data: str) -> bytes:
    """Decode a base64 image, with or without a `data:image/...;base64,` prefix."""
    payload = _DATA_URL_PREFIX.sub("", text_field(image_data, "imageData"))
    if not payload:
        raise ValidationError("An image is required for face recognition", fields={"imageData": "required"})
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64", fields={"imageData": "format:base64"})
