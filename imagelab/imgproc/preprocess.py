"""Resize and recompress uploads before they are sent to a hosted model."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO
from typing import Callable

from PIL import Image, UnidentifiedImageError

from imagelab.exceptions import InvalidImageError

_MEDIA_TYPES = {"JPEG": "image/jpeg", "WEBP": "image/webp", "PNG": "image/png"}


@dataclass(frozen=True, slots=True)
class EncodePolicy:
    """Target width, container format and quality for an upload."""

    width: int | None
    fmt: str
    quality: int

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self.fmt]


RESTORE_POLICY = EncodePolicy(width=1000, fmt="JPEG", quality=100)
STICKER_POLICY = EncodePolicy(width=800, fmt="JPEG", quality=60)
TRANSFORM_POLICY = EncodePolicy(width=800, fmt="WEBP", quality=80)


def _encode(img: Image.Image, fmt: str, quality: int) -> bytes:
    if fmt == "JPEG" and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    buffer = BytesIO()
    img.save(buffer, format=fmt, quality=quality)
    return buffer.getvalue()


def resize_and_encode(data: bytes, policy: EncodePolicy) -> bytes:
    """Scale *data* to the policy width, keeping aspect ratio, and re-encode it."""

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            if policy.width and img.width != policy.width:
                height = max(1, round(img.height * policy.width / img.width))
                img = img.resize((policy.width, height), Image.Resampling.LANCZOS)
            return _encode(img, policy.fmt, policy.quality)
    except UnidentifiedImageError as exc:
        raise InvalidImageError("El archivo no es una imagen compatible.") from exc


def reencode(fmt: str, quality: int) -> Callable[[bytes], bytes]:
    """Return a transform that converts image bytes to *fmt* without resizing."""

    policy = EncodePolicy(width=None, fmt=fmt, quality=quality)

    def _transform(data: bytes) -> bytes:
        return resize_and_encode(data, policy)

    return _transform


def to_data_uri(data: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"
