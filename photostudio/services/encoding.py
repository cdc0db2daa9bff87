"""
Purpose:
- Convert uploaded image bytes to a text-safe data URL and back.
- Strip/re-wrap the base64 payload when crossing the Gemini request boundary.

Notes:
- Uploads are sniffed with Pillow so the mime type comes from the bytes,
  not from whatever the browser claimed.
"""

from __future__ import annotations
import base64
import binascii
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Optional
from PIL import Image, UnidentifiedImageError

from ..core.errors import InvalidImageError
from ..core.settings import settings

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*),(?P<data>.*)$", re.DOTALL)

@dataclass(frozen=True)
class ImagePayload:
    mime_type: str
    data: bytes

    def to_data_url(self) -> str:
        return to_data_url(self.data, self.mime_type)

def to_data_url(raw: bytes, mime_type: str = "image/png") -> str:
    b64 = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{b64}"

def strip_data_url(data_url: str) -> str:
    """
    Return just the base64 payload (the part after the first comma).
    A bare base64 string is passed through unchanged.
    """
    if not data_url:
        raise InvalidImageError("Empty image payload")
    head, sep, tail = data_url.partition(",")
    if not sep:
        return data_url.strip()
    if not head.startswith("data:"):
        raise InvalidImageError("Malformed data URL")
    return tail.strip()

def parse_data_url(data_url: str) -> ImagePayload:
    m = _DATA_URL_RE.match((data_url or "").strip())
    if not m:
        raise InvalidImageError("Malformed data URL")
    if ";base64" not in (m.group("params") or ""):
        raise InvalidImageError("Only base64 data URLs are supported")
    try:
        raw = base64.b64decode(m.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 payload: {e}") from e
    return ImagePayload(mime_type=m.group("mime") or "application/octet-stream", data=raw)

def sniff_image(raw: bytes, max_bytes: Optional[int] = None) -> ImagePayload:
    """
    Verify that raw bytes are an image Pillow can read and return them
    tagged with the detected mime type.
    """
    limit = settings.max_upload_bytes if max_bytes is None else max_bytes
    if not raw:
        raise InvalidImageError("Empty upload")
    if len(raw) > limit:
        raise InvalidImageError(f"Image is larger than {limit} bytes")
    try:
        with Image.open(BytesIO(raw)) as img:
            fmt = (img.format or "").upper()
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"Not an image: {e}") from e
    if fmt not in {f.upper() for f in settings.allowed_image_formats}:
        raise InvalidImageError(f"Unsupported image format: {fmt or 'unknown'}")
    return ImagePayload(mime_type=Image.MIME.get(fmt, "image/png"), data=raw)

def upload_to_data_url(raw: bytes) -> str:
    return sniff_image(raw).to_data_url()
