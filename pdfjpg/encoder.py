from __future__ import annotations
import base64
import io

from PIL import Image

from .config import JPEG_QUALITY

JPEG_MIME = "image/jpeg"
DATA_URI_PREFIX = f"data:{JPEG_MIME};base64,"


def encode_jpeg(img: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    if not 1 <= quality <= 100:
        raise ValueError(f"JPEG quality must be within 1..100, got {quality}")
    if img.mode != "RGB":
        img = img.convert("RGB")
    buf = io.BytesIO()
    # no chroma subsampling at full quality
    img.save(buf, format="JPEG", quality=quality, subsampling=0 if quality >= 95 else -1)
    return buf.getvalue()


def to_data_uri(jpeg: bytes) -> str:
    return DATA_URI_PREFIX + base64.b64encode(jpeg).decode("ascii")


def from_data_uri(uri: str) -> bytes:
    if not uri.startswith(DATA_URI_PREFIX):
        raise ValueError("not a base64 JPEG data URI")
    return base64.b64decode(uri[len(DATA_URI_PREFIX):])


def encode_data_uri(img: Image.Image, quality: int = JPEG_QUALITY) -> str:
    """Serialize a rendered surface to a self-contained `data:image/jpeg;base64,...` string."""
    return to_data_uri(encode_jpeg(img, quality))
