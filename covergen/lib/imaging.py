# covergen/lib/imaging.py
from __future__ import annotations

import base64
import io
import re
import urllib.request
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode, urlparse, urlunparse, parse_qsl

from PIL import Image, ImageOps

from covergen import logger

log = logger.get_logger(__name__)

_DATAURL_RE = re.compile(r"^data:(image/[\w+.-]+);base64,(.*)$", re.IGNORECASE | re.DOTALL)

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


def sniff_ext_from_bytes(data: bytes) -> str:
    # PNG
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return ".png"
    # JPEG
    if data.startswith(b"\xff\xd8"):
        return ".jpg"
    # GIF87a / GIF89a
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return ".gif"
    # WEBP: RIFF....WEBP
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    return ""


def content_type_for(key: str) -> str:
    ext = "." + key.rsplit(".", 1)[-1].lower() if "." in key else ""
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def decode_image_b64(image_b64: str) -> bytes:
    """Accepts 'data:image/...;base64,...' or raw base64 and returns the bytes."""
    if not image_b64:
        raise ValueError("empty base64")
    m = _DATAURL_RE.match(image_b64.strip())
    payload = m.group(2) if m else image_b64.strip()
    payload = "".join(payload.split())
    missing_padding = (-len(payload)) % 4
    if missing_padding:
        payload += "=" * missing_padding
    return base64.b64decode(payload)


def fetch_image_bytes(url: str, timeout: float = 60.0) -> bytes:
    parsed = urlparse(url or "")
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"Invalid image URL format: {url!r}")
    with urllib.request.urlopen(url, timeout=timeout) as r:
        status = getattr(r, "status", 200)
        if status >= 400:
            raise ValueError(f"Failed to download image: HTTP {status}")
        return r.read()


@dataclass
class OptimizedImage:
    data: bytes
    format: str
    width: int
    height: int
    original_size: int

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def compression_ratio(self) -> float:
        return (self.original_size / self.size) if self.size else 0.0


def optimize_image(
    data: bytes,
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
    fmt: str = "webp",
    quality: int = 85,
) -> OptimizedImage:
    """
    Re-encode `data` as `fmt`, scaled down to fit inside width x height
    (aspect ratio kept, never upscaled). EXIF and other metadata are dropped.
    """
    with Image.open(io.BytesIO(data)) as src:
        img = ImageOps.exif_transpose(src)
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        if width and height:
            img.thumbnail((width, height), Image.LANCZOS)

        out = io.BytesIO()
        pil_fmt = fmt.upper()
        if pil_fmt in ("JPG", "JPEG"):
            pil_fmt = "JPEG"
            img = img.convert("RGB")
        img.save(out, format=pil_fmt, quality=quality)
        w, h = img.size

    result = OptimizedImage(data=out.getvalue(), format=fmt.lower(), width=w, height=h, original_size=len(data))
    log.debug(f"optimized image {result.original_size} -> {result.size} bytes ({w}x{h} {result.format})")
    return result


def with_resize_params(url: str, *, width: Optional[int] = None, height: Optional[int] = None,
                       quality: int = 80, fmt: str = "webp", fit: Optional[str] = None) -> str:
    """Add Cloudflare image-resizing query parameters to a public object URL."""
    parts = urlparse(url)
    query = dict(parse_qsl(parts.query))
    query["format"] = fmt
    query["quality"] = str(quality)
    if width:
        query["width"] = str(width)
    if height:
        query["height"] = str(height)
    if fit:
        query["fit"] = fit
    return urlunparse(parts._replace(query=urlencode(query)))
