from __future__ import annotations
from PIL import Image, UnidentifiedImageError
import io


EXT_FOR_MIME = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/heic": "heic",
}

def sniff_mime(data: bytes) -> str | None:
    """MIME type of any format Pillow can open, or None."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "")
    except Exception:
        return None

def inspect_image(data: bytes, max_bytes: int) -> tuple[str, int, int]:
    """
    Validate an uploaded photo and return (mime, width, height).
    Raises ValueError when the payload is empty, too large, or not an image
    Pillow can decode and verify.
    """
    if not data:
        raise ValueError("Photo is empty")
    if len(data) > max_bytes:
        raise ValueError(f"Image must be less than {max_bytes // (1024 * 1024)}MB")
    mime = sniff_mime(data)
    if mime is None or not mime.startswith("image/"):
        raise ValueError("Unsupported image type")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()  # basic integrity
        with Image.open(io.BytesIO(data)) as img2:
            width, height = img2.size
    except UnidentifiedImageError:
        raise ValueError("Invalid image file")
    except Exception as e:
        # truncated or corrupt payloads surface as assorted decoder errors
        raise ValueError("Invalid image file") from e
    if not width or not height:
        raise ValueError("Invalid image file")
    return mime, width, height

def ext_for_mime(mime: str) -> str:
    return EXT_FOR_MIME.get(mime) or mime.split("/", 1)[-1].split("+", 1)[0] or "bin"
