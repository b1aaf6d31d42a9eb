import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

FORMAT_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


def encode_image(upload):
    """
    Turn an uploaded photo (file-like or bytes) into a data URL string.
    Returns None when the upload is missing or not a readable image; the
    operator simply retakes the photo.
    """
    if upload is None:
        return None

    raw = upload if isinstance(upload, (bytes, bytearray)) else upload.read()
    if not raw:
        return None

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        logger.info("Discarded unreadable photo upload (%d bytes)", len(raw))
        return None

    mime = FORMAT_MIME.get(fmt or "", "application/octet-stream")
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"
