# qc/tests/test_capture.py
import base64
import io

from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from qc.services.capture import encode_image


def _png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


def test_encodes_png_upload_as_data_url():
    raw = _png_bytes()
    encoded = encode_image(SimpleUploadedFile("cp.png", raw, content_type="image/png"))

    assert encoded.startswith("data:image/png;base64,")
    assert base64.b64decode(encoded.split(",", 1)[1]) == raw


def test_unreadable_upload_fails_silently():
    assert encode_image(SimpleUploadedFile("cp.png", b"not an image")) is None


def test_missing_or_empty_upload():
    assert encode_image(None) is None
    assert encode_image(b"") is None
