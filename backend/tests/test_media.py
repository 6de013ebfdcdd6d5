import pytest
from conftest import png_bytes, jpeg_bytes, gif_bytes
from ecolearn.services.media import inspect_image, ext_for_mime

MB = 1024 * 1024


def test_accepts_png_and_jpeg():
    assert inspect_image(png_bytes(size=(40, 20)), 10 * MB) == ("image/png", 40, 20)
    mime, w, h = inspect_image(jpeg_bytes(), 10 * MB)
    assert (mime, w, h) == ("image/jpeg", 32, 32)
    assert ext_for_mime(mime) == "jpg"


def test_accepts_any_decodable_format():
    assert inspect_image(gif_bytes(), 10 * MB) == ("image/gif", 24, 16)
    assert ext_for_mime("image/gif") == "gif"


@pytest.mark.parametrize("data,message", [
    (b"", "empty"),
    (b"hello world", "Unsupported"),
    (b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n", "Unsupported"),
])
def test_rejects_bad_payloads(data, message):
    with pytest.raises(ValueError, match=message):
        inspect_image(data, 10 * MB)


def test_rejects_oversized():
    with pytest.raises(ValueError, match="less than 10MB"):
        inspect_image(b"\x89PNG" + b"\x00" * (10 * MB), 10 * MB)


def test_rejects_truncated_png():
    data = png_bytes()
    with pytest.raises(ValueError):
        inspect_image(data[: len(data) // 2], 10 * MB)
