import io

import numpy as np
import pytest
from PIL import Image

from conftest import encode_with_pillow, solid_rgba
from pixrefine.errors import DecodeError
from pixrefine.utils.loader import decode_image, load_bytes


def test_decode_png_rgba_roundtrip(random_rgba):
    out = decode_image(encode_with_pillow(random_rgba, "PNG"))
    assert out.dtype == np.uint8
    assert out.shape == random_rgba.shape
    assert np.array_equal(out, random_rgba)


def test_decode_rgb_jpeg_gets_opaque_alpha():
    data = encode_with_pillow(solid_rgba(8, 12)[:, :, :3], "JPEG")
    out = decode_image(data, "image/jpeg")
    assert out.shape == (8, 12, 4)
    assert np.all(out[:, :, 3] == 255)


def test_decode_webp():
    data = encode_with_pillow(solid_rgba(5, 7, (0, 0, 255, 128)), "WEBP")
    out = decode_image(data)
    assert out.shape == (5, 7, 4)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x89PNG\r\n",
        b"not an image at all",
    ],
)
def test_malformed_bytes_raise_decode_error(data):
    with pytest.raises(DecodeError):
        decode_image(data)


def test_truncated_body_raises_decode_error(rng):
    arr = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
    data = encode_with_pillow(arr, "PNG")
    with pytest.raises(DecodeError):
        decode_image(data[: len(data) // 2])


def test_mime_type_restricts_decoder():
    png = encode_with_pillow(solid_rgba(4, 4), "PNG")
    with pytest.raises(DecodeError):
        decode_image(png, "image/jpeg")


def test_unknown_mime_type():
    png = encode_with_pillow(solid_rgba(4, 4), "PNG")
    with pytest.raises(DecodeError) as info:
        decode_image(png, "image/x-tga")
    assert info.value.stage == "decode"


def test_load_bytes(tmp_path):
    p = tmp_path / "img.bin"
    p.write_bytes(b"abc")
    assert load_bytes(p) == b"abc"


def test_decode_16bit_greyscale_keeps_high_byte():
    arr16 = (np.arange(64, dtype=np.uint16) * 1000).reshape(8, 8)
    buf = io.BytesIO()
    Image.fromarray(arr16).save(buf, format="PNG")
    out = decode_image(buf.getvalue(), "image/png")
    expected = (arr16 >> 8).astype(np.uint8)
    assert out.shape == (8, 8, 4)
    for c in range(3):
        assert np.array_equal(out[:, :, c], expected)
    assert np.all(out[:, :, 3] == 255)


def test_decode_applies_exif_orientation():
    exif = Image.Exif()
    exif[0x0112] = 6
    buf = io.BytesIO()
    Image.new("RGB", (20, 10), (0, 128, 0)).save(buf, format="JPEG", exif=exif)
    out = decode_image(buf.getvalue(), "image/jpeg")
    assert out.shape == (20, 10, 4)
