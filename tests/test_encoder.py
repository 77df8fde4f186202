import io

import numpy as np
import pytest
from PIL import Image

from conftest import solid_rgba
from pixrefine.config import settings
from pixrefine.errors import EncodeError
from pixrefine.utils.encoder import OutputFormat, encode_image
from pixrefine.utils.loader import decode_image


def _open(data):
    im = Image.open(io.BytesIO(data))
    im.load()
    return im


@pytest.mark.parametrize(
    "value, expected",
    [
        ("webp", OutputFormat.WEBP),
        ("PNG", OutputFormat.PNG),
        ("jpg", OutputFormat.JPEG),
        ("image/jpeg", OutputFormat.JPEG),
        ("image/webp", OutputFormat.WEBP),
        (OutputFormat.PNG, OutputFormat.PNG),
    ],
)
def test_parse_format(value, expected):
    assert OutputFormat.parse(value) is expected


def test_parse_unknown_format():
    with pytest.raises(ValueError):
        OutputFormat.parse("tiff")


def test_format_metadata():
    assert OutputFormat.WEBP.mime_type == "image/webp"
    assert OutputFormat.JPEG.mime_type == "image/jpeg"
    assert OutputFormat.JPEG.extension == ".jpg"
    assert OutputFormat.from_path("out/photo.JPG") is OutputFormat.JPEG
    assert not OutputFormat.PNG.lossy


def test_png_is_lossless_for_palette_images(rng):
    palette = rng.integers(0, 256, size=(200, 4), dtype=np.uint8)
    arr = palette[rng.integers(0, len(palette), size=(31, 17))]
    data = encode_image(arr, OutputFormat.PNG)
    assert _open(data).format == "PNG"
    assert np.array_equal(decode_image(data), arr)


def test_png_ignores_quality(random_rgba):
    assert encode_image(random_rgba, "png", 0.1) == encode_image(random_rgba, "png", 1.0)


def test_jpeg_drops_alpha():
    arr = solid_rgba(16, 16, (200, 100, 50, 255))
    arr[:8, :, 3] = 0
    data = encode_image(arr, OutputFormat.JPEG, 0.95)
    im = _open(data)
    assert im.format == "JPEG"
    assert im.mode == "RGB"
    assert np.all(decode_image(data)[:, :, 3] == 255)


def test_jpeg_flattens_onto_background():
    arr = solid_rgba(16, 16, (255, 255, 255, 0))
    out = decode_image(encode_image(arr, OutputFormat.JPEG, 1.0))
    expected = np.array(settings.JPEG_BACKGROUND)
    assert np.all(np.abs(out[:, :, :3].astype(int) - expected) <= 3)


def test_webp_preserves_alpha():
    arr = solid_rgba(16, 16, (0, 128, 255, 255))
    arr[:, :8, 3] = 0
    data = encode_image(arr, OutputFormat.WEBP, 0.8)
    im = _open(data)
    assert im.format == "WEBP"
    out = decode_image(data)
    assert np.all(out[:, :8, 3] <= 5)
    assert np.all(out[:, 8:, 3] >= 250)


@pytest.mark.parametrize("fmt", [OutputFormat.JPEG, OutputFormat.WEBP])
def test_quality_is_monotonic(photo_like, fmt):
    bigger = 0
    samples = [photo_like(seed=s) for s in range(5)]
    for arr in samples:
        high = len(encode_image(arr, fmt, 0.9))
        low = len(encode_image(arr, fmt, 0.3))
        if high >= low:
            bigger += 1
    assert bigger >= len(samples) - 1


@pytest.mark.parametrize(
    "arr",
    [
        np.zeros((4, 4, 3), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.float32),
        np.zeros((4, 4), dtype=np.uint8),
    ],
)
def test_unsupported_pixel_config_raises(arr):
    with pytest.raises(EncodeError):
        encode_image(arr, OutputFormat.PNG)
