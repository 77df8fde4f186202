import io

import numpy as np
import pytest
from PIL import Image


def encode_with_pillow(arr: np.ndarray, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format=fmt)
    return buf.getvalue()


def solid_rgba(h: int, w: int, color=(255, 0, 0, 255)) -> np.ndarray:
    arr = np.empty((h, w, 4), dtype=np.uint8)
    arr[:, :] = color
    return arr


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_rgba(rng):
    return rng.integers(0, 256, size=(17, 23, 4), dtype=np.uint8)


@pytest.fixture
def red_png():
    return encode_with_pillow(solid_rgba(100, 100)[:, :, :3])


@pytest.fixture
def small_png(rng):
    arr = rng.integers(0, 256, size=(10, 10, 4), dtype=np.uint8)
    return encode_with_pillow(arr)


@pytest.fixture
def photo_like(rng):
    """Smooth gradients plus noise, closer to a photo than pure noise."""
    def make(h=64, w=64, seed=0):
        r = np.random.default_rng(seed)
        y, x = np.mgrid[0:h, 0:w].astype(np.float32)
        base = np.stack(
            [
                128 + 100 * np.sin(x / 7.0 + seed),
                128 + 100 * np.cos(y / 5.0),
                255 * (x + y) / (w + h),
            ],
            axis=-1,
        )
        noisy = base + r.normal(0, 20, size=base.shape)
        rgb = np.clip(noisy, 0, 255).astype(np.uint8)
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=-1)

    return make
