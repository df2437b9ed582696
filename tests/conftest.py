"""
Конфигурация pytest
"""
import numpy as np
import pytest

from pixdiff.core.buffer import PixelBuffer


def pytest_configure(config):
    """Регистрируем маркеры"""
    config.addinivalue_line(
        "markers", "benchmark: бенчмарк-тесты производительности"
    )


def make_image(width, height, color=(255, 255, 255, 255)):
    """Создаёт массив RGBA (h, w, 4), залитый одним цветом"""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[...] = color
    return arr


def wrap(arr):
    return PixelBuffer.from_array(arr)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def random_pair(rng):
    """Пара похожих случайных изображений 16x16"""
    a = rng.integers(0, 256, (16, 16, 4), dtype=np.uint8)
    a[..., 3] = 255
    b = a.copy()
    changed = rng.random((16, 16)) < 0.2
    b[changed, :3] = rng.integers(0, 256, (int(changed.sum()), 3), dtype=np.uint8)
    return a, b


@pytest.fixture
def aa_pair():
    """
    3x3: чёрный кластер слева сверху, белый справа снизу,
    центр - серый, во втором изображении чуть светлее.
    """
    black = (0, 0, 0, 255)
    white = (255, 255, 255, 255)
    gray = (128, 128, 128, 255)
    img1 = make_image(3, 3, gray)
    for x, y in ((0, 0), (1, 0), (0, 1)):
        img1[y, x] = black
    for x, y in ((2, 2), (2, 1), (1, 2)):
        img1[y, x] = white
    img2 = img1.copy()
    img2[1, 1] = (170, 170, 170, 255)
    return img1, img2
