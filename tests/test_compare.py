"""
Тесты попиксельного сравнения
"""
import numpy as np
import pytest

from pixdiff.core.buffer import PixelBuffer
from pixdiff.core.compare import compare_images, count_diff_pixels, pixelmatch, render_grayscale
from pixdiff.core.errors import InvalidPixelBuffer, OffsetOutOfRange
from pixdiff.core.overlay import gray_values

from conftest import make_image, wrap

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


@pytest.fixture
def black_white_pair():
    """2x1: первый пиксель совпадает, второй чёрный против белого"""
    img1 = make_image(2, 1, BLACK)
    img2 = img1.copy()
    img2[0, 1] = WHITE
    return img1, img2


def test_single_difference(black_white_pair):
    """Один сильно отличающийся пиксель даёт одно различие"""
    img1, img2 = black_white_pair
    assert pixelmatch(wrap(img1), wrap(img2)) == 1
    assert count_diff_pixels(wrap(img1), wrap(img2)) == 1


def test_accepts_raw_triples(black_white_pair):
    img1, img2 = black_white_pair
    assert pixelmatch((img1.tobytes(), 2, 1), (bytearray(img2.tobytes()), 2, 1)) == 1


def test_identical_images(random_pair):
    """Идентичные изображения: 0 различий при любых настройках"""
    a, _ = random_pair
    for options in ({}, {"threshold": 0}, {"include_aa": True}, {"alpha": 0}, {"diff_mask": True}):
        assert pixelmatch(wrap(a), wrap(a.copy()), options=options) == 0
        assert count_diff_pixels(wrap(a), wrap(a), options=options) == 0


def test_identical_renders_gray(random_pair):
    """На быстром пути результат - серая версия первого изображения"""
    a, _ = random_pair
    out = PixelBuffer.allocate(16, 16)
    messages = []
    result = compare_images(wrap(a), wrap(a.copy()), out, report=messages.append)

    assert result.identical
    assert result.diff_pixels == 0
    assert len(messages) == 1
    expected = gray_values(a, 0.5)
    assert np.array_equal(out.data[..., 0], expected)
    assert np.array_equal(out.data[..., 2], expected)
    assert np.all(out.data[..., 3] == 255)


def test_identical_diff_mask_leaves_output(random_pair):
    """В режиме маски быстрый путь ничего не рисует"""
    a, _ = random_pair
    out = PixelBuffer.allocate(16, 16)
    assert pixelmatch(wrap(a), wrap(a.copy()), out, options={"diff_mask": True}) == 0
    assert not out.data.any()


def test_threshold_zero_detects_one_level():
    """При threshold=0 отличие на 1 в одном канале - различие"""
    img1 = make_image(1, 1, (100, 100, 100, 255))
    img2 = make_image(1, 1, (100, 101, 100, 255))
    assert pixelmatch(wrap(img1), wrap(img2), options={"threshold": 0}) == 1
    assert pixelmatch(wrap(img1), wrap(img2)) == 0


def test_threshold_one_ignores_everything(random_pair, black_white_pair):
    """При threshold=1 порог не меньше максимума метрики"""
    a, b = random_pair
    inverted = a.copy()
    inverted[..., :3] = 255 - inverted[..., :3]
    for img1, img2 in ((a, b), (a, inverted), black_white_pair):
        assert pixelmatch(wrap(img1), wrap(img2), options={"threshold": 1, "include_aa": True}) == 0


def test_include_aa_is_monotonic(random_pair):
    """С include_aa различий не меньше, чем без него"""
    a, b = random_pair
    with_aa = pixelmatch(wrap(a), wrap(b), options={"include_aa": True})
    without_aa = pixelmatch(wrap(a), wrap(b))
    assert with_aa >= without_aa
    assert with_aa == count_diff_pixels(wrap(a), wrap(b), options={"include_aa": True})
    assert without_aa == count_diff_pixels(wrap(a), wrap(b))


def test_antialiased_pixel_excluded(aa_pair):
    """Сглаженный пиксель не считается различием"""
    img1, img2 = aa_pair
    result = compare_images(wrap(img1), wrap(img2))
    assert result.diff_pixels == 0
    assert result.aa_pixels == 1
    assert pixelmatch(wrap(img1), wrap(img2), options={"include_aa": True}) == 1


def test_antialiased_pixel_rendering(aa_pair):
    """Сглаженный пиксель рисуется цветом aa_color, но не в маске"""
    img1, img2 = aa_pair
    out = PixelBuffer.allocate(3, 3)
    pixelmatch(wrap(img1), wrap(img2), out)
    assert out.pixel(1, 1) == (255, 255, 0, 255)
    assert out.pixel(0, 0) == (128, 128, 128, 255)

    mask = PixelBuffer.allocate(3, 3)
    pixelmatch(wrap(img1), wrap(img2), mask, options={"diff_mask": True})
    assert not mask.data.any()


def test_diff_rendering(black_white_pair):
    """Различие - diff_color, совпадающий пиксель - серый фон"""
    img1, img2 = black_white_pair
    out = bytearray(8)
    assert pixelmatch(wrap(img1), wrap(img2), out) == 1
    # чёрный при alpha=0.5: 255 - 127.5 -> 128
    assert list(out[:4]) == [128, 128, 128, 255]
    assert list(out[4:]) == [255, 0, 0, 255]


def test_diff_color_alt():
    """Альтернативный цвет - там, где первое изображение светлее"""
    img1 = make_image(2, 1, BLACK)
    img1[0, 1] = WHITE
    img2 = make_image(2, 1, WHITE)
    img2[0, 1] = BLACK
    out = PixelBuffer.allocate(2, 1)
    options = {"diff_color_alt": (0, 255, 0), "alpha": 0}
    assert pixelmatch(wrap(img1), wrap(img2), out, options=options) == 2
    assert out.pixel(0, 0) == (255, 0, 0, 255)
    assert out.pixel(1, 0) == (0, 255, 0, 255)


def test_diff_mask_draws_only_differences(black_white_pair):
    img1, img2 = black_white_pair
    out = PixelBuffer.allocate(2, 1)
    assert pixelmatch(wrap(img1), wrap(img2), out, options={"diff_mask": True}) == 1
    assert out.pixel(0, 0) == (0, 0, 0, 0)
    assert out.pixel(1, 0) == (255, 0, 0, 255)


def test_antialiased_pixel_with_offset(aa_pair):
    """Сглаживание распознаётся и в окне со смещением"""
    img1, img2 = aa_pair
    padded = np.pad(img1, ((2, 2), (2, 2), (0, 0)), mode="edge")
    result = compare_images(wrap(padded), wrap(img2), offset=(2, 2))
    assert result.diff_pixels == 0
    assert result.aa_pixels == 1
    assert count_diff_pixels(wrap(padded), wrap(img2), offset=(2, 2)) == 0
    assert pixelmatch(wrap(padded), wrap(img2), offset=(2, 2), options={"include_aa": True}) == 1


def test_sub_region():
    """Сравнивается только окно первого изображения со смещением"""
    img1 = make_image(10, 10)
    img2 = make_image(4, 4)
    assert pixelmatch(wrap(img1), wrap(img2), offset=(3, 3)) == 0

    # вне окна - не влияет
    img1[0, 0] = BLACK
    img1[9, 9] = BLACK
    assert pixelmatch(wrap(img1), wrap(img2), offset=(3, 3)) == 0

    # внутри окна - одно различие
    img1[5, 5] = BLACK
    out = PixelBuffer.allocate(4, 4)
    assert pixelmatch(wrap(img1), wrap(img2), out, offset=(3, 3)) == 1
    assert out.pixel(2, 2) == (255, 0, 0, 255)
    assert count_diff_pixels(wrap(img1), wrap(img2), offset=(3, 3)) == 1


@pytest.mark.parametrize("offset", [(7, 0), (0, 7), (-1, 0), (0, -1), (1.5, 0), (1,)])
def test_offset_out_of_range(offset):
    img1 = make_image(10, 10)
    img2 = make_image(4, 4)
    with pytest.raises(OffsetOutOfRange):
        pixelmatch(wrap(img1), wrap(img2), offset=offset)


def test_invalid_buffers_fail_before_scan(black_white_pair):
    img1, img2 = black_white_pair
    with pytest.raises(InvalidPixelBuffer):
        pixelmatch(([0] * 8, 2, 1), wrap(img2))
    with pytest.raises(InvalidPixelBuffer):
        pixelmatch(wrap(img1), wrap(img2), output=bytes(8))


def test_render_grayscale():
    """Серая версия целого изображения"""
    img = make_image(2, 2, BLACK)
    img[1, 1] = WHITE
    out = PixelBuffer.allocate(2, 2)
    render_grayscale(wrap(img), out)
    assert out.pixel(0, 0) == (128, 128, 128, 255)
    assert out.pixel(1, 1) == (255, 255, 255, 255)

    untouched = PixelBuffer.allocate(2, 2)
    render_grayscale(wrap(img), untouched, {"diff_mask": True})
    assert not untouched.data.any()


def test_gray_values_transparency():
    """Прозрачный пиксель в сером фоне - белый"""
    assert gray_values(np.array([0, 0, 0, 0], dtype=np.uint8), 1.0) == 255
    assert gray_values(np.array([0, 0, 0, 255], dtype=np.uint8), 1.0) == 0
    assert gray_values(np.array([0, 0, 0, 255], dtype=np.uint8), 0.0) == 255


def test_gray_values_partial_alpha():
    """Серый фон учитывает и alpha фона, и прозрачность пикселя"""
    half = np.array([0, 0, 0, 128], dtype=np.uint8)
    assert gray_values(half, 0.5) == round(255 - 255 * 0.5 * 128 / 255)
    assert gray_values(half, 1.0) == round(255 - 255 * 128 / 255)


@pytest.mark.benchmark
def test_benchmark_pixelmatch(benchmark, random_pair):
    """Бенчмарк полного сравнения с отрисовкой"""
    a, b = random_pair
    out = PixelBuffer.allocate(16, 16)
    result = benchmark(pixelmatch, wrap(a), wrap(b), out)
    assert result >= 0
