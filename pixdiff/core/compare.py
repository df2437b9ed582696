"""
Попиксельное сравнение изображений с учётом сглаживания
"""
import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Tuple

import numpy as np

from .antialias import antialiased
from .buffer import PixelBuffer, as_pixel_buffer, output_buffer
from .colors import delta_map
from .errors import OffsetOutOfRange
from .options import Options, make_options
from .overlay import draw_gray_pixels, draw_pixels

logger = logging.getLogger(__name__)

Offset = Tuple[int, int]
Report = Callable[[str], None]

IDENTICAL_MESSAGE = "Изображения идентичны"


@dataclass(frozen=True)
class DiffResult:
    """Итог сравнения"""
    diff_pixels: int
    aa_pixels: int
    total_pixels: int
    identical: bool = False

    @property
    def diff_percent(self) -> float:
        # защита от деления на ноль для пустых изображений
        if self.total_pixels == 0:
            return 0.0
        return self.diff_pixels / self.total_pixels * 100


class _Classification(NamedTuple):
    diff: np.ndarray      # настоящие различия
    aa: np.ndarray        # сглаженные пиксели (не считаются)
    lighter: np.ndarray   # первый пиксель светлее второго


def _prepare(img1, img2, offset: Offset, options) -> Tuple[PixelBuffer, PixelBuffer, int, int, Options]:
    img1 = as_pixel_buffer(img1)
    img2 = as_pixel_buffer(img2)

    try:
        ox, oy = offset
    except (TypeError, ValueError):
        raise OffsetOutOfRange(f"Смещение должно быть парой (x, y), получено {offset!r}") from None
    for value in (ox, oy):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise OffsetOutOfRange(f"Смещение должно быть целым, получено {offset!r}")
    ox, oy = int(ox), int(oy)

    if ox < 0 or oy < 0 or ox + img2.width > img1.width or oy + img2.height > img1.height:
        raise OffsetOutOfRange(
            f"Окно {img2.width}x{img2.height} со смещением ({ox}, {oy}) "
            f"выходит за пределы {img1.width}x{img1.height}"
        )

    return img1, img2, ox, oy, make_options(options)


def _words(rgba: np.ndarray) -> np.ndarray:
    # один 32-битный элемент на пиксель
    return rgba.view(np.uint32)


def _identical(window: np.ndarray, other: np.ndarray) -> bool:
    return bool(np.array_equal(_words(window), _words(other)))


def _classify(
    img1: PixelBuffer,
    img2: PixelBuffer,
    ox: int,
    oy: int,
    window: np.ndarray,
    options: Options
) -> _Classification:
    delta, lighter = delta_map(window, img2.data)

    # разность выше порога
    candidates = delta > options.max_delta
    aa = np.zeros_like(candidates)

    if not options.include_aa:
        # проверяем, настоящее ли это различие или сглаживание
        for y, x in np.argwhere(candidates).tolist():
            if (antialiased(img1, x + ox, y + oy, img2, -ox, -oy)
                    or antialiased(img2, x, y, img1, ox, oy)):
                aa[y, x] = True

    return _Classification(candidates & ~aa, aa, lighter)


def _render(
    output: PixelBuffer,
    window: np.ndarray,
    result: _Classification,
    options: Options
) -> None:
    if not options.diff_mask:
        # похожие пиксели - серый фон, смешанный с белым
        similar = ~(result.diff | result.aa)
        draw_gray_pixels(output, window, similar, options.alpha)
        # сглаженные пиксели не попадают в маску
        draw_pixels(output, result.aa, options.aa_color)

    if options.diff_color_alt is not None:
        alt = result.diff & result.lighter
        draw_pixels(output, result.diff & ~alt, options.diff_color)
        draw_pixels(output, alt, options.diff_color_alt)
    else:
        draw_pixels(output, result.diff, options.diff_color)


def compare_images(
    img1,
    img2,
    output=None,
    offset: Offset = (0, 0),
    options=None,
    report: Optional[Report] = None
) -> DiffResult:
    """
    Сравнивает второе изображение с окном первого.

    :param img1: первое изображение: PixelBuffer или (data, width, height)
    :param img2: второе изображение, задаёт область сравнения
    :param output: выходной буфер с раскладкой строк img2 (или None)
    :param offset: смещение (x, y) окна в первом изображении
    :param options: Options, словарь или None
    :param report: необязательный приёмник сообщения об идентичности
    :return: DiffResult
    """
    img1, img2, ox, oy, options = _prepare(img1, img2, offset, options)
    out = output_buffer(output, img2.width, img2.height)
    total = img2.width * img2.height

    logger.info(
        f"Сравнение {img1.width}x{img1.height} и {img2.width}x{img2.height}: "
        f"offset=({ox}, {oy}), threshold={options.threshold}, include_aa={options.include_aa}, "
        f"diff_mask={options.diff_mask}, output={out is not None}"
    )

    window = img1.region(ox, oy, img2.width, img2.height)

    # быстрый путь для идентичных изображений
    if _identical(window, img2.data):
        if out is not None and not options.diff_mask:
            draw_gray_pixels(out, window, None, options.alpha)
        logger.info(IDENTICAL_MESSAGE)
        if report is not None:
            report(IDENTICAL_MESSAGE)
        return DiffResult(0, 0, total, identical=True)

    result = _classify(img1, img2, ox, oy, window, options)
    if out is not None:
        _render(out, window, result, options)

    diff_result = DiffResult(
        diff_pixels=int(np.count_nonzero(result.diff)),
        aa_pixels=int(np.count_nonzero(result.aa)),
        total_pixels=total,
    )
    logger.info(
        f"Результат: diff_pixels={diff_result.diff_pixels}, aa_pixels={diff_result.aa_pixels}, "
        f"diff_percent={diff_result.diff_percent:.2f}"
    )
    return diff_result


def pixelmatch(
    img1,
    img2,
    output=None,
    offset: Offset = (0, 0),
    options=None,
    report: Optional[Report] = None
) -> int:
    """
    Число различающихся пикселей; при наличии output рисует карту различий.
    """
    return compare_images(img1, img2, output, offset, options, report).diff_pixels


def count_diff_pixels(img1, img2, offset: Offset = (0, 0), options=None) -> int:
    """
    Только подсчёт различающихся пикселей, без отрисовки.
    Классификация та же, что у pixelmatch, включая include_aa.
    """
    img1, img2, ox, oy, options = _prepare(img1, img2, offset, options)
    window = img1.region(ox, oy, img2.width, img2.height)
    if _identical(window, img2.data):
        return 0
    result = _classify(img1, img2, ox, oy, window, options)
    return int(np.count_nonzero(result.diff))


def render_grayscale(img, output, options=None) -> None:
    """
    Рисует серую версию изображения целиком (как фон карты различий).

    :param img: изображение: PixelBuffer или (data, width, height)
    :param output: выходной буфер того же размера
    :param options: Options, словарь или None (используются alpha и diff_mask)
    """
    img = as_pixel_buffer(img)
    out = output_buffer(output, img.width, img.height)
    options = make_options(options)
    if not options.diff_mask:
        logger.info(f"Серое изображение {img.width}x{img.height}, alpha={options.alpha}")
        draw_gray_pixels(out, img.data, None, options.alpha)
