"""
Детектор сглаживания (anti-aliasing)

По статье "Anti-aliased Pixel and Intensity Slope Detector" (V. Vysniauskas, 2009).
"""
from .buffer import PixelBuffer
from .colors import brightness_delta


def _bounds(img: PixelBuffer, x1: int, y1: int):
    x0 = max(x1 - 1, 0)
    y0 = max(y1 - 1, 0)
    x2 = min(x1 + 1, img.width - 1)
    y2 = min(y1 + 1, img.height - 1)
    # на границе соседей меньше, поэтому счётчик совпадений стартует с 1
    zeroes = 1 if x1 == x0 or x1 == x2 or y1 == y0 or y1 == y2 else 0
    return x0, y0, x2, y2, zeroes


def has_many_siblings(img: PixelBuffer, x1: int, y1: int) -> bool:
    """
    Есть ли у пикселя 3+ соседа точно такого же цвета.

    :param img: изображение
    :param x1: координата x пикселя
    :param y1: координата y пикселя
    :return: True, если пиксель лежит в однородной области
    """
    x0, y0, x2, y2, zeroes = _bounds(img, x1, y1)
    center = img.pixel(x1, y1)

    for x in range(x0, x2 + 1):
        for y in range(y0, y2 + 1):
            if x == x1 and y == y1:
                continue
            if img.pixel(x, y) == center:
                zeroes += 1
            if zeroes > 2:
                return True

    return False


def _stable_in_both(
    subject: PixelBuffer,
    reference: PixelBuffer,
    x: int,
    y: int,
    dx: int,
    dy: int
) -> bool:
    rx, ry = x + dx, y + dy
    return (
        has_many_siblings(subject, x, y)
        and reference.contains(rx, ry)
        and has_many_siblings(reference, rx, ry)
    )


def antialiased(
    subject: PixelBuffer,
    x1: int,
    y1: int,
    reference: PixelBuffer,
    dx: int = 0,
    dy: int = 0
) -> bool:
    """
    Является ли пиксель subject в (x1, y1) артефактом сглаживания.

    Пиксель считается сглаженным, если среди соседей есть и более тёмный,
    и более светлый, и хотя бы один из крайних соседей лежит в однородной
    области в обоих изображениях.

    :param subject: проверяемое изображение
    :param x1: координата x в subject
    :param y1: координата y в subject
    :param reference: второе изображение для перекрёстной проверки
    :param dx: сдвиг координат subject -> reference по x
    :param dy: сдвиг координат subject -> reference по y
    :return: True для сглаженного пикселя
    """
    x0, y0, x2, y2, zeroes = _bounds(subject, x1, y1)
    center = subject.pixel(x1, y1)
    min_delta = 0.0
    max_delta = 0.0
    min_x = min_y = max_x = max_y = None

    # обход 8 соседних пикселей
    for x in range(x0, x2 + 1):
        for y in range(y0, y2 + 1):
            if x == x1 and y == y1:
                continue

            delta = brightness_delta(center, subject.pixel(x, y))

            if delta == 0:
                zeroes += 1
                # больше 2 одинаковых соседей - точно не сглаживание
                if zeroes > 2:
                    return False
            elif delta < min_delta:
                min_delta = delta
                min_x, min_y = x, y
            elif delta > max_delta:
                max_delta = delta
                max_x, max_y = x, y

    # нет одновременно более тёмных и более светлых соседей
    if min_delta == 0 or max_delta == 0:
        return False

    return (
        _stable_in_both(subject, reference, min_x, min_y, dx, dy)
        or _stable_in_both(subject, reference, max_x, max_y, dx, dy)
    )
