"""
Цветовые преобразования и перцептуальная метрика YIQ

Метрика по статье "Measuring perceived color difference using YIQ NTSC
transmission color space in mobile applications" (Y. Kotsarenko, F. Ramos).
"""
from enum import Enum
from typing import NamedTuple, Tuple

import numpy as np

# Максимально возможное значение метрики (чёрный против белого)
MAX_DELTA = 35215


class Direction(Enum):
    """Изменение яркости пикселя первого изображения относительно второго"""
    NONE = 0
    LIGHTER = 1
    DARKER = -1


class ColorDelta(NamedTuple):
    magnitude: float
    direction: Direction

    @property
    def signed(self) -> float:
        """Знаковая разность: отрицательна, если первый пиксель светлее"""
        if self.direction is Direction.LIGHTER:
            return -self.magnitude
        return self.magnitude


def rgb2y(r, g, b):
    return r * 0.29889531 + g * 0.58662247 + b * 0.11448223


def rgb2i(r, g, b):
    return r * 0.59597799 - g * 0.27417610 - b * 0.32180189


def rgb2q(r, g, b):
    return r * 0.21147017 - g * 0.52261711 + b * 0.31114694


def blend(c, a):
    """Смешивание полупрозрачного канала с белым фоном"""
    return 255 + (c - 255) * a


def _blend_pixel(p) -> Tuple[float, float, float]:
    r, g, b, a = p
    if a < 255:
        a /= 255
        return blend(r, a), blend(g, a), blend(b, a)
    return r, g, b


def brightness_delta(p1, p2) -> float:
    """
    Разность яркости (Y) двух пикселей, Y1 - Y2.

    :param p1: пиксель (r, g, b, a)
    :param p2: пиксель (r, g, b, a)
    :return: положительна, если первый пиксель светлее
    """
    if p1 == p2:
        return 0.0
    return rgb2y(*_blend_pixel(p1)) - rgb2y(*_blend_pixel(p2))


def color_delta(p1, p2) -> ColorDelta:
    """
    Квадратичная перцептуальная разность цветов в пространстве YIQ.

    :param p1: пиксель первого изображения (r, g, b, a)
    :param p2: пиксель второго изображения (r, g, b, a)
    :return: величина разности (0..35215) и направление изменения яркости
    """
    if p1 == p2:
        return ColorDelta(0.0, Direction.NONE)

    r1, g1, b1 = _blend_pixel(p1)
    r2, g2, b2 = _blend_pixel(p2)

    y1 = rgb2y(r1, g1, b1)
    y2 = rgb2y(r2, g2, b2)
    y = y1 - y2
    i = rgb2i(r1, g1, b1) - rgb2i(r2, g2, b2)
    q = rgb2q(r1, g1, b1) - rgb2q(r2, g2, b2)

    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q

    if y1 > y2:
        direction = Direction.LIGHTER
    elif y1 < y2:
        direction = Direction.DARKER
    else:
        direction = Direction.NONE
    return ColorDelta(delta, direction)


def delta_map(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Векторизованная разность YIQ для двух областей одинаковой формы.
    Выражения совпадают с color_delta, результаты побитово равны.

    :param a: RGBA область первого изображения (h, w, 4)
    :param b: RGBA область второго изображения (h, w, 4)
    :return: карта величин разности (float64), маска "первый пиксель светлее"
    """
    identical = np.all(a == b, axis=-1)

    fa = a.astype(np.float64)
    fb = b.astype(np.float64)

    # При alpha == 255 смешивание с белым даёт исходный канал без погрешности
    wa = fa[..., 3] / 255
    wb = fb[..., 3] / 255
    r1, g1, b1 = (blend(fa[..., c], wa) for c in range(3))
    r2, g2, b2 = (blend(fb[..., c], wb) for c in range(3))

    y1 = rgb2y(r1, g1, b1)
    y2 = rgb2y(r2, g2, b2)
    y = y1 - y2
    i = rgb2i(r1, g1, b1) - rgb2i(r2, g2, b2)
    q = rgb2q(r1, g1, b1) - rgb2q(r2, g2, b2)

    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    delta[identical] = 0.0

    lighter = (y1 > y2) & ~identical
    return delta, lighter
