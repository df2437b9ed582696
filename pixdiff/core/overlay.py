"""
Отрисовка результата сравнения
"""
from typing import Optional, Tuple

import numpy as np

from .buffer import PixelBuffer
from .colors import blend, rgb2y


def gray_values(rgba: np.ndarray, alpha: float) -> np.ndarray:
    """
    Яркость пикселей, смешанная с белым пропорционально alpha * A / 255.

    :param rgba: пиксели RGBA (..., 4)
    :param alpha: прозрачность серого фона 0..1
    :return: значения 0..255 (uint8), округление к ближайшему чётному
    """
    f = rgba.astype(np.float64)
    y = rgb2y(f[..., 0], f[..., 1], f[..., 2])
    val = blend(y, alpha * f[..., 3] / 255)
    return np.clip(np.rint(val), 0, 255).astype(np.uint8)


def draw_pixels(
    output: PixelBuffer,
    mask: Optional[np.ndarray],
    color: Tuple[int, int, int]
) -> None:
    """
    Заливает отмеченные пиксели сплошным цветом с полной непрозрачностью.

    :param output: выходной буфер
    :param mask: булева маска (h, w) или None для всего буфера
    :param color: цвет RGB
    """
    out = output.data
    if mask is None:
        mask = np.ones(out.shape[:2], dtype=bool)
    out[mask, :3] = color
    out[mask, 3] = 255


def draw_gray_pixels(
    output: PixelBuffer,
    source: np.ndarray,
    mask: Optional[np.ndarray],
    alpha: float
) -> None:
    """
    Рисует серый фон по исходному изображению.

    :param output: выходной буфер
    :param source: область исходного изображения той же формы, что output
    :param mask: булева маска (h, w) или None для всего буфера
    :param alpha: прозрачность фона 0..1
    """
    out = output.data
    if mask is None:
        mask = np.ones(out.shape[:2], dtype=bool)
    vals = gray_values(source[mask], alpha)
    out[mask, :3] = vals[:, None]
    out[mask, 3] = 255
