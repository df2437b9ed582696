"""
Чтение/запись изображений в буферы RGBA
"""
import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .buffer import PixelBuffer

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ['.png', '.bmp', '.tiff', '.tif', '.webp']


def to_rgba(img: np.ndarray) -> np.ndarray:
    """
    Приводит декодированное OpenCV изображение к RGBA 8 бит.

    :param img: GRAY, BGR или BGRA изображение (8 или 16 бит)
    :return: массив (h, w, 4) uint8
    """
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ValueError(f"Неподдерживаемая глубина цвета: {img.dtype}")

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Неподдерживаемое число каналов: {channels}")


def safe_imread(path: str) -> Optional[PixelBuffer]:
    """
    Безопасное чтение изображения с поддержкой кириллицы в путях.

    :param path: путь к файлу
    :return: PixelBuffer RGBA или None
    """
    try:
        # через numpy, cv2.imread не понимает не-ASCII пути на Windows
        with open(path, 'rb') as f:
            img_array = np.asarray(bytearray(f.read()), dtype=np.uint8)
        img = cv2.imdecode(img_array, cv2.IMREAD_UNCHANGED)
        if img is None:
            logger.error(f"Не удалось декодировать изображение: {path}")
            return None
        return PixelBuffer.from_array(np.ascontiguousarray(to_rgba(img)))
    except (OSError, ValueError, cv2.error) as e:
        logger.error(f"Ошибка чтения {path}: {e}")
        return None


def safe_imwrite(path: str, img: PixelBuffer) -> bool:
    """
    Безопасная запись буфера RGBA с поддержкой кириллицы.

    :param path: путь к файлу
    :param img: изображение
    :return: успешность операции
    """
    try:
        # Создаём директорию если нужно
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        # Кодируем в буфер
        ext = Path(path).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            ext = '.png'

        bgra = cv2.cvtColor(np.ascontiguousarray(img.data), cv2.COLOR_RGBA2BGRA)
        success, buffer = cv2.imencode(ext, bgra)
        if not success:
            logger.error(f"Не удалось закодировать {path}")
            return False
        with open(path, 'wb') as f:
            f.write(buffer)
        return True
    except (OSError, cv2.error) as e:
        logger.error(f"Ошибка записи {path}: {e}")
        return False
