"""
Модель пиксельного буфера RGBA
"""
from typing import Optional, Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidPixelBuffer

CHANNELS = 4

Pixel = Tuple[int, int, int, int]


def _as_flat_bytes(data, writable: bool) -> np.ndarray:
    """
    Приводит буфер к плоскому uint8-массиву без копирования.

    :param data: bytes, bytearray, memoryview или numpy-массив с 1 байтом на элемент
    :param writable: нужен ли доступ на запись
    :return: плоский numpy-массив uint8 поверх той же памяти
    """
    if isinstance(data, np.ndarray):
        if data.dtype.itemsize != 1 or data.dtype.kind not in "ui":
            raise InvalidPixelBuffer(
                f"Ожидается массив uint8 с 1 байтом на элемент, получен {data.dtype}"
            )
        if not data.flags.c_contiguous:
            raise InvalidPixelBuffer("Ожидается непрерывный (C-contiguous) массив")
        if writable and not data.flags.writeable:
            raise InvalidPixelBuffer("Выходной буфер доступен только для чтения")
        return data.reshape(-1).view(np.uint8)

    try:
        view = memoryview(data)
    except TypeError:
        raise InvalidPixelBuffer(
            f"Ожидается bytes, bytearray или массив uint8, получен {type(data).__name__}"
        ) from None

    if view.itemsize != 1:
        raise InvalidPixelBuffer(
            f"Ожидается 1 байт на элемент, получено {view.itemsize} (формат {view.format!r})"
        )
    if not view.c_contiguous:
        raise InvalidPixelBuffer("Ожидается непрерывный буфер")
    if writable and view.readonly:
        raise InvalidPixelBuffer("Выходной буфер доступен только для чтения")
    return np.frombuffer(view.cast("B"), dtype=np.uint8)


class PixelBuffer:
    """
    Растровое изображение RGBA: строки подряд, 4 байта на пиксель.

    Данные доступны как numpy-представление формы (height, width, 4) над
    исходной памятью. Входные буферы только для чтения, запись разрешена
    лишь буферу, созданному с writable=True.
    """

    def __init__(
        self,
        data,
        width: int,
        height: int,
        writable: bool = False,
        allow_larger: bool = False
    ):
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 0:
                raise DimensionMismatch(f"{name} должен быть неотрицательным целым, получено {value!r}")

        flat = _as_flat_bytes(data, writable)
        expected = int(width) * int(height) * CHANNELS
        if flat.size < expected or (flat.size != expected and not allow_larger):
            raise DimensionMismatch(
                f"Размер данных {flat.size} не совпадает с {width}x{height}x{CHANNELS} = {expected}"
            )

        view = flat[:expected].reshape(int(height), int(width), CHANNELS)
        if not writable:
            view = view.view()
            view.flags.writeable = False

        self.width = int(width)
        self.height = int(height)
        self.writable = writable
        self.data = view

    @classmethod
    def allocate(cls, width: int, height: int) -> "PixelBuffer":
        """Создаёт пустой (прозрачный) буфер для записи результата"""
        return cls(np.zeros((height, width, CHANNELS), dtype=np.uint8), width, height, writable=True)

    @classmethod
    def from_array(cls, arr: np.ndarray, writable: bool = False) -> "PixelBuffer":
        """Оборачивает массив формы (h, w, 4)"""
        if not isinstance(arr, np.ndarray) or arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise InvalidPixelBuffer(f"Ожидается массив формы (h, w, 4), получен {getattr(arr, 'shape', None)}")
        return cls(arr, arr.shape[1], arr.shape[0], writable=writable)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> Pixel:
        """Возвращает (r, g, b, a) в точке (x, y)"""
        return tuple(self.data[y, x].tolist())

    def put(self, x: int, y: int, rgba) -> None:
        """Записывает все четыре канала одной операцией"""
        if not self.writable:
            raise InvalidPixelBuffer("Буфер доступен только для чтения")
        self.data[y, x] = rgba

    def region(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """Представление прямоугольника (без копирования)"""
        return self.data[y:y + height, x:x + width]

    def __repr__(self) -> str:
        mode = "rw" if self.writable else "ro"
        return f"PixelBuffer({self.width}x{self.height}, {mode})"


def as_pixel_buffer(obj) -> PixelBuffer:
    """
    Приводит входное изображение к PixelBuffer (только для чтения).

    :param obj: PixelBuffer, тройка (data, width, height) или массив (h, w, 4)
    :return: PixelBuffer
    """
    if isinstance(obj, PixelBuffer):
        return obj
    if isinstance(obj, tuple) and len(obj) == 3:
        data, width, height = obj
        return PixelBuffer(data, width, height)
    if isinstance(obj, np.ndarray) and obj.ndim == 3:
        return PixelBuffer.from_array(obj)
    raise InvalidPixelBuffer(
        f"Ожидается PixelBuffer или (data, width, height), получен {type(obj).__name__}"
    )


def output_buffer(output, width: int, height: int) -> Optional[PixelBuffer]:
    """
    Оборачивает выходной буфер с раскладкой строк второго изображения.

    Сырой буфер может быть больше width * height * 4 байт, используется его начало.
    """
    if output is None:
        return None
    if isinstance(output, PixelBuffer):
        if not output.writable:
            raise InvalidPixelBuffer("Выходной буфер доступен только для чтения")
        if output.size != (width, height):
            raise DimensionMismatch(
                f"Размер выходного буфера {output.width}x{output.height} не совпадает с {width}x{height}"
            )
        return output
    if isinstance(output, np.ndarray) and output.ndim == 3:
        if output.shape[:2] != (height, width):
            raise DimensionMismatch(
                f"Форма выходного массива {output.shape} не совпадает с ({height}, {width}, 4)"
            )
    return PixelBuffer(output, width, height, writable=True, allow_larger=True)
