"""
Ошибки сравнения изображений
"""


class PixdiffError(Exception):
    """Базовая ошибка pixdiff"""


class InvalidPixelBuffer(PixdiffError, TypeError):
    """Буфер не является плоским байтовым растром"""


class DimensionMismatch(PixdiffError, ValueError):
    """Длина буфера не совпадает с width * height * 4"""


class OffsetOutOfRange(PixdiffError, ValueError):
    """Смещённое окно выходит за пределы первого изображения"""


class InvalidOptions(PixdiffError, ValueError):
    """Недопустимые параметры сравнения"""
