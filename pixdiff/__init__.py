"""
pixdiff - попиксельное сравнение изображений с детектором сглаживания
"""

__version__ = "1.0.0"

from .core.buffer import PixelBuffer, as_pixel_buffer
from .core.colors import ColorDelta, Direction, brightness_delta, color_delta
from .core.antialias import antialiased, has_many_siblings
from .core.compare import DiffResult, compare_images, count_diff_pixels, pixelmatch, render_grayscale
from .core.errors import DimensionMismatch, InvalidOptions, InvalidPixelBuffer, OffsetOutOfRange, PixdiffError
from .core.options import Options, make_options

__all__ = [
    "PixelBuffer",
    "as_pixel_buffer",
    "ColorDelta",
    "Direction",
    "brightness_delta",
    "color_delta",
    "antialiased",
    "has_many_siblings",
    "DiffResult",
    "compare_images",
    "count_diff_pixels",
    "pixelmatch",
    "render_grayscale",
    "PixdiffError",
    "InvalidPixelBuffer",
    "DimensionMismatch",
    "OffsetOutOfRange",
    "InvalidOptions",
    "Options",
    "make_options",
]
