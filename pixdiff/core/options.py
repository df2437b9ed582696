"""
Параметры сравнения
"""
import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .colors import MAX_DELTA
from .errors import InvalidOptions

Color = Tuple[int, int, int]

# Ключи старого формата настроек
_LEGACY_KEYS = {
    "includeAA": "include_aa",
    "aaColor": "aa_color",
    "diffColor": "diff_color",
    "diffColorAlt": "diff_color_alt",
    "diffMask": "diff_mask",
}


@dataclass(frozen=True)
class Options:
    """Настройки сравнения (неизменяемые, создаются на каждый вызов)"""
    threshold: float = 0.1                     # порог 0..1, меньше - чувствительнее
    include_aa: bool = False                   # считать сглаженные пиксели различиями
    alpha: float = 0.5                         # прозрачность серого фона в результате
    aa_color: Color = (255, 255, 0)            # цвет сглаженных пикселей
    diff_color: Color = (255, 0, 0)            # цвет различий
    diff_color_alt: Optional[Color] = None     # цвет различий, где первое изображение светлее
    diff_mask: bool = False                    # рисовать только различия, без фона

    def __post_init__(self):
        for name in ("threshold", "alpha"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
                raise InvalidOptions(f"{name} должен быть в диапазоне 0..1, получено {value!r}")
        for name in ("include_aa", "diff_mask"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise InvalidOptions(f"{name} должен быть true/false, получено {value!r}")
        for name in ("aa_color", "diff_color", "diff_color_alt"):
            value = getattr(self, name)
            if value is None and name == "diff_color_alt":
                continue
            object.__setattr__(self, name, _check_color(name, value))

    @property
    def max_delta(self) -> float:
        """Максимально допустимая квадратичная разность YIQ"""
        return MAX_DELTA * self.threshold * self.threshold

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Options":
        """
        Создаёт настройки из словаря (snake_case или старые camelCase ключи).

        :param data: словарь настроек
        :return: Options
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _LEGACY_KEYS.get(key, key)
            if name not in known:
                raise InvalidOptions(f"Неизвестный параметр: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def load(cls, path) -> "Options":
        """Загружает настройки из JSON файла"""
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise InvalidOptions(f"Ожидается JSON-объект в {path}")
        return cls.from_dict(data)


def _check_color(name: str, value) -> Color:
    try:
        color = tuple(int(c) for c in value)
    except (TypeError, ValueError):
        raise InvalidOptions(f"{name}: ожидается тройка RGB, получено {value!r}") from None
    if len(color) != 3 or not all(0 <= c <= 255 for c in color):
        raise InvalidOptions(f"{name}: ожидается тройка RGB 0..255, получено {value!r}")
    return color


def make_options(options: Optional[Any] = None, **overrides) -> Options:
    """
    Объединяет настройки по умолчанию с переданными.

    :param options: Options, словарь или None
    :param overrides: отдельные поля поверх options
    :return: новый Options
    """
    if options is None:
        base = Options()
    elif isinstance(options, Options):
        base = options
    elif isinstance(options, Mapping):
        base = Options.from_dict(options)
    else:
        raise InvalidOptions(f"Ожидается Options или dict, получен {type(options).__name__}")

    if overrides:
        overrides = {_LEGACY_KEYS.get(k, k): v for k, v in overrides.items()}
        try:
            return replace(base, **overrides)
        except TypeError as e:
            raise InvalidOptions(str(e)) from None
    return base
