"""
CLI интерфейс для pixdiff
"""
import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.progress import track

from .core.buffer import PixelBuffer
from .core.compare import compare_images, render_grayscale
from .core.errors import PixdiffError
from .core.io import safe_imread, safe_imwrite
from .core.options import Options, make_options

app = typer.Typer(help="pixdiff - попиксельное сравнение изображений")
console = Console()


def parse_color(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Разбирает цвет вида "255,0,0" """
    if value is None:
        return None
    parts = value.replace(" ", "").split(",")
    if len(parts) != 3:
        raise typer.BadParameter(f"Ожидается R,G,B, получено {value!r}")
    try:
        color = tuple(int(p) for p in parts)
    except ValueError:
        raise typer.BadParameter(f"Ожидается R,G,B, получено {value!r}") from None
    if not all(0 <= c <= 255 for c in color):
        raise typer.BadParameter(f"Компоненты цвета должны быть 0..255: {value!r}")
    return color


def _load(path: Path) -> PixelBuffer:
    if not path.exists():
        console.print(f"[red]Ошибка: файл {path} не найден[/red]")
        raise typer.Exit(2)
    img = safe_imread(str(path))
    if img is None:
        console.print(f"[red]Ошибка: не удалось загрузить {path}[/red]")
        raise typer.Exit(2)
    return img


@app.command()
def compare(
    image1: Path = typer.Argument(..., help="Первое изображение"),
    image2: Path = typer.Argument(..., help="Второе изображение (область сравнения)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Путь для карты различий"),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", min=0.0, max=1.0, help="Порог 0..1"),
    include_aa: Optional[bool] = typer.Option(None, "--include-aa/--skip-aa", help="Считать сглаживание различием"),
    alpha: Optional[float] = typer.Option(None, "--alpha", "-a", min=0.0, max=1.0, help="Прозрачность фона 0..1"),
    aa_color: Optional[str] = typer.Option(None, "--aa-color", help="Цвет сглаживания R,G,B"),
    diff_color: Optional[str] = typer.Option(None, "--diff-color", help="Цвет различий R,G,B"),
    diff_color_alt: Optional[str] = typer.Option(None, "--diff-color-alt", help="Цвет различий, где первое изображение светлее"),
    diff_mask: Optional[bool] = typer.Option(None, "--diff-mask/--no-diff-mask", help="Рисовать только различия"),
    offset_x: int = typer.Option(0, "--offset-x", "-x", min=0, help="Смещение окна в первом изображении по x"),
    offset_y: int = typer.Option(0, "--offset-y", "-y", min=0, help="Смещение окна в первом изображении по y"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON файл с параметрами"),
    fail_on_diff: bool = typer.Option(False, "--fail-on-diff", help="Код выхода 1 при наличии различий"),
):
    """
    Сравнивает два изображения и выводит число различающихся пикселей.
    """
    overrides = {
        "threshold": threshold,
        "include_aa": include_aa,
        "alpha": alpha,
        "aa_color": parse_color(aa_color),
        "diff_color": parse_color(diff_color),
        "diff_color_alt": parse_color(diff_color_alt),
        "diff_mask": diff_mask,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        base = Options.load(config) if config is not None else None
        options = make_options(base, **overrides)
    except (OSError, ValueError) as e:
        console.print(f"[red]Ошибка в параметрах: {e}[/red]")
        raise typer.Exit(2)

    img1 = _load(image1)
    img2 = _load(image2)
    out = PixelBuffer.allocate(img2.width, img2.height) if output is not None else None

    try:
        result = compare_images(
            img1, img2, out, (offset_x, offset_y), options,
            report=lambda msg: console.print(f"[green]{msg}[/green]"),
        )
    except PixdiffError as e:
        console.print(f"[red]Ошибка: {e}[/red]")
        raise typer.Exit(2)

    if out is not None:
        if safe_imwrite(str(output), out):
            console.print(f"Карта различий сохранена в {output}")
        else:
            console.print(f"[red]Ошибка при сохранении {output}[/red]")
            raise typer.Exit(2)

    console.print(f"Различающихся пикселей: {result.diff_pixels:,} ({result.diff_percent:.2f}%)")
    if result.aa_pixels:
        console.print(f"Сглаженных пикселей: {result.aa_pixels:,}")

    if fail_on_diff and result.diff_pixels > 0:
        raise typer.Exit(1)


@app.command()
def gray(
    image: Path = typer.Argument(..., help="Исходное изображение"),
    output: Path = typer.Argument(..., help="Путь для серого изображения"),
    alpha: float = typer.Option(0.5, "--alpha", "-a", min=0.0, max=1.0, help="Прозрачность 0..1"),
):
    """
    Сохраняет серую версию изображения, смешанную с белым.
    """
    img = _load(image)
    out = PixelBuffer.allocate(img.width, img.height)
    render_grayscale(img, out, make_options(alpha=alpha))
    if not safe_imwrite(str(output), out):
        console.print(f"[red]Ошибка при сохранении {output}[/red]")
        raise typer.Exit(2)
    console.print(f"[green]Готово![/green] {output}")


@app.command()
def batch(
    dir1: Path = typer.Argument(..., help="Директория с первыми изображениями"),
    dir2: Path = typer.Argument(..., help="Директория со вторыми изображениями"),
    output_dir: Path = typer.Argument(..., help="Директория для карт различий"),
    threshold: float = typer.Option(0.1, "--threshold", "-t", min=0.0, max=1.0, help="Порог 0..1"),
    pattern: str = typer.Option("*.png", "--pattern", "-p", help="Паттерн файлов"),
):
    """
    Пакетное сравнение изображений из двух директорий (пары по имени файла).
    """
    if not dir1.is_dir() or not dir2.is_dir():
        console.print("[red]Ошибка: один из путей не является директорией[/red]")
        raise typer.Exit(2)

    output_dir.mkdir(parents=True, exist_ok=True)
    options = make_options(threshold=threshold)

    files1 = sorted(dir1.glob(pattern))
    files2 = {f.name: f for f in dir2.glob(pattern)}
    console.print(f"Найдено {len(files1)} файлов в {dir1}")

    processed = 0
    errors = 0
    differing = 0

    for file1 in track(files1, description="Обработка...", console=console):
        if file1.name not in files2:
            console.print(f"[yellow]Пропуск {file1.name}: нет пары в {dir2}[/yellow]")
            continue

        img1 = safe_imread(str(file1))
        img2 = safe_imread(str(files2[file1.name]))
        if img1 is None or img2 is None:
            console.print(f"[red]Ошибка загрузки {file1.name}[/red]")
            errors += 1
            continue

        try:
            out = PixelBuffer.allocate(img2.width, img2.height)
            result = compare_images(img1, img2, out, options=options)
        except PixdiffError as e:
            console.print(f"[red]Ошибка при обработке {file1.name}: {e}[/red]")
            errors += 1
            continue

        if not safe_imwrite(str(output_dir / file1.name), out):
            console.print(f"[red]Ошибка при сохранении {file1.name}[/red]")
            errors += 1
            continue
        processed += 1
        if result.diff_pixels:
            differing += 1
            console.print(f"{file1.name}: {result.diff_pixels:,} ({result.diff_percent:.2f}%)")

    console.print(f"\n[green]Обработано: {processed}, с различиями: {differing}, ошибок: {errors}[/green]")


def main():
    """Точка входа CLI"""
    logging.basicConfig(format='%(asctime)s %(levelname)s: %(message)s', level=logging.WARNING)
    app()


if __name__ == "__main__":
    main()
