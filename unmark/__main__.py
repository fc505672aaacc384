"""
Unmark File Runner

Local stand-in for the upload shell: decodes image files, removes the corner
watermark and writes unwatermarked_<name>.png next to them (or into an
output directory).

Usage:
    python -m unmark photo.jpg other.png --output-dir cleaned/
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .batch import BatchItemResult, remove_batch
from .config import Settings
from .engine import WatermarkEngine
from .errors import InitializationError

logger = logging.getLogger("unmark")
console = Console()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="unmark", description="Remove the corner watermark from images")
    parser.add_argument("inputs", nargs="+", type=Path, help="Image files (JPEG, PNG, WebP)")
    parser.add_argument("--output-dir", type=Path, help="Where to write results (default: next to each input)")
    parser.add_argument("--strategy", choices=["auto", "fill", "reverse_alpha"], help="Synthesis strategy")
    parser.add_argument("--alpha-map-dir", type=Path, help="Directory with the profile's alpha map images")
    parser.add_argument("--concurrency", type=int, help="Images processed in parallel")
    return parser.parse_args(argv)


def output_path_for(input_path: Path, output_dir: Optional[Path]) -> Path:
    directory = output_dir or input_path.parent
    return directory / f"unwatermarked_{input_path.stem}.png"


def load_image(path: Path) -> np.ndarray:
    with Image.open(path) as img:
        return np.array(img.convert("RGBA"))


async def run(args: argparse.Namespace) -> int:
    overrides = {}
    if args.strategy:
        overrides["strategy"] = args.strategy
    if args.alpha_map_dir:
        overrides["alpha_map_dir"] = args.alpha_map_dir
    if args.concurrency:
        overrides["max_concurrency"] = args.concurrency
    settings = Settings(**overrides)

    try:
        engine = await WatermarkEngine.create(settings)
    except InitializationError as e:
        logger.error(f"Engine initialization failed: {e}")
        return 1

    paths = []
    images = []
    failures = 0
    for path in args.inputs:
        try:
            images.append(load_image(path))
            paths.append(path)
        except (OSError, UnidentifiedImageError) as e:
            logger.error(f"Could not load {path}: {e}")
            failures += 1

    def on_progress(completed: int, total: int, result: BatchItemResult) -> None:
        console.print(f"[dim]{completed}/{total}[/dim] {escape(paths[result.index].name)}")

    results = await remove_batch(engine, images, progress_callback=on_progress)

    if args.output_dir:
        args.output_dir.mkdir(parents=True, exist_ok=True)

    saved = 0
    for path, result in zip(paths, results):
        if not result.success:
            failures += 1
            continue

        out_path = output_path_for(path, args.output_dir)
        try:
            Image.fromarray(result.cleaned_image).save(out_path, format="PNG")
        except OSError as e:
            logger.error(f"Could not save {out_path}: {e}")
            failures += 1
            continue
        saved += 1

        region = result.region
        console.print(
            f"[green]✓[/green] {escape(path.name)}: watermark {region.size}×{region.size} px "
            f"at ({region.x}, {region.y}) via {result.method_used} → {escape(str(out_path))}"
        )

    console.print(f"\nProcessed {saved}/{len(args.inputs)} images")
    return 1 if failures else 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=Settings().log_level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
