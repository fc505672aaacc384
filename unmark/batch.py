"""
Batch Removal

Runs independent removal calls with bounded parallelism. A failing image is
recorded and logged, and the rest of the batch continues.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from .engine import WatermarkEngine
from .errors import UnmarkError
from .schemas import WatermarkRegion

logger = logging.getLogger(__name__)


@dataclass
class BatchItemResult:
    """Outcome of one image in a batch."""
    index: int
    success: bool
    cleaned_image: Optional[np.ndarray] = None
    region: Optional[WatermarkRegion] = None
    method_used: str = ""  # "fill" or "reverse_alpha"
    error: Optional[str] = None


async def remove_batch(
    engine: WatermarkEngine,
    images: Sequence[np.ndarray],
    concurrency: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int, BatchItemResult], None]] = None,
) -> list[BatchItemResult]:
    """
    Remove watermarks from many images concurrently.

    Args:
        engine: Ready watermark engine
        images: Source rasters; none of them is modified
        concurrency: Maximum removals in flight; the engine's max_concurrency if None
        progress_callback: Optional callback(completed, total, result)

    Returns:
        One BatchItemResult per image, in input order
    """
    limit = concurrency if concurrency is not None else engine.state.max_concurrency
    if limit < 1:
        raise ValueError(f"Concurrency must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)
    total = len(images)
    completed = 0

    async def run_one(index: int, image: np.ndarray) -> BatchItemResult:
        nonlocal completed
        async with semaphore:
            try:
                cleaned, region, patch = await asyncio.to_thread(engine.process, image)
                result = BatchItemResult(
                    index=index,
                    success=True,
                    cleaned_image=cleaned,
                    region=region,
                    method_used=patch.method,
                )
            except UnmarkError as e:
                logger.error(f"Failed to process image {index + 1}/{total}: {e}")
                result = BatchItemResult(index=index, success=False, error=str(e))

        completed += 1
        if progress_callback:
            progress_callback(completed, total, result)
        return result

    logger.info(f"Processing {total} images with concurrency {limit}")
    results = await asyncio.gather(*(run_one(i, image) for i, image in enumerate(images)))

    failed = sum(1 for r in results if not r.success)
    logger.info(f"Batch completed: {total - failed} processed, {failed} errors")
    return list(results)
