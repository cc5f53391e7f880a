# app/core/analysis_queue.py

"""
Runs check-image analysis with a bounded number of calls in flight.

The default concurrency of 1 analyzes one image at a time, waiting for
each call to finish before starting the next, so the vision service is
never flooded. Results always come back in upload order, and one failed
image never stops the rest.
"""

import asyncio
import logging
from typing import Callable, Iterable, Optional, Protocol

from app.exceptions import CheckAnalysisError, TooManyImagesError, redact_secrets
from app.models import CheckAnalysis, CheckImageResult, ImageUpload

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class CheckAnalyzer(Protocol):
    """Reads check number and payee name off a check image."""

    async def analyze(self, image: bytes, media_type: str) -> CheckAnalysis:
        ...


class CancellationToken:
    """Stops a run between images. Calls already in flight finish."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AnalysisQueue:
    """Analyze uploaded check images through a CheckAnalyzer."""

    def __init__(
        self,
        analyzer: CheckAnalyzer,
        concurrency: int = 1,
        retries: int = 0,
        max_images: Optional[int] = None,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if retries < 0:
            raise ValueError("retries must not be negative")

        self.analyzer = analyzer
        self.concurrency = concurrency
        self.retries = retries
        self.max_images = max_images

    async def analyze_one(self, upload: ImageUpload) -> CheckImageResult:
        """
        Analyze a single image, turning any failure into an error result.

        Only retryable CheckAnalysisErrors are retried, at most
        self.retries extra times.
        """
        attempt = 0
        while True:
            try:
                analysis = await self.analyzer.analyze(upload.content, upload.media_type)
                return CheckImageResult(
                    check_number=analysis.check_number,
                    check_name=analysis.check_name,
                    image_url=upload.filename,
                )
            except CheckAnalysisError as e:
                if e.retryable and attempt < self.retries:
                    attempt += 1
                    logger.info(
                        "Retrying analysis of %s (attempt %d of %d): %s",
                        upload.filename, attempt, self.retries, e.message,
                    )
                    continue
                message = e.message
            except Exception as e:
                # Any single image may fail without aborting the run
                message = redact_secrets(str(e)) or "Unknown error"

            logger.warning("Check image analysis failed for %s: %s", upload.filename, message)
            return CheckImageResult(
                check_number="",
                check_name="",
                image_url=upload.filename,
                error=message,
            )

    async def run(
        self,
        uploads: Iterable[ImageUpload],
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[CheckImageResult]:
        """
        Analyze all uploads and return their results in upload order.

        Uploads not yet started when cancel_token is cancelled are left
        out of the result.
        """
        uploads = list(uploads)
        total = len(uploads)

        if self.max_images is not None and total > self.max_images:
            raise TooManyImagesError(total, self.max_images)

        slots: list[Optional[CheckImageResult]] = [None] * total
        semaphore = asyncio.Semaphore(self.concurrency)
        done = 0

        async def worker(index: int, upload: ImageUpload) -> None:
            nonlocal done
            async with semaphore:
                if cancel_token is not None and cancel_token.cancelled:
                    return
                slots[index] = await self.analyze_one(upload)
            done += 1
            if on_progress is not None:
                on_progress(done, total)

        await asyncio.gather(*(worker(i, upload) for i, upload in enumerate(uploads)))

        results = [result for result in slots if result is not None]
        if len(results) < total:
            logger.info("Analysis cancelled after %d of %d images", len(results), total)
        return results
