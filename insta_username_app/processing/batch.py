"""
Batch Processing Module

Runs one extraction per image concurrently and joins the results in
submission order. A batch succeeds or fails as a whole.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Protocol, Sequence

from .errors import (
    BatchError,
    ConfigurationError,
    ExtractionError,
    InstaExtractorError,
    UnknownError,
)
from .logger import get_logger
from .models import ExtractionResult, InputFile, ResultSet

logger = get_logger(__name__)

CREDENTIAL_MARKERS = ("api key", "api_key", "apikey", "unauthorized", "authentication")


class UsernameExtractor(Protocol):
    def extract(self, image_bytes: bytes, mime_type: str) -> List[str]:
        ...


def classify_error(error: BaseException) -> InstaExtractorError:
    """Map an extraction failure to the error shown to the user."""
    if isinstance(error, ConfigurationError):
        return error

    message = str(error)
    if any(marker in message.lower() for marker in CREDENTIAL_MARKERS):
        return ConfigurationError()
    if isinstance(error, ExtractionError):
        return ExtractionError(error.message)
    return UnknownError()


async def process_batch(files: Sequence[InputFile], client: UsernameExtractor) -> ResultSet:
    """
    Extract usernames from every file at once.

    Every call is started before any is awaited, on a pool with one worker
    per file. All calls are allowed to settle; if any failed, the failure with
    the lowest submission index is raised as a BatchError and no results are
    returned.

    Args:
        files: Images in submission order
        client: Object with an extract(image_bytes, mime_type) method

    Returns:
        ResultSet aligned with `files`

    Raises:
        BatchError: When at least one extraction failed
    """
    if not files:
        return ResultSet()

    start_time = datetime.now()
    logger.info(f"Processing batch of {len(files)} image(s)")

    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=len(files), thread_name_prefix="extract")
    try:
        futures = [
            loop.run_in_executor(executor, client.extract, file.data, file.mime_type)
            for file in files
        ]
        outcomes = await asyncio.gather(*futures, return_exceptions=True)
    except asyncio.CancelledError:
        # In-flight calls cannot be interrupted; leave them to finish in the background
        logger.warning(f"Batch of {len(files)} image(s) cancelled")
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown(wait=True)

    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, BaseException):
            classified = classify_error(outcome)
            logger.error(f"Image {index} ({files[index].name}) failed: {outcome}")
            failed = sum(1 for o in outcomes if isinstance(o, BaseException))
            logger.warning(f"Discarding batch: {failed}/{len(files)} extraction(s) failed")
            raise BatchError(classified, index) from outcome

    results = [
        ExtractionResult.from_usernames(file, usernames)
        for file, usernames in zip(files, outcomes)
    ]
    result_set = ResultSet(results=results)

    elapsed = (datetime.now() - start_time).total_seconds()
    logger.info(f"Batch complete in {elapsed:.1f}s: {result_set.total_usernames} username(s) "
                f"across {len(result_set)} image(s)")
    return result_set
