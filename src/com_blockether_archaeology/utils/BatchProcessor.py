"""
Generic batch processor with retry logic and concurrent execution.
"""

import logging
from typing import Any, Callable, Coroutine, Generic, List, Optional, Sequence, TypeVar

import anyio
from pydantic import BaseModel, Field
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Type variables for generic input and output
TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BatchFailure(BaseModel):
    """An item that still failed after all retries."""

    index: int = Field(description="Position of the item in the input sequence")
    item: str = Field(description="Printable description of the item")
    error_type: str = Field(description="Exception class name")
    message: str = Field(description="Exception message")


class BatchOutcome(BaseModel, Generic[TOutput]):
    """Results of the items that succeeded, in input order, plus recorded failures."""

    results: List[TOutput] = Field(default_factory=list)
    failures: List[BatchFailure] = Field(default_factory=list)


class BatchProcessor(Generic[TInput, TOutput]):
    """
    Generic batch processor with concurrent execution and retry logic.

    GUARANTEES:
    - Order preservation: results are returned in the same order as inputs
    - Bounded concurrency: at most `batch_size` items run at once
    - Retries only for `retry_exceptions`, with exponential backoff
    - An item failing after all retries is recorded and never cancels its siblings
    """

    # Default configuration constants
    DEFAULT_BATCH_SIZE = 8
    DEFAULT_MAX_RETRIES = 2
    DEFAULT_RETRY_MIN_WAIT = 100  # milliseconds
    DEFAULT_RETRY_MAX_WAIT = 2000  # milliseconds

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_min_wait: int = DEFAULT_RETRY_MIN_WAIT,
        retry_max_wait: int = DEFAULT_RETRY_MAX_WAIT,
        retry_exceptions: Optional[tuple[type[Exception], ...]] = None,
    ):
        """
        Initialize the batch processor.

        Args:
            batch_size: Number of items to process concurrently
            max_retries: Maximum number of attempts per item
            retry_min_wait: Minimum wait time between retries (milliseconds)
            retry_max_wait: Maximum wait time between retries (milliseconds)
            retry_exceptions: Exception types worth retrying (default: OSError)
        """
        self._batch_size = batch_size
        self._max_retries = max_retries
        self._retry_min_wait = retry_min_wait
        self._retry_max_wait = retry_max_wait
        self._retry_exceptions = retry_exceptions or (OSError,)

    def _with_retry(
        self,
        processor_func: Callable[[TInput], Coroutine[Any, Any, TOutput]],
    ) -> Callable[[TInput], Coroutine[Any, Any, TOutput]]:
        retry_decorator = retry(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(min=self._retry_min_wait / 1000, max=self._retry_max_wait / 1000),
            retry=retry_if_exception_type(self._retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retry_decorator(processor_func)

    async def process_collecting_failures(
        self,
        items: Sequence[TInput],
        processor_func: Callable[[TInput], Coroutine[Any, Any, TOutput]],
        describe: Callable[[TInput], str] = str,
    ) -> BatchOutcome[TOutput]:
        """
        Process items concurrently, recording items that fail after all retries.

        A failing item never cancels its siblings. Failures are logged at
        WARNING level and returned sorted by input position.

        Args:
            items: Sequence of items to process
            processor_func: Async function to process each item
            describe: Printable description of an item for failure records

        Returns:
            Successful results in input order plus the failures
        """
        if not items:
            return BatchOutcome[TOutput]()

        process_with_retry = self._with_retry(processor_func)
        limiter = anyio.CapacityLimiter(self._batch_size)
        results_dict: dict[int, TOutput] = {}
        failures: list[BatchFailure] = []

        async def process_with_limiter(idx: int, item: TInput) -> None:
            async with limiter:
                try:
                    results_dict[idx] = await process_with_retry(item)
                except Exception as e:
                    logger.warning(f"Giving up on {describe(item)}: {e}")
                    failures.append(
                        BatchFailure(index=idx, item=describe(item), error_type=type(e).__name__, message=str(e))
                    )

        async with anyio.create_task_group() as tg:
            for idx, item in enumerate(items):
                tg.start_soon(process_with_limiter, idx, item)

        return BatchOutcome[TOutput](
            results=[results_dict[i] for i in range(len(items)) if i in results_dict],
            failures=sorted(failures, key=lambda failure: failure.index),
        )
