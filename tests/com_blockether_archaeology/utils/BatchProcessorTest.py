"""
Tests for BatchProcessor ordering, retries and failure collection.
"""

from typing import Dict

import anyio
import pytest

from com_blockether_archaeology.utils.BatchProcessor import BatchOutcome, BatchProcessor


class TestBatchProcessor:
    """Test suite for BatchProcessor."""

    BATCH_SIZE = 3
    MAX_RETRIES = 3
    RETRY_MIN_WAIT = 0  # milliseconds
    RETRY_MAX_WAIT = 0  # milliseconds

    @pytest.fixture
    def processor(self) -> BatchProcessor[str, str]:
        return BatchProcessor[str, str](
            batch_size=self.BATCH_SIZE,
            max_retries=self.MAX_RETRIES,
            retry_min_wait=self.RETRY_MIN_WAIT,
            retry_max_wait=self.RETRY_MAX_WAIT,
        )

    @pytest.mark.anyio
    async def test_process_empty_batch(self, processor: BatchProcessor[str, str]) -> None:
        async def process_func(item: str) -> str:
            return item.upper()

        outcome = await processor.process_collecting_failures([], process_func)

        assert outcome.results == []
        assert outcome.failures == []

    @pytest.mark.anyio
    async def test_order_is_preserved_regardless_of_completion_order(
        self, processor: BatchProcessor[str, str]
    ) -> None:
        """Items finishing in reverse order still come back in input order."""
        items = ["a", "b", "c", "d", "e"]
        delays = {"a": 0.05, "b": 0.04, "c": 0.03, "d": 0.02, "e": 0.0}

        async def process_func(item: str) -> str:
            await anyio.sleep(delays[item])
            return item.upper()

        outcome = await processor.process_collecting_failures(items, process_func)

        assert outcome.results == ["A", "B", "C", "D", "E"]

    @pytest.mark.anyio
    async def test_concurrency_is_bounded(self, processor: BatchProcessor[str, str]) -> None:
        running = 0
        peak = 0

        async def process_func(item: str) -> str:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await anyio.sleep(0.01)
            running -= 1
            return item

        await processor.process_collecting_failures([str(i) for i in range(10)], process_func)
        assert peak <= self.BATCH_SIZE

    @pytest.mark.anyio
    async def test_transient_os_error_is_retried(self, processor: BatchProcessor[str, str]) -> None:
        attempts: Dict[str, int] = {}

        async def process_func(item: str) -> str:
            attempts[item] = attempts.get(item, 0) + 1
            if attempts[item] < 2:
                raise OSError("temporarily unavailable")
            return item

        outcome = await processor.process_collecting_failures(["x"], process_func)

        assert outcome.results == ["x"]
        assert outcome.failures == []
        assert attempts["x"] == 2

    @pytest.mark.anyio
    async def test_non_retryable_error_is_not_retried(self, processor: BatchProcessor[str, str]) -> None:
        attempts = 0

        async def process_func(item: str) -> str:
            nonlocal attempts
            attempts += 1
            raise ValueError("bad item")

        outcome = await processor.process_collecting_failures(["x"], process_func)

        assert attempts == 1
        assert outcome.failures[0].error_type == "ValueError"

    @pytest.mark.anyio
    async def test_collecting_failures_keeps_successes(self, processor: BatchProcessor[str, str]) -> None:
        async def process_func(item: str) -> str:
            if item == "bad":
                raise ValueError(f"cannot process {item}")
            return item.upper()

        outcome = await processor.process_collecting_failures(["a", "bad", "c"], process_func)

        assert isinstance(outcome, BatchOutcome)
        assert outcome.results == ["A", "C"]
        assert len(outcome.failures) == 1
        assert outcome.failures[0].index == 1
        assert outcome.failures[0].item == "bad"
        assert outcome.failures[0].error_type == "ValueError"

    @pytest.mark.anyio
    async def test_collecting_failures_after_exhausted_retries(self, processor: BatchProcessor[str, str]) -> None:
        attempts = 0

        async def process_func(item: str) -> str:
            nonlocal attempts
            attempts += 1
            raise PermissionError("denied")

        outcome = await processor.process_collecting_failures(["locked"], process_func, describe=lambda i: f"<{i}>")

        assert outcome.results == []
        assert attempts == self.MAX_RETRIES
        assert outcome.failures[0].item == "<locked>"
        assert outcome.failures[0].error_type == "PermissionError"
