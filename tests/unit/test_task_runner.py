"""
Unit tests for the task runner and op wrappers.
"""

import asyncio
import dataclasses

import pytest

from avif_optimizer.domain.models import WorkItem, TaskSuccess, TaskFailure
from avif_optimizer.domain.exceptions import TaskTimeoutError
from avif_optimizer.application.task_runner import run_task, with_timeout, in_thread


def run(coro):
    return asyncio.run(coro)


class TestRunTask:
    """Test run_task outcome capture."""

    def test_async_success(self):
        async def op(item):
            await asyncio.sleep(0.01)
            return item.upper()

        outcome = run(run_task(WorkItem(index=3, item='a.jpg'), op))

        assert isinstance(outcome, TaskSuccess)
        assert outcome.succeeded
        assert outcome.index == 3
        assert outcome.item == 'a.jpg'
        assert outcome.value == 'A.JPG'
        assert outcome.duration_ms >= 5

    def test_sync_callable_success(self):
        outcome = run(run_task(WorkItem(index=0, item=2), lambda x: x * 10))

        assert isinstance(outcome, TaskSuccess)
        assert outcome.value == 20

    def test_sync_raise_becomes_failure(self):
        def op(item):
            raise ValueError('Sync error')

        outcome = run(run_task(WorkItem(index=1, item='b.jpg'), op))

        assert isinstance(outcome, TaskFailure)
        assert not outcome.succeeded
        assert str(outcome.error) == 'Sync error'
        assert outcome.index == 1
        assert outcome.duration_ms >= 0

    def test_async_raise_becomes_failure(self):
        async def op(item):
            await asyncio.sleep(0)
            raise RuntimeError('Async error')

        outcome = run(run_task(WorkItem(index=0, item='c.jpg'), op))

        assert isinstance(outcome, TaskFailure)
        assert isinstance(outcome.error, RuntimeError)

    def test_error_attributes_preserved(self):
        class CodedError(Exception):
            code = 'CUSTOM_CODE'

        async def op(item):
            raise CodedError('Custom error')

        outcome = run(run_task(WorkItem(index=0, item='x'), op))

        assert outcome.error.code == 'CUSTOM_CODE'

    def test_outcome_is_immutable(self):
        outcome = run(run_task(WorkItem(index=0, item='x'), lambda x: x))

        with pytest.raises(dataclasses.FrozenInstanceError):
            outcome.value = 'changed'


class TestWrappers:
    """Test timeout and thread wrappers."""

    def test_timeout_fails_slow_item(self):
        async def slow(item):
            await asyncio.sleep(1)
            return item

        outcome = run(run_task(WorkItem(index=0, item='slow'), with_timeout(slow, 0.05)))

        assert isinstance(outcome, TaskFailure)
        assert isinstance(outcome.error, TaskTimeoutError)

    def test_timeout_passes_fast_item(self):
        async def fast(item):
            return item

        outcome = run(run_task(WorkItem(index=0, item='fast'), with_timeout(fast, 1)))

        assert outcome.value == 'fast'

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            with_timeout(lambda x: x, 0)

    def test_in_thread_runs_blocking_callable(self):
        op = in_thread(lambda x: x + 1)

        outcome = run(run_task(WorkItem(index=0, item=41), op))

        assert outcome.value == 42

    def test_in_thread_propagates_error_as_failure(self):
        def boom(item):
            raise OSError('disk gone')

        outcome = run(run_task(WorkItem(index=0, item='x'), in_thread(boom)))

        assert isinstance(outcome.error, OSError)
