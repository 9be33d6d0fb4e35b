"""Operation context: cancellation and deadline propagation.

Every network call, subprocess and resolve call accepts an
``OperationContext``. Cancelling the context (or letting its deadline
pass) aborts the in-flight work and makes the whole call fail.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, wait
from typing import TypeVar

from taghash.shared.errors import (
    ErrorCode,
    ErrorContext,
    OperationCancelledError,
    OperationTimeoutError,
)

T = TypeVar("T")


class OperationContext:
    """Cancellation token with an optional monotonic deadline.

    Example:
        >>> ctx = OperationContext.with_timeout(30)
        >>> resolver.resolve_tag(repo, "v1.0.0", ctx)
        >>> ctx.cancel()  # from another thread
    """

    # how often run() re-checks cancellation and the deadline
    POLL_INTERVAL_SECONDS = 0.05

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize the context.

        Args:
            deadline: Absolute ``time.monotonic()`` value after which the
                context is expired, or None for no deadline
        """
        self._cancel_event = threading.Event()
        self.deadline = deadline

    @classmethod
    def background(cls) -> OperationContext:
        """Return a context that is never cancelled unless asked to."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float | None) -> OperationContext:
        """Return a context expiring ``seconds`` from now (None: no deadline)."""
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def is_expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timeout(self, default: float | None) -> float | None:
        """Pick the smaller of ``default`` and the remaining time."""
        remaining = self.remaining()
        if remaining is None:
            return default
        if default is None:
            return remaining
        return min(default, remaining)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if cancelled meanwhile."""
        return self._cancel_event.wait(seconds)

    def check(self, operation: str, repository: str | None = None) -> None:
        """Raise if the context was cancelled or its deadline passed.

        Raises:
            OperationCancelledError: The context was cancelled
            OperationTimeoutError: The deadline passed
        """
        if self.is_cancelled():
            raise OperationCancelledError(
                ErrorCode.OPERATION_CANCELLED,
                f"operation cancelled: {operation}",
                ErrorContext(operation=operation, repository=repository),
            )
        if self.is_expired():
            raise OperationTimeoutError(
                ErrorCode.OPERATION_TIMEOUT,
                f"operation deadline exceeded: {operation}",
                ErrorContext(operation=operation, repository=repository),
            )

    def run(
        self,
        operation: str,
        func: Callable[[], T],
        repository: str | None = None,
    ) -> T:
        """Run a blocking call on a worker thread and wait for it under this context.

        Blocking calls such as an HTTP request cannot be interrupted from
        outside. The call runs on a daemon thread; if the context is
        cancelled or its deadline passes first, the caller gets the error
        at once and the late result is discarded.

        Raises:
            OperationCancelledError: The context was cancelled before ``func`` returned
            OperationTimeoutError: The deadline passed before ``func`` returned
            Exception: Whatever ``func`` raised
        """
        self.check(operation, repository)
        future: Future[T] = Future()

        def worker() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(func())
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=worker, name=f"taghash-{operation}", daemon=True).start()

        while True:
            done, _ = wait([future], timeout=self.POLL_INTERVAL_SECONDS)
            if done:
                return future.result()
            self.check(operation, repository)
