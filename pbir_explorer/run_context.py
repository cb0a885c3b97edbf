"""Cancellation, deadlines and bounded fan-out for a resolution run."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

T = TypeVar('T')
R = TypeVar('R')


class ResolutionInterrupted(Exception):
    """A resolution run was stopped before it finished."""
    pass


class ResolutionCancelled(ResolutionInterrupted):
    """The caller cancelled the run."""
    pass


class DeadlineExceeded(ResolutionInterrupted):
    """The caller-supplied deadline passed."""
    pass


class RunContext:
    """Per-run state shared by the loaders of one resolution pass.

    Cancellation is cooperative: loaders call ``check()`` between file
    operations. A read already in flight completes and its result is
    discarded when the run stops.

    Args:
        max_workers: Upper bound on concurrent file loads.
        deadline_seconds: Optional time budget, measured from construction.
    """

    def __init__(self, max_workers: int = 8, deadline_seconds: float | None = None) -> None:
        self.max_workers = max(1, max_workers)
        self._cancelled = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check(self) -> None:
        """Raise if the run was cancelled or ran past its deadline."""
        if self._cancelled.is_set():
            raise ResolutionCancelled("Resolution cancelled")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise DeadlineExceeded("Resolution deadline exceeded")

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply ``fn`` to every item on a bounded pool, keeping input order."""
        items = list(items)
        self.check()
        if len(items) <= 1 or self.max_workers == 1:
            results = []
            for item in items:
                self.check()
                results.append(fn(item))
            return results

        def _guarded(item: T) -> R:
            self.check()
            return fn(item)

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as pool:
            results = list(pool.map(_guarded, items))
        self.check()
        return results
