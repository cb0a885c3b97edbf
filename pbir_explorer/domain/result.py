"""Loader outcome type shared by every file loader."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pbir_explorer.domain.enums import LoadFailure

T = TypeVar('T')


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Either a loaded value or the reason it could not be loaded.

    Loaders never raise for expected I/O or parse problems. The caller
    applies its fallback policy once, typically through ``unwrap_or``.
    """

    value: T | None = None
    failure: LoadFailure | None = None
    detail: str = ''

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> 'LoadResult[T]':
        return cls(value=value)

    @classmethod
    def fail(cls, failure: LoadFailure, detail: str = '') -> 'LoadResult[T]':
        return cls(failure=failure, detail=detail)

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` when loading failed."""
        return self.value if self.ok else default
