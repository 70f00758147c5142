"""Batch writer Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..records import Batch


class BaseBatchWriter(ABC):
    """Uniform contract for stores that persist scan batches."""

    @abstractmethod
    def write(self, batch: Batch) -> None:
        """Persist one batch atomically, raising `PersistenceError` on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def __enter__(self) -> "BaseBatchWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["BaseBatchWriter"]
