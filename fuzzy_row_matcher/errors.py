"""Exception hierarchy shared by every fuzzy-row-matcher component."""

from __future__ import annotations


class FuzzyRowMatcherError(Exception):
    """Base class for all errors raised by the matcher."""


class ConfigurationError(FuzzyRowMatcherError):
    """Run configuration is missing required settings or failed validation."""


class UnsupportedSourceError(FuzzyRowMatcherError):
    """Schema bootstrap was requested against an unrecognised database vendor."""


class PersistenceError(FuzzyRowMatcherError):
    """A batch could not be written to the target store."""


class InterruptedWaitError(FuzzyRowMatcherError):
    """The orchestrator was interrupted while waiting on its workers."""


class PipelineCancelled(FuzzyRowMatcherError):
    """Raised inside a worker once the pipeline has been asked to stop."""


__all__ = [
    "ConfigurationError",
    "FuzzyRowMatcherError",
    "InterruptedWaitError",
    "PersistenceError",
    "PipelineCancelled",
    "UnsupportedSourceError",
]
