"""Fuzzy row matcher: approximate duplicate detection across rows of a table."""

from .config import ConfigRepository, RunConfiguration, SourceConfig, TargetConfig, build_config
from .engine import AggregationMode, AlgorithmKind, AlgoStats, RunReport
from .errors import (
    ConfigurationError,
    FuzzyRowMatcherError,
    InterruptedWaitError,
    PersistenceError,
    UnsupportedSourceError,
)
from .orchestrator import Orchestrator, run

__version__ = "0.1.0"

__all__ = [
    "AggregationMode",
    "AlgoStats",
    "AlgorithmKind",
    "ConfigRepository",
    "ConfigurationError",
    "FuzzyRowMatcherError",
    "InterruptedWaitError",
    "Orchestrator",
    "PersistenceError",
    "RunConfiguration",
    "RunReport",
    "SourceConfig",
    "TargetConfig",
    "UnsupportedSourceError",
    "build_config",
    "run",
]
