"""Engine components: algorithms → scan → statistics → batched persistence."""

from .algorithms import Algorithm, AlgorithmKind, build_algorithms
from .channel import BoundedChannel
from .exporter import BaseBatchWriter, BatchConsumer, SQLiteBatchWriter
from .records import AlgoStats, AlgorithmResult, Batch, MatchRecord, RowSnapshot, RunReport
from .scanner import AggregationMode, RowComparator, ScanSummary, aggregate_qualifies
from .statistics import StatisticsAggregator
from .thread_pool import ThreadPoolManager

__all__ = [
    "AggregationMode",
    "AlgoStats",
    "Algorithm",
    "AlgorithmKind",
    "AlgorithmResult",
    "BaseBatchWriter",
    "Batch",
    "BatchConsumer",
    "BoundedChannel",
    "MatchRecord",
    "RowComparator",
    "RowSnapshot",
    "RunReport",
    "SQLiteBatchWriter",
    "ScanSummary",
    "StatisticsAggregator",
    "ThreadPoolManager",
    "aggregate_qualifies",
    "build_algorithms",
]
