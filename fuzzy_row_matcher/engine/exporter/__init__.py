"""Batch writer SPI, implementations and the consumer loop."""

from .base import BaseBatchWriter
from .consumer import BatchConsumer
from .sqlite_exporter import SQLiteBatchWriter

__all__ = ["BaseBatchWriter", "BatchConsumer", "SQLiteBatchWriter"]
