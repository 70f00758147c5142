"""Pydantic models describing a fuzzy matching run."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..engine.algorithms import Algorithm, AlgorithmKind, build_algorithms
from ..engine.scanner import AggregationMode
from ..errors import ConfigurationError

DEFAULT_STR_LEN_DELTA_PCT = 50.0
DEFAULT_COMMIT_SIZE = 500
DEFAULT_QUEUE_CAPACITY = 100
DEFAULT_SHUTDOWN_TIMEOUT = 60.0


class SourceConfig(BaseModel):
    """Where rows are read from and which columns identify a row."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["sqlite", "csv"] = "sqlite"
    path: Path
    table_query: str | None = None
    hash_keys: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("hash_keys", mode="before")
    @classmethod
    def _coerce_keys(cls, value: Any) -> frozenset[str]:
        if value in (None, ""):
            return frozenset()
        if isinstance(value, str):
            return frozenset(part.strip() for part in value.split(",") if part.strip())
        return frozenset(str(item) for item in value)

    @model_validator(mode="after")
    def _validate_query(self) -> "SourceConfig":
        if self.kind == "sqlite" and not (self.table_query or "").strip():
            raise ValueError("sqlite sources require table_query (a table name or SELECT)")
        return self

    @property
    def sql(self) -> str:
        """The query to run: a SELECT is used verbatim, a table name is wrapped."""

        query = (self.table_query or "").strip()
        if query.upper().startswith("SELECT"):
            return query
        return f"SELECT * FROM {query}"


class TargetConfig(BaseModel):
    """Store receiving row snapshots and match scores."""

    model_config = ConfigDict(frozen=True)

    path: Path
    vendor: str = "sqlite"

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)


class RunConfiguration(BaseModel):
    """Immutable, validated settings of one run."""

    model_config = ConfigDict(frozen=True)

    source: SourceConfig
    target: TargetConfig | None = None
    algorithms: tuple[Algorithm, ...] = ()
    aggregate_results: bool = False
    ignore_duplicates: bool = False
    str_len_delta_pct: float = Field(default=DEFAULT_STR_LEN_DELTA_PCT, ge=0.0, le=100.0)
    commit_size: int = Field(default=DEFAULT_COMMIT_SIZE, ge=1)
    queue_capacity: int = Field(default=DEFAULT_QUEUE_CAPACITY, ge=1)
    shutdown_timeout: float = Field(default=DEFAULT_SHUTDOWN_TIMEOUT, gt=0.0)

    @field_validator("algorithms", mode="before")
    @classmethod
    def _coerce_algorithms(cls, value: Any) -> tuple[Algorithm, ...]:
        if value in (None, ""):
            return ()
        if isinstance(value, dict):
            return build_algorithms(value)
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"algorithms must be a mapping or a list, got {value!r}")
        thresholds: dict[AlgorithmKind, Any] = {}
        for item in value:
            if isinstance(item, Algorithm):
                thresholds[item.kind] = item.threshold
            elif isinstance(item, dict):
                missing = [key for key in ("kind", "threshold") if key not in item]
                if missing:
                    raise ValueError(f"Algorithm entry {item!r} is missing {', '.join(missing)}")
                thresholds[AlgorithmKind(item["kind"])] = item["threshold"]
            else:
                raise ValueError(f"Unsupported algorithm entry: {item!r}")
        return build_algorithms(thresholds)

    @property
    def aggregation_mode(self) -> AggregationMode:
        return AggregationMode.ALL if self.aggregate_results else AggregationMode.ANY

    @property
    def persist(self) -> bool:
        return self.target is not None

    def thresholds(self) -> dict[str, int | float]:
        return {algorithm.kind.value: algorithm.threshold for algorithm in self.algorithms}

    def to_payload(self) -> dict[str, Any]:
        """Serialisable form accepted back by `build_config`."""

        return {
            "source": {
                "kind": self.source.kind,
                "path": str(self.source.path),
                "table_query": self.source.table_query,
                "hash_keys": sorted(self.source.hash_keys),
            },
            "target": (
                {"path": str(self.target.path), "vendor": self.target.vendor}
                if self.target
                else None
            ),
            "algorithms": self.thresholds(),
            "aggregate_results": self.aggregate_results,
            "ignore_duplicates": self.ignore_duplicates,
            "str_len_delta_pct": self.str_len_delta_pct,
            "commit_size": self.commit_size,
            "queue_capacity": self.queue_capacity,
            "shutdown_timeout": self.shutdown_timeout,
        }


def build_config(**options: Any) -> RunConfiguration:
    """Validate ``options`` into a `RunConfiguration`.

    Raises `ConfigurationError` when the source is missing or any option is
    invalid; nothing partially built is returned.
    """

    if options.get("source") is None:
        raise ConfigurationError("Source must be set")
    try:
        config = RunConfiguration.model_validate(options)
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid run configuration: {exc}") from exc
    if config.aggregation_mode is AggregationMode.ALL and not config.algorithms:
        structlog.get_logger("fuzzy_row_matcher.config").warning(
            "empty_algorithm_set_all_mode",
            detail="every compared pair will qualify as a match",
        )
    return config


__all__ = [
    "DEFAULT_COMMIT_SIZE",
    "DEFAULT_QUEUE_CAPACITY",
    "DEFAULT_SHUTDOWN_TIMEOUT",
    "DEFAULT_STR_LEN_DELTA_PCT",
    "RunConfiguration",
    "SourceConfig",
    "TargetConfig",
    "build_config",
]
