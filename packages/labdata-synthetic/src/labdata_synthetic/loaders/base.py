"""Sink contract and the all-or-nothing batch writer.

A sink receives one Arrow table per entity inside a batch:

    sink.begin()
    sink.write("customers", table)   # once per entity
    sink.commit()                    # or sink.rollback() on any failure

Nothing a sink stages becomes visible before commit. BatchWriter drives the
protocol for a whole Dataset and turns any failure into SinkWriteFailure
after rolling the batch back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import pyarrow as pa
import structlog
from pydantic import BaseModel, ConfigDict

from labdata_synthetic.errors import SinkWriteFailure

if TYPE_CHECKING:
    from labdata_synthetic.pipeline import Dataset

logger = structlog.get_logger(__name__)


class LoadResult(BaseModel):
    """Result of writing one entity.

    Attributes:
        table_name: Target table or file identifier
        rows_loaded: Number of rows written
        snapshot_id: New snapshot ID after load (Iceberg only)
        operation: Operation type (overwrite)
    """

    model_config = ConfigDict(frozen=True)

    table_name: str
    rows_loaded: int
    snapshot_id: int | None = None
    operation: str = "overwrite"


class Sink(ABC):
    """Target store for a generated batch."""

    @abstractmethod
    def describe(self) -> str:
        """Short description used in logs and error messages."""

    @abstractmethod
    def begin(self) -> None:
        """Start a batch."""

    @abstractmethod
    def write(self, entity: str, table: pa.Table) -> LoadResult:
        """Stage one entity's rows."""

    @abstractmethod
    def commit(self) -> None:
        """Publish everything staged since begin()."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard everything staged since begin(). Safe to call more than once."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"


class BatchWriter:
    """Write a Dataset to a sink as a single batch.

    Example:
        >>> results = BatchWriter(ParquetSink("out/")).write(dataset)
        >>> sum(r.rows_loaded for r in results)
        4213
    """

    def __init__(self, sink: Sink) -> None:
        self.sink = sink
        self._log = logger.bind(sink=sink.describe())

    def write(self, dataset: Dataset) -> list[LoadResult]:
        """Write every entity of ``dataset``, then commit.

        Returns:
            One LoadResult per entity, in dataset order.

        Raises:
            SinkWriteFailure: If any step fails. The batch has been rolled
                back and nothing is visible in the target.
        """
        self._log.info("batch_started", entities=len(dataset.entities))
        entity: str | None = None
        results: list[LoadResult] = []
        try:
            self.sink.begin()
            for entity in dataset:
                result = self.sink.write(entity, dataset.to_arrow(entity))
                results.append(result)
                self._log.debug("entity_staged", entity=entity, rows=result.rows_loaded)
            entity = None
            self.sink.commit()
        except SinkWriteFailure:
            self._rollback(entity)
            raise
        except Exception as e:
            self._rollback(entity)
            raise SinkWriteFailure(
                self.sink.describe(),
                entity=entity,
                internal_details=f"{type(e).__name__}: {e}",
            ) from e

        self._log.info(
            "batch_committed",
            entities=len(results),
            rows=sum(r.rows_loaded for r in results),
        )
        return results

    def _rollback(self, entity: str | None) -> None:
        self._log.warning("batch_rolling_back", entity=entity)
        try:
            self.sink.rollback()
        except Exception as e:
            # The write failure is the one that propagates
            self._log.error("rollback_failed", error=str(e), error_type=type(e).__name__)


def write_dataset(dataset: Dataset, sink: Sink) -> list[LoadResult]:
    """Write ``dataset`` to ``sink`` as one all-or-nothing batch."""
    return BatchWriter(sink).write(dataset)
