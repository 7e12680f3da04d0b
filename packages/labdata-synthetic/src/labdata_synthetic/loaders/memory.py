"""In-memory sink, mainly for tests and notebooks."""

from __future__ import annotations

import pyarrow as pa

from labdata_synthetic.errors import SinkWriteFailure
from labdata_synthetic.loaders.base import LoadResult, Sink


class MemorySink(Sink):
    """Keeps committed tables in a dict.

    Staged tables are swapped in on commit, so a failed batch leaves
    ``tables`` exactly as it was.

    Example:
        >>> sink = MemorySink()
        >>> write_dataset(dataset, sink)
        >>> sink.tables["customers"].num_rows
        10
    """

    def __init__(self) -> None:
        self.tables: dict[str, pa.Table] = {}
        self.commits = 0
        self._staged: dict[str, pa.Table] | None = None

    def describe(self) -> str:
        return "memory://"

    def begin(self) -> None:
        self._staged = {}

    def write(self, entity: str, table: pa.Table) -> LoadResult:
        if self._staged is None:
            raise SinkWriteFailure(self.describe(), entity=entity, internal_details="no open batch")
        self._staged[entity] = table
        return LoadResult(table_name=entity, rows_loaded=table.num_rows)

    def commit(self) -> None:
        if self._staged is None:
            raise SinkWriteFailure(self.describe(), internal_details="no open batch")
        self.tables = self._staged
        self._staged = None
        self.commits += 1

    def rollback(self) -> None:
        self._staged = None
