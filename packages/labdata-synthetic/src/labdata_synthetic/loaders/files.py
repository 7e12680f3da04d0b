"""Directory sinks: one Parquet or CSV file per entity.

Files are written into a hidden staging directory next to the target and
the staging directory is renamed over the target on commit. Readers of the
target see either the previous batch or the new one, never a mix.
"""

from __future__ import annotations

import shutil
import tempfile
from abc import abstractmethod
from pathlib import Path

import pyarrow as pa
import pyarrow.csv as pa_csv
import pyarrow.parquet as pq
import structlog

from labdata_synthetic.errors import SinkWriteFailure
from labdata_synthetic.loaders.base import LoadResult, Sink

logger = structlog.get_logger(__name__)


class DirectorySink(Sink):
    """Base class for sinks writing one file per entity into a directory."""

    scheme = ""
    suffix = ""

    def __init__(self, target: str | Path) -> None:
        self.target = Path(target)
        self._staging: Path | None = None
        self._log = logger.bind(target=str(self.target))

    def describe(self) -> str:
        return f"{self.scheme}://{self.target}"

    @abstractmethod
    def _write_file(self, table: pa.Table, path: Path) -> None: ...

    def begin(self) -> None:
        if self.target.exists() and not self.target.is_dir():
            raise SinkWriteFailure(
                self.describe(),
                internal_details=f"{self.target} exists and is not a directory",
            )
        self.target.parent.mkdir(parents=True, exist_ok=True)
        self._staging = Path(
            tempfile.mkdtemp(prefix=f".{self.target.name}.staging-", dir=self.target.parent)
        )
        self._log.debug("staging_created", staging=str(self._staging))

    def write(self, entity: str, table: pa.Table) -> LoadResult:
        if self._staging is None:
            raise SinkWriteFailure(self.describe(), entity=entity, internal_details="no open batch")
        path = self._staging / f"{entity}{self.suffix}"
        self._write_file(table, path)
        return LoadResult(table_name=str(self.target / path.name), rows_loaded=table.num_rows)

    def commit(self) -> None:
        if self._staging is None:
            raise SinkWriteFailure(self.describe(), internal_details="no open batch")

        previous: Path | None = None
        if self.target.exists():
            previous = self.target.with_name(f".{self.target.name}.previous-{self._staging.name}")
            self.target.rename(previous)
        try:
            self._staging.rename(self.target)
        except OSError:
            if previous is not None:
                previous.rename(self.target)
            raise
        self._staging = None

        if previous is not None:
            shutil.rmtree(previous)
        self._log.info("directory_published")

    def rollback(self) -> None:
        if self._staging is not None and self._staging.exists():
            shutil.rmtree(self._staging)
            self._log.debug("staging_removed", staging=str(self._staging))
        self._staging = None


class ParquetSink(DirectorySink):
    """Write each entity as ``<entity>.parquet``.

    Example:
        >>> write_dataset(dataset, ParquetSink("lab-data"))
    """

    scheme = "parquet"
    suffix = ".parquet"

    def __init__(self, target: str | Path, *, compression: str = "zstd") -> None:
        super().__init__(target)
        self.compression = compression

    def _write_file(self, table: pa.Table, path: Path) -> None:
        pq.write_table(table, path, compression=self.compression)


class CsvSink(DirectorySink):
    """Write each entity as ``<entity>.csv`` with a header row."""

    scheme = "csv"
    suffix = ".csv"

    def _write_file(self, table: pa.Table, path: Path) -> None:
        pa_csv.write_csv(table, path)


def read_parquet_dir(path: str | Path) -> dict[str, pa.Table]:
    """Read a directory written by ParquetSink back into Arrow tables.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    path = Path(path)
    if not path.is_dir():
        raise FileNotFoundError(f"Not a directory: {path}")
    return {file.stem: pq.read_table(file) for file in sorted(path.glob("*.parquet"))}
