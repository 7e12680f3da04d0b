"""Unit tests for sinks and the batch writer.

Tests cover:
- LoadResult and IcebergSinkConfig models
- All-or-nothing semantics of BatchWriter with in-memory and directory sinks
- URI parsing for --out
- IcebergSink staging, promotion and restore against an in-memory fake catalog
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pyarrow as pa
import pytest

from labdata_synthetic.errors import ConfigurationError, SinkWriteFailure
from labdata_synthetic.loaders import (
    BatchWriter,
    CsvSink,
    LoadResult,
    MemorySink,
    ParquetSink,
    read_parquet_dir,
    sink_from_uri,
    write_dataset,
)
from labdata_synthetic.loaders.iceberg import IcebergSink, IcebergSinkConfig
from labdata_synthetic.pipeline import Dataset

pytestmark = pytest.mark.unit


class FailingMemorySink(MemorySink):
    """Memory sink that fails when staging one entity."""

    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.rollbacks = 0

    def write(self, entity: str, table: pa.Table) -> LoadResult:
        if entity == self.fail_on:
            raise RuntimeError("disk full")
        return super().write(entity, table)

    def rollback(self) -> None:
        self.rollbacks += 1
        super().rollback()


class FailingParquetSink(ParquetSink):
    def __init__(self, target: Path, fail_on: str) -> None:
        super().__init__(target)
        self.fail_on = fail_on

    def _write_file(self, table: pa.Table, path: Path) -> None:
        if path.stem == self.fail_on:
            raise OSError("No space left on device")
        super()._write_file(table, path)


class TestLoadResult:
    """Tests for LoadResult Pydantic model."""

    def test_valid_load_result(self) -> None:
        """Create valid LoadResult with all fields."""
        result = LoadResult(
            table_name="lab.customers",
            rows_loaded=1000,
            snapshot_id=12345678901234,
            operation="overwrite",
        )
        assert result.table_name == "lab.customers"
        assert result.rows_loaded == 1000
        assert result.snapshot_id == 12345678901234

    def test_defaults(self) -> None:
        """snapshot_id is optional and the operation defaults to overwrite."""
        result = LoadResult(table_name="customers", rows_loaded=5)
        assert result.snapshot_id is None
        assert result.operation == "overwrite"


class TestIcebergSinkConfig:
    """Tests for IcebergSinkConfig Pydantic model."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Config has sensible defaults from environment/defaults."""
        for name in ("CATALOG_NAME", "CATALOG_URI", "WAREHOUSE", "CREDENTIAL", "S3_ENDPOINT"):
            monkeypatch.delenv(f"LABDATA_ICEBERG_{name}", raising=False)
        config = IcebergSinkConfig()
        assert config.catalog_name == "polaris"
        assert config.catalog_uri == "http://localhost:8181/api/catalog"
        assert config.warehouse == "warehouse"
        assert config.credential is None
        assert config.s3_endpoint is None
        assert config.s3_region == "us-east-1"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """LABDATA_ICEBERG_* variables configure the catalog."""
        monkeypatch.setenv("LABDATA_ICEBERG_WAREHOUSE", "lab_warehouse")
        assert IcebergSinkConfig().warehouse == "lab_warehouse"

    def test_extra_fields_ignored(self) -> None:
        """Extra fields are ignored (not forbidden) per SettingsConfigDict."""
        config = IcebergSinkConfig(
            catalog_name="test",
            extra_field="ignored",  # type: ignore[call-arg]
        )
        assert config.catalog_name == "test"
        assert not hasattr(config, "extra_field")


class TestMemorySink:
    """Tests for MemorySink and BatchWriter."""

    def test_write_dataset(self, dataset: Dataset) -> None:
        """Every entity is committed with its row count."""
        sink = MemorySink()
        results = write_dataset(dataset, sink)

        assert [r.table_name for r in results] == dataset.entities
        assert sink.commits == 1
        assert {name: t.num_rows for name, t in sink.tables.items()} == dataset.row_counts()

    def test_write_without_begin(self) -> None:
        """Writing outside a batch is rejected."""
        with pytest.raises(SinkWriteFailure):
            MemorySink().write("customers", pa.table({"a": [1]}))

    def test_failure_leaves_nothing_visible(self, dataset: Dataset) -> None:
        """A failing entity rolls the whole batch back."""
        sink = FailingMemorySink(fail_on="usage")

        with pytest.raises(SinkWriteFailure) as exc_info:
            BatchWriter(sink).write(dataset)

        assert exc_info.value.entity == "usage"
        assert exc_info.value.sink == "memory://"
        assert sink.tables == {}
        assert sink.rollbacks == 1
        assert sink.commits == 0

    def test_failure_keeps_previous_batch(self, dataset: Dataset) -> None:
        """A failed batch leaves the last committed batch in place."""
        sink = FailingMemorySink(fail_on="nothing")
        write_dataset(dataset, sink)
        before = dict(sink.tables)

        sink.fail_on = "leads"
        with pytest.raises(SinkWriteFailure):
            write_dataset(dataset, sink)

        assert sink.tables == before
        assert sink.commits == 1

    def test_rollback_failure_does_not_mask_error(self, dataset: Dataset) -> None:
        """The original failure propagates even if rollback raises."""

        class BrokenRollback(FailingMemorySink):
            def rollback(self) -> None:
                raise RuntimeError("rollback broke")

        with pytest.raises(SinkWriteFailure) as exc_info:
            write_dataset(dataset, BrokenRollback(fail_on="customers"))

        assert exc_info.value.entity == "customers"


class TestDirectorySinks:
    """Tests for ParquetSink and CsvSink."""

    def test_parquet_writes_one_file_per_entity(self, dataset: Dataset, tmp_path: Path) -> None:
        """Each entity becomes <entity>.parquet with its rows."""
        target = tmp_path / "lab"
        results = write_dataset(dataset, ParquetSink(target))

        tables = read_parquet_dir(target)
        assert sorted(tables) == sorted(dataset.entities)
        assert tables["customers"].num_rows == 10
        assert results[0].table_name == str(target / "customers.parquet")

    def test_parquet_replaces_previous_batch(self, dataset: Dataset, tmp_path: Path) -> None:
        """A second batch replaces the directory contents."""
        target = tmp_path / "lab"
        target.mkdir()
        (target / "stale.parquet").write_bytes(b"old")

        write_dataset(dataset, ParquetSink(target))

        assert not (target / "stale.parquet").exists()
        assert (target / "customers.parquet").exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["lab"]

    def test_parquet_failure_keeps_old_target(self, dataset: Dataset, tmp_path: Path) -> None:
        """On failure the target is untouched and no staging directory remains."""
        target = tmp_path / "lab"
        target.mkdir()
        (target / "customers.parquet").write_bytes(b"previous")

        with pytest.raises(SinkWriteFailure) as exc_info:
            write_dataset(dataset, FailingParquetSink(target, fail_on="invoices"))

        assert exc_info.value.entity == "invoices"
        assert (target / "customers.parquet").read_bytes() == b"previous"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["lab"]

    def test_target_is_a_file(self, dataset: Dataset, tmp_path: Path) -> None:
        """A target that is an existing file is rejected before writing."""
        target = tmp_path / "lab"
        target.write_text("not a directory")

        with pytest.raises(SinkWriteFailure):
            write_dataset(dataset, ParquetSink(target))
        assert target.read_text() == "not a directory"

    def test_csv_has_header(self, dataset: Dataset, tmp_path: Path) -> None:
        """CSV files start with the column names."""
        target = tmp_path / "csv"
        write_dataset(dataset, CsvSink(target))

        header = (target / "customers.csv").read_text().splitlines()[0]
        assert header.replace('"', "").startswith("customer_id,company_name,")
        assert len((target / "customers.csv").read_text().splitlines()) == 11

    def test_read_parquet_dir_missing(self, tmp_path: Path) -> None:
        """Reading a missing directory raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_parquet_dir(tmp_path / "missing")


class TestSinkFromUri:
    """Tests for --out URI parsing."""

    @pytest.mark.parametrize(
        ("uri", "sink_type"),
        [
            ("lab-data", ParquetSink),
            ("parquet://lab-data", ParquetSink),
            ("PARQUET://lab-data", ParquetSink),
            ("csv://exports/lab", CsvSink),
            ("memory://", MemorySink),
        ],
    )
    def test_schemes(self, uri: str, sink_type: type) -> None:
        """Each scheme maps to its sink."""
        assert isinstance(sink_from_uri(uri), sink_type)

    def test_csv_location(self) -> None:
        """The location after the scheme is the target directory."""
        sink = sink_from_uri("csv://exports/lab")
        assert sink.describe() == "csv://exports/lab"

    def test_iceberg_namespace(self) -> None:
        """iceberg:// takes a namespace and connects lazily."""
        sink = sink_from_uri("iceberg://lab/")
        assert isinstance(sink, IcebergSink)
        assert sink.namespace == "lab"

    @pytest.mark.parametrize("uri", ["", "s3://bucket/lab", "parquet://"])
    def test_invalid(self, uri: str) -> None:
        """Empty, unknown or location-less URIs are configuration errors."""
        with pytest.raises(ConfigurationError):
            sink_from_uri(uri)


class FakeSnapshot:
    def __init__(self, snapshot_id: int) -> None:
        self.snapshot_id = snapshot_id


class FakeTable:
    def __init__(self, catalog: FakeCatalog, identifier: str) -> None:
        self.catalog = catalog
        self.identifier = identifier
        self.rows = 0

    def append(self, table: pa.Table) -> None:
        if self.identifier.endswith(f".{self.catalog.fail_on}__staging"):
            raise OSError("object store unavailable")
        self.rows += table.num_rows

    def current_snapshot(self) -> FakeSnapshot:
        return FakeSnapshot(len(self.catalog.tables))


class FakeCatalog:
    """Just enough of pyiceberg's Catalog for IcebergSink."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.namespaces: set[str] = set()
        self.tables: dict[str, FakeTable] = {}
        self.fail_on = fail_on

    def create_namespace_if_not_exists(self, namespace: str) -> None:
        self.namespaces.add(namespace)

    def table_exists(self, identifier: str) -> bool:
        return identifier in self.tables

    def create_table(self, identifier: str, schema: Any) -> FakeTable:
        table = FakeTable(self, identifier)
        self.tables[identifier] = table
        return table

    def drop_table(self, identifier: str) -> None:
        del self.tables[identifier]

    def rename_table(self, source: str, target: str) -> None:
        table = self.tables.pop(source)
        table.identifier = target
        self.tables[target] = table


class RenameFailingCatalog(FakeCatalog):
    """Fails renames onto one identifier."""

    def __init__(self, fail_rename_to: str | None) -> None:
        super().__init__()
        self.fail_rename_to = fail_rename_to

    def rename_table(self, source: str, target: str) -> None:
        if target == self.fail_rename_to:
            raise OSError(f"rename to {target} rejected")
        super().rename_table(source, target)


class TestIcebergSink:
    """Tests for IcebergSink against a fake catalog."""

    def test_commit_publishes_tables(self, dataset: Dataset) -> None:
        """Staging tables are renamed to <namespace>.<entity> on commit."""
        catalog = FakeCatalog()
        sink = IcebergSink("lab", catalog=catalog)  # type: ignore[arg-type]

        results = write_dataset(dataset, sink)

        assert catalog.namespaces == {"lab"}
        assert sorted(catalog.tables) == sorted(f"lab.{e}" for e in dataset.entities)
        assert catalog.tables["lab.customers"].rows == 10
        assert results[0].table_name == "lab.customers"
        assert results[0].snapshot_id is not None

    def test_commit_replaces_existing(self, dataset: Dataset) -> None:
        """An existing target table is replaced, not appended to."""
        catalog = FakeCatalog()
        sink = IcebergSink("lab", catalog=catalog)  # type: ignore[arg-type]
        write_dataset(dataset, sink)
        write_dataset(dataset, sink)

        assert catalog.tables["lab.customers"].rows == 10
        assert not any(name.endswith("__staging") for name in catalog.tables)

    def test_failure_drops_staging(self, dataset: Dataset) -> None:
        """A failed batch drops its staging tables and leaves targets alone."""
        catalog = FakeCatalog(fail_on="invoices")
        sink = IcebergSink("lab", catalog=catalog)  # type: ignore[arg-type]

        with pytest.raises(SinkWriteFailure) as exc_info:
            write_dataset(dataset, sink)

        assert exc_info.value.entity == "invoices"
        assert catalog.tables == {}

    def test_stale_staging_is_replaced(self, dataset: Dataset) -> None:
        """A staging table left by an interrupted batch is dropped first."""
        catalog = FakeCatalog()
        catalog.tables["lab.customers__staging"] = FakeTable(catalog, "lab.customers__staging")
        catalog.tables["lab.customers__staging"].rows = 999

        write_dataset(dataset, IcebergSink("lab", catalog=catalog))  # type: ignore[arg-type]

        assert catalog.tables["lab.customers"].rows == 10

    def test_failed_promotion_restores_previous_batch(self, dataset: Dataset) -> None:
        """A rename failing mid-commit puts every previous table back."""
        catalog = RenameFailingCatalog(fail_rename_to=None)
        write_dataset(dataset, IcebergSink("lab", catalog=catalog))  # type: ignore[arg-type]
        previous = dict(catalog.tables)

        catalog.fail_rename_to = "lab.users"
        with pytest.raises(SinkWriteFailure):
            write_dataset(dataset, IcebergSink("lab", catalog=catalog))  # type: ignore[arg-type]

        assert catalog.tables == previous
        assert all(table.identifier == name for name, table in catalog.tables.items())

    def test_failed_first_promotion_leaves_nothing(self, dataset: Dataset) -> None:
        """With no previous batch, a failed commit leaves no tables behind."""
        catalog = RenameFailingCatalog(fail_rename_to="lab.subscriptions")

        with pytest.raises(SinkWriteFailure):
            write_dataset(dataset, IcebergSink("lab", catalog=catalog))  # type: ignore[arg-type]

        assert catalog.tables == {}

    def test_stale_previous_is_dropped(self, dataset: Dataset) -> None:
        """A __previous table left by an interrupted commit is cleared."""
        catalog = FakeCatalog()
        catalog.tables["lab.customers__previous"] = FakeTable(catalog, "lab.customers__previous")

        write_dataset(dataset, IcebergSink("lab", catalog=catalog))  # type: ignore[arg-type]

        assert sorted(catalog.tables) == sorted(f"lab.{e}" for e in dataset.entities)

    def test_describe(self) -> None:
        """describe() names the namespace."""
        sink = IcebergSink("lab", catalog=FakeCatalog())  # type: ignore[arg-type]
        assert sink.describe() == "iceberg://lab"
        assert repr(sink) == "IcebergSink(iceberg://lab)"
