"""Iceberg sink for generated batches.

This module provides the IcebergSink for persisting a dataset to Apache
Iceberg tables via PyIceberg, one table per entity in a namespace.

Features:
- Each entity is first written to a ``<entity>__staging`` table
- On commit, existing targets move aside to ``<entity>__previous`` and
  staging tables are renamed in; any failure restores the previous tables
- On rollback, staging tables are dropped and targets are untouched
- Catalog configuration via environment or explicit parameters
"""

from __future__ import annotations

import os
from typing import Any

import pyarrow as pa
import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pyiceberg.catalog import Catalog, load_catalog

from labdata_synthetic.errors import SinkWriteFailure
from labdata_synthetic.loaders.base import LoadResult, Sink

logger = structlog.get_logger(__name__)

STAGING_SUFFIX = "__staging"
PREVIOUS_SUFFIX = "__previous"


class IcebergSinkConfig(BaseSettings):
    """Configuration for IcebergSink.

    Can be loaded from environment variables with LABDATA_ICEBERG_ prefix.

    Example:
        >>> # From environment
        >>> config = IcebergSinkConfig()
        >>>
        >>> # Explicit
        >>> config = IcebergSinkConfig(
        ...     catalog_uri="http://polaris:8181/api/catalog",
        ...     warehouse="warehouse",
        ... )
    """

    model_config = SettingsConfigDict(
        env_prefix="LABDATA_ICEBERG_",
        env_file=".env",
        extra="ignore",
    )

    catalog_name: str = Field(
        default="polaris",
        description="Name of the catalog",
    )
    catalog_uri: str = Field(
        default="http://localhost:8181/api/catalog",
        description="URI of the REST catalog",
    )
    warehouse: str = Field(
        default="warehouse",
        description="Warehouse name",
    )
    credential: str | None = Field(
        default=None,
        description="OAuth credential (client_id:client_secret)",
    )
    s3_endpoint: str | None = Field(
        default=None,
        description="S3 endpoint override for LocalStack",
    )
    s3_region: str = Field(
        default="us-east-1",
        description="S3 region",
    )


class IcebergSink(Sink):
    """Write a batch into Iceberg tables ``<namespace>.<entity>``.

    Example:
        >>> sink = IcebergSink("lab", config=IcebergSinkConfig())
        >>> results = write_dataset(dataset, sink)
        >>> results[0].snapshot_id
        4358109269173036811
    """

    def __init__(
        self,
        namespace: str,
        *,
        config: IcebergSinkConfig | None = None,
        catalog: Catalog | None = None,
    ) -> None:
        """Initialize the Iceberg sink.

        Args:
            namespace: Target namespace (created if missing)
            config: Catalog configuration (defaults from environment)
            catalog: Pre-built catalog; skips connecting from ``config``
        """
        self.namespace = namespace
        self._config = config or IcebergSinkConfig()
        self._catalog = catalog
        self._staged: dict[str, str] = {}
        self._log = logger.bind(
            catalog=self._config.catalog_name,
            namespace=namespace,
        )

    @property
    def catalog(self) -> Catalog:
        """Lazily load and cache the catalog connection."""
        if self._catalog is None:
            self._catalog = self._create_catalog()
        return self._catalog

    def _create_catalog(self) -> Catalog:
        catalog_props: dict[str, Any] = {
            "uri": self._config.catalog_uri,
            "warehouse": self._config.warehouse,
        }

        # Add OAuth credential if provided
        if self._config.credential:
            catalog_props["credential"] = self._config.credential
        else:
            # Try environment variables
            client_id = os.environ.get("POLARIS_CLIENT_ID")
            client_secret = os.environ.get("POLARIS_CLIENT_SECRET")
            if client_id and client_secret:
                catalog_props["credential"] = f"{client_id}:{client_secret}"

        if self._config.s3_endpoint:
            catalog_props["s3.endpoint"] = self._config.s3_endpoint
            catalog_props["s3.path-style-access"] = "true"

        catalog_props["s3.region"] = self._config.s3_region

        self._log.info("catalog_connecting", uri=self._config.catalog_uri)
        return load_catalog(self._config.catalog_name, **catalog_props)

    def describe(self) -> str:
        return f"iceberg://{self.namespace}"

    def identifier(self, entity: str) -> str:
        return f"{self.namespace}.{entity}"

    def begin(self) -> None:
        self._staged = {}
        self.catalog.create_namespace_if_not_exists(self.namespace)

    def write(self, entity: str, table: pa.Table) -> LoadResult:
        staging = self.identifier(f"{entity}{STAGING_SUFFIX}")
        if self.catalog.table_exists(staging):
            # Left over from an interrupted batch
            self.catalog.drop_table(staging)

        iceberg_table = self.catalog.create_table(staging, schema=table.schema)
        self._staged[entity] = staging
        iceberg_table.append(table)

        snapshot = iceberg_table.current_snapshot()
        snapshot_id = snapshot.snapshot_id if snapshot else None
        self._log.debug("entity_staged", table=staging, rows=table.num_rows)

        return LoadResult(
            table_name=self.identifier(entity),
            rows_loaded=table.num_rows,
            snapshot_id=snapshot_id,
            operation="overwrite",
        )

    def commit(self) -> None:
        """Swap every staged table in, or none of them.

        Existing targets are first renamed to ``<entity>__previous``; staging
        tables are then renamed onto the targets. If any rename fails the
        previous tables are restored before the error propagates. Previous
        tables are dropped only once every entity has been promoted.
        """
        moved: list[tuple[str, str]] = []
        promoted: list[str] = []
        try:
            for entity in self._staged:
                target = self.identifier(entity)
                previous = self.identifier(f"{entity}{PREVIOUS_SUFFIX}")
                if self.catalog.table_exists(previous):
                    # Left over from an interrupted commit
                    self.catalog.drop_table(previous)
                if self.catalog.table_exists(target):
                    self.catalog.rename_table(target, previous)
                    moved.append((target, previous))

            for entity, staging in list(self._staged.items()):
                target = self.identifier(entity)
                self.catalog.rename_table(staging, target)
                promoted.append(target)
                del self._staged[entity]
        except Exception:
            self._restore(promoted, moved)
            raise

        for _, previous in moved:
            try:
                self.catalog.drop_table(previous)
            except Exception as e:
                # Left for the next commit to drop
                self._log.warning("previous_drop_failed", table=previous, error=str(e))
        for target in promoted:
            self._log.info("table_replaced", table=target)
        self._staged = {}

    def _restore(self, promoted: list[str], moved: list[tuple[str, str]]) -> None:
        failed: list[str] = []
        for target in promoted:
            try:
                self.catalog.drop_table(target)
            except Exception as e:
                failed.append(target)
                self._log.error("promoted_drop_failed", table=target, error=str(e))
        for target, previous in moved:
            try:
                self.catalog.rename_table(previous, target)
            except Exception as e:
                failed.append(target)
                self._log.error("previous_restore_failed", table=target, error=str(e))
        if failed:
            raise SinkWriteFailure(
                self.describe(),
                internal_details=f"could not restore tables: {', '.join(failed)}",
            )
        self._log.warning("commit_reverted", restored=[target for target, _ in moved])

    def rollback(self) -> None:
        failed: list[str] = []
        for staging in self._staged.values():
            try:
                self.catalog.drop_table(staging)
            except Exception as e:
                failed.append(staging)
                self._log.error("staging_drop_failed", table=staging, error=str(e))
        self._staged = {}
        if failed:
            raise SinkWriteFailure(
                self.describe(),
                internal_details=f"could not drop staging tables: {', '.join(failed)}",
            )
