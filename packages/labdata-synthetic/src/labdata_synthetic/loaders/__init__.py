"""Sinks for generated batches.

This module provides:
- BatchWriter / write_dataset: all-or-nothing batch protocol
- MemorySink: in-memory tables
- ParquetSink / CsvSink: one file per entity, atomic directory swap
- IcebergSink: one Iceberg table per entity via PyIceberg
- sink_from_uri: build a sink from an ``--out`` URI
"""

from __future__ import annotations

from labdata_synthetic.loaders.base import BatchWriter, LoadResult, Sink, write_dataset
from labdata_synthetic.loaders.factory import sink_from_uri
from labdata_synthetic.loaders.files import CsvSink, ParquetSink, read_parquet_dir
from labdata_synthetic.loaders.memory import MemorySink

__all__ = [
    "BatchWriter",
    "CsvSink",
    "LoadResult",
    "MemorySink",
    "ParquetSink",
    "Sink",
    "read_parquet_dir",
    "sink_from_uri",
    "write_dataset",
]
