"""Build sinks from ``--out`` URIs.

Supported forms:
- ``memory://``
- ``parquet://<dir>`` or a bare directory path
- ``csv://<dir>``
- ``iceberg://<namespace>`` (catalog settings from LABDATA_ICEBERG_*)
"""

from __future__ import annotations

from pathlib import Path

from labdata_synthetic.errors import ConfigurationError
from labdata_synthetic.loaders.base import Sink
from labdata_synthetic.loaders.files import CsvSink, ParquetSink
from labdata_synthetic.loaders.memory import MemorySink

SCHEMES = ("memory", "parquet", "csv", "iceberg")


def sink_from_uri(uri: str) -> Sink:
    """Create the sink addressed by ``uri``.

    Example:
        >>> sink_from_uri("csv://out/lab")
        CsvSink(csv://out/lab)

    Raises:
        ConfigurationError: On an unknown scheme or a missing location.
    """
    scheme, sep, location = uri.partition("://")
    if not sep:
        if not uri:
            raise ConfigurationError("Output location is empty")
        return ParquetSink(Path(uri))

    scheme = scheme.lower()
    if scheme == "memory":
        return MemorySink()
    if scheme not in SCHEMES:
        raise ConfigurationError(
            f"Unsupported output scheme '{scheme}'. Available: {', '.join(SCHEMES)}"
        )
    if not location:
        raise ConfigurationError(f"Output URI '{uri}' has no location")

    if scheme == "parquet":
        return ParquetSink(Path(location))
    if scheme == "csv":
        return CsvSink(Path(location))

    # Deferred: pulls in pyiceberg and its catalog clients
    from labdata_synthetic.loaders.iceberg import IcebergSink

    return IcebergSink(location.strip("/"))
