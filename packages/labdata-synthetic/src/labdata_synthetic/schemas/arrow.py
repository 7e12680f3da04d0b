"""Arrow schemas for the entity models.

Each pydantic model maps to one Arrow schema so every sink writes the same
column types: identifiers and labels as strings, money as decimal(12, 2),
calendar days as date32 and timestamps as microsecond timestamps.
"""

from __future__ import annotations

import types
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Union, get_args, get_origin

import pyarrow as pa
from pydantic import BaseModel

MONEY_TYPE = pa.decimal128(12, 2)

_SCALAR_TYPES: dict[Any, pa.DataType] = {
    str: pa.string(),
    int: pa.int64(),
    bool: pa.bool_(),
    Decimal: MONEY_TYPE,
    datetime: pa.timestamp("us"),
    date: pa.date32(),
}


def _arrow_type(annotation: Any) -> tuple[pa.DataType, bool]:
    """Map a field annotation to (arrow type, nullable)."""
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        arrow_type, _ = _arrow_type(args[0])
        return arrow_type, True
    if origin is Literal:
        return pa.string(), False
    if annotation in _SCALAR_TYPES:
        return _SCALAR_TYPES[annotation], False
    raise TypeError(f"No Arrow type for annotation {annotation!r}")


def arrow_schema(model: type[BaseModel]) -> pa.Schema:
    """Build the Arrow schema for a model, in field declaration order."""
    fields = []
    for name, info in model.model_fields.items():
        arrow_type, nullable = _arrow_type(info.annotation)
        fields.append(pa.field(name, arrow_type, nullable=nullable))
    return pa.schema(fields)


def to_arrow_table(model: type[BaseModel], rows: Sequence[BaseModel]) -> pa.Table:
    """Convert validated rows to an Arrow table with the model's schema.

    Args:
        model: Row model class
        rows: Rows of that model

    Returns:
        PyArrow Table (empty but typed when ``rows`` is empty)
    """
    return pa.Table.from_pylist([row.model_dump() for row in rows], schema=arrow_schema(model))
