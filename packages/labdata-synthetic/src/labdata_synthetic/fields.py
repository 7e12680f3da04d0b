"""Declarative field-spec tables.

An entity is described as an ordered mapping of column name to rule. Rules
are small callables evaluated against a RowContext; later rules can read the
values earlier rules produced, which is how derived columns stay consistent
with the values actually drawn for the same row.

Example:
    >>> spec = EntitySpec(
    ...     "tickets",
    ...     SupportTicket,
    ...     {
    ...         "ticket_id": SequenceId("TKT"),
    ...         "created_date": HoursFrom("now", 1, 8760, sign=-1),
    ...         ("category", "subcategory"): Pick(TICKET_CATEGORIES),
    ...         "ticket_summary": Template("Customer inquiry regarding {subcategory}"),
    ...     },
    ... )

Keys starting with ``_`` are scratch values: they can be referenced by later
rules but are dropped before the row is validated. Tuple keys unpack a tuple
value into several columns.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Generic, TypeVar

from faker import Faker
from pydantic import BaseModel, ValidationError

from labdata_synthetic.distributions.temporal import as_date, as_datetime, reference_datetime
from labdata_synthetic.distributions.weighted import WeightedDistribution
from labdata_synthetic.errors import ConstraintViolation

M = TypeVar("M", bound=BaseModel)

FieldKey = str | tuple[str, ...]


class RowContext:
    """State visible to rules while one row is rendered.

    Attributes:
        fake: Faker instance owning the stage's random stream
        as_of: Reference date ("today")
        now: Reference timestamp (midnight of ``as_of``)
        parent: Parent entity the row belongs to, if any
        index: Zero-based row index within the stage
        extras: Stage-supplied values (e.g. a precomputed date)
        row: Values rendered so far for the current row
    """

    def __init__(
        self,
        fake: Faker,
        *,
        as_of: date,
        now: datetime | None = None,
        parent: Any = None,
        index: int = 0,
        extras: Mapping[str, Any] | None = None,
    ) -> None:
        self.fake = fake
        self.as_of = as_of
        self.now = now or reference_datetime(as_of)
        self.parent = parent
        self.index = index
        self.extras = dict(extras or {})
        self.row: dict[str, Any] = {}

    @property
    def rng(self) -> Any:
        """Random stream shared with the Faker instance."""
        return self.fake.random

    def at(
        self,
        index: int,
        *,
        parent: Any = None,
        extras: Mapping[str, Any] | None = None,
    ) -> RowContext:
        """Return a fresh context for another row on the same random stream."""
        return RowContext(
            self.fake,
            as_of=self.as_of,
            now=self.now,
            parent=parent,
            index=index,
            extras=extras,
        )

    def resolve(self, ref: Any) -> Any:
        """Resolve a reference to a value.

        Strings name ``as_of``, ``now``, ``parent.<attr>``, ``extra.<key>``
        or a column already rendered in this row. Anything else is returned
        unchanged, so rule arguments can be literals or references.
        """
        if not isinstance(ref, str):
            return ref
        if ref == "as_of":
            return self.as_of
        if ref == "now":
            return self.now
        if ref.startswith("parent."):
            attr = ref.removeprefix("parent.")
            if isinstance(self.parent, Mapping):
                return self.parent[attr]
            return getattr(self.parent, attr)
        if ref.startswith("extra."):
            return self.extras[ref.removeprefix("extra.")]
        if ref not in self.row:
            raise KeyError(f"Field '{ref}' referenced before it was rendered")
        return self.row[ref]


Rule = Callable[[RowContext], Any]


@dataclass(frozen=True)
class Const:
    value: Any

    def __call__(self, ctx: RowContext) -> Any:
        return self.value


@dataclass(frozen=True)
class Ref:
    """Copy a referenced value (parent attribute, extra, or earlier column)."""

    ref: str

    def __call__(self, ctx: RowContext) -> Any:
        return ctx.resolve(self.ref)


@dataclass(frozen=True)
class Pick:
    """Draw one value from a weighted catalog."""

    catalog: WeightedDistribution[Any]

    def __call__(self, ctx: RowContext) -> Any:
        return self.catalog.sample_one(ctx.rng)


@dataclass(frozen=True)
class PickBy:
    """Draw from the catalog selected by a referenced key.

    Keys without a catalog yield ``default``.
    """

    key: str
    catalogs: Mapping[Hashable, WeightedDistribution[Any]]
    default: Any = None

    def __call__(self, ctx: RowContext) -> Any:
        catalog = self.catalogs.get(ctx.resolve(self.key))
        if catalog is None:
            return self.default
        return catalog.sample_one(ctx.rng)


@dataclass(frozen=True)
class Lookup:
    """Map a referenced key through a static table."""

    key: str
    table: Mapping[Hashable, Any]
    default: Any = None

    def __call__(self, ctx: RowContext) -> Any:
        return self.table.get(ctx.resolve(self.key), self.default)


@dataclass(frozen=True)
class IntRange:
    """Uniform integer in ``[low, high]``; bounds may be references.

    ``cap`` limits the drawn value (e.g. opens never exceed sends).
    """

    low: int | str
    high: int | str
    cap: int | str | None = None

    def __call__(self, ctx: RowContext) -> int:
        value = ctx.rng.randint(ctx.resolve(self.low), ctx.resolve(self.high))
        if self.cap is not None:
            value = min(value, ctx.resolve(self.cap))
        return value


@dataclass(frozen=True)
class FloatRange:
    low: float
    high: float
    digits: int = 2

    def __call__(self, ctx: RowContext) -> float:
        return round(ctx.rng.uniform(self.low, self.high), self.digits)


@dataclass(frozen=True)
class Chance:
    """True with the given probability."""

    probability: float

    def __call__(self, ctx: RowContext) -> bool:
        return ctx.rng.random() < self.probability


@dataclass(frozen=True)
class Maybe:
    """Evaluate ``rule`` with the given probability, else None."""

    probability: float
    rule: Rule

    def __call__(self, ctx: RowContext) -> Any:
        if ctx.rng.random() < self.probability:
            return self.rule(ctx)
        return None


def _clamp(value: Any, floor: Any, cap: Any) -> Any:
    convert = as_datetime if isinstance(value, datetime) else as_date
    if floor is not None:
        value = max(value, convert(floor))
    if cap is not None:
        value = min(value, convert(cap))
    return value


@dataclass(frozen=True)
class DaysFrom:
    """Offset an anchor date by a uniform number of days.

    ``sign=-1`` looks back from the anchor. The result keeps the anchor's
    type (date or datetime) and is clamped into ``[floor, cap]``.
    """

    anchor: str
    low: int
    high: int
    sign: int = 1
    floor: str | None = None
    cap: str | None = None

    def __call__(self, ctx: RowContext) -> date | datetime:
        anchor = ctx.resolve(self.anchor)
        value = anchor + timedelta(days=self.sign * ctx.rng.randint(self.low, self.high))
        return _clamp(value, ctx.resolve(self.floor), ctx.resolve(self.cap))


@dataclass(frozen=True)
class HoursFrom:
    """Offset an anchor by a uniform number of hours; always a datetime."""

    anchor: str
    low: int
    high: int
    sign: int = 1
    floor: str | None = None
    cap: str | None = None

    def __call__(self, ctx: RowContext) -> datetime:
        anchor = as_datetime(ctx.resolve(self.anchor))
        value = anchor + timedelta(hours=self.sign * ctx.rng.randint(self.low, self.high))
        return _clamp(value, ctx.resolve(self.floor), ctx.resolve(self.cap))


@dataclass(frozen=True)
class Derived:
    """Compute a value from the context (typically from ``ctx.row``)."""

    func: Callable[[RowContext], Any]

    def __call__(self, ctx: RowContext) -> Any:
        return self.func(ctx)


@dataclass(frozen=True)
class Equals:
    """Predicate: the referenced value is one of ``values``."""

    ref: str
    values: tuple[Any, ...]

    def __call__(self, ctx: RowContext) -> bool:
        return ctx.resolve(self.ref) in self.values


@dataclass(frozen=True)
class When:
    """Conditional rule; ``otherwise`` defaults to null."""

    predicate: Callable[[RowContext], bool]
    then: Rule
    otherwise: Rule = Const(None)

    def __call__(self, ctx: RowContext) -> Any:
        if self.predicate(ctx):
            return self.then(ctx)
        return self.otherwise(ctx)


@dataclass(frozen=True)
class SequenceId:
    """Formatted identifier ``PREFIX-000123`` from the row index."""

    prefix: str
    start: int = 1
    width: int = 6

    def __call__(self, ctx: RowContext) -> str:
        return format_id(self.prefix, self.start + ctx.index, self.width)


@dataclass(frozen=True)
class Template:
    """``str.format`` over the row rendered so far."""

    pattern: str

    def __call__(self, ctx: RowContext) -> str:
        return self.pattern.format(**ctx.row)


@dataclass(frozen=True)
class Phone:
    """US phone number ``(AAA) EEE-NNNN``."""

    def __call__(self, ctx: RowContext) -> str:
        rng = ctx.rng
        return f"({rng.randint(200, 999)}) {rng.randint(200, 999)}-{rng.randint(1000, 9999)}"


def format_id(prefix: str, number: int, width: int = 6) -> str:
    return f"{prefix}-{number:0{width}d}"


def money(value: Decimal | float | int) -> Decimal:
    """Quantize to cents."""
    return Decimal(str(value)).quantize(Decimal("0.01"))


class EntitySpec(Generic[M]):
    """Ordered field rules for one entity type, validated by a pydantic model.

    Args:
        name: Entity (and stage) name used in error context
        model: Frozen pydantic model for the rows
        fields: Ordered mapping of column name (or tuple of names) to rule
        finalize: Optional hook applied to the rendered row before validation
    """

    def __init__(
        self,
        name: str,
        model: type[M],
        fields: Mapping[FieldKey, Rule],
        *,
        finalize: Callable[[dict[str, Any], RowContext], dict[str, Any]] | None = None,
    ) -> None:
        self.name = name
        self.model = model
        self.fields = dict(fields)
        self.finalize = finalize

    def render(self, ctx: RowContext) -> M:
        """Render and validate one row.

        Raises:
            ConstraintViolation: If the rendered row fails model validation.
        """
        ctx.row = {}
        for key, rule in self.fields.items():
            value = rule(ctx)
            if isinstance(key, tuple):
                ctx.row.update(zip(key, value, strict=True))
            else:
                ctx.row[key] = value

        row = {k: v for k, v in ctx.row.items() if not k.startswith("_")}
        if self.finalize is not None:
            row = self.finalize(row, ctx)

        try:
            return self.model(**row)
        except ValidationError as e:
            examples = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConstraintViolation(
                self.name,
                entity=self.name,
                invariant="row_schema",
                examples=examples,
            ) from e

    @property
    def columns(self) -> list[str]:
        names: list[str] = []
        for key in self.fields:
            names.extend(key if isinstance(key, tuple) else (key,))
        return [name for name in names if not name.startswith("_")]
