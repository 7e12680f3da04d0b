"""Stage contract, registry and per-stage random streams.

A stage is a plain function that turns its parents' rows into its own rows:

    (parents: StageResults, catalogs: ReferenceCatalogs, fake: Faker,
     config: GeneratorConfig) -> list[Model]

Stages are registered with their dependencies in a StageRegistry; the
pipeline schedules them in dependency order. Every stage draws from its own
Faker instance seeded from the root seed and the stage name, so the rows a
stage produces do not depend on which other stages ran or in what order.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from typing import TYPE_CHECKING, Any

import structlog
from faker import Faker
from pydantic import BaseModel

from labdata_synthetic.errors import ConfigurationError, DependencyMissing

if TYPE_CHECKING:
    from labdata_synthetic.catalogs import ReferenceCatalogs
    from labdata_synthetic.config import GeneratorConfig

logger = structlog.get_logger(__name__)

# (parents, catalogs, fake, config) -> rows
StageFunc = Callable[..., list[Any]]


def stage_seed(seed: int, stage: str) -> int:
    """Derive a stable 64-bit sub-seed for a stage.

    Example:
        >>> stage_seed(42, "users") == stage_seed(42, "users")
        True
    """
    digest = hashlib.sha256(f"{seed}:{stage}".encode()).digest()
    return int.from_bytes(digest[:8], "big")


def stage_faker(seed: int, stage: str) -> Faker:
    """Create the Faker instance owning a stage's random stream."""
    fake = Faker("en_US")
    # Use instance-level seeding for true reproducibility
    fake.seed_instance(stage_seed(seed, stage))
    return fake


def log_generation(entity: str, count: int) -> None:
    """Log generation activity.

    Args:
        entity: Name of the entity being generated
        count: Number of records generated
    """
    logger.info("data_generated", entity=entity, count=count)


class StageResults(Mapping[str, Sequence[BaseModel]]):
    """Read-only view of the parent outputs handed to a stage."""

    def __init__(self, results: Mapping[str, Sequence[BaseModel]] | None = None) -> None:
        self._results = dict(results or {})

    def require(self, name: str, *, stage: str) -> Sequence[BaseModel]:
        """Return a parent's rows.

        Args:
            name: Parent stage name
            stage: Name of the requesting stage (for error context)

        Raises:
            DependencyMissing: If the parent output is not available.
        """
        if name not in self._results:
            raise DependencyMissing(stage, [name])
        return self._results[name]

    def __getitem__(self, name: str) -> Sequence[BaseModel]:
        return self._results[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)


@dataclass(frozen=True)
class Stage:
    """A registered generation stage.

    Attributes:
        name: Stage name; also the entity and table name of its rows
        func: Stage function
        depends_on: Names of parent stages
        description: One-line description for listings
    """

    name: str
    func: StageFunc
    depends_on: tuple[str, ...] = ()
    description: str = ""

    def run(
        self,
        parents: StageResults,
        catalogs: ReferenceCatalogs,
        fake: Faker,
        config: GeneratorConfig,
    ) -> list[Any]:
        return self.func(parents, catalogs, fake, config)


class StageRegistry:
    """Named stages and their dependency graph.

    Example:
        >>> registry = StageRegistry()
        >>> @registry.register("customers")
        ... def customers(parents, catalogs, fake, config):
        ...     return []
        >>> registry.names
        ['customers']
    """

    def __init__(self, stages: Iterable[Stage] = ()) -> None:
        self._stages: dict[str, Stage] = {}
        for stage in stages:
            self.add(stage)

    def add(self, stage: Stage) -> None:
        if stage.name in self._stages:
            raise ValueError(f"Stage '{stage.name}' is already registered")
        self._stages[stage.name] = stage

    def register(
        self,
        name: str,
        *,
        depends_on: Sequence[str] = (),
        description: str | None = None,
    ) -> Callable[[StageFunc], StageFunc]:
        """Decorator registering a stage function."""

        def decorator(func: StageFunc) -> StageFunc:
            doc = (func.__doc__ or "").strip().splitlines()
            self.add(
                Stage(
                    name=name,
                    func=func,
                    depends_on=tuple(depends_on),
                    description=description or (doc[0] if doc else ""),
                )
            )
            return func

        return decorator

    @property
    def names(self) -> list[str]:
        return list(self._stages)

    def get(self, name: str) -> Stage:
        return self._stages[name]

    def __contains__(self, name: object) -> bool:
        return name in self._stages

    def __iter__(self) -> Iterator[Stage]:
        return iter(self._stages.values())

    def __len__(self) -> int:
        return len(self._stages)

    def graph(self) -> dict[str, set[str]]:
        """Stage name to the set of its parents."""
        return {name: set(stage.depends_on) for name, stage in self._stages.items()}

    def validate(self) -> None:
        """Check that every dependency is registered and the graph is acyclic.

        Raises:
            DependencyMissing: On an unregistered dependency or a cycle.
        """
        for stage in self._stages.values():
            missing = [dep for dep in stage.depends_on if dep not in self._stages]
            if missing:
                raise DependencyMissing(
                    stage.name,
                    missing,
                    reason="dependency is not a registered stage",
                )

        try:
            TopologicalSorter(self.graph()).prepare()
        except CycleError as e:
            cycle = list(e.args[1])
            raise DependencyMissing(
                cycle[0],
                cycle[1:],
                reason="stage graph contains a cycle",
            ) from e

    def topological_order(self) -> list[str]:
        """Stage names in a valid execution order."""
        self.validate()
        return list(TopologicalSorter(self.graph()).static_order())

    def ancestors(self, name: str) -> set[str]:
        """All transitive parents of a stage."""
        seen: set[str] = set()
        stack = list(self.get(name).depends_on)
        while stack:
            parent = stack.pop()
            if parent in seen:
                continue
            seen.add(parent)
            if parent in self._stages:
                stack.extend(self._stages[parent].depends_on)
        return seen

    def subset(self, names: Iterable[str]) -> StageRegistry:
        """Registry restricted to ``names`` plus their ancestors.

        Raises:
            ConfigurationError: If a requested stage is not registered.
        """
        requested = list(names)
        unknown = [name for name in requested if name not in self._stages]
        if unknown:
            raise ConfigurationError(
                f"Unknown stage(s): {', '.join(unknown)}. "
                f"Available: {', '.join(self._stages)}"
            )

        keep: set[str] = set(requested)
        for name in requested:
            keep |= self.ancestors(name)
        return StageRegistry(stage for stage in self._stages.values() if stage.name in keep)


# Stages shipped with labdata register themselves here on import of
# labdata_synthetic.generators.
STAGES = StageRegistry()
