"""Generation pipeline: DAG scheduling of stages over a bounded worker pool.

The pipeline walks the stage graph with a topological scheduler. A stage is
submitted as soon as all of its parents have produced output, so
independent stages (e.g. leads and customers) run concurrently. The
cancellation token is checked before each submission and before the
dataset is assembled; a running stage is never interrupted.

Example:
    >>> config = GeneratorConfig(seed=42, customers=10)
    >>> dataset = GenerationPipeline(config).run()
    >>> dataset.row_counts()["customers"]
    10
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator, Mapping, Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import date
from graphlib import TopologicalSorter
from typing import Any

import pyarrow as pa
import structlog
from pydantic import BaseModel

from labdata_synthetic.catalogs import ReferenceCatalogs
from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.errors import GenerationCancelled, InvalidCatalog
from labdata_synthetic.generators import STAGES, StageRegistry, StageResults, stage_faker
from labdata_synthetic.invariants import check_stage
from labdata_synthetic.schemas import ENTITY_MODELS, to_arrow_table

logger = structlog.get_logger(__name__)


class CancellationToken:
    """Cooperative cancellation flag shared with the pipeline.

    Safe to cancel from another thread or a signal handler.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise GenerationCancelled if the token has fired.

        Args:
            stage: Stage about to start (for error context).
        """
        if self._event.is_set():
            raise GenerationCancelled(stage)


@dataclass(frozen=True)
class Dataset:
    """Generated rows per entity, in stage-declaration order.

    Attributes:
        tables: Entity name to its ordered rows
        seed: Root seed the batch was generated with
        as_of: Reference date of the batch
    """

    tables: Mapping[str, Sequence[BaseModel]]
    seed: int
    as_of: date
    durations_ms: Mapping[str, float] = field(default_factory=dict, compare=False)

    def __getitem__(self, entity: str) -> Sequence[BaseModel]:
        return self.tables[entity]

    def __contains__(self, entity: object) -> bool:
        return entity in self.tables

    def __iter__(self) -> Iterator[str]:
        return iter(self.tables)

    @property
    def entities(self) -> list[str]:
        return list(self.tables)

    def row_counts(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self.tables.items()}

    def to_arrow(self, entity: str) -> pa.Table:
        """Arrow table for one entity, typed from its row model."""
        rows = self.tables[entity]
        model = ENTITY_MODELS.get(entity)
        if model is None:
            if not rows:
                return pa.table({})
            model = type(rows[0])
        return to_arrow_table(model, rows)

    def to_arrow_tables(self) -> dict[str, pa.Table]:
        return {name: self.to_arrow(name) for name in self.tables}


class GenerationPipeline:
    """Runs registered stages in dependency order.

    Args:
        config: Generator configuration (seed, row counts, worker pool size).
        registry: Stages to run. Defaults to the built-in stages.
        catalogs: Reference catalogs. Defaults to the built-in catalogs.
        cancellation: Token checked between stages.

    Raises:
        ConfigurationError: If ``config.stages`` names an unknown stage.
        DependencyMissing: If the stage graph is incomplete or cyclic.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        registry: StageRegistry | None = None,
        catalogs: ReferenceCatalogs | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self.config = config
        self.catalogs = catalogs or ReferenceCatalogs()
        self.cancellation = cancellation or CancellationToken()

        registry = registry if registry is not None else STAGES
        if config.stages:
            registry = registry.subset(config.stages)
        registry.validate()
        self.registry = registry

        self._log = logger.bind(seed=config.seed, as_of=config.as_of.isoformat())

    def run(self) -> Dataset:
        """Generate every stage and assemble the dataset.

        Returns:
            Dataset with one row sequence per stage.

        Raises:
            GenerationCancelled: If the token fired before a stage started.
            LabDataError: The first error raised by a stage or its checks.
        """
        started = time.perf_counter()
        self._log.info(
            "generation_started",
            stages=len(self.registry),
            max_workers=self.config.max_workers,
        )

        results: dict[str, list[Any]] = {}
        durations: dict[str, float] = {}
        sorter = TopologicalSorter(self.registry.graph())
        sorter.prepare()

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="labdata-stage",
        ) as executor:
            futures: dict[Future[tuple[list[Any], float]], str] = {}
            try:
                while sorter.is_active():
                    for name in sorted(sorter.get_ready()):
                        self.cancellation.raise_if_cancelled(name)
                        parents = StageResults(
                            {dep: results[dep] for dep in self.registry.get(name).depends_on}
                        )
                        futures[executor.submit(self._run_stage, name, parents)] = name

                    done, _ = wait(futures, return_when=FIRST_COMPLETED)
                    for future in done:
                        name = futures.pop(future)
                        rows, duration_ms = future.result()
                        results[name] = rows
                        durations[name] = duration_ms
                        sorter.done(name)
            except BaseException:
                for pending in futures:
                    pending.cancel()
                self._log.warning(
                    "generation_aborted",
                    completed=sorted(results),
                    running=sorted(futures.values()),
                )
                raise

        self.cancellation.raise_if_cancelled("assemble")

        # Declaration order, not completion order
        tables = {name: results[name] for name in self.registry.names}
        dataset = Dataset(
            tables=tables,
            seed=self.config.seed,
            as_of=self.config.as_of,
            durations_ms=durations,
        )
        self._log.info(
            "generation_completed",
            rows=sum(dataset.row_counts().values()),
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return dataset

    def _run_stage(self, name: str, parents: StageResults) -> tuple[list[Any], float]:
        stage = self.registry.get(name)
        log = self._log.bind(stage=name)
        log.debug("stage_started", parents=list(parents))
        started = time.perf_counter()

        fake = stage_faker(self.config.seed, name)
        try:
            rows = stage.run(parents, self.catalogs, fake, self.config)
        except InvalidCatalog as e:
            if e.stage is not None:
                raise
            raise InvalidCatalog(e.catalog, reason=e.reason, stage=name, entity=name) from e
        check_stage(name, rows, parents, self.config)

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        log.info("stage_completed", rows=len(rows), duration_ms=duration_ms)
        return rows, duration_ms


def generate(
    config: GeneratorConfig | None = None,
    *,
    registry: StageRegistry | None = None,
    catalogs: ReferenceCatalogs | None = None,
    cancellation: CancellationToken | None = None,
) -> Dataset:
    """Generate a dataset with the built-in stages.

    Example:
        >>> dataset = generate(GeneratorConfig(seed=7, customers=5, leads=20))
        >>> sorted(dataset.row_counts())[:3]
        ['customers', 'feature_adoption', 'health_scores']
    """
    pipeline = GenerationPipeline(
        config or GeneratorConfig(),
        registry=registry,
        catalogs=catalogs,
        cancellation=cancellation,
    )
    return pipeline.run()
