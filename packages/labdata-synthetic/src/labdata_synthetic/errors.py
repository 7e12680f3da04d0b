"""Exception hierarchy for labdata.

- LabDataError: Base exception for all generation errors
- InvalidCatalog: A weighted reference catalog is empty or degenerate
- DependencyMissing: A stage ran before (or without) its parent stages
- ConstraintViolation: A post-generation invariant check failed
- SinkWriteFailure: The target store rejected a batch
- GenerationCancelled: The batch was cancelled between stages
- ConfigurationError: Generator configuration could not be loaded

User-facing messages name the failing stage, the entity type and the
catalog or invariant involved. Technical details are logged via structlog
and never included in the message.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


def _context(stage: str | None, entity: str | None) -> str:
    parts: list[str] = []
    if stage:
        parts.append(f"stage '{stage}'")
    if entity:
        parts.append(f"entity '{entity}'")
    return f" ({', '.join(parts)})" if parts else ""


class LabDataError(Exception):
    """Base exception for labdata.

    Args:
        user_message: Safe message to display to the user.
        stage: Name of the generation stage that failed, if known.
        entity: Entity type being generated or written, if known.
        internal_details: Optional technical details, logged but never shown.

    Example:
        >>> raise LabDataError("Generation failed", stage="users", entity="users")
    """

    def __init__(
        self,
        user_message: str,
        *,
        stage: str | None = None,
        entity: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        full_message = f"{user_message}{_context(stage, entity)}"
        super().__init__(full_message)
        self.user_message = full_message
        self.stage = stage
        self.entity = entity

        if internal_details:
            logger.error(
                "labdata_error",
                error_type=self.__class__.__name__,
                user_message=full_message,
                internal_details=internal_details,
            )


class InvalidCatalog(LabDataError):
    """Raised when a weighted catalog cannot be sampled.

    Use this exception when a catalog is empty, carries a negative weight,
    or all of its weights are zero.

    Attributes:
        catalog: Name of the offending catalog.

    Example:
        >>> raise InvalidCatalog("firm_prefixes", reason="catalog is empty")
        # User sees: "Invalid catalog 'firm_prefixes': catalog is empty"
    """

    def __init__(
        self,
        catalog: str,
        *,
        reason: str,
        stage: str | None = None,
        entity: str | None = None,
    ) -> None:
        super().__init__(
            f"Invalid catalog '{catalog}': {reason}",
            stage=stage,
            entity=entity,
        )
        self.catalog = catalog
        self.reason = reason


class DependencyMissing(LabDataError):
    """Raised when a stage's parent output is not available.

    Use this exception when:
    - A stage declares a dependency that is not registered
    - A stage reads a parent stage that has not completed
    - The stage graph contains a cycle

    Attributes:
        missing: Names of the unavailable parent stages.
    """

    def __init__(
        self,
        stage: str,
        missing: list[str],
        *,
        reason: str = "parent stage output not available",
    ) -> None:
        super().__init__(
            f"Missing dependency {', '.join(missing)}: {reason}",
            stage=stage,
            entity=stage,
        )
        self.missing = missing


class ConstraintViolation(LabDataError):
    """Raised when generated rows break an invariant.

    Attributes:
        invariant: Name of the failed invariant.
        examples: A few offending row descriptions.

    Example:
        >>> raise ConstraintViolation(
        ...     "leads",
        ...     entity="leads",
        ...     invariant="funnel_dates_ordered",
        ...     examples=["LEAD-000004: sql_date before mql_date"],
        ... )
    """

    def __init__(
        self,
        stage: str,
        *,
        entity: str,
        invariant: str,
        examples: list[str] | None = None,
    ) -> None:
        examples = examples or []
        shown = "; ".join(examples[:3])
        message = f"Invariant '{invariant}' violated"
        if shown:
            message = f"{message}: {shown}"
        super().__init__(message, stage=stage, entity=entity)
        self.invariant = invariant
        self.examples = examples


class SinkWriteFailure(LabDataError):
    """Raised when a sink rejects a batch.

    The batch is rolled back before this error propagates.

    Attributes:
        sink: Description of the target sink.
    """

    def __init__(
        self,
        sink: str,
        *,
        entity: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to write batch to {sink}",
            stage="write",
            entity=entity,
            internal_details=internal_details,
        )
        self.sink = sink


class GenerationCancelled(LabDataError):
    """Raised when a cancellation token fires between stages."""

    def __init__(self, stage: str) -> None:
        super().__init__("Generation cancelled before stage started", stage=stage)


class ConfigurationError(LabDataError):
    """Raised when the generator configuration is invalid or unreadable.

    Attributes:
        file_path: Path to the configuration file, if any.
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        if file_path:
            user_message = f"{user_message} (in {file_path})"
        super().__init__(user_message, internal_details=internal_details)
        self.file_path = file_path
