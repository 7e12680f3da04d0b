"""Generator configuration.

Row counts, windows and the random seed for a generation batch. Values come
from (highest priority first) explicit arguments, ``LABDATA_`` environment
variables, a ``.env`` file, and an optional YAML file.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from labdata_synthetic.errors import ConfigurationError

MAX_SEQUENCE_ID = 999_999


class GeneratorConfig(BaseSettings):
    """Configuration for a generation batch.

    Example:
        >>> config = GeneratorConfig(seed=7, customers=25)
        >>> config.usage_days
        90
    """

    model_config = SettingsConfigDict(
        env_prefix="LABDATA_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    seed: int = Field(default=42, description="Root seed for every stage sub-stream")
    customers: int = Field(default=500, ge=0, description="Number of customer accounts")
    customer_id_start: int = Field(
        default=1000,
        ge=0,
        description="First customer sequence number",
    )
    usage_days: int = Field(default=90, ge=1, le=3650, description="Daily usage window")
    usage_density: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Probability an active user has a usage row on a given day",
    )
    health_weeks: int = Field(default=12, ge=1, le=520, description="Weekly health snapshots")
    leads: int = Field(default=1000, ge=0, description="Number of sales leads")
    as_of: date = Field(
        default_factory=date.today,
        description="Reference 'today' for every relative date",
    )
    max_workers: int = Field(default=4, ge=1, le=32, description="Stage worker pool size")
    enforce_funnel_order: bool = Field(
        default=True,
        description="Clamp lead funnel dates into mql <= sql <= conversion order",
    )
    stages: tuple[str, ...] | None = Field(
        default=None,
        description="Generate only these stages (and their ancestors)",
    )

    @model_validator(mode="after")
    def validate_customer_ids(self) -> Self:
        """Validate that every customer id fits the six-digit format.

        Raises:
            ValueError: If the last customer number exceeds 999999.
        """
        last = self.customer_id_start + self.customers - 1
        if last > MAX_SEQUENCE_ID:
            raise ValueError(
                f"customer_id_start + customers exceeds {MAX_SEQUENCE_ID + 1}; "
                f"the last customer would be number {last}"
            )
        return self

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides: Any) -> GeneratorConfig:
        """Load configuration from a YAML file.

        Explicit ``overrides`` win over values in the file.

        Args:
            path: Path to a YAML mapping of configuration fields.
            **overrides: Field values that take precedence over the file.

        Returns:
            Validated GeneratorConfig.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError("Configuration file not found", file_path=str(path))

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Invalid YAML in configuration file",
                file_path=str(path),
                internal_details=str(e),
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                file_path=str(path),
            )

        data.update(overrides)
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} field error(s)",
                file_path=str(path),
                internal_details=str(e),
            ) from e
