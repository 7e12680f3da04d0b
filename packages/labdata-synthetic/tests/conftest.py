"""Shared fixtures for labdata-synthetic tests.

Provides a fixed reference date, small generator configurations and a
session-wide generated dataset so property tests do not regenerate data.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest
import structlog

from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.pipeline import Dataset, generate

AS_OF = date(2025, 6, 30)


def make_config(**overrides: Any) -> GeneratorConfig:
    """Small, fast configuration with a fixed as-of date."""
    values: dict[str, Any] = {
        "seed": 42,
        "customers": 10,
        "leads": 60,
        "usage_days": 14,
        "health_weeks": 4,
        "as_of": AS_OF,
    }
    values.update(overrides)
    return GeneratorConfig(**values)


@pytest.fixture
def config() -> GeneratorConfig:
    return make_config()


@pytest.fixture
def config_factory() -> Callable[..., GeneratorConfig]:
    """Build a small configuration with keyword overrides."""
    return make_config


@pytest.fixture(scope="session")
def dataset() -> Dataset:
    """Dataset for seed=42, 10 customers, generated once per session."""
    return generate(make_config())


@pytest.fixture(scope="session")
def larger_dataset() -> Dataset:
    """Dataset with enough rows for distribution-level assertions."""
    return generate(make_config(seed=7, customers=80, leads=400))


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo logging configuration done by a test."""
    yield
    structlog.reset_defaults()
