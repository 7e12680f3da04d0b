"""Shared test fixtures for labdata-cli tests.

Provides CliRunner fixtures and a small generated Parquet dataset for
commands that read one.
"""

from __future__ import annotations

from collections.abc import Generator, Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from labdata_cli.main import cli

AS_OF = "2025-06-30"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def generated_dir(cli_runner: CliRunner, tmp_path: Path) -> Path:
    """Directory holding a 10-customer Parquet dataset as of 2025-06-30."""
    out = tmp_path / "lab-data"
    result = cli_runner.invoke(
        cli,
        [
            "generate",
            "--seed",
            "42",
            "--customers",
            "10",
            "--leads",
            "40",
            "--as-of",
            AS_OF,
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    return out


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Drop the stream bound by configure_logging inside CliRunner."""
    yield
    structlog.reset_defaults()
