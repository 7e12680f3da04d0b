"""Unit tests for GeneratorConfig."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.errors import ConfigurationError

pytestmark = pytest.mark.unit


class TestGeneratorConfig:
    """Tests for defaults, validation and sources."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Config has sensible defaults."""
        monkeypatch.delenv("LABDATA_CUSTOMERS", raising=False)
        config = GeneratorConfig()

        assert config.seed == 42
        assert config.customers == 500
        assert config.customer_id_start == 1000
        assert config.usage_days == 90
        assert config.health_weeks == 12
        assert config.leads == 1000
        assert config.max_workers == 4
        assert config.enforce_funnel_order is True
        assert config.stages is None
        assert config.as_of == date.today()

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """LABDATA_ environment variables override defaults."""
        monkeypatch.setenv("LABDATA_CUSTOMERS", "25")
        monkeypatch.setenv("LABDATA_AS_OF", "2025-01-31")

        config = GeneratorConfig()

        assert config.customers == 25
        assert config.as_of == date(2025, 1, 31)

    def test_explicit_beats_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Explicit arguments win over the environment."""
        monkeypatch.setenv("LABDATA_SEED", "7")
        assert GeneratorConfig(seed=9).seed == 9

    def test_rejects_negative_counts(self) -> None:
        """Row counts cannot be negative."""
        with pytest.raises(ValidationError):
            GeneratorConfig(customers=-1)

    def test_rejects_bad_density(self) -> None:
        """Usage density is a probability."""
        with pytest.raises(ValidationError):
            GeneratorConfig(usage_density=1.5)

    def test_customer_ids_fit_six_digits(self) -> None:
        """The last customer number may be 999999 but not beyond."""
        config = GeneratorConfig(customer_id_start=999_995, customers=5)
        assert config.customer_id_start == 999_995

        with pytest.raises(ValidationError, match="customer_id_start"):
            GeneratorConfig(customer_id_start=999_998, customers=5)

    def test_frozen(self) -> None:
        """Config is immutable once built."""
        config = GeneratorConfig(seed=1)
        with pytest.raises(ValidationError):
            config.seed = 2  # type: ignore[misc]


class TestFromYaml:
    """Tests for YAML loading."""

    def test_load(self, tmp_path: Path) -> None:
        """Values come from the file."""
        path = tmp_path / "lab.yaml"
        path.write_text("seed: 11\ncustomers: 30\nas_of: 2025-03-01\nstages: [usage]\n")

        config = GeneratorConfig.from_yaml(path)

        assert config.seed == 11
        assert config.customers == 30
        assert config.as_of == date(2025, 3, 1)
        assert config.stages == ("usage",)

    def test_overrides_win(self, tmp_path: Path) -> None:
        """Explicit overrides take precedence over the file."""
        path = tmp_path / "lab.yaml"
        path.write_text("seed: 11\ncustomers: 30\n")

        config = GeneratorConfig.from_yaml(path, customers=5)

        assert config.seed == 11
        assert config.customers == 5

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert GeneratorConfig.from_yaml(path, seed=3).seed == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigurationError naming the path."""
        with pytest.raises(ConfigurationError, match="not found") as exc_info:
            GeneratorConfig.from_yaml(tmp_path / "missing.yaml")
        assert exc_info.value.file_path == str(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Malformed YAML raises ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("seed: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            GeneratorConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        """Top-level YAML must be a mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            GeneratorConfig.from_yaml(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Field errors are reported as ConfigurationError."""
        path = tmp_path / "lab.yaml"
        path.write_text("customers: -4\n")
        with pytest.raises(ConfigurationError, match="field error"):
            GeneratorConfig.from_yaml(path)
