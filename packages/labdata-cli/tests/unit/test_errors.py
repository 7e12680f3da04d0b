"""Unit tests for labdata_cli.errors module."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from labdata_cli.errors import (
    EXIT_CANCELLED,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    exit_code_for,
    format_pydantic_error,
    handle_labdata_error,
    handle_validation_error,
)
from labdata_synthetic.errors import (
    ConfigurationError,
    ConstraintViolation,
    DependencyMissing,
    GenerationCancelled,
    InvalidCatalog,
    SinkWriteFailure,
)

pytestmark = pytest.mark.unit


class TestCLIError:
    """Tests for CLIError exception."""

    def test_cli_error_message(self) -> None:
        """Test CLIError stores message correctly."""
        error = CLIError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_cli_error_default_exit_code(self) -> None:
        """Test CLIError has default exit code of 1."""
        error = CLIError("Test error")
        assert error.exit_code == EXIT_USER_ERROR

    def test_cli_error_custom_exit_code(self) -> None:
        """Test CLIError accepts custom exit code."""
        error = CLIError("Test error", exit_code=EXIT_SYSTEM_ERROR)
        assert error.exit_code == EXIT_SYSTEM_ERROR


class TestFormatPydanticError:
    """Tests for format_pydantic_error function."""

    def test_format_single_error(self) -> None:
        """Test formatting a single validation error."""

        class Settings(BaseModel):
            customers: int = Field(ge=0)

        with pytest.raises(PydanticValidationError) as exc_info:
            Settings(customers=-1)

        formatted = format_pydantic_error(exc_info.value)
        assert formatted.startswith("Validation failed:")
        assert "  - customers: Input should be greater than or equal to 0" in formatted

    def test_format_model_level_error(self) -> None:
        """Errors without a field location print the message alone."""

        class Window(BaseModel):
            start: int
            end: int

            @model_validator(mode="after")
            def check_order(self) -> Window:
                if self.end < self.start:
                    raise ValueError("end is before start")
                return self

        with pytest.raises(PydanticValidationError) as exc_info:
            Window(start=5, end=1)

        formatted = format_pydantic_error(exc_info.value)
        assert "  - Value error, end is before start" in formatted

    def test_format_nested_location(self) -> None:
        """Nested locations are joined with dots."""

        class Inner(BaseModel):
            value: int

        class Outer(BaseModel):
            inner: Inner

        with pytest.raises(PydanticValidationError) as exc_info:
            Outer(inner={"value": "x"})  # type: ignore[arg-type]

        assert "inner.value" in format_pydantic_error(exc_info.value)

    def test_handle_validation_error(self) -> None:
        """Validation errors become user errors naming their source."""

        class Settings(BaseModel):
            seed: int

        with pytest.raises(PydanticValidationError) as exc_info:
            Settings(seed="abc")  # type: ignore[arg-type]

        with pytest.raises(CLIError) as cli_exc:
            handle_validation_error(exc_info.value, "lab.yaml")

        assert cli_exc.value.exit_code == EXIT_USER_ERROR
        assert "Invalid configuration from lab.yaml" in cli_exc.value.message


class TestExitCodes:
    """Tests for mapping labdata errors to exit codes."""

    @pytest.mark.parametrize(
        ("err", "code"),
        [
            (InvalidCatalog("segments", reason="catalog is empty"), EXIT_USER_ERROR),
            (DependencyMissing("users", ["customers"]), EXIT_USER_ERROR),
            (ConstraintViolation("leads", entity="leads", invariant="x"), EXIT_USER_ERROR),
            (ConfigurationError("bad"), EXIT_USER_ERROR),
            (SinkWriteFailure("parquet://out"), EXIT_SYSTEM_ERROR),
            (GenerationCancelled("users"), EXIT_CANCELLED),
        ],
    )
    def test_exit_code_for(self, err: Exception, code: int) -> None:
        """Sink failures are system errors; cancellation uses 130."""
        assert exit_code_for(err) == code  # type: ignore[arg-type]

    def test_handle_labdata_error(self) -> None:
        """The user message and exit code are carried on the CLIError."""
        err = SinkWriteFailure("csv://out", entity="usage")

        with pytest.raises(CLIError) as exc_info:
            handle_labdata_error(err)

        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert exc_info.value.message == err.user_message
        assert exc_info.value.__cause__ is err
