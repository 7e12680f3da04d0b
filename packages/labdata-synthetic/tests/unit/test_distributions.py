"""Unit tests for weighted and temporal distributions."""

from __future__ import annotations

import random
from collections import Counter
from datetime import date

import pytest

from labdata_synthetic.distributions.temporal import (
    DEFAULT_USAGE_CALENDAR,
    add_months,
    months_between,
    trailing_days,
    trailing_week_starts,
    week_start,
)
from labdata_synthetic.distributions.weighted import WeightedDistribution
from labdata_synthetic.errors import InvalidCatalog

pytestmark = pytest.mark.unit


class TestWeightedDistribution:
    """Tests for WeightedDistribution."""

    def test_initialization(self) -> None:
        """Values, weights and probabilities follow the input order."""
        wd = WeightedDistribution({"a": 3, "b": 1}, name="letters")

        assert wd.values == ["a", "b"]
        assert wd.weights == [3.0, 1.0]
        assert wd.probabilities == {"a": 0.75, "b": 0.25}
        assert len(wd) == 2

    def test_accepts_pairs_with_tuple_values(self) -> None:
        """Tuple values support multi-column catalog rows."""
        wd = WeightedDistribution([(("Insurance", "P&C"), 2), (("Banking", "Retail"), 1)])

        assert wd.sample_one(random.Random(1)) in wd.values

    def test_empty_catalog_raises(self) -> None:
        """An empty catalog is rejected with its name."""
        with pytest.raises(InvalidCatalog, match="'segments'") as exc_info:
            WeightedDistribution({}, name="segments")

        assert exc_info.value.catalog == "segments"
        assert exc_info.value.reason == "catalog is empty"

    def test_negative_weight_raises(self) -> None:
        """Negative weights are rejected."""
        with pytest.raises(InvalidCatalog, match="non-negative"):
            WeightedDistribution({"a": 1, "b": -1}, name="bad")

    def test_all_zero_weights_raise(self) -> None:
        """A catalog whose weights are all zero cannot be sampled."""
        with pytest.raises(InvalidCatalog, match="all weights are zero"):
            WeightedDistribution({"a": 0, "b": 0}, name="zeros")

    def test_sample_count_and_membership(self) -> None:
        """sample returns the requested number of catalog values."""
        wd = WeightedDistribution({"red": 5, "blue": 3, "green": 2})
        values = wd.sample(500, random.Random(42))

        assert len(values) == 500
        assert set(values) <= {"red", "blue", "green"}

    def test_sampling_converges_to_weights(self) -> None:
        """Observed frequencies approach the configured probabilities."""
        wd = WeightedDistribution({"Active": 85, "Churned": 7, "Paused": 5, "Trial": 3})
        counts = Counter(wd.sample(20_000, random.Random(42)))

        for value, probability in wd.probabilities.items():
            assert abs(counts[value] / 20_000 - probability) < 0.02

    def test_zero_weight_value_never_drawn(self) -> None:
        """Values with zero weight are never sampled."""
        wd = WeightedDistribution({"yes": 1, "never": 0})

        assert "never" not in wd.sample(1_000, random.Random(3))

    def test_same_stream_same_values(self) -> None:
        """Draws depend only on the random stream passed in."""
        wd = WeightedDistribution({"x": 1, "y": 2, "z": 3})

        assert wd.sample(50, random.Random(9)) == wd.sample(50, random.Random(9))

    def test_sample_distinct(self) -> None:
        """sample_distinct never repeats a value."""
        wd = WeightedDistribution.uniform(["a", "b", "c", "d"], name="products")
        picked = wd.sample_distinct(3, random.Random(5))

        assert len(picked) == 3
        assert len(set(picked)) == 3

    def test_sample_distinct_caps_at_positive_weights(self) -> None:
        """Asking for more values than available returns every positive value."""
        wd = WeightedDistribution({"a": 1, "b": 1, "c": 0})
        picked = wd.sample_distinct(10, random.Random(5))

        assert sorted(picked) == ["a", "b"]

    def test_uniform(self) -> None:
        """uniform gives every value the same probability."""
        wd = WeightedDistribution.uniform(["SMB", "Mid-Market", "Enterprise"])

        assert list(wd.probabilities.values()) == pytest.approx([1 / 3] * 3)


class TestTemporal:
    """Tests for calendar helpers."""

    def test_add_months_clamps_day(self) -> None:
        """Month arithmetic clamps to the last day of the target month."""
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_months_between(self) -> None:
        """Month boundaries crossed, ignoring the day of month."""
        assert months_between(date(2024, 12, 31), date(2025, 1, 1)) == 1
        assert months_between(date(2025, 1, 1), date(2025, 1, 31)) == 0
        assert months_between(date(2023, 6, 15), date(2025, 6, 30)) == 24

    def test_trailing_days(self) -> None:
        """Window ends on as_of, oldest first."""
        days = trailing_days(date(2025, 6, 30), 3)

        assert days == [date(2025, 6, 28), date(2025, 6, 29), date(2025, 6, 30)]

    def test_week_start_is_monday(self) -> None:
        """Weeks start on Monday."""
        assert week_start(date(2025, 6, 29)) == date(2025, 6, 23)
        assert week_start(date(2025, 6, 23)) == date(2025, 6, 23)

    def test_trailing_week_starts(self) -> None:
        """Weekly snapshots are consecutive Mondays ending in the as-of week."""
        weeks = trailing_week_starts(date(2025, 6, 30), 3)

        assert weeks == [date(2025, 6, 16), date(2025, 6, 23), date(2025, 6, 30)]

    def test_usage_calendar(self) -> None:
        """Mid-week email peaks and weekends follow the default calendar."""
        assert DEFAULT_USAGE_CALENDAR.is_peak_email_day(date(2025, 6, 24))  # Tuesday
        assert not DEFAULT_USAGE_CALENDAR.is_peak_email_day(date(2025, 6, 23))  # Monday
        assert DEFAULT_USAGE_CALENDAR.is_weekend(date(2025, 6, 28))
        assert not DEFAULT_USAGE_CALENDAR.is_weekend(date(2025, 6, 27))
