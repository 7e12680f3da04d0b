"""Weighted distribution utilities.

This module provides the categorical sampler behind every reference catalog.
Weights are relative (they need not sum to 1) and values can be any hashable,
including tuples for multi-column catalog rows.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from itertools import accumulate
from typing import Generic, TypeVar

from labdata_synthetic.errors import InvalidCatalog

T = TypeVar("T")


class WeightedDistribution(Generic[T]):
    """Helper for weighted random selection.

    Draws come from the ``rng`` passed to each call, so one distribution can
    be shared by stages that each own an independent random stream. Without
    an ``rng`` the distribution falls back to its own seeded stream.

    Example:
        >>> statuses = WeightedDistribution(
        ...     {"Active": 85, "Churned": 7, "Paused": 5, "Trial": 3},
        ...     name="account_status",
        ... )
        >>> values = statuses.sample(100, rng=random.Random(42))
    """

    def __init__(
        self,
        weights: Mapping[T, float] | Iterable[tuple[T, float]],
        *,
        name: str = "catalog",
        seed: int | None = None,
    ) -> None:
        """Initialize with weight mapping.

        Args:
            weights: Mapping (or pairs) of values to their relative weights
            name: Catalog name used in error messages
            seed: Optional seed for the fallback random stream

        Raises:
            InvalidCatalog: If the catalog is empty, has a negative weight, or
                all weights are zero.
        """
        pairs = list(weights.items()) if isinstance(weights, Mapping) else list(weights)
        self.name = name

        if not pairs:
            raise InvalidCatalog(name, reason="catalog is empty")

        self.values: list[T] = [value for value, _ in pairs]
        self.weights: list[float] = [float(weight) for _, weight in pairs]

        if any(w < 0 for w in self.weights):
            raise InvalidCatalog(name, reason="weights must be non-negative")
        if sum(self.weights) <= 0:
            raise InvalidCatalog(name, reason="all weights are zero")

        self._cum_weights = list(accumulate(self.weights))
        self._rng = random.Random(seed)

    @classmethod
    def uniform(cls, values: Sequence[T], *, name: str = "catalog") -> WeightedDistribution[T]:
        """Build a distribution where every value is equally likely.

        Args:
            values: Candidate values
            name: Catalog name used in error messages

        Returns:
            WeightedDistribution with unit weights
        """
        return cls([(value, 1) for value in values], name=name)

    def sample(self, count: int, rng: random.Random | None = None) -> list[T]:
        """Generate weighted random values.

        Args:
            count: Number of values to generate
            rng: Random stream to draw from

        Returns:
            List of randomly selected values
        """
        source = rng or self._rng
        return source.choices(self.values, cum_weights=self._cum_weights, k=count)

    def sample_one(self, rng: random.Random | None = None) -> T:
        """Generate a single weighted random value.

        Args:
            rng: Random stream to draw from

        Returns:
            Randomly selected value
        """
        return self.sample(1, rng)[0]

    def sample_distinct(self, count: int, rng: random.Random | None = None) -> list[T]:
        """Draw up to ``count`` distinct values without replacement.

        Each draw is weighted among the values not yet picked. Zero-weight
        values are never returned, so fewer than ``count`` values come back
        when the catalog has fewer positive weights.

        Args:
            count: Maximum number of values to draw
            rng: Random stream to draw from

        Returns:
            Distinct values in draw order
        """
        source = rng or self._rng
        pool = [(v, w) for v, w in zip(self.values, self.weights, strict=True) if w > 0]
        picked: list[T] = []

        while pool and len(picked) < count:
            index = source.choices(range(len(pool)), weights=[w for _, w in pool], k=1)[0]
            picked.append(pool.pop(index)[0])

        return picked

    @property
    def probabilities(self) -> dict[T, float]:
        """Get probability distribution.

        Returns:
            Dictionary mapping values to their probabilities
        """
        total = sum(self.weights)
        return {v: w / total for v, w in zip(self.values, self.weights, strict=True)}

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"WeightedDistribution(name={self.name!r}, size={len(self.values)})"
