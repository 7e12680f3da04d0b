"""Distribution helpers for synthetic data generation.

This module provides utilities for creating realistic data distributions:
- Weighted choices for categorical data
- Calendar helpers for time-windowed data
"""

from __future__ import annotations

from labdata_synthetic.distributions.temporal import UsageCalendar
from labdata_synthetic.distributions.weighted import WeightedDistribution

__all__ = ["WeightedDistribution", "UsageCalendar"]
