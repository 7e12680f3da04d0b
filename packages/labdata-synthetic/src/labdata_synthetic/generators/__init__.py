"""Generation stages.

This module registers the built-in stages in STAGES:
- accounts: customers, users, subscriptions, invoices
- engagement: usage, health_scores, nps_responses, support_tickets,
  feature_adoption
- sales: leads, opportunities

All stages support:
- Deterministic seeding (one Faker sub-stream per stage)
- Weighted distributions from the reference catalogs
- Row validation through the pydantic schemas
"""

from __future__ import annotations

from labdata_synthetic.generators import accounts, engagement, sales  # noqa: F401
from labdata_synthetic.generators.base import (
    STAGES,
    Stage,
    StageRegistry,
    StageResults,
    stage_faker,
    stage_seed,
)

__all__ = [
    "STAGES",
    "Stage",
    "StageRegistry",
    "StageResults",
    "stage_faker",
    "stage_seed",
]
