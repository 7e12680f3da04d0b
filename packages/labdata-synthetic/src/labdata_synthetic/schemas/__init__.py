"""Pydantic schemas for the lab dataset.

This module provides type-safe Pydantic models for:
- Accounts: Customers, Users, Subscriptions, Invoices
- Engagement: Usage, Health Scores, NPS, Support Tickets, Feature Adoption
- Sales: Leads, Opportunities
"""

from __future__ import annotations

from pydantic import BaseModel

from labdata_synthetic.schemas.accounts import Customer, Invoice, Subscription, User
from labdata_synthetic.schemas.arrow import arrow_schema, to_arrow_table
from labdata_synthetic.schemas.engagement import (
    FeatureAdoption,
    HealthScoreSnapshot,
    NPSResponse,
    SupportTicket,
    UsageRecord,
)
from labdata_synthetic.schemas.sales import Lead, Opportunity

# Entity (table) name to row model, in load order
ENTITY_MODELS: dict[str, type[BaseModel]] = {
    "customers": Customer,
    "users": User,
    "subscriptions": Subscription,
    "invoices": Invoice,
    "usage": UsageRecord,
    "health_scores": HealthScoreSnapshot,
    "nps_responses": NPSResponse,
    "support_tickets": SupportTicket,
    "feature_adoption": FeatureAdoption,
    "leads": Lead,
    "opportunities": Opportunity,
}

__all__ = [
    "ENTITY_MODELS",
    "arrow_schema",
    "to_arrow_table",
    # Accounts
    "Customer",
    "User",
    "Subscription",
    "Invoice",
    # Engagement
    "UsageRecord",
    "HealthScoreSnapshot",
    "NPSResponse",
    "SupportTicket",
    "FeatureAdoption",
    # Sales
    "Lead",
    "Opportunity",
]
