"""Engagement schema definitions.

This module defines Pydantic models for customer engagement data:
- UsageRecord: Daily platform usage counters per user
- HealthScoreSnapshot: Weekly customer health score
- NPSResponse: Net Promoter Score survey response
- SupportTicket: Support case raised by a user
- FeatureAdoption: Per-customer feature adoption summary

All models are immutable (frozen=True) and validate at construction time.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from labdata_synthetic.schemas.accounts import CUSTOMER_ID_PATTERN, USER_ID_PATTERN

ChurnRiskType = Literal["Low", "Medium", "High", "Critical"]
HealthTrendType = Literal["Improving", "Stable", "Declining"]
NPSCategoryType = Literal["Detractor", "Passive", "Promoter"]
TicketPriorityType = Literal["Low", "Medium", "High", "Urgent"]
TicketStatusType = Literal["Open", "In Progress", "Waiting on Customer", "Resolved", "Closed"]
TicketChannelType = Literal["Email", "Phone", "Chat", "Self-Service"]
AdoptionStatusType = Literal["Not Started", "Exploring", "Adopted", "Power User"]

Count = Annotated[int, Field(ge=0)]


class UsageRecord(BaseModel):
    """Daily usage counters, keyed by (usage_date, customer_id, user_id)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    usage_date: date = Field(..., description="Usage day")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer")
    user_id: str = Field(..., pattern=USER_ID_PATTERN, description="User")
    # Email marketing
    emails_sent: Count = 0
    emails_opened: Count = 0
    emails_clicked: Count = 0
    email_templates_used: Count = 0
    # Social media
    social_posts_created: Count = 0
    social_posts_published: Count = 0
    social_accounts_connected: Count = 0
    # Website
    website_page_views: Count = 0
    website_leads_generated: Count = 0
    blog_posts_published: Count = 0
    # MyRepChat
    myrepchat_messages_sent: Count = 0
    myrepchat_messages_received: Count = 0
    myrepchat_templates_used: Count = 0
    # Events and cards
    events_created: Count = 0
    greeting_cards_sent: Count = 0
    # General platform
    total_logins: Count = 0
    session_duration_minutes: Count = 0
    features_used: Count = 0


class HealthScoreSnapshot(BaseModel):
    """Weekly health score snapshot.

    The overall score is the weighted component average rounded half up
    (usage 25%, engagement 20%, support 20%, payment 20%, expansion 15%).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    snapshot_date: date = Field(..., description="Monday of the snapshot week")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer")
    overall_health_score: int = Field(..., ge=0, le=100, description="Weighted score")
    usage_score: int = Field(..., ge=0, le=100, description="Platform usage component")
    engagement_score: int = Field(..., ge=0, le=100, description="Engagement component")
    support_score: int = Field(..., ge=0, le=100, description="Support component")
    payment_score: int = Field(..., ge=0, le=100, description="Payment component")
    expansion_score: int = Field(..., ge=0, le=100, description="Expansion component")
    churn_risk: ChurnRiskType = Field(..., description="Churn risk bucket")
    health_trend: HealthTrendType = Field(..., description="Trend label")


class NPSResponse(BaseModel):
    """NPS survey response from a primary contact."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    response_id: str = Field(..., pattern=r"^NPS-\d{6}$", description="Response identifier")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer")
    user_id: str = Field(..., pattern=USER_ID_PATTERN, description="Responding user")
    survey_date: date = Field(..., description="Survey date")
    nps_score: int = Field(..., ge=0, le=10, description="Score 0-10")
    nps_category: NPSCategoryType = Field(..., description="Category derived from the score")
    feedback_text: str | None = Field(default=None, max_length=2000, description="Comment")
    product_mentioned: str = Field(..., max_length=100, description="Product surveyed")
    follow_up_requested: bool = Field(..., description="Follow-up requested")
    follow_up_completed: bool = Field(..., description="Follow-up completed")


class SupportTicket(BaseModel):
    """Support ticket raised by a user."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ticket_id: str = Field(..., pattern=r"^TKT-\d{6}$", description="Ticket identifier")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer")
    user_id: str = Field(..., pattern=USER_ID_PATTERN, description="Reporting user")
    created_date: datetime = Field(..., description="Ticket creation timestamp")
    resolved_date: datetime | None = Field(default=None, description="Resolution timestamp")
    category: str = Field(..., max_length=50, description="Category")
    subcategory: str = Field(..., max_length=100, description="Subcategory")
    priority: TicketPriorityType = Field(..., description="Priority")
    status: TicketStatusType = Field(..., description="Status")
    channel: TicketChannelType = Field(..., description="Intake channel")
    assigned_agent: str = Field(..., max_length=100, description="Assigned agent")
    resolution_time_hours: Decimal | None = Field(
        default=None,
        ge=Decimal("0"),
        decimal_places=2,
        description="Hours from creation to resolution",
    )
    first_response_time_minutes: int = Field(..., ge=0, description="First response minutes")
    csat_score: int = Field(..., ge=1, le=5, description="Satisfaction rating")
    sla_met: bool = Field(..., description="SLA met")
    ticket_summary: str = Field(..., max_length=500, description="Summary")


class FeatureAdoption(BaseModel):
    """Feature adoption summary, keyed by (customer_id, feature_name)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer")
    feature_name: str = Field(..., max_length=100, description="Feature")
    first_used_date: date | None = Field(default=None, description="First day with usage")
    last_used_date: date | None = Field(default=None, description="Last day with usage")
    usage_count: int = Field(..., ge=0, description="Total counter value in the window")
    adoption_status: AdoptionStatusType = Field(..., description="Adoption bucket")
