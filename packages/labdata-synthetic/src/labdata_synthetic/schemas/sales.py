"""Sales pipeline schema definitions.

- Lead: Marketing/sales lead with funnel milestone dates
- Opportunity: Pipeline opportunity opened from a qualified lead

All models are immutable (frozen=True) and validate at construction time.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from labdata_synthetic.schemas.accounts import CUSTOMER_ID_PATTERN, EMAIL_PATTERN

LeadStatusType = Literal["New", "Contacted", "Qualified", "Unqualified", "Converted"]
OpportunityStageType = Literal[
    "Discovery",
    "Demo",
    "Proposal",
    "Negotiation",
    "Closed Won",
    "Closed Lost",
]
OpportunityType = Literal["New Business", "Upsell", "Cross-sell", "Renewal"]

LEAD_ID_PATTERN = r"^LEAD-\d{6}$"


class Lead(BaseModel):
    """Sales lead.

    Funnel dates (mql, sql, conversion) are independent milestones; when
    present together they are ordered mql <= sql <= conversion.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    lead_id: str = Field(..., pattern=LEAD_ID_PATTERN, description="Lead identifier")
    company_name: str = Field(..., min_length=1, max_length=200, description="Prospect firm")
    contact_name: str = Field(..., max_length=100, description="Contact name")
    contact_email: str = Field(..., pattern=EMAIL_PATTERN, description="Contact email")
    contact_phone: str = Field(..., max_length=20, description="Contact phone")
    lead_source: str = Field(..., max_length=50, description="Lead source")
    lead_source_detail: str = Field(..., max_length=200, description="Source detail")
    industry: str = Field(..., max_length=100, description="Industry")
    company_size: str = Field(..., max_length=20, description="Company size band")
    created_date: datetime = Field(..., description="Lead creation timestamp")
    assigned_sdr: str = Field(..., max_length=100, description="Assigned SDR")
    lead_status: LeadStatusType = Field(..., description="Lead status")
    mql_date: date | None = Field(default=None, description="Marketing qualified date")
    sql_date: date | None = Field(default=None, description="Sales qualified date")
    conversion_date: date | None = Field(default=None, description="Conversion date")
    converted_customer_id: str | None = Field(
        default=None,
        pattern=CUSTOMER_ID_PATTERN,
        description="Customer created from this lead",
    )
    utm_source: str = Field(..., max_length=100, description="UTM source")
    utm_medium: str = Field(..., max_length=100, description="UTM medium")
    utm_campaign: str = Field(..., max_length=200, description="UTM campaign")


class Opportunity(BaseModel):
    """Sales opportunity.

    Probability is determined by the stage; actual_close_date is set only for
    closed stages; loss and win reasons only for Closed Lost and Closed Won.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    opportunity_id: str = Field(..., pattern=r"^OPP-\d{6}$", description="Opportunity id")
    lead_id: str = Field(..., pattern=LEAD_ID_PATTERN, description="Source lead")
    customer_id: str | None = Field(
        default=None,
        pattern=CUSTOMER_ID_PATTERN,
        description="Existing customer (upsells only)",
    )
    opportunity_name: str = Field(..., max_length=200, description="Opportunity name")
    opportunity_type: OpportunityType = Field(..., description="Opportunity type")
    stage: OpportunityStageType = Field(..., description="Pipeline stage")
    probability: int = Field(..., ge=0, le=100, description="Win probability percent")
    amount: Decimal = Field(..., ge=Decimal("0"), decimal_places=2, description="Deal amount")
    arr_value: Decimal = Field(..., ge=Decimal("0"), decimal_places=2, description="Deal ARR")
    created_date: date = Field(..., description="Opportunity creation date")
    close_date: date = Field(..., description="Expected close date")
    actual_close_date: date | None = Field(default=None, description="Actual close date")
    owner: str = Field(..., max_length=100, description="Opportunity owner")
    products_interested: str = Field(..., max_length=500, description="Products of interest")
    competitor: str | None = Field(default=None, max_length=100, description="Competitor")
    loss_reason: str | None = Field(default=None, max_length=200, description="Loss reason")
    win_reason: str | None = Field(default=None, max_length=200, description="Win reason")
    days_in_pipeline: int = Field(..., ge=0, description="Days open")
