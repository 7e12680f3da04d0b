"""Account schema definitions.

This module defines Pydantic models for the customer account domain:
- Customer: Advisory firm account (root entity)
- User: Platform user belonging to a customer
- Subscription: Product subscription with recurring revenue
- Invoice: Billing period invoice for a subscription

All models are immutable (frozen=True) and validate at construction time.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Valid values for categorical fields
SegmentType = Literal["SMB", "Mid-Market", "Enterprise"]
AccountStatusType = Literal["Active", "Churned", "Paused", "Trial"]
UserRoleType = Literal["Admin", "Advisor", "Staff", "Compliance Officer"]
UserStatusType = Literal["Active", "Inactive", "Suspended"]
SubscriptionStatusType = Literal["Active", "Cancelled", "Pending", "Expired"]
BillingFrequencyType = Literal["Monthly", "Annual"]
InvoiceStatusType = Literal["Paid", "Pending", "Overdue", "Void"]

CUSTOMER_ID_PATTERN = r"^CUST-\d{6}$"
USER_ID_PATTERN = r"^USER-\d{6}$"
SUBSCRIPTION_ID_PATTERN = r"^SUB-\d{6}$"
EMAIL_PATTERN = r"^[\w\.\-\+]+@[\w\.\-]+\.\w+$"


class Customer(BaseModel):
    """Customer account.

    Attributes:
        customer_id: Identifier ``CUST-NNNNNN``
        company_name: Firm name
        segment: SMB, Mid-Market or Enterprise
        industry: Industry (RIA, Broker-Dealer, ...)
        sub_industry: Industry detail
        state: US state code
        city: City (``Metro Area`` outside the detailed states)
        timezone: IANA timezone for the state
        created_date: Account creation date
        account_status: Active, Churned, Paused or Trial
        employee_count_band: Band matching the segment
        aum_band: Assets under management band matching the segment
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Customer identifier")
    company_name: str = Field(..., min_length=1, max_length=200, description="Firm name")
    segment: SegmentType = Field(..., description="Customer segment")
    industry: str = Field(..., max_length=100, description="Industry")
    sub_industry: str = Field(..., max_length=100, description="Industry detail")
    state: str = Field(..., min_length=2, max_length=2, description="US state code")
    city: str = Field(..., max_length=100, description="City")
    timezone: str = Field(..., max_length=50, description="IANA timezone")
    created_date: date = Field(..., description="Account creation date")
    acquisition_channel: str = Field(..., max_length=50, description="Acquisition channel")
    csm_owner: str = Field(..., max_length=100, description="Customer success manager")
    sales_owner: str = Field(..., max_length=100, description="Account executive")
    account_status: AccountStatusType = Field(..., description="Account lifecycle status")
    is_strategic_account: bool = Field(..., description="Strategic account flag")
    employee_count_band: str = Field(..., max_length=20, description="Employee count band")
    aum_band: str = Field(..., max_length=50, description="Assets under management band")


class User(BaseModel):
    """Platform user belonging to a customer account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str = Field(..., pattern=USER_ID_PATTERN, description="User identifier")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Owning customer")
    email: str = Field(
        ...,
        min_length=5,
        max_length=200,
        pattern=EMAIL_PATTERN,
        description="Email address",
    )
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    role: UserRoleType = Field(..., description="Platform role")
    title: str = Field(..., max_length=100, description="Job title")
    phone: str = Field(..., max_length=20, description="Phone number")
    created_date: date = Field(..., description="User creation date")
    last_login_date: datetime = Field(..., description="Last login timestamp")
    login_count: int = Field(..., ge=0, description="Lifetime login count")
    is_primary_contact: bool = Field(..., description="Primary contact for the account")
    user_status: UserStatusType = Field(..., description="User status")
    email_verified: bool = Field(..., description="Email address verified")
    mfa_enabled: bool = Field(..., description="Multi-factor authentication enabled")


class Subscription(BaseModel):
    """Product subscription.

    Attributes:
        mrr_amount: Monthly recurring revenue after discount
        arr_amount: Annual recurring revenue (12 x MRR)
        discount_percent: Whole-percent discount (Enterprise only)
        end_date: Set only for cancelled subscriptions
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    subscription_id: str = Field(
        ...,
        pattern=SUBSCRIPTION_ID_PATTERN,
        description="Subscription identifier",
    )
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Owning customer")
    product_name: str = Field(..., max_length=100, description="Product")
    plan_tier: str = Field(..., max_length=50, description="Plan tier")
    billing_frequency: BillingFrequencyType = Field(..., description="Billing frequency")
    start_date: date = Field(..., description="Subscription start")
    end_date: date | None = Field(default=None, description="Subscription end")
    renewal_date: date = Field(..., description="Next renewal date")
    status: SubscriptionStatusType = Field(..., description="Subscription status")
    mrr_amount: Decimal = Field(
        ...,
        ge=Decimal("0"),
        decimal_places=2,
        description="Monthly recurring revenue",
    )
    arr_amount: Decimal = Field(
        ...,
        ge=Decimal("0"),
        decimal_places=2,
        description="Annual recurring revenue",
    )
    discount_percent: Decimal = Field(
        ...,
        ge=Decimal("0"),
        le=Decimal("100"),
        decimal_places=2,
        description="Discount percent",
    )
    contract_term_months: int = Field(..., ge=1, description="Contract term in months")
    auto_renew: bool = Field(..., description="Renews automatically")
    cancellation_reason: str | None = Field(
        default=None,
        max_length=200,
        description="Reason given on cancellation",
    )


class Invoice(BaseModel):
    """Billing period invoice for a subscription."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    invoice_id: str = Field(..., pattern=r"^INV-\d{6}$", description="Invoice identifier")
    customer_id: str = Field(..., pattern=CUSTOMER_ID_PATTERN, description="Billed customer")
    subscription_id: str = Field(
        ...,
        pattern=SUBSCRIPTION_ID_PATTERN,
        description="Billed subscription",
    )
    invoice_date: date = Field(..., description="Invoice date (period start)")
    due_date: date = Field(..., description="Payment due date")
    paid_date: date | None = Field(default=None, description="Payment date")
    amount: Decimal = Field(..., ge=Decimal("0"), decimal_places=2, description="Net amount")
    tax_amount: Decimal = Field(..., ge=Decimal("0"), decimal_places=2, description="Tax")
    total_amount: Decimal = Field(
        ...,
        ge=Decimal("0"),
        decimal_places=2,
        description="Amount plus tax",
    )
    status: InvoiceStatusType = Field(..., description="Invoice status")
    payment_method: str = Field(..., max_length=50, description="Payment method")
