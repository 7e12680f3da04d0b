"""Engagement stages: usage, health scores, NPS, support tickets, adoption.

Usage counters follow a weekly shape (email peaks mid-week, no social
posting on weekends). Health scores, NPS categories and ticket resolution
times are derived from values drawn for the same row.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any

from faker import Faker

from labdata_synthetic.catalogs import FEATURE_COUNTERS, ReferenceCatalogs
from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.distributions.temporal import (
    DEFAULT_USAGE_CALENDAR,
    trailing_days,
    trailing_week_starts,
    week_start,
)
from labdata_synthetic.fields import (
    Chance,
    Const,
    DaysFrom,
    Derived,
    EntitySpec,
    Equals,
    HoursFrom,
    IntRange,
    Pick,
    Ref,
    RowContext,
    SequenceId,
    Template,
    When,
)
from labdata_synthetic.generators.base import STAGES, StageResults, log_generation
from labdata_synthetic.schemas.engagement import (
    FeatureAdoption,
    HealthScoreSnapshot,
    NPSResponse,
    SupportTicket,
    UsageRecord,
)
from labdata_synthetic.scoring import (
    adoption_status,
    churn_risk,
    nps_category,
    overall_health_score,
)

HEALTH_SCORED_STATUSES = ("Active", "Paused")
NPS_RESPONSE_RATE = 0.30
TICKET_RATE = 0.40
RESOLVED_TICKET_STATUSES = ("Resolved", "Closed")


def _peak_email_day(ctx: RowContext) -> bool:
    return DEFAULT_USAGE_CALENDAR.is_peak_email_day(ctx.extras["usage_date"])


def _weekend(ctx: RowContext) -> bool:
    return DEFAULT_USAGE_CALENDAR.is_weekend(ctx.extras["usage_date"])


USAGE_SPEC = EntitySpec(
    "usage",
    UsageRecord,
    {
        "usage_date": Ref("extra.usage_date"),
        "customer_id": Ref("parent.customer_id"),
        "user_id": Ref("parent.user_id"),
        # Email marketing
        "emails_sent": When(_peak_email_day, IntRange(0, 50), IntRange(0, 20)),
        "emails_opened": IntRange(0, 30, cap="emails_sent"),
        "emails_clicked": IntRange(0, 10, cap="emails_opened"),
        "email_templates_used": IntRange(0, 5),
        # Social media
        "social_posts_created": When(_weekend, Const(0), IntRange(0, 10)),
        "social_posts_published": When(
            _weekend,
            Const(0),
            IntRange(0, 8, cap="social_posts_created"),
        ),
        "social_accounts_connected": IntRange(1, 5),
        # Website
        "website_page_views": IntRange(10, 500),
        "website_leads_generated": IntRange(0, 5),
        "blog_posts_published": IntRange(0, 2),
        # MyRepChat
        "myrepchat_messages_sent": IntRange(0, 30),
        "myrepchat_messages_received": IntRange(0, 25),
        "myrepchat_templates_used": IntRange(0, 5),
        # Events and cards
        "events_created": IntRange(0, 2),
        "greeting_cards_sent": IntRange(0, 10),
        # General platform
        "total_logins": IntRange(1, 10),
        "session_duration_minutes": IntRange(5, 120),
        "features_used": IntRange(3, 15),
    },
)


def _overall(ctx: RowContext) -> int:
    row = ctx.row
    return overall_health_score(
        row["usage_score"],
        row["engagement_score"],
        row["support_score"],
        row["payment_score"],
        row["expansion_score"],
    )


def health_spec(catalogs: ReferenceCatalogs) -> EntitySpec[HealthScoreSnapshot]:
    return EntitySpec(
        "health_scores",
        HealthScoreSnapshot,
        {
            "snapshot_date": Ref("extra.snapshot_date"),
            "customer_id": Ref("parent.customer_id"),
            "usage_score": IntRange(40, 100),
            "engagement_score": IntRange(30, 100),
            "support_score": IntRange(50, 100),
            "payment_score": IntRange(60, 100),
            "expansion_score": IntRange(20, 100),
            "overall_health_score": Derived(_overall),
            "churn_risk": Derived(lambda ctx: churn_risk(ctx.row["overall_health_score"])),
            "health_trend": Pick(catalogs.health_trends),
        },
    )


def nps_spec(catalogs: ReferenceCatalogs) -> EntitySpec[NPSResponse]:
    return EntitySpec(
        "nps_responses",
        NPSResponse,
        {
            "response_id": SequenceId("NPS"),
            "customer_id": Ref("parent.customer_id"),
            "user_id": Ref("parent.user_id"),
            "survey_date": DaysFrom("as_of", 0, 365, sign=-1, floor="parent.created_date"),
            "nps_score": IntRange(0, 10),
            "nps_category": Derived(lambda ctx: nps_category(ctx.row["nps_score"])),
            "feedback_text": Pick(catalogs.nps_feedback),
            "product_mentioned": Pick(catalogs.nps_products),
            "follow_up_requested": Chance(0.20),
            "follow_up_completed": When(
                Equals("follow_up_requested", (True,)),
                Chance(0.80),
                Const(False),
            ),
        },
    )


def _resolution_hours(ctx: RowContext) -> Decimal | None:
    resolved = ctx.row["resolved_date"]
    if resolved is None:
        return None
    seconds = (resolved - ctx.row["created_date"]).total_seconds()
    return (Decimal(int(seconds)) / Decimal(3600)).quantize(Decimal("0.01"))


def ticket_spec(catalogs: ReferenceCatalogs) -> EntitySpec[SupportTicket]:
    return EntitySpec(
        "support_tickets",
        SupportTicket,
        {
            "ticket_id": SequenceId("TKT"),
            "customer_id": Ref("parent.customer_id"),
            "user_id": Ref("parent.user_id"),
            "created_date": HoursFrom("now", 1, 8760, sign=-1, floor="parent.created_date"),
            ("category", "subcategory"): Pick(catalogs.ticket_categories),
            "priority": Pick(catalogs.ticket_priorities),
            "status": Pick(catalogs.ticket_statuses),
            "resolved_date": When(
                Equals("status", RESOLVED_TICKET_STATUSES),
                HoursFrom("created_date", 1, 72, cap="now"),
            ),
            "channel": Pick(catalogs.ticket_channels),
            "assigned_agent": Pick(catalogs.support_agents),
            "resolution_time_hours": Derived(_resolution_hours),
            "first_response_time_minutes": IntRange(5, 480),
            "csat_score": IntRange(1, 5),
            "sla_met": Chance(0.92),
            "ticket_summary": Template("Customer inquiry regarding {subcategory}"),
        },
    )


@STAGES.register(
    "usage",
    depends_on=["customers", "users"],
    description="Daily platform usage for active users",
)
def generate_usage(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[UsageRecord]:
    parents.require("customers", stage="usage")
    users: Any = parents.require("users", stage="usage")
    active_users = [user for user in users if user.user_status == "Active"]
    ctx = RowContext(fake, as_of=config.as_of)

    # Ordered by date, then user
    rows: list[UsageRecord] = []
    for day in trailing_days(config.as_of, config.usage_days):
        for user in active_users:
            if day < user.created_date:
                continue
            if ctx.rng.random() >= config.usage_density:
                continue
            row_ctx = ctx.at(len(rows), parent=user, extras={"usage_date": day})
            rows.append(USAGE_SPEC.render(row_ctx))

    log_generation("usage", len(rows))
    return rows


@STAGES.register(
    "health_scores",
    depends_on=["customers"],
    description="Weekly health snapshots for active and paused customers",
)
def generate_health_scores(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[HealthScoreSnapshot]:
    customers: Any = parents.require("customers", stage="health_scores")
    scored = [c for c in customers if c.account_status in HEALTH_SCORED_STATUSES]
    spec = health_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[HealthScoreSnapshot] = []
    for snapshot_date in trailing_week_starts(config.as_of, config.health_weeks):
        for customer in scored:
            # No snapshot for weeks before the account existed
            if snapshot_date < week_start(customer.created_date):
                continue
            row_ctx = ctx.at(len(rows), parent=customer, extras={"snapshot_date": snapshot_date})
            rows.append(spec.render(row_ctx))

    log_generation("health_scores", len(rows))
    return rows


@STAGES.register(
    "nps_responses",
    depends_on=["customers", "users"],
    description="NPS survey responses from primary contacts",
)
def generate_nps_responses(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[NPSResponse]:
    parents.require("customers", stage="nps_responses")
    users: Any = parents.require("users", stage="nps_responses")
    spec = nps_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[NPSResponse] = []
    for user in users:
        if not user.is_primary_contact:
            continue
        if ctx.rng.random() >= NPS_RESPONSE_RATE:
            continue
        rows.append(spec.render(ctx.at(len(rows), parent=user)))

    log_generation("nps_responses", len(rows))
    return rows


@STAGES.register(
    "support_tickets",
    depends_on=["customers", "users"],
    description="Support tickets raised by users",
)
def generate_support_tickets(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[SupportTicket]:
    parents.require("customers", stage="support_tickets")
    users: Any = parents.require("users", stage="support_tickets")
    spec = ticket_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[SupportTicket] = []
    for user in users:
        if ctx.rng.random() >= TICKET_RATE:
            continue
        rows.append(spec.render(ctx.at(len(rows), parent=user)))

    log_generation("support_tickets", len(rows))
    return rows


@STAGES.register(
    "feature_adoption",
    depends_on=["customers", "usage"],
    description="Feature adoption summary derived from usage",
)
def generate_feature_adoption(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[FeatureAdoption]:
    customers: Any = parents.require("customers", stage="feature_adoption")
    usage: Any = parents.require("usage", stage="feature_adoption")

    # (customer, feature) -> day -> counter total
    daily: dict[tuple[str, str], dict[date, int]] = defaultdict(lambda: defaultdict(int))
    for record in usage:
        for feature, counter in FEATURE_COUNTERS.items():
            value = getattr(record, counter)
            if value > 0:
                daily[(record.customer_id, feature)][record.usage_date] += value

    rows: list[FeatureAdoption] = []
    for customer in customers:
        for feature in FEATURE_COUNTERS:
            days = daily.get((customer.customer_id, feature), {})
            rows.append(
                FeatureAdoption(
                    customer_id=customer.customer_id,
                    feature_name=feature,
                    first_used_date=min(days) if days else None,
                    last_used_date=max(days) if days else None,
                    usage_count=sum(days.values()),
                    adoption_status=adoption_status(len(days), config.usage_days),
                )
            )

    log_generation("feature_adoption", len(rows))
    return rows
