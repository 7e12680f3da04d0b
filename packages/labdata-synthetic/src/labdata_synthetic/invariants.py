"""Post-generation invariant checks.

Checks run after each stage against its rows (and its parents' rows). A
failing check raises ConstraintViolation naming the stage, the entity and
the invariant, with a few offending rows as examples.

Example:
    >>> check_stage("health_scores", rows, parents, config)
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Callable, Sequence
from typing import Any

import structlog

from labdata_synthetic.catalogs import OPPORTUNITY_STAGES
from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.errors import ConstraintViolation
from labdata_synthetic.generators.base import StageResults
from labdata_synthetic.generators.sales import FUNNEL_DATES
from labdata_synthetic.scoring import churn_risk, nps_category, overall_health_score

logger = structlog.get_logger(__name__)

# (rows, parents, config) -> offending row descriptions
Check = Callable[[Sequence[Any], StageResults, GeneratorConfig], list[str]]

CHECKS: dict[str, dict[str, Check]] = defaultdict(dict)

_MAX_EXAMPLES = 5


def invariant(stage: str, name: str) -> Callable[[Check], Check]:
    """Register a check for a stage."""

    def decorator(func: Check) -> Check:
        CHECKS[stage][name] = func
        return func

    return decorator


def check_stage(
    stage: str,
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> None:
    """Run every check registered for ``stage``.

    Raises:
        ConstraintViolation: On the first failing invariant.
    """
    for name, check in CHECKS.get(stage, {}).items():
        failures = check(rows, parents, config)
        if failures:
            logger.warning(
                "invariant_failed",
                stage=stage,
                invariant=name,
                failures=len(failures),
            )
            raise ConstraintViolation(
                stage,
                entity=stage,
                invariant=name,
                examples=failures[:_MAX_EXAMPLES],
            )


def _by_id(rows: Sequence[Any], key: str) -> dict[str, Any]:
    return {getattr(row, key): row for row in rows}


# Customers


@invariant("customers", "created_on_or_before_as_of")
def _customers_created(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{c.customer_id}: created {c.created_date} after {config.as_of}"
        for c in rows
        if c.created_date > config.as_of
    ]


@invariant("customers", "unique_customer_id")
def _customers_unique(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    counts = Counter(c.customer_id for c in rows)
    return [f"{cid}: appears {n} times" for cid, n in counts.items() if n > 1]


# Users


@invariant("users", "created_after_customer")
def _users_created(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    customers = _by_id(parents.require("customers", stage="users"), "customer_id")
    failures = []
    for user in rows:
        customer = customers.get(user.customer_id)
        if customer is None:
            failures.append(f"{user.user_id}: unknown customer {user.customer_id}")
        elif not customer.created_date <= user.created_date <= config.as_of:
            failures.append(
                f"{user.user_id}: created {user.created_date}, "
                f"customer created {customer.created_date}"
            )
    return failures


@invariant("users", "one_primary_contact")
def _users_primary(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    primaries: dict[str, int] = defaultdict(int)
    for user in rows:
        primaries[user.customer_id] += int(user.is_primary_contact)
    return [f"{cid}: {n} primary contacts" for cid, n in primaries.items() if n != 1]


# Subscriptions


@invariant("subscriptions", "cancelled_has_end_date")
def _subscriptions_end(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    failures = []
    for sub in rows:
        if sub.status == "Cancelled" and (sub.end_date is None or sub.end_date <= sub.start_date):
            failures.append(f"{sub.subscription_id}: end {sub.end_date}, start {sub.start_date}")
        elif sub.status != "Cancelled" and sub.end_date is not None:
            failures.append(f"{sub.subscription_id}: {sub.status} with end {sub.end_date}")
    return failures


@invariant("subscriptions", "arr_is_twelve_mrr")
def _subscriptions_arr(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{s.subscription_id}: mrr {s.mrr_amount}, arr {s.arr_amount}"
        for s in rows
        if s.mrr_amount * 12 != s.arr_amount
    ]


@invariant("subscriptions", "distinct_products")
def _subscriptions_products(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    counts = Counter((s.customer_id, s.product_name) for s in rows)
    return [f"{cid}: {product} x{n}" for (cid, product), n in counts.items() if n > 1]


# Invoices


@invariant("invoices", "total_is_amount_plus_tax")
def _invoices_total(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{i.invoice_id}: {i.amount} + {i.tax_amount} != {i.total_amount}"
        for i in rows
        if i.amount + i.tax_amount != i.total_amount
    ]


@invariant("invoices", "paid_date_matches_status")
def _invoices_paid(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{i.invoice_id}: status {i.status}, paid {i.paid_date}"
        for i in rows
        if (i.status == "Paid") != (i.paid_date is not None)
    ]


# Usage


@invariant("usage", "email_funnel_counts")
def _usage_email(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{r.user_id}@{r.usage_date}: sent {r.emails_sent}, opened {r.emails_opened}, "
        f"clicked {r.emails_clicked}"
        for r in rows
        if not r.emails_clicked <= r.emails_opened <= r.emails_sent
    ]


@invariant("usage", "unique_user_day")
def _usage_unique(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    counts = Counter((r.usage_date, r.user_id) for r in rows)
    return [f"{uid}@{day}: {n} rows" for (day, uid), n in counts.items() if n > 1]


# Health scores


@invariant("health_scores", "overall_is_weighted_average")
def _health_overall(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    failures = []
    for h in rows:
        expected = overall_health_score(
            h.usage_score,
            h.engagement_score,
            h.support_score,
            h.payment_score,
            h.expansion_score,
        )
        if h.overall_health_score != expected:
            failures.append(
                f"{h.customer_id}@{h.snapshot_date}: {h.overall_health_score} != {expected}"
            )
    return failures


@invariant("health_scores", "churn_risk_matches_score")
def _health_risk(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{h.customer_id}@{h.snapshot_date}: {h.churn_risk} for score {h.overall_health_score}"
        for h in rows
        if h.churn_risk != churn_risk(h.overall_health_score)
    ]


# NPS


@invariant("nps_responses", "category_matches_score")
def _nps_category(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{r.response_id}: {r.nps_category} for score {r.nps_score}"
        for r in rows
        if r.nps_category != nps_category(r.nps_score)
    ]


@invariant("nps_responses", "follow_up_completed_requires_request")
def _nps_follow_up(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    return [
        f"{r.response_id}: completed without request"
        for r in rows
        if r.follow_up_completed and not r.follow_up_requested
    ]


# Support tickets


@invariant("support_tickets", "resolution_matches_status")
def _tickets_resolution(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    failures = []
    for t in rows:
        resolved = t.status in ("Resolved", "Closed")
        if resolved != (t.resolved_date is not None):
            failures.append(f"{t.ticket_id}: status {t.status}, resolved {t.resolved_date}")
        elif t.resolved_date is not None and t.resolved_date < t.created_date:
            failures.append(f"{t.ticket_id}: resolved before created")
    return failures


# Leads


@invariant("leads", "funnel_dates_ordered")
def _leads_funnel(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    if not config.enforce_funnel_order:
        return []
    failures = []
    for lead in rows:
        present = [
            (name, getattr(lead, name)) for name in FUNNEL_DATES if getattr(lead, name) is not None
        ]
        for (earlier, a), (later, b) in zip(present, present[1:]):
            if b < a:
                failures.append(f"{lead.lead_id}: {later} {b} before {earlier} {a}")
    return failures


# Opportunities


@invariant("opportunities", "closed_fields_match_stage")
def _opportunities_closed(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    failures = []
    for o in rows:
        closed = o.stage in ("Closed Won", "Closed Lost")
        if closed != (o.actual_close_date is not None):
            failures.append(f"{o.opportunity_id}: {o.stage} with close {o.actual_close_date}")
        if (o.loss_reason is not None) != (o.stage == "Closed Lost"):
            failures.append(f"{o.opportunity_id}: loss reason on {o.stage}")
        if (o.win_reason is not None) != (o.stage == "Closed Won"):
            failures.append(f"{o.opportunity_id}: win reason on {o.stage}")
    return failures


@invariant("opportunities", "probability_matches_stage")
def _opportunities_probability(
    rows: Sequence[Any],
    parents: StageResults,
    config: GeneratorConfig,
) -> list[str]:
    expected = dict(OPPORTUNITY_STAGES.values)
    return [
        f"{o.opportunity_id}: probability {o.probability} for {o.stage}"
        for o in rows
        if expected.get(o.stage) != o.probability
    ]
