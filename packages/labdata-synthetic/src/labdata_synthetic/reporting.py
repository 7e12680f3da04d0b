"""Reporting projections over a generated dataset.

Two Arrow tables that lab exercises query first:

- customer_360: one row per customer with active subscription revenue,
  user counts, the latest health snapshot and recent ticket volume
- revenue_summary: subscription revenue by start-month cohort, segment,
  industry, product and tier

Each child table is aggregated on its own before joining, so totals are
not multiplied by unrelated child rows. Money columns are float64 rounded
to cents.

Example:
    >>> tables = dataset.to_arrow_tables()
    >>> customer_360(tables, as_of=dataset.as_of).num_rows
    10
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta

import pyarrow as pa
import pyarrow.compute as pc

from labdata_synthetic.distributions.temporal import months_between, reference_datetime

RECENT_TICKET_DAYS = 90

CUSTOMER_360_COLUMNS = [
    "customer_id",
    "company_name",
    "segment",
    "industry",
    "sub_industry",
    "state",
    "account_status",
    "csm_owner",
    "customer_since",
    "tenure_months",
    "active_subscriptions",
    "total_mrr",
    "total_arr",
    "total_users",
    "active_users",
    "last_user_login",
    "overall_health_score",
    "churn_risk",
    "total_tickets_90d",
]

REVENUE_KEYS = ["cohort_month", "segment", "industry", "product_name", "plan_tier"]


def _rename(table: pa.Table, mapping: Mapping[str, str]) -> pa.Table:
    return table.rename_columns([mapping.get(name, name) for name in table.column_names])


def _money(table: pa.Table, column: str) -> pa.Table:
    index = table.schema.get_field_index(column)
    values = pc.round(pc.cast(table[column], pa.float64()), 2)
    return table.set_column(index, column, values)


def _fill(table: pa.Table, column: str, value: int | float) -> pa.Table:
    index = table.schema.get_field_index(column)
    return table.set_column(index, column, pc.fill_null(table[column], value))


def customer_360(tables: Mapping[str, pa.Table], *, as_of: date) -> pa.Table:
    """One row per customer, sorted by customer_id.

    Args:
        tables: Entity tables; needs customers, subscriptions, users,
            health_scores and support_tickets.
        as_of: Reference date for tenure and the 90-day ticket window.
    """
    customers = tables["customers"].select(
        [
            "customer_id",
            "company_name",
            "segment",
            "industry",
            "sub_industry",
            "state",
            "account_status",
            "csm_owner",
            "created_date",
        ]
    )
    customers = _rename(customers, {"created_date": "customer_since"})
    tenure = [months_between(day, as_of) for day in customers["customer_since"].to_pylist()]
    customers = customers.append_column("tenure_months", pa.array(tenure, pa.int64()))

    subs = tables["subscriptions"]
    active_subs = subs.filter(pc.equal(subs["status"], "Active"))
    active_subs = _money(_money(active_subs, "mrr_amount"), "arr_amount")
    sub_stats = active_subs.group_by("customer_id").aggregate(
        [
            ("subscription_id", "count_distinct"),
            ("mrr_amount", "sum"),
            ("arr_amount", "sum"),
        ]
    )
    sub_stats = _rename(
        sub_stats,
        {
            "subscription_id_count_distinct": "active_subscriptions",
            "mrr_amount_sum": "total_mrr",
            "arr_amount_sum": "total_arr",
        },
    )

    users = tables["users"]
    user_stats = users.group_by("customer_id").aggregate(
        [("user_id", "count_distinct"), ("last_login_date", "max")]
    )
    user_stats = _rename(
        user_stats,
        {"user_id_count_distinct": "total_users", "last_login_date_max": "last_user_login"},
    )
    active_users = users.filter(pc.equal(users["user_status"], "Active"))
    active_stats = _rename(
        active_users.group_by("customer_id").aggregate([("user_id", "count_distinct")]),
        {"user_id_count_distinct": "active_users"},
    )

    # Latest snapshot across the whole table
    health = tables["health_scores"]
    if health.num_rows:
        latest = pc.max(health["snapshot_date"])
        health = health.filter(pc.equal(health["snapshot_date"], latest))
    health = health.select(["customer_id", "overall_health_score", "churn_risk"])

    tickets = tables["support_tickets"]
    window_start = reference_datetime(as_of) - timedelta(days=RECENT_TICKET_DAYS)
    recent = tickets.filter(
        pc.greater_equal(
            tickets["created_date"],
            pa.scalar(window_start, type=tickets.schema.field("created_date").type),
        )
    )
    ticket_stats = _rename(
        recent.group_by("customer_id").aggregate([("ticket_id", "count_distinct")]),
        {"ticket_id_count_distinct": "total_tickets_90d"},
    )

    result = customers
    for stats in (sub_stats, user_stats, active_stats, health, ticket_stats):
        result = result.join(stats, keys="customer_id", join_type="left outer")

    for column, default in (
        ("active_subscriptions", 0),
        ("total_mrr", 0.0),
        ("total_arr", 0.0),
        ("total_users", 0),
        ("active_users", 0),
        ("total_tickets_90d", 0),
    ):
        result = _fill(result, column, default)

    return result.select(CUSTOMER_360_COLUMNS).sort_by("customer_id")


def revenue_summary(tables: Mapping[str, pa.Table]) -> pa.Table:
    """Subscription revenue by cohort month, segment, industry, product and tier.

    Args:
        tables: Entity tables; needs subscriptions and customers.
    """
    subs = _money(_money(tables["subscriptions"], "mrr_amount"), "arr_amount")
    cohorts = [day.replace(day=1) for day in subs["start_date"].to_pylist()]
    subs = subs.append_column("cohort_month", pa.array(cohorts, pa.date32()))
    cancelled = pc.cast(pc.equal(subs["status"], "Cancelled"), pa.int64())
    subs = subs.append_column("is_cancelled", cancelled)

    firmographics = tables["customers"].select(["customer_id", "segment", "industry"])
    joined = subs.join(firmographics, keys="customer_id", join_type="inner")

    summary = joined.group_by(REVENUE_KEYS).aggregate(
        [
            ("subscription_id", "count_distinct"),
            ("mrr_amount", "sum"),
            ("arr_amount", "sum"),
            ("mrr_amount", "mean"),
            ("is_cancelled", "sum"),
        ]
    )
    summary = _rename(
        summary,
        {
            "subscription_id_count_distinct": "subscription_count",
            "mrr_amount_sum": "total_mrr",
            "arr_amount_sum": "total_arr",
            "mrr_amount_mean": "avg_mrr",
            "is_cancelled_sum": "churned_subscriptions",
        },
    )
    for column in ("total_mrr", "total_arr", "avg_mrr"):
        summary = _money(summary, column)

    columns = [
        *REVENUE_KEYS,
        "subscription_count",
        "total_mrr",
        "total_arr",
        "avg_mrr",
        "churned_subscriptions",
    ]
    return summary.select(columns).sort_by([(key, "ascending") for key in REVENUE_KEYS])
