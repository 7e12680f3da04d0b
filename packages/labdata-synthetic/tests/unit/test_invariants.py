"""Unit tests for post-generation invariant checks.

Each test corrupts one row of a generated dataset with ``model_copy`` (which
skips validation) and asserts that the stage check names the invariant.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import pytest

from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.errors import ConstraintViolation
from labdata_synthetic.generators import STAGES, StageResults
from labdata_synthetic.invariants import CHECKS, check_stage
from labdata_synthetic.pipeline import Dataset

pytestmark = pytest.mark.unit


def parents_of(dataset: Dataset, stage: str) -> StageResults:
    return StageResults({dep: dataset[dep] for dep in STAGES.get(stage).depends_on})


def corrupt(rows: Any, index: int = 0, **update: Any) -> list[Any]:
    rows = list(rows)
    rows[index] = rows[index].model_copy(update=update)
    return rows


def assert_violation(
    dataset: Dataset,
    config: GeneratorConfig,
    stage: str,
    rows: list[Any],
    invariant: str,
) -> ConstraintViolation:
    with pytest.raises(ConstraintViolation) as exc_info:
        check_stage(stage, rows, parents_of(dataset, stage), config)
    err = exc_info.value
    assert err.stage == stage
    assert err.entity == stage
    assert err.invariant == invariant
    assert err.examples
    return err


class TestCheckStage:
    """Tests for the check runner."""

    def test_generated_dataset_passes(self, dataset: Dataset, config: GeneratorConfig) -> None:
        """Every built-in stage passes its own checks."""
        for stage in STAGES.names:
            check_stage(stage, dataset[stage], parents_of(dataset, stage), config)

    def test_unknown_stage_has_no_checks(self, config: GeneratorConfig) -> None:
        """Stages without registered checks always pass."""
        check_stage("widgets", [object()], StageResults(), config)

    def test_every_entity_is_checked(self) -> None:
        """Every built-in stage except feature adoption registers a check."""
        assert set(CHECKS) == set(STAGES.names) - {"feature_adoption"}

    def test_examples_are_capped(self, dataset: Dataset, config: GeneratorConfig) -> None:
        """At most five offending rows are carried on the error."""
        rows = [
            row.model_copy(update={"created_date": config.as_of + timedelta(days=1)})
            for row in dataset["customers"]
        ]
        err = assert_violation(dataset, config, "customers", rows, "created_on_or_before_as_of")
        assert len(err.examples) == 5


class TestAccountInvariants:
    """Tests for customers, users, subscriptions and invoices."""

    def test_duplicate_customer_id(self, dataset: Dataset, config: GeneratorConfig) -> None:
        rows = corrupt(dataset["customers"], 1, customer_id=dataset["customers"][0].customer_id)
        assert_violation(dataset, config, "customers", rows, "unique_customer_id")

    def test_user_created_before_customer(
        self, dataset: Dataset, config: GeneratorConfig
    ) -> None:
        rows = corrupt(dataset["users"], created_date=date(1999, 1, 1))
        assert_violation(dataset, config, "users", rows, "created_after_customer")

    def test_two_primary_contacts(self, dataset: Dataset, config: GeneratorConfig) -> None:
        """A second primary contact for the same customer is rejected."""
        users = dataset["users"]
        second = next(i for i, u in enumerate(users) if not u.is_primary_contact)
        rows = corrupt(users, second, is_primary_contact=True)
        assert_violation(dataset, config, "users", rows, "one_primary_contact")

    def test_active_subscription_with_end_date(
        self, dataset: Dataset, config: GeneratorConfig
    ) -> None:
        subs = dataset["subscriptions"]
        index = next(i for i, s in enumerate(subs) if s.status != "Cancelled")
        rows = corrupt(subs, index, end_date=config.as_of)
        assert_violation(dataset, config, "subscriptions", rows, "cancelled_has_end_date")

    def test_arr_mismatch(self, dataset: Dataset, config: GeneratorConfig) -> None:
        rows = corrupt(dataset["subscriptions"], arr_amount=Decimal("1.00"))
        assert_violation(dataset, config, "subscriptions", rows, "arr_is_twelve_mrr")

    def test_repeated_product(self, dataset: Dataset, config: GeneratorConfig) -> None:
        subs = list(dataset["subscriptions"])
        rows = [*subs, subs[0].model_copy(update={"subscription_id": "SUB-999999"})]
        assert_violation(dataset, config, "subscriptions", rows, "distinct_products")

    def test_invoice_total(self, dataset: Dataset, config: GeneratorConfig) -> None:
        invoices = dataset["invoices"]
        rows = corrupt(invoices, total_amount=invoices[0].total_amount + 1)
        assert_violation(dataset, config, "invoices", rows, "total_is_amount_plus_tax")

    def test_paid_without_date(self, dataset: Dataset, config: GeneratorConfig) -> None:
        rows = corrupt(dataset["invoices"], status="Paid", paid_date=None)
        assert_violation(dataset, config, "invoices", rows, "paid_date_matches_status")


class TestEngagementInvariants:
    """Tests for usage, health scores, NPS and tickets."""

    def test_clicks_exceed_opens(self, dataset: Dataset, config: GeneratorConfig) -> None:
        usage = dataset["usage"]
        rows = corrupt(usage, emails_clicked=usage[0].emails_opened + 1)
        assert_violation(dataset, config, "usage", rows, "email_funnel_counts")

    def test_duplicate_user_day(self, dataset: Dataset, config: GeneratorConfig) -> None:
        usage = list(dataset["usage"])
        assert_violation(dataset, config, "usage", [*usage, usage[0]], "unique_user_day")

    def test_overall_score_mismatch(self, dataset: Dataset, config: GeneratorConfig) -> None:
        health = dataset["health_scores"]
        wrong = (health[0].overall_health_score + 1) % 101
        rows = corrupt(health, overall_health_score=wrong)
        assert_violation(dataset, config, "health_scores", rows, "overall_is_weighted_average")

    def test_churn_risk_mismatch(self, dataset: Dataset, config: GeneratorConfig) -> None:
        health = dataset["health_scores"]
        wrong = "High" if health[0].churn_risk != "High" else "Low"
        rows = corrupt(health, churn_risk=wrong)
        assert_violation(dataset, config, "health_scores", rows, "churn_risk_matches_score")

    def test_nps_category_mismatch(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        rows = corrupt(larger_dataset["nps_responses"], nps_score=10, nps_category="Detractor")
        assert_violation(larger_dataset, config, "nps_responses", rows, "category_matches_score")

    def test_follow_up_without_request(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        rows = corrupt(
            larger_dataset["nps_responses"],
            follow_up_requested=False,
            follow_up_completed=True,
        )
        assert_violation(
            larger_dataset,
            config,
            "nps_responses",
            rows,
            "follow_up_completed_requires_request",
        )

    def test_open_ticket_with_resolution(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        tickets = larger_dataset["support_tickets"]
        rows = corrupt(tickets, status="Open", resolved_date=tickets[0].created_date)
        assert_violation(
            larger_dataset, config, "support_tickets", rows, "resolution_matches_status"
        )

    def test_resolved_before_created(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        tickets = larger_dataset["support_tickets"]
        rows = corrupt(
            tickets,
            status="Resolved",
            resolved_date=tickets[0].created_date - timedelta(hours=1),
        )
        assert_violation(
            larger_dataset, config, "support_tickets", rows, "resolution_matches_status"
        )


class TestSalesInvariants:
    """Tests for leads and opportunities."""

    def test_funnel_out_of_order(self, dataset: Dataset, config: GeneratorConfig) -> None:
        rows = corrupt(
            dataset["leads"],
            mql_date=date(2025, 3, 10),
            sql_date=date(2025, 3, 1),
            conversion_date=None,
        )
        assert_violation(dataset, config, "leads", rows, "funnel_dates_ordered")

    def test_funnel_check_follows_config(self, dataset: Dataset, config_factory: Any) -> None:
        """With funnel ordering disabled, unordered dates are allowed."""
        rows = corrupt(dataset["leads"], mql_date=date(2025, 3, 10), sql_date=date(2025, 3, 1))
        check_stage("leads", rows, StageResults(), config_factory(enforce_funnel_order=False))

    def test_open_opportunity_with_close_date(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        opps = larger_dataset["opportunities"]
        rows = corrupt(
            opps,
            stage="Discovery",
            probability=10,
            actual_close_date=date(2025, 1, 1),
            win_reason=None,
            loss_reason=None,
        )
        assert_violation(
            larger_dataset, config, "opportunities", rows, "closed_fields_match_stage"
        )

    def test_probability_mismatch(
        self, larger_dataset: Dataset, config: GeneratorConfig
    ) -> None:
        opps = larger_dataset["opportunities"]
        index = next(i for i, o in enumerate(opps) if o.stage == "Discovery")
        rows = corrupt(opps, index, probability=90)
        assert_violation(
            larger_dataset, config, "opportunities", rows, "probability_matches_stage"
        )
