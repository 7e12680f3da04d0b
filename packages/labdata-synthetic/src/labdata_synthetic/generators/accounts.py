"""Account stages: customers, users, subscriptions and invoices.

Features:
- Firm names, firmographics and owners from the reference catalogs
- Segment-driven user counts, subscription counts and discounts
- Child dates anchored on (and never before) the parent's dates
- Subscription lifecycle mirrored from the customer's account status
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from faker import Faker

from labdata_synthetic.catalogs import (
    DEFAULT_CITY,
    DEFAULT_TIMEZONE,
    INVOICE_TAX_RATE,
    SUBSCRIPTION_STATUS_BY_ACCOUNT,
    ReferenceCatalogs,
)
from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.distributions.temporal import add_months
from labdata_synthetic.fields import (
    Chance,
    Const,
    DaysFrom,
    Derived,
    EntitySpec,
    Equals,
    HoursFrom,
    IntRange,
    Lookup,
    Phone,
    Pick,
    PickBy,
    Ref,
    RowContext,
    SequenceId,
    Template,
    When,
    money,
)
from labdata_synthetic.generators.base import STAGES, StageResults, log_generation
from labdata_synthetic.schemas.accounts import Customer, Invoice, Subscription, User

USER_ID_START = 5000
SUBSCRIPTION_ID_START = 2000
INVOICE_DUE_DAYS = 30
MAX_INVOICES_PER_SUBSCRIPTION = 24

_active_account = Equals("parent.account_status", ("Active",))
_churned_account = Equals("parent.account_status", ("Churned",))


def email_domain(company_name: str) -> str:
    """Domain derived from a firm name.

    Example:
        >>> email_domain("Summit Wealth Partners")
        'summitwealthpartners.com'
    """
    return company_name.replace(" ", "").replace("'", "").lower() + ".com"


def customer_spec(catalogs: ReferenceCatalogs, config: GeneratorConfig) -> EntitySpec[Customer]:
    return EntitySpec(
        "customers",
        Customer,
        {
            "customer_id": SequenceId("CUST", start=config.customer_id_start),
            "_prefix": Pick(catalogs.firm_prefixes),
            "_suffix": Pick(catalogs.firm_suffixes),
            "company_name": Template("{_prefix} {_suffix}"),
            "segment": Pick(catalogs.segments),
            ("industry", "sub_industry"): Pick(catalogs.industries),
            "state": Pick(catalogs.states),
            "city": PickBy("state", catalogs.cities_by_state, default=DEFAULT_CITY),
            "timezone": Lookup("state", catalogs.state_timezones, default=DEFAULT_TIMEZONE),
            "created_date": DaysFrom("as_of", 30, 2000, sign=-1),
            "acquisition_channel": Pick(catalogs.acquisition_channels),
            "csm_owner": Pick(catalogs.csm_owners),
            "sales_owner": Pick(catalogs.sales_owners),
            "account_status": Pick(catalogs.account_statuses),
            "is_strategic_account": Chance(0.15),
            "employee_count_band": PickBy("segment", catalogs.employee_bands),
            "aum_band": PickBy("segment", catalogs.aum_bands),
        },
    )


def user_spec(catalogs: ReferenceCatalogs) -> EntitySpec[User]:
    return EntitySpec(
        "users",
        User,
        {
            "user_id": SequenceId("USER", start=USER_ID_START),
            "customer_id": Ref("parent.customer_id"),
            "first_name": Pick(catalogs.first_names),
            "last_name": Pick(catalogs.last_names),
            "email": Derived(
                lambda ctx: (
                    f"{ctx.row['first_name'].lower()}.{ctx.row['last_name'].lower()}"
                    f"@{email_domain(ctx.parent.company_name)}"
                )
            ),
            "role": Pick(catalogs.user_roles),
            "title": Pick(catalogs.user_titles),
            "phone": Phone(),
            "created_date": DaysFrom("parent.created_date", 0, 365, cap="as_of"),
            "last_login_date": When(
                _active_account,
                HoursFrom("now", 1, 720, sign=-1, floor="created_date"),
                DaysFrom("now", 30, 180, sign=-1, floor="created_date"),
            ),
            "login_count": IntRange(5, 500),
            "is_primary_contact": Ref("extra.is_primary_contact"),
            "user_status": When(
                _active_account,
                Pick(catalogs.user_statuses),
                Const("Inactive"),
            ),
            "email_verified": Chance(0.95),
            "mfa_enabled": Chance(0.70),
        },
    )


def _discount_percent(ctx: RowContext) -> Decimal:
    if ctx.parent.segment == "Enterprise":
        return Decimal(ctx.rng.randint(10, 25))
    return Decimal("0")


def _mrr_amount(ctx: RowContext) -> Decimal:
    base_price: Decimal = ctx.row["_base_price"]
    discount: Decimal = ctx.row["discount_percent"]
    return money(base_price * (Decimal(100) - discount) / Decimal(100))


def _churn_end_date(ctx: RowContext) -> date:
    start: date = ctx.row["start_date"]
    end = min(add_months(start, ctx.rng.randint(3, 24)), ctx.as_of)
    return max(end, start + timedelta(days=1))


def subscription_spec(catalogs: ReferenceCatalogs) -> EntitySpec[Subscription]:
    return EntitySpec(
        "subscriptions",
        Subscription,
        {
            "subscription_id": SequenceId("SUB", start=SUBSCRIPTION_ID_START),
            "customer_id": Ref("parent.customer_id"),
            "product_name": Ref("extra.product_name"),
            ("plan_tier", "_base_price"): PickBy("product_name", catalogs.product_tiers),
            "billing_frequency": Pick(catalogs.billing_frequencies),
            "start_date": DaysFrom("parent.created_date", 0, 90, cap="as_of"),
            "end_date": When(_churned_account, Derived(_churn_end_date)),
            "renewal_date": Derived(lambda ctx: add_months(ctx.row["start_date"], 12)),
            "status": Lookup("parent.account_status", SUBSCRIPTION_STATUS_BY_ACCOUNT),
            "discount_percent": Derived(_discount_percent),
            "mrr_amount": Derived(_mrr_amount),
            "arr_amount": Derived(lambda ctx: ctx.row["mrr_amount"] * 12),
            "contract_term_months": Pick(catalogs.contract_terms),
            "auto_renew": Chance(0.80),
            "cancellation_reason": When(_churned_account, Pick(catalogs.cancellation_reasons)),
        },
    )


def _invoice_status(ctx: RowContext, catalogs: ReferenceCatalogs) -> str:
    if ctx.row["due_date"] < ctx.as_of:
        return catalogs.settled_invoice_statuses.sample_one(ctx.rng)
    return catalogs.open_invoice_statuses.sample_one(ctx.rng)


def invoice_spec(catalogs: ReferenceCatalogs) -> EntitySpec[Invoice]:
    return EntitySpec(
        "invoices",
        Invoice,
        {
            "invoice_id": SequenceId("INV"),
            "customer_id": Ref("parent.customer_id"),
            "subscription_id": Ref("parent.subscription_id"),
            "invoice_date": Ref("extra.invoice_date"),
            "due_date": Derived(
                lambda ctx: ctx.row["invoice_date"] + timedelta(days=INVOICE_DUE_DAYS)
            ),
            "amount": Ref("extra.amount"),
            "tax_amount": Derived(lambda ctx: money(ctx.row["amount"] * INVOICE_TAX_RATE)),
            "total_amount": Derived(lambda ctx: ctx.row["amount"] + ctx.row["tax_amount"]),
            "status": Derived(lambda ctx: _invoice_status(ctx, catalogs)),
            "paid_date": When(
                Equals("status", ("Paid",)),
                DaysFrom("invoice_date", 0, 30, cap="as_of"),
            ),
            "payment_method": Pick(catalogs.payment_methods),
        },
    )


def billing_dates(subscription: Subscription, as_of: date) -> list[date]:
    """Invoice dates for a subscription: one per billing period.

    Periods start on ``start_date`` and run until the end date (exclusive)
    or the as-of date (inclusive), at most 24 periods.
    """
    period = 1 if subscription.billing_frequency == "Monthly" else 12
    dates: list[date] = []
    while len(dates) < MAX_INVOICES_PER_SUBSCRIPTION:
        invoice_date = add_months(subscription.start_date, period * len(dates))
        if subscription.end_date is not None and invoice_date >= subscription.end_date:
            break
        if invoice_date > as_of:
            break
        dates.append(invoice_date)
    return dates


@STAGES.register("customers", description="Customer accounts (root entity)")
def generate_customers(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[Customer]:
    spec = customer_spec(catalogs, config)
    ctx = RowContext(fake, as_of=config.as_of)
    rows = [spec.render(ctx.at(i)) for i in range(config.customers)]
    log_generation("customers", len(rows))
    return rows


@STAGES.register("users", depends_on=["customers"], description="Users per customer")
def generate_users(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[User]:
    customers: Any = parents.require("customers", stage="users")
    spec = user_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[User] = []
    for customer in customers:
        low, high = catalogs.users_per_segment[customer.segment]
        for position in range(ctx.rng.randint(low, high)):
            row_ctx = ctx.at(
                len(rows),
                parent=customer,
                extras={"is_primary_contact": position == 0},
            )
            rows.append(spec.render(row_ctx))

    log_generation("users", len(rows))
    return rows


@STAGES.register(
    "subscriptions",
    depends_on=["customers"],
    description="Product subscriptions per customer",
)
def generate_subscriptions(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[Subscription]:
    customers: Any = parents.require("customers", stage="subscriptions")
    spec = subscription_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[Subscription] = []
    for customer in customers:
        count = catalogs.subscriptions_per_segment[customer.segment]
        for product in catalogs.products.sample_distinct(count, ctx.rng):
            row_ctx = ctx.at(len(rows), parent=customer, extras={"product_name": product})
            rows.append(spec.render(row_ctx))

    log_generation("subscriptions", len(rows))
    return rows


@STAGES.register(
    "invoices",
    depends_on=["subscriptions"],
    description="Billing period invoices per subscription",
)
def generate_invoices(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[Invoice]:
    subscriptions: Any = parents.require("subscriptions", stage="invoices")
    spec = invoice_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[Invoice] = []
    for subscription in subscriptions:
        period_amount = (
            subscription.mrr_amount
            if subscription.billing_frequency == "Monthly"
            else subscription.arr_amount
        )
        for invoice_date in billing_dates(subscription, config.as_of):
            row_ctx = ctx.at(
                len(rows),
                parent=subscription,
                extras={"invoice_date": invoice_date, "amount": period_amount},
            )
            rows.append(spec.render(row_ctx))

    log_generation("invoices", len(rows))
    return rows
