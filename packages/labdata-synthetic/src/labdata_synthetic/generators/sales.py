"""Sales pipeline stages: leads and opportunities.

Leads are independent of the customer base. Funnel milestone dates are
offsets from the lead's creation date; with funnel ordering enforced they
are clamped into mql <= sql <= conversion. Opportunities are opened for a
share of qualified and converted leads.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from faker import Faker

from labdata_synthetic.catalogs import (
    CLOSED_STAGES,
    OPPORTUNITY_LEAD_STATUSES,
    ReferenceCatalogs,
)
from labdata_synthetic.config import GeneratorConfig
from labdata_synthetic.fields import (
    Const,
    DaysFrom,
    Derived,
    EntitySpec,
    Equals,
    HoursFrom,
    Maybe,
    Phone,
    Pick,
    Ref,
    RowContext,
    SequenceId,
    Template,
    When,
)
from labdata_synthetic.generators.base import STAGES, StageResults, log_generation
from labdata_synthetic.schemas.sales import Lead, Opportunity

OPPORTUNITY_RATE = 0.80
FUNNEL_DATES = ("mql_date", "sql_date", "conversion_date")


def order_funnel_dates(row: dict[str, Any], ctx: RowContext | None = None) -> dict[str, Any]:
    """Clamp present funnel dates so each is on or after the earlier ones.

    Example:
        >>> order_funnel_dates(
        ...     {"mql_date": date(2025, 3, 10), "sql_date": date(2025, 3, 1),
        ...      "conversion_date": None}
        ... )["sql_date"]
        datetime.date(2025, 3, 10)
    """
    latest: date | None = None
    for name in FUNNEL_DATES:
        value = row[name]
        if value is None:
            continue
        if latest is not None and value < latest:
            row[name] = latest
        latest = row[name]
    return row


def _whole_dollars(low: int, high: int) -> Derived:
    return Derived(lambda ctx: Decimal(ctx.rng.randint(low, high)))


def lead_spec(catalogs: ReferenceCatalogs, config: GeneratorConfig) -> EntitySpec[Lead]:
    return EntitySpec(
        "leads",
        Lead,
        {
            "lead_id": SequenceId("LEAD"),
            "_prefix": Pick(catalogs.lead_firm_prefixes),
            "_suffix": Pick(catalogs.lead_firm_suffixes),
            "company_name": Template("{_prefix} {_suffix}"),
            "_first": Pick(catalogs.lead_first_names),
            "_last": Pick(catalogs.lead_last_names),
            "contact_name": Template("{_first} {_last}"),
            "contact_email": Derived(
                lambda ctx: f"{ctx.row['_first'].lower()}.{ctx.row['_last'].lower()}@example.com"
            ),
            "contact_phone": Phone(),
            ("lead_source", "lead_source_detail"): Pick(catalogs.lead_sources),
            "industry": Pick(catalogs.lead_industries),
            "company_size": Pick(catalogs.lead_company_sizes),
            "created_date": HoursFrom("now", 0, 8760, sign=-1),
            "_created_day": Derived(lambda ctx: ctx.row["created_date"].date()),
            "assigned_sdr": Pick(catalogs.sdrs),
            "lead_status": Pick(catalogs.lead_statuses),
            "mql_date": Maybe(0.60, DaysFrom("_created_day", 1, 14, cap="as_of")),
            "sql_date": Maybe(0.40, DaysFrom("_created_day", 7, 30, cap="as_of")),
            "conversion_date": Maybe(0.15, DaysFrom("_created_day", 14, 60, cap="as_of")),
            "converted_customer_id": Const(None),
            "utm_source": Pick(catalogs.utm_sources),
            "utm_medium": Pick(catalogs.utm_mediums),
            "utm_campaign": Pick(catalogs.utm_campaigns),
        },
        finalize=order_funnel_dates if config.enforce_funnel_order else None,
    )


def _days_in_pipeline(ctx: RowContext) -> int:
    closed = ctx.row["actual_close_date"] or ctx.as_of
    return (closed - ctx.row["created_date"]).days


def opportunity_spec(catalogs: ReferenceCatalogs) -> EntitySpec[Opportunity]:
    return EntitySpec(
        "opportunities",
        Opportunity,
        {
            "opportunity_id": SequenceId("OPP"),
            "lead_id": Ref("parent.lead_id"),
            "customer_id": Const(None),
            "_company": Ref("parent.company_name"),
            "_name_suffix": Pick(catalogs.opportunity_name_suffixes),
            "opportunity_name": Template("{_company} - {_name_suffix}"),
            "opportunity_type": Pick(catalogs.opportunity_types),
            ("stage", "probability"): Pick(catalogs.opportunity_stages),
            "amount": _whole_dollars(5000, 100000),
            "arr_value": _whole_dollars(5000, 100000),
            "created_date": Derived(lambda ctx: ctx.parent.created_date.date()),
            "close_date": DaysFrom("created_date", 30, 120),
            "actual_close_date": When(
                Equals("stage", CLOSED_STAGES),
                DaysFrom("created_date", 30, 90, cap="as_of"),
            ),
            "owner": Pick(catalogs.opportunity_owners),
            "products_interested": Pick(catalogs.products_interested),
            "competitor": Pick(catalogs.competitors),
            "loss_reason": When(Equals("stage", ("Closed Lost",)), Pick(catalogs.loss_reasons)),
            "win_reason": When(Equals("stage", ("Closed Won",)), Pick(catalogs.win_reasons)),
            "days_in_pipeline": Derived(_days_in_pipeline),
        },
    )


@STAGES.register("leads", description="Marketing and sales leads")
def generate_leads(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[Lead]:
    spec = lead_spec(catalogs, config)
    ctx = RowContext(fake, as_of=config.as_of)
    rows = [spec.render(ctx.at(i)) for i in range(config.leads)]
    log_generation("leads", len(rows))
    return rows


@STAGES.register(
    "opportunities",
    depends_on=["leads"],
    description="Opportunities for qualified and converted leads",
)
def generate_opportunities(
    parents: StageResults,
    catalogs: ReferenceCatalogs,
    fake: Faker,
    config: GeneratorConfig,
) -> list[Opportunity]:
    leads: Any = parents.require("leads", stage="opportunities")
    spec = opportunity_spec(catalogs)
    ctx = RowContext(fake, as_of=config.as_of)

    rows: list[Opportunity] = []
    for lead in leads:
        if lead.lead_status not in OPPORTUNITY_LEAD_STATUSES:
            continue
        if ctx.rng.random() >= OPPORTUNITY_RATE:
            continue
        rows.append(spec.render(ctx.at(len(rows), parent=lead)))

    log_generation("opportunities", len(rows))
    return rows
