"""Reference data catalogs.

Static weighted lookup tables used by every stage: firm name parts,
firmographics, people, products and price points, support taxonomy, and the
sales funnel vocabulary. Catalogs with a single uniform weight are plain
lookup tables.

Values that describe the same row travel together as tuples, e.g.
``(industry, sub_industry)`` or ``(plan_tier, base_price)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from labdata_synthetic.distributions.weighted import WeightedDistribution

W = WeightedDistribution

# Firmographics

SEGMENTS = W.uniform(["SMB", "Mid-Market", "Enterprise"], name="segments")

INDUSTRIES = W.uniform(
    [
        ("RIA", "Independent RIA"),
        ("RIA", "Large RIA"),
        ("Broker-Dealer", "Independent Broker-Dealer"),
        ("Broker-Dealer", "Regional BD"),
        ("Bank/Credit Union", "Community Bank"),
        ("Bank/Credit Union", "Credit Union"),
        ("Insurance", "Life & Annuity"),
        ("Insurance", "P&C"),
        ("Insurance", "IMO/FMO"),
        ("Wirehouse", "National Wirehouse"),
    ],
    name="industries",
)

STATES = W.uniform(
    [
        "CA", "TX", "FL", "NY", "IL", "PA", "OH", "GA", "NC", "MI",
        "NJ", "VA", "WA", "AZ", "MA", "TN", "IN", "MO", "MD", "CO",
    ],
    name="states",
)

CITIES_BY_STATE: dict[str, WeightedDistribution[str]] = {
    "CA": W.uniform(["San Francisco", "Los Angeles", "San Diego", "Sacramento"], name="cities_ca"),
    "TX": W.uniform(["Houston", "Dallas", "Austin", "San Antonio"], name="cities_tx"),
    "FL": W.uniform(["Miami", "Tampa", "Orlando", "Jacksonville"], name="cities_fl"),
    "NY": W.uniform(["New York", "Buffalo", "Albany", "Rochester"], name="cities_ny"),
}
DEFAULT_CITY = "Metro Area"

STATE_TIMEZONES: dict[str, str] = {
    **dict.fromkeys(("CA", "WA"), "America/Los_Angeles"),
    **dict.fromkeys(("TX", "IL", "MO", "TN"), "America/Chicago"),
    **dict.fromkeys(("AZ", "CO"), "America/Denver"),
}
DEFAULT_TIMEZONE = "America/New_York"

ACQUISITION_CHANNELS = W.uniform(
    ["Direct", "Partner", "Referral", "Marketing", "Event", "Webinar"],
    name="acquisition_channels",
)

CSM_OWNERS = W.uniform(
    [
        "Sarah Mitchell", "James Chen", "Emily Rodriguez", "Michael Thompson", "Lisa Park",
        "David Kumar", "Jennifer Walsh", "Robert Garcia", "Amanda Foster", "Chris Martinez",
    ],
    name="csm_owners",
)

SALES_OWNERS = W.uniform(
    [
        "Tom Brady", "Jessica Williams", "Marcus Johnson", "Rachel Kim", "Andrew Scott",
        "Stephanie Lee", "Brandon Davis", "Michelle Taylor", "Kevin Brown", "Nicole Adams",
    ],
    name="sales_owners",
)

FIRM_PREFIXES = W.uniform(
    [
        "Pinnacle", "Summit", "Heritage", "Legacy", "Cornerstone", "Beacon", "Horizon",
        "Sterling", "Meridian", "Capstone", "Evergreen", "Vanguard", "Premier", "Elite",
        "Pacific", "Atlantic", "Mountain", "Valley", "Oak", "Maple", "Cedar", "Pine",
        "Golden", "Silver", "Diamond", "Sapphire", "Emerald", "Crystal", "Royal", "Noble",
    ],
    name="firm_prefixes",
)

FIRM_SUFFIXES = W.uniform(
    [
        "Financial Advisors", "Wealth Management", "Financial Group", "Advisory Services",
        "Capital Partners", "Investment Advisors", "Financial Planning", "Wealth Partners",
        "Asset Management", "Financial Services", "Advisory Group", "Wealth Advisors",
    ],
    name="firm_suffixes",
)

ACCOUNT_STATUSES = W(
    {"Active": 85, "Churned": 7, "Paused": 5, "Trial": 3},
    name="account_statuses",
)

EMPLOYEE_BANDS_BY_SEGMENT: dict[str, WeightedDistribution[str]] = {
    "SMB": W.uniform(["1-5", "6-20"], name="employee_bands_smb"),
    "Mid-Market": W.uniform(["21-50", "51-100"], name="employee_bands_mid_market"),
    "Enterprise": W.uniform(["100+"], name="employee_bands_enterprise"),
}

AUM_BANDS_BY_SEGMENT: dict[str, WeightedDistribution[str]] = {
    "SMB": W.uniform(["$0-50M", "$50-100M"], name="aum_bands_smb"),
    "Mid-Market": W.uniform(["$100-500M", "$500M-1B"], name="aum_bands_mid_market"),
    "Enterprise": W.uniform(["$1-5B", "$5B+"], name="aum_bands_enterprise"),
}

# People

FIRST_NAMES = W.uniform(
    [
        "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
        "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
        "Thomas", "Sarah", "Charles", "Karen", "Christopher", "Nancy", "Daniel", "Lisa",
        "Matthew", "Betty", "Anthony", "Margaret", "Mark", "Sandra", "Donald", "Ashley",
        "Steven", "Kimberly", "Paul", "Emily", "Andrew", "Donna", "Joshua", "Michelle",
    ],
    name="first_names",
)

LAST_NAMES = W.uniform(
    [
        "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
        "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
        "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson",
        "White", "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson",
    ],
    name="last_names",
)

USER_ROLES = W(
    {"Admin": 0.15, "Advisor": 0.60, "Staff": 0.20, "Compliance Officer": 0.05},
    name="user_roles",
)

USER_TITLES = W.uniform(
    [
        "Financial Advisor", "Senior Advisor", "Wealth Manager", "Client Relationship Manager",
        "Practice Manager", "Operations Manager", "Administrative Assistant", "Compliance Manager",
        "Partner", "Managing Director", "Vice President", "Associate Advisor",
    ],
    name="user_titles",
)

ACTIVE_ACCOUNT_USER_STATUSES = W({"Active": 92, "Inactive": 8}, name="user_statuses")

USERS_PER_SEGMENT: dict[str, tuple[int, int]] = {
    "SMB": (2, 5),
    "Mid-Market": (4, 8),
    "Enterprise": (6, 15),
}

# Products and billing

PRODUCTS = W.uniform(
    ["Marketing Suite", "Website Pro", "MyRepChat", "Do It For Me"],
    name="products",
)

PRODUCT_TIERS: dict[str, WeightedDistribution[tuple[str, Decimal]]] = {
    "Marketing Suite": W(
        [
            (("Starter", Decimal("149")), 0.30),
            (("Professional", Decimal("299")), 0.45),
            (("Enterprise", Decimal("599")), 0.20),
        ],
        name="tiers_marketing_suite",
    ),
    "Website Pro": W(
        [
            (("Starter", Decimal("99")), 0.25),
            (("Professional", Decimal("199")), 0.50),
            (("Enterprise", Decimal("399")), 0.20),
        ],
        name="tiers_website_pro",
    ),
    "MyRepChat": W(
        [
            (("Starter", Decimal("49")), 0.35),
            (("Professional", Decimal("99")), 0.45),
            (("Enterprise", Decimal("199")), 0.15),
        ],
        name="tiers_myrepchat",
    ),
    "Do It For Me": W(
        [
            (("Standard", Decimal("499")), 0.40),
            (("Premium", Decimal("899")), 0.35),
            (("Elite", Decimal("1499")), 0.15),
        ],
        name="tiers_do_it_for_me",
    ),
}

SUBSCRIPTIONS_PER_SEGMENT: dict[str, int] = {"SMB": 2, "Mid-Market": 3, "Enterprise": 4}

SUBSCRIPTION_STATUS_BY_ACCOUNT: dict[str, str] = {
    "Active": "Active",
    "Churned": "Cancelled",
    "Paused": "Pending",
    "Trial": "Active",
}

BILLING_FREQUENCIES = W({"Annual": 70, "Monthly": 30}, name="billing_frequencies")

CONTRACT_TERMS = W({12: 70, 24: 30}, name="contract_terms")

CANCELLATION_REASONS = W.uniform(
    [
        "Switched to competitor", "Budget constraints", "Not using the product",
        "Missing features", "Poor support experience", "Company closed",
    ],
    name="cancellation_reasons",
)

PAYMENT_METHODS = W(
    {"Credit Card": 45, "ACH": 35, "Wire": 10, "Check": 10},
    name="payment_methods",
)

SETTLED_INVOICE_STATUSES = W({"Paid": 92, "Overdue": 5, "Void": 3}, name="settled_invoice_statuses")

OPEN_INVOICE_STATUSES = W({"Pending": 70, "Paid": 30}, name="open_invoice_statuses")

INVOICE_TAX_RATE = Decimal("0.08")

# Engagement

HEALTH_TRENDS = W(
    {"Improving": 33, "Stable": 33, "Declining": 34},
    name="health_trends",
)

NPS_PRODUCTS = W.uniform(
    ["Marketing Suite", "Website Pro", "MyRepChat", "Do It For Me", "Overall Platform"],
    name="nps_products",
)

NPS_FEEDBACK = W(
    [
        (None, 40),
        ("Great product, love the templates!", 20),
        ("Support could be faster but overall good experience.", 10),
        ("Would love more customization options.", 10),
        ("The platform saves me so much time every week.", 10),
        ("Compliance features are essential for our practice.", 10),
    ],
    name="nps_feedback",
)

TICKET_CATEGORIES = W(
    [
        (("Technical", "Login Issues"), 0.15),
        (("Technical", "Email Delivery"), 0.12),
        (("Technical", "Integration Problems"), 0.10),
        (("Technical", "Performance Issues"), 0.08),
        (("Billing", "Invoice Question"), 0.10),
        (("Billing", "Refund Request"), 0.05),
        (("Billing", "Upgrade/Downgrade"), 0.08),
        (("Feature Request", "New Feature"), 0.07),
        (("Feature Request", "Enhancement"), 0.05),
        (("Training", "How-To Question"), 0.10),
        (("Training", "Best Practices"), 0.05),
        (("Compliance", "Content Review"), 0.03),
        (("Compliance", "Archiving Question"), 0.02),
    ],
    name="ticket_categories",
)

TICKET_PRIORITIES = W(
    {"Medium": 50, "Low": 30, "High": 15, "Urgent": 5},
    name="ticket_priorities",
)

TICKET_STATUSES = W(
    {"Resolved": 70, "Closed": 10, "In Progress": 10, "Waiting on Customer": 5, "Open": 5},
    name="ticket_statuses",
)

TICKET_CHANNELS = W(
    {"Email": 40, "Chat": 30, "Phone": 20, "Self-Service": 10},
    name="ticket_channels",
)

SUPPORT_AGENTS = W.uniform(
    [
        "Alex Thompson", "Jordan Rivera", "Casey Morgan", "Taylor Kim", "Morgan Chen",
        "Riley Johnson", "Jamie Lee", "Drew Martinez", "Quinn Wilson", "Avery Davis",
    ],
    name="support_agents",
)

# Counter column per tracked feature, used to derive feature adoption.
FEATURE_COUNTERS: dict[str, str] = {
    "Email Campaigns": "emails_sent",
    "Email Templates": "email_templates_used",
    "Social Publishing": "social_posts_published",
    "Website Lead Capture": "website_leads_generated",
    "Blog Publishing": "blog_posts_published",
    "MyRepChat Messaging": "myrepchat_messages_sent",
    "Events": "events_created",
    "Greeting Cards": "greeting_cards_sent",
}

# Sales pipeline

LEAD_SOURCES = W(
    [
        (("Website", "Contact Form"), 0.25),
        (("Website", "Demo Request"), 0.20),
        (("Webinar", "2025 Marketing Trends"), 0.15),
        (("Webinar", "Compliance Best Practices"), 0.10),
        (("Referral", "Customer Referral"), 0.10),
        (("Partner", "Broker-Dealer Partner"), 0.08),
        (("Event", "Industry Conference"), 0.05),
        (("Content Download", "2025 Marketing Guide"), 0.07),
    ],
    name="lead_sources",
)

SDRS = W.uniform(
    ["Mike Chen", "Sarah Park", "Jason Williams", "Emily Davis", "Chris Martinez"],
    name="sdrs",
)

LEAD_INDUSTRIES = W.uniform(["RIA", "Broker-Dealer", "Insurance", "Bank"], name="lead_industries")

LEAD_COMPANY_SIZES = W.uniform(["1-10", "11-50", "51-200", "200+"], name="lead_company_sizes")

LEAD_FIRM_PREFIXES = W.uniform(
    [
        "Pinnacle", "Summit", "Heritage", "Legacy", "Cornerstone",
        "Beacon", "Horizon", "Sterling", "Meridian", "Capstone",
    ],
    name="lead_firm_prefixes",
)

LEAD_FIRM_SUFFIXES = W.uniform(
    [
        "Financial Advisors", "Wealth Management", "Financial Group",
        "Advisory Services", "Capital Partners",
    ],
    name="lead_firm_suffixes",
)

LEAD_FIRST_NAMES = W.uniform(
    [
        "James", "Mary", "John", "Patricia", "Robert",
        "Jennifer", "Michael", "Linda", "William", "Elizabeth",
    ],
    name="lead_first_names",
)

LEAD_LAST_NAMES = W.uniform(
    ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis"],
    name="lead_last_names",
)

LEAD_STATUSES = W(
    {"New": 20, "Contacted": 20, "Qualified": 30, "Converted": 15, "Unqualified": 15},
    name="lead_statuses",
)

UTM_SOURCES = W({"google": 50, "linkedin": 30, "direct": 20}, name="utm_sources")

UTM_MEDIUMS = W({"cpc": 40, "organic": 30, "referral": 30}, name="utm_mediums")

UTM_CAMPAIGNS = W({"brand_awareness_2025": 50, "lead_gen_q1": 50}, name="utm_campaigns")

OPPORTUNITY_LEAD_STATUSES: tuple[str, ...] = ("Qualified", "Converted")

OPPORTUNITY_OWNERS = W.uniform(
    ["Tom Brady", "Jessica Williams", "Marcus Johnson", "Rachel Kim", "Andrew Scott"],
    name="opportunity_owners",
)

OPPORTUNITY_STAGES = W.uniform(
    [
        ("Discovery", 10),
        ("Demo", 25),
        ("Proposal", 50),
        ("Negotiation", 75),
        ("Closed Won", 100),
        ("Closed Lost", 0),
    ],
    name="opportunity_stages",
)

CLOSED_STAGES: tuple[str, ...] = ("Closed Won", "Closed Lost")

OPPORTUNITY_TYPES = W(
    {"New Business": 70, "Upsell": 20, "Cross-sell": 10},
    name="opportunity_types",
)

OPPORTUNITY_NAME_SUFFIXES = W(
    {"New Business": 70, "Platform Upgrade": 30},
    name="opportunity_name_suffixes",
)

PRODUCTS_INTERESTED = W(
    {
        "Marketing Suite": 30,
        "Marketing Suite, Website Pro": 20,
        "Marketing Suite, MyRepChat": 20,
        "Full Platform Bundle": 20,
        "Do It For Me": 10,
    },
    name="products_interested",
)

COMPETITORS = W(
    [("Broadridge", 30), ("Snappy Kraken", 20), ("Twenty Over Ten", 20), (None, 30)],
    name="competitors",
)

LOSS_REASONS = W(
    {"Price too high": 30, "Went with competitor": 30, "No decision made": 40},
    name="loss_reasons",
)

WIN_REASONS = W(
    {"Strong product fit": 30, "Compliance features": 30, "Great demo experience": 40},
    name="win_reasons",
)


@dataclass(frozen=True)
class ReferenceCatalogs:
    """Bundle of catalogs handed to every stage.

    Defaults are the module-level catalogs; tests and callers can swap in
    replacements with ``dataclasses.replace``.
    """

    segments: WeightedDistribution[str] = SEGMENTS
    industries: WeightedDistribution[tuple[str, str]] = INDUSTRIES
    states: WeightedDistribution[str] = STATES
    cities_by_state: dict[str, WeightedDistribution[str]] = field(
        default_factory=lambda: dict(CITIES_BY_STATE)
    )
    state_timezones: dict[str, str] = field(default_factory=lambda: dict(STATE_TIMEZONES))
    acquisition_channels: WeightedDistribution[str] = ACQUISITION_CHANNELS
    csm_owners: WeightedDistribution[str] = CSM_OWNERS
    sales_owners: WeightedDistribution[str] = SALES_OWNERS
    firm_prefixes: WeightedDistribution[str] = FIRM_PREFIXES
    firm_suffixes: WeightedDistribution[str] = FIRM_SUFFIXES
    account_statuses: WeightedDistribution[str] = ACCOUNT_STATUSES
    employee_bands: dict[str, WeightedDistribution[str]] = field(
        default_factory=lambda: dict(EMPLOYEE_BANDS_BY_SEGMENT)
    )
    aum_bands: dict[str, WeightedDistribution[str]] = field(
        default_factory=lambda: dict(AUM_BANDS_BY_SEGMENT)
    )
    first_names: WeightedDistribution[str] = FIRST_NAMES
    last_names: WeightedDistribution[str] = LAST_NAMES
    user_roles: WeightedDistribution[str] = USER_ROLES
    user_titles: WeightedDistribution[str] = USER_TITLES
    user_statuses: WeightedDistribution[str] = ACTIVE_ACCOUNT_USER_STATUSES
    users_per_segment: dict[str, tuple[int, int]] = field(
        default_factory=lambda: dict(USERS_PER_SEGMENT)
    )
    products: WeightedDistribution[str] = PRODUCTS
    product_tiers: dict[str, WeightedDistribution[tuple[str, Decimal]]] = field(
        default_factory=lambda: dict(PRODUCT_TIERS)
    )
    subscriptions_per_segment: dict[str, int] = field(
        default_factory=lambda: dict(SUBSCRIPTIONS_PER_SEGMENT)
    )
    billing_frequencies: WeightedDistribution[str] = BILLING_FREQUENCIES
    contract_terms: WeightedDistribution[int] = CONTRACT_TERMS
    cancellation_reasons: WeightedDistribution[str] = CANCELLATION_REASONS
    payment_methods: WeightedDistribution[str] = PAYMENT_METHODS
    settled_invoice_statuses: WeightedDistribution[str] = SETTLED_INVOICE_STATUSES
    open_invoice_statuses: WeightedDistribution[str] = OPEN_INVOICE_STATUSES
    health_trends: WeightedDistribution[str] = HEALTH_TRENDS
    nps_products: WeightedDistribution[str] = NPS_PRODUCTS
    nps_feedback: WeightedDistribution[str | None] = NPS_FEEDBACK
    ticket_categories: WeightedDistribution[tuple[str, str]] = TICKET_CATEGORIES
    ticket_priorities: WeightedDistribution[str] = TICKET_PRIORITIES
    ticket_statuses: WeightedDistribution[str] = TICKET_STATUSES
    ticket_channels: WeightedDistribution[str] = TICKET_CHANNELS
    support_agents: WeightedDistribution[str] = SUPPORT_AGENTS
    lead_sources: WeightedDistribution[tuple[str, str]] = LEAD_SOURCES
    sdrs: WeightedDistribution[str] = SDRS
    lead_industries: WeightedDistribution[str] = LEAD_INDUSTRIES
    lead_company_sizes: WeightedDistribution[str] = LEAD_COMPANY_SIZES
    lead_firm_prefixes: WeightedDistribution[str] = LEAD_FIRM_PREFIXES
    lead_firm_suffixes: WeightedDistribution[str] = LEAD_FIRM_SUFFIXES
    lead_first_names: WeightedDistribution[str] = LEAD_FIRST_NAMES
    lead_last_names: WeightedDistribution[str] = LEAD_LAST_NAMES
    lead_statuses: WeightedDistribution[str] = LEAD_STATUSES
    utm_sources: WeightedDistribution[str] = UTM_SOURCES
    utm_mediums: WeightedDistribution[str] = UTM_MEDIUMS
    utm_campaigns: WeightedDistribution[str] = UTM_CAMPAIGNS
    opportunity_owners: WeightedDistribution[str] = OPPORTUNITY_OWNERS
    opportunity_stages: WeightedDistribution[tuple[str, int]] = OPPORTUNITY_STAGES
    opportunity_types: WeightedDistribution[str] = OPPORTUNITY_TYPES
    opportunity_name_suffixes: WeightedDistribution[str] = OPPORTUNITY_NAME_SUFFIXES
    products_interested: WeightedDistribution[str] = PRODUCTS_INTERESTED
    competitors: WeightedDistribution[str | None] = COMPETITORS
    loss_reasons: WeightedDistribution[str] = LOSS_REASONS
    win_reasons: WeightedDistribution[str] = WIN_REASONS
