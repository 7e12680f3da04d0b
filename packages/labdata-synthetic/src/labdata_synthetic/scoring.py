"""Derived score and bucket functions.

Pure functions shared by the generators and the invariant checks so that a
stored derived value and its later verification use the same arithmetic.
"""

from __future__ import annotations

# Component weights in percent; they sum to 100.
HEALTH_COMPONENT_WEIGHTS: dict[str, int] = {
    "usage_score": 25,
    "engagement_score": 20,
    "support_score": 20,
    "payment_score": 20,
    "expansion_score": 15,
}

CHURN_RISK_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (80, "Low"),
    (60, "Medium"),
    (40, "High"),
)


def overall_health_score(
    usage: int,
    engagement: int,
    support: int,
    payment: int,
    expansion: int,
) -> int:
    """Weighted health score, rounded half up.

    Integer arithmetic avoids binary float error at the .5 boundary.

    Example:
        >>> overall_health_score(80, 60, 100, 100, 40)
        78
    """
    components = {
        "usage_score": usage,
        "engagement_score": engagement,
        "support_score": support,
        "payment_score": payment,
        "expansion_score": expansion,
    }
    weighted = sum(HEALTH_COMPONENT_WEIGHTS[name] * score for name, score in components.items())
    return (weighted + 50) // 100


def churn_risk(overall: int) -> str:
    """Bucket an overall health score into a churn risk label."""
    for threshold, label in CHURN_RISK_THRESHOLDS:
        if overall >= threshold:
            return label
    return "Critical"


def nps_category(score: int) -> str:
    """Promoter (9-10), Passive (7-8) or Detractor (0-6)."""
    if score >= 9:
        return "Promoter"
    if score >= 7:
        return "Passive"
    return "Detractor"


def adoption_status(active_days: int, window_days: int) -> str:
    """Bucket feature usage by the share of window days it was used.

    Example:
        >>> adoption_status(0, 90)
        'Not Started'
        >>> adoption_status(60, 90)
        'Power User'
    """
    if active_days <= 0:
        return "Not Started"
    share = active_days / max(window_days, 1)
    if share < 0.10:
        return "Exploring"
    if share < 0.50:
        return "Adopted"
    return "Power User"
