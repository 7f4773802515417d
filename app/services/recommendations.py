from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import MarkupRule, SmsLog
from app.services.pricing import DefaultMarkupPolicy, get_default_markup
from app.services.profit import get_profit_analytics


USAGE_WINDOW_DAYS = 30
HIGH_VOLUME_THRESHOLD = 10000
VOLUME_DISCOUNT_STEP = Decimal("5")
MINIMUM_SUGGESTED_MARKUP = Decimal("10")
TOP_COUNTRIES = 5


def extract_country_hint(recipient: str) -> str:
    # First three characters only; not an E.164 country-code parse.
    return str(recipient or "")[:3]


def get_usage_stats(db: Session, user_id: int, days: int = USAGE_WINDOW_DAYS) -> dict:
    since = datetime.now(timezone.utc) - timedelta(days=days)
    logs = db.query(SmsLog).filter(SmsLog.user_id == user_id, SmsLog.sent_at >= since).all()

    total_volume = 0
    total_cost = Decimal("0")
    countries = Counter()
    for log in logs:
        recipients = log.recipients or []
        total_volume += len(recipients)
        total_cost += Decimal(str(log.cost or 0))
        for recipient in recipients:
            countries[extract_country_hint(recipient)] += 1

    # most_common keeps first-seen order among equal counts.
    top_countries = [code for code, _ in countries.most_common(TOP_COUNTRIES) if code]
    return {
        "total_volume": total_volume,
        "total_cost": total_cost,
        # The window is a single month, so monthly average and total coincide.
        "average_monthly_volume": total_volume,
        "top_countries": top_countries,
        "average_cost_per_sms": (total_cost / total_volume) if total_volume else Decimal("0"),
    }


def get_pricing_recommendations(db: Session, user_id: int, *, policy: DefaultMarkupPolicy | None = None) -> dict:
    """Advisory markup suggestions. Nothing here changes a reseller's rules."""
    usage = get_usage_stats(db, user_id)
    current_markup = get_default_markup(db, user_id, policy)
    recommendations = []

    if usage["average_monthly_volume"] > HIGH_VOLUME_THRESHOLD:
        recommendations.append(
            {
                "type": "VOLUME_DISCOUNT",
                "title": "High Volume Discount",
                "description": "Consider offering volume discounts for high-usage clients",
                "suggested_markup": max(current_markup - VOLUME_DISCOUNT_STEP, MINIMUM_SUGGESTED_MARKUP),
                "potential_savings": Decimal(usage["average_monthly_volume"]) * Decimal("0.001"),
            }
        )

    if usage["top_countries"]:
        recommendations.append(
            {
                "type": "COUNTRY_SPECIFIC",
                "title": "Country-Specific Pricing",
                "description": f"Optimize pricing for top countries: {', '.join(usage['top_countries'])}",
                "suggested_action": "Create country-specific markup rules",
            }
        )

    active_rules = (
        db.query(MarkupRule)
        .filter(MarkupRule.user_id == user_id, MarkupRule.is_active.is_(True))
        .count()
    )
    if not active_rules:
        recommendations.append(
            {
                "type": "SETUP",
                "title": "Create Your First Markup Rule",
                "description": "Set up markup rules to start earning profit on SMS services",
                "suggested_action": f"Create a basic percentage markup rule (currently defaulting to {current_markup}%)",
            }
        )

    analytics = get_profit_analytics(db, user_id, USAGE_WINDOW_DAYS)
    if analytics["total_profit"] == 0:
        recommendations.append(
            {
                "type": "REVENUE",
                "title": "No Profit Generated",
                "description": "No profit was recorded in the last 30 days",
                "suggested_action": "Review your pricing strategy and ensure markup rules are active",
            }
        )

    return {
        "recommendations": recommendations,
        "current_markup": current_markup,
        "usage_stats": usage,
    }
