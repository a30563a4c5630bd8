"""
handlers/common.py
------------------
Shared helpers for the bot handlers.
The SubscriptionService instance lives in ``application.bot_data`` so every
handler works against the same loaded store.
"""

from telegram.ext import ContextTypes

from services.aggregates import AnalyticsPeriod
from services.subscription_service import SubscriptionService

SERVICE_KEY = "subscription_service"


def get_service(context: ContextTypes.DEFAULT_TYPE) -> SubscriptionService:
    """Return the shared service registered by main()."""
    return context.bot_data[SERVICE_KEY]


def parse_period(args: list[str] | None) -> AnalyticsPeriod | None:
    """
    Read an optional month/year argument.

    Returns:
        The period (month when no argument is given), or None if the argument is invalid.
    """
    if not args:
        return AnalyticsPeriod.MONTH
    value = args[0].strip().lower()
    if value in {"month", "monthly", "m"}:
        return AnalyticsPeriod.MONTH
    if value in {"year", "yearly", "y"}:
        return AnalyticsPeriod.YEAR
    return None
