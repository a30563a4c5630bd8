"""
handlers/analytics_handler.py
-----------------------------
Read-only views: dashboard, upcoming, overdue, analytics and the category chart.
"""

from telegram import Update
from telegram.ext import ContextTypes

import config
from handlers.common import get_service, parse_period
from security.auth import authorized_only
from services.chart_service import ChartService
from utils.logger import get_logger

logger = get_logger(__name__)
chart_service = ChartService(config.CURRENCY_SYMBOL)

PERIOD_USAGE = "⚠️ Usage: {command} [month|year]"


@authorized_only
async def dashboard_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /dashboard - totals plus overdue and upcoming subscriptions."""
    await update.message.reply_text(get_service(context).dashboard())


@authorized_only
async def upcoming_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /upcoming."""
    await update.message.reply_text(get_service(context).upcoming())


@authorized_only
async def overdue_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /overdue."""
    await update.message.reply_text(get_service(context).overdue())


@authorized_only
async def analytics_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /analytics [month|year] - category breakdown and statistics.

    Usage:
        /analytics        → monthly figures
        /analytics year   → yearly figures
    """
    period = parse_period(context.args)
    if period is None:
        await update.message.reply_text(PERIOD_USAGE.format(command="/analytics"))
        return
    await update.message.reply_text(get_service(context).analytics(period))


@authorized_only
async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /chart [month|year] - send the spending-by-category chart."""
    period = parse_period(context.args)
    if period is None:
        await update.message.reply_text(PERIOD_USAGE.format(command="/chart"))
        return

    records = get_service(context).current_records()
    buf = chart_service.generate_category_chart(records, period)
    if buf:
        await update.message.reply_photo(photo=buf, caption="📊 Spending by category")
    else:
        await update.message.reply_text("📭 No active subscriptions to chart.")
