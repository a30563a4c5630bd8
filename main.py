"""
main.py
-------
Entry point for the SubTrack Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Load the subscription store (which runs a renewal pass).
    - Register the command handlers and start polling.
"""

from datetime import date

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

import config
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from handlers.analytics_handler import (
    analytics_command,
    chart_command,
    dashboard_command,
    overdue_command,
    upcoming_command,
)
from handlers.common import SERVICE_KEY
from handlers.export_handler import export_csv_command, export_excel_command
from handlers.start_handler import help_command, myid_command, start_command
from handlers.subscription_handler import (
    add_command,
    delete_command,
    edit_command,
    renew_command,
    subscriptions_command,
    toggle_command,
)
from repositories.subscription_storage import PostgresKeyValueStorage
from repositories.subscription_store import SubscriptionStore
from services.subscription_service import SubscriptionService
from utils.logger import get_logger

logger = get_logger(__name__)

COMMANDS = [
    ("start", start_command, "🚀 Start the bot"),
    ("help", help_command, "📖 Show help"),
    ("subscriptions", subscriptions_command, "📋 List subscriptions"),
    ("add", add_command, "➕ Add a subscription"),
    ("edit", edit_command, "✏️ Edit a subscription"),
    ("delete", delete_command, "🗑️ Delete a subscription"),
    ("toggle", toggle_command, "⏯️ Pause or resume"),
    ("renew", renew_command, "🔁 Advance overdue dates"),
    ("dashboard", dashboard_command, "📊 Dashboard"),
    ("upcoming", upcoming_command, "🔔 Upcoming renewals"),
    ("overdue", overdue_command, "🔴 Overdue subscriptions"),
    ("analytics", analytics_command, "📈 Spending analytics"),
    ("chart", chart_command, "🥧 Category chart"),
    ("export_csv", export_csv_command, "📄 Export CSV"),
    ("export_excel", export_excel_command, "📊 Export Excel"),
    ("myid", myid_command, "🆔 Your Telegram id"),
]


def build_service() -> SubscriptionService:
    """Create the store over PostgreSQL, load it and wrap it in the service."""
    storage = PostgresKeyValueStorage(config.STORAGE_KEY)
    store = SubscriptionStore(storage, seed_sample_data=config.SEED_SAMPLE_DATA)
    records = store.load(date.today())
    logger.info(f"Loaded {len(records)} subscriptions")
    return SubscriptionService(
        store,
        upcoming_window_days=config.UPCOMING_WINDOW_DAYS,
        currency_symbol=config.CURRENCY_SYMBOL,
    )


async def set_bot_commands(application: Application) -> None:
    """Register the bot commands menu in Telegram on startup."""
    await application.bot.set_my_commands(
        [BotCommand(name, description) for name, _, description in COMMANDS]
    )
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Load subscriptions ─────────────────────────────
    service = build_service()

    # ── 3. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(config.TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()
    app.bot_data[SERVICE_KEY] = service

    # ── 4. Register command handlers ──────────────────────
    for name, callback, _ in COMMANDS:
        app.add_handler(CommandHandler(name, callback))

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 SubTrack is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 6. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("SubTrack stopped.")


if __name__ == "__main__":
    main()
