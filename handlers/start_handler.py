"""
handlers/start_handler.py
--------------------------
Handles /start, /help and /myid.
"""

from telegram import Update
from telegram.ext import ContextTypes

from security.auth import authorized_only
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
🤖 Welcome to SubTrack!
Your personal subscription tracker 💳

📝 Manage subscriptions:
/add name | price | cycle [| category | date | repeat | color | notes]
/edit <id> price:12.99 cycle:yearly ...
/delete <id> - remove a subscription
/toggle <id> - pause or resume
/renew - move overdue billing dates forward now

📊 Views:
/subscriptions [category] [search] - active subscriptions
/dashboard - totals, overdue and upcoming
/upcoming - renewing in the next days
/overdue - past due with renewal disabled
/analytics [month|year] - spending breakdown
/chart [month|year] - category chart

📤 Export:
/export_csv - download as CSV
/export_excel - download as Excel

Cycles: weekly, monthly, quarterly, yearly
Renewal: disabled, weekly, monthly, quarterly, yearly
"""


@authorized_only
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start - greet the user."""
    user = update.effective_user
    logger.info(f"User {user.id} started the bot.")
    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I keep track of your subscriptions and their next billing dates.\n\n"
        f"Send /help to see every command."
    )


@authorized_only
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help - list the commands."""
    await update.message.reply_text(HELP_TEXT)


async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid - show the Telegram id to put in ALLOWED_USER_IDS."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your Telegram id: {user.id}\n"
        f"Add it to ALLOWED_USER_IDS in .env to lock the bot to you."
    )
