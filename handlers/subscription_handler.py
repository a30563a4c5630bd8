"""
handlers/subscription_handler.py
--------------------------------
Commands that list and change subscriptions.
Arguments are parsed here; validation and persistence live in SubscriptionService.
"""

import re

from telegram import Update
from telegram.ext import ContextTypes

from handlers.common import get_service
from models.subscription import SubscriptionCategory
from security.auth import authorized_only
from utils.logger import get_logger

logger = get_logger(__name__)

_ADD_FIELDS = ("name", "price", "billing_cycle", "category", "next_billing_date", "repetition", "color", "notes")
_EDIT_PATTERN = re.compile(r"(\w+):\s*(.+?)(?=\s+\w+:|$)")
_NOTES_PATTERN = re.compile(r"(?:^|\s)notes:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_CATEGORIES = {c.value for c in SubscriptionCategory}

ADD_USAGE = (
    "📝 Add a subscription\n\n"
    "Format:\n"
    "/add name | price | cycle [| category | date | repeat | color | notes]\n\n"
    "Examples:\n"
    "• /add Netflix | 15.99 | monthly\n"
    "• /add Adobe | 52.99 | monthly | productivity | 2026-03-01 | yearly\n"
    "• /add Gym | 9 | weekly | fitness | | disabled | orange | student rate\n\n"
    "Leave a field empty to use its default."
)


def _parse_add(text: str) -> dict | None:
    """
    Split "name | price | cycle | ..." into keyword arguments for add_manual.

    Returns:
        The fields, or None when name, price or cycle is missing.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 3 or not all(parts[:3]):
        return None
    if len(parts) > len(_ADD_FIELDS):
        # a "|" inside the notes
        parts = parts[:len(_ADD_FIELDS) - 1] + [" | ".join(parts[len(_ADD_FIELDS) - 1:])]
    parts += [""] * (len(_ADD_FIELDS) - len(parts))
    fields = {field: value or None for field, value in zip(_ADD_FIELDS, parts)}
    fields["notes"] = fields["notes"] or ""
    return fields


def _parse_edit(text: str) -> dict[str, str]:
    """
    Turn "price:12 name:Netflix Premium" into {"price": "12", "name": "Netflix Premium"}.

    "notes:" takes the rest of the line, so notes may contain "word:" (URLs, times).
    """
    notes = _NOTES_PATTERN.search(text)
    fields_text = text[:notes.start()] if notes else text
    changes = {key.lower(): value.strip() for key, value in _EDIT_PATTERN.findall(fields_text)}
    if notes:
        changes["notes"] = notes.group(1).strip()
    return changes


@authorized_only
async def subscriptions_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /subscriptions [category] [search] - list active subscriptions by name.

    Examples:
        /subscriptions
        /subscriptions streaming
        /subscriptions music spot
    """
    args = list(context.args or [])
    category = None
    if args and args[0].lower() in _CATEGORIES:
        category = args.pop(0)
    msg = get_service(context).list_subscriptions(" ".join(args), category)
    await update.message.reply_text(msg)


@authorized_only
async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /add - add a subscription from the pipe-separated format."""
    if not context.args:
        await update.message.reply_text(ADD_USAGE)
        return

    fields = _parse_add(" ".join(context.args))
    if fields is None:
        await update.message.reply_text("⚠️ Name, price and cycle are required.\n\n" + ADD_USAGE)
        return

    result = get_service(context).add_manual(**fields)
    await update.message.reply_text(result["message"])


@authorized_only
async def edit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /edit <id> field:value ... - change one or more fields.

    Examples:
        /edit 1a2b3c4d price:17.99
        /edit 1a2b3c4d cycle:yearly repeat:yearly date:2027-01-15
        /edit 1a2b3c4d name:Netflix Premium notes:shared with family
    """
    if not context.args or len(context.args) < 2:
        await update.message.reply_text(
            "✏️ Usage: /edit <id> field:value ...\n"
            "Fields: name, price, cycle, category, date, repeat, color, notes\n"
            "notes: goes last and keeps the rest of the line\n"
            "Example: /edit 1a2b3c4d price:17.99 repeat:disabled"
        )
        return

    record_id = context.args[0]
    changes = _parse_edit(" ".join(context.args[1:]))
    msg = get_service(context).edit_subscription(record_id, changes)
    await update.message.reply_text(msg)


@authorized_only
async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delete <id>."""
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /delete <id>\nExample: /delete 1a2b3c4d")
        return
    msg = get_service(context).delete_subscription(context.args[0])
    await update.message.reply_text(msg)


@authorized_only
async def toggle_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /toggle <id> - pause or resume a subscription."""
    if not context.args:
        await update.message.reply_text("⚠️ Usage: /toggle <id>\nExample: /toggle 1a2b3c4d")
        return
    msg = get_service(context).toggle_subscription(context.args[0])
    await update.message.reply_text(msg)


@authorized_only
async def renew_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /renew - run the renewal pass now."""
    msg = get_service(context).renew_now()
    await update.message.reply_text(msg)
