"""
security/auth.py
-----------------
Owner-only guard for the bot.
The subscription list is personal, so every handler is restricted to the
user ids listed in ALLOWED_USER_IDS.
"""

from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

import config
from utils.logger import get_logger

logger = get_logger(__name__)


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users.

    Behavior:
        - If ALLOWED_USER_IDS is empty, every user is allowed (dev mode).
        - Otherwise other users get a refusal and the attempt is logged.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        allowed = config.ALLOWED_USER_IDS
        if allowed and user.id not in allowed:
            logger.error(
                f"🚫 Unauthorized access attempt: user_id={user.id}, "
                f"username={user.username}"
            )
            await update.message.reply_text("⛔ Sorry, this is a private subscription tracker.")
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
