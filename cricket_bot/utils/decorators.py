# utils/decorators.py
# Error handling decorator for bot handlers: the one place typed errors become replies

import logging
from functools import wraps
from html import escape

from telegram import Update
from telegram.ext import ContextTypes
from telegram.error import TelegramError, BadRequest, Forbidden, NetworkError

from ..errors import (
    InsufficientFundsError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def _reply(update: Update, text: str):
    """Best-effort HTML reply to whatever message triggered the update."""
    try:
        if update and update.effective_message:
            await update.effective_message.reply_html(text)
    except TelegramError as e:
        logger.warning(f"Could not send error reply: {e}")


def handle_errors(func):
    """
    Decorator that wraps handler functions with comprehensive error handling.
    Translates game errors into replies and logs Telegram API and store failures.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        try:
            return await func(update, context, *args, **kwargs)
        except InsufficientFundsError as e:
            await _reply(
                update,
                "❌ <b>Insufficient balance!</b>\n\n"
                f"Your balance: <b>{e.balance:,} coins</b>\n"
                f"Stake: <b>{e.stake:,} coins</b>\n\n"
                "Lower your stake with /stake or the 💰 buttons."
            )
        except NotFoundError as e:
            await _reply(
                update,
                f"❌ <b>Not found</b>\n\n{escape(str(e))}\n\n"
                "Use /start to register or /live to see the current match."
            )
        except ValidationError as e:
            logger.debug(f"Rejected input in {func.__name__}: {e}")
            await _reply(update, f"⚠️ {escape(str(e))}")
        except StoreUnavailableError as e:
            logger.error(f"Store unavailable in {func.__name__}: {e}", exc_info=True)
            await _reply(
                update,
                "❌ <b>Something went wrong</b>\n\n"
                "Your coins are safe. Please try again in a moment."
            )
        except BadRequest as e:
            logger.error(f"BadRequest in {func.__name__}: {e}")
            await _reply(
                update,
                "❌ <b>Request Error</b>\n\n"
                "Something went wrong with your request. Please try again."
            )
        except Forbidden as e:
            logger.error(f"Forbidden in {func.__name__}: {e}")
        except NetworkError as e:
            logger.error(f"NetworkError in {func.__name__}: {e}")
            await _reply(
                update,
                "❌ <b>Network Error</b>\n\n"
                "Connection issue. Please try again later."
            )
        except TelegramError as e:
            logger.error(f"TelegramError in {func.__name__}: {e}")
            await _reply(
                update,
                "❌ <b>Error</b>\n\n"
                "An error occurred. Please try again."
            )
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
            await _reply(
                update,
                "❌ <b>Unexpected Error</b>\n\n"
                "Something went wrong. Please try again later."
            )
    return wrapper
