# handlers/admin.py
# Admin commands: match lifecycle, coin adjustments, user history, broadcast

import logging
from html import escape

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from ..config import DEFAULT_MATCH_NAME, DEFAULT_TOTAL_OVERS
from ..utils.decorators import handle_errors
from ..utils.helpers import (
    is_admin,
    get_services,
    parse_positive_int,
    format_scoreboard,
    history_text,
)
from .. import wallet

logger = logging.getLogger(__name__)

ADMIN_ONLY = "❌ <b>Admin only command.</b>"


async def notify_users(context: ContextTypes.DEFAULT_TYPE, text: str, user_ids=None):
    """
    Send an HTML message to many users.

    Args:
        context: Bot context
        text: Message to send
        user_ids: Recipients, every registered user when omitted

    Returns:
        Tuple of (sent, failed) counts
    """
    if user_ids is None:
        user_ids = get_services(context).store.list_user_ids()

    sent = failed = 0
    for user_id in user_ids:
        try:
            await context.bot.send_message(chat_id=user_id, text=text, parse_mode=ParseMode.HTML)
            sent += 1
        except TelegramError as e:
            # User might have blocked the bot
            logger.warning(f"Cannot notify user {user_id}: {e}")
            failed += 1
    return sent, failed


# ==================== MATCH LIFECYCLE ====================

async def start_match_action(context: ContextTypes.DEFAULT_TYPE, admin_id: int,
                             name: str = DEFAULT_MATCH_NAME,
                             total_overs: int = DEFAULT_TOTAL_OVERS) -> str:
    match = get_services(context).matches.start_match(admin_id, name, total_overs)

    sent, failed = await notify_users(
        context,
        f"🎉 <b>NEW MATCH STARTED!</b>\n\n"
        f"🏏 <b>{escape(match.name)}</b> is now LIVE!\n\n"
        f"Tap /live to join the action!"
    )
    return (
        f"✅ <b>Match Started!</b>\n\n"
        f"Match ID: <code>{match.id}</code>\n"
        f"Name: {escape(match.name)}\n"
        f"Overs: {match.total_overs}\n\n"
        f"📢 Notified {sent} players ({failed} failed)."
    )


async def stop_match_action(context: ContextTypes.DEFAULT_TYPE, admin_id: int) -> str:
    match = get_services(context).matches.stop_match(admin_id)
    return (
        f"🛑 <b>Match Stopped!</b>\n\n"
        f"{format_scoreboard(match)}"
    )


async def pause_match_action(context: ContextTypes.DEFAULT_TYPE, admin_id: int) -> str:
    match = get_services(context).matches.pause_match(admin_id)
    return f"⏸️ <b>Match Paused</b>\n\n{escape(match.name)} (ID <code>{match.id}</code>)"


async def resume_match_action(context: ContextTypes.DEFAULT_TYPE, admin_id: int,
                              match_id=None) -> str:
    match = get_services(context).matches.resume_match(admin_id, match_id)
    return f"▶️ <b>Match Resumed</b>\n\n{escape(match.name)} (ID <code>{match.id}</code>) is LIVE again."


@handle_errors
async def admin_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /admin command - show the admin panel."""
    if not is_admin(update.effective_user.id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    keyboard = [
        [
            InlineKeyboardButton("▶️ Start Match", callback_data="admin_start_match"),
            InlineKeyboardButton("⏹️ Stop Match", callback_data="admin_stop_match"),
        ],
        [
            InlineKeyboardButton("⏸️ Pause Match", callback_data="admin_pause_match"),
            InlineKeyboardButton("⏯️ Resume Match", callback_data="admin_resume_match"),
        ],
    ]
    await update.message.reply_html(
        "👑 <b>ADMIN PANEL</b>\n\n"
        "Select an action:\n\n"
        "📝 <b>Commands:</b>\n"
        "/startmatch [name] [overs]\n"
        "/stopmatch, /pausematch, /resumematch [id]\n"
        "/addcoins &lt;user_id&gt; &lt;amount&gt;\n"
        "/resetcoins &lt;user_id&gt;\n"
        "/userhistory &lt;user_id&gt;\n"
        "/broadcast &lt;message&gt;",
        reply_markup=InlineKeyboardMarkup(keyboard)
    )


@handle_errors
async def startmatch_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /startmatch command. A trailing number sets the overs."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    args = list(context.args or [])
    total_overs = DEFAULT_TOTAL_OVERS
    if args and parse_positive_int(args[-1]) is not None:
        total_overs = parse_positive_int(args.pop())
    name = " ".join(args) or DEFAULT_MATCH_NAME

    await update.message.reply_html(await start_match_action(context, user_id, name, total_overs))


@handle_errors
async def stopmatch_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /stopmatch command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return
    await update.message.reply_html(await stop_match_action(context, user_id))


@handle_errors
async def pausematch_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /pausematch command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return
    await update.message.reply_html(await pause_match_action(context, user_id))


@handle_errors
async def resumematch_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /resumematch command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    match_id = parse_positive_int(context.args[0]) if context.args else None
    await update.message.reply_html(await resume_match_action(context, user_id, match_id))


# ==================== COINS ====================

@handle_errors
async def addcoins_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /addcoins command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    if not context.args or len(context.args) < 2:
        await update.message.reply_html(
            "💰 <b>Add Coins</b>\n\n"
            "Usage: /addcoins &lt;user_id&gt; &lt;amount&gt;\n"
            "Example: /addcoins 123456789 500"
        )
        return

    target_id = parse_positive_int(context.args[0])
    amount = parse_positive_int(context.args[1])
    if target_id is None or amount is None:
        await update.message.reply_html("❌ Invalid user ID or amount! Please enter positive numbers.")
        return

    new_balance = wallet.add_coins(get_services(context).store, user_id, target_id, amount)

    await update.message.reply_html(
        f"✅ <b>Coins Added!</b>\n\n"
        f"👤 User: <code>{target_id}</code>\n"
        f"➕ Added: <b>{amount:,} coins</b>\n"
        f"💰 New Balance: <b>{new_balance:,} coins</b>"
    )
    await notify_users(
        context,
        f"🎉 <b>COINS ADDED!</b>\n\n"
        f"Admin added <b>{amount:,} coins</b> to your account!\n\n"
        f"New balance: <b>{new_balance:,} coins</b>",
        user_ids=[target_id]
    )


@handle_errors
async def resetcoins_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /resetcoins command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    target_id = parse_positive_int(context.args[0]) if context.args else None
    if target_id is None:
        await update.message.reply_html("Usage: /resetcoins &lt;user_id&gt;")
        return

    new_balance = wallet.reset_coins(get_services(context).store, user_id, target_id)

    await update.message.reply_html(
        f"🔄 <b>Coins Reset!</b>\n\n"
        f"👤 User: <code>{target_id}</code>\n"
        f"💰 Reset to: <b>{new_balance:,} coins</b>"
    )
    await notify_users(
        context,
        f"🔄 <b>COINS RESET!</b>\n\nYour coins have been reset to <b>{new_balance:,}</b> by admin.",
        user_ids=[target_id]
    )


# ==================== REPORTING ====================

@handle_errors
async def userhistory_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /userhistory command."""
    if not is_admin(update.effective_user.id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    target_id = parse_positive_int(context.args[0]) if context.args else None
    if target_id is None:
        await update.message.reply_html("Usage: /userhistory &lt;user_id&gt;")
        return

    await update.message.reply_html(history_text(get_services(context).store, target_id, "USER HISTORY"))


@handle_errors
async def broadcast_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /broadcast command."""
    user_id = update.effective_user.id
    if not is_admin(user_id):
        await update.message.reply_html(ADMIN_ONLY)
        return

    message = " ".join(context.args or [])
    if not message:
        await update.message.reply_html("Usage: /broadcast &lt;message&gt;")
        return

    sent, failed = await notify_users(context, f"📢 <b>ADMIN BROADCAST</b>\n\n{escape(message)}")
    logger.info(f"Admin {user_id} broadcast to {sent} users ({failed} failed)")

    await update.message.reply_html(
        f"📢 <b>BROADCAST COMPLETE</b>\n\n"
        f"Sent to: {sent} users\n"
        f"Failed: {failed} users"
    )
