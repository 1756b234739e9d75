# handlers/games.py
# Game commands: /live, /stake, /bowl, /leave, and the settlement flow

import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes

from ..config import PREDICTION_TYPES, STAKE_PRESETS
from ..errors import NotFoundError, NotJoinedError
from ..models import SettlementResult
from ..utils.decorators import handle_errors
from ..utils.helpers import (
    get_services,
    parse_positive_int,
    format_dashboard,
    format_settlement,
    format_ball_update,
    prediction_label,
)

logger = logging.getLogger(__name__)


def game_keyboard() -> InlineKeyboardMarkup:
    """Prediction, stake and action buttons shown under the live dashboard."""
    prediction_buttons = [
        InlineKeyboardButton(prediction_label(key), callback_data=f"predict_{key}")
        for key in PREDICTION_TYPES
    ]
    keyboard = [prediction_buttons[i:i + 2] for i in range(0, len(prediction_buttons), 2)]
    keyboard.append([
        InlineKeyboardButton(f"💰 Bet {amount}", callback_data=f"bet_{amount}")
        for amount in STAKE_PRESETS
    ])
    keyboard.append([
        InlineKeyboardButton("🏏 Bowl!", callback_data="confirm_ball"),
        InlineKeyboardButton("🔄 Refresh", callback_data="refresh_live"),
    ])
    keyboard.append([
        InlineKeyboardButton("❌ Leave Match", callback_data="leave_match"),
    ])
    return InlineKeyboardMarkup(keyboard)


def after_ball_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("🔁 Same again", callback_data="repeat_ball"),
            InlineKeyboardButton("📊 Dashboard", callback_data="refresh_live"),
        ]
    ])


def join_live_match(services, user):
    """
    Register the user if needed and seat them in the live match.

    Returns:
        Tuple of (Match, Session)
    """
    services.store.get_or_create_user(user.id, user.username or user.first_name)
    match = services.store.get_live_match()
    if match is None:
        raise NotFoundError("No live match right now. Wait for the next one to start!")
    session = services.sessions.join(user.id, match.id)
    return match, session


def dashboard_text(services, user_id: int) -> str:
    session = services.sessions.get(user_id)
    if session is None:
        raise NotJoinedError("Use /live to join the current match first")
    match = services.store.get_match(session.match_id)
    summary = services.store.match_summary(match.id)
    return format_dashboard(match, summary, session)


async def edit_dashboard(query, context: ContextTypes.DEFAULT_TYPE, user_id: int):
    """Redraw the dashboard message the button was pressed on."""
    text = dashboard_text(get_services(context), user_id)
    try:
        await query.edit_message_text(
            text,
            reply_markup=game_keyboard(),
            parse_mode=ParseMode.HTML
        )
    except BadRequest as e:
        # Pressing a button that changes nothing leaves the text identical
        if "not modified" not in str(e).lower():
            raise


async def notify_ball_update(context: ContextTypes.DEFAULT_TYPE, result: SettlementResult):
    """Send the ball that was just bowled to everyone else in the match."""
    services = get_services(context)
    for member_id in services.sessions.members(result.match_id):
        if member_id == result.user_id:
            continue
        try:
            await context.bot.send_message(
                chat_id=member_id,
                text=format_ball_update(result),
                parse_mode=ParseMode.HTML
            )
        except TelegramError as e:
            logger.warning(f"Cannot send ball update to user {member_id}: {e}")

    if result.progress.completed:
        services.sessions.end_match(result.match_id)


async def settle_for_user(context: ContextTypes.DEFAULT_TYPE, user_id: int) -> SettlementResult:
    """Settle the user's pending prediction and tell the rest of the match."""
    services = get_services(context)
    async with services.sessions.lock_for(user_id):
        result = services.settlement.settle(user_id)
    await notify_ball_update(context, result)
    return result


@handle_errors
async def live_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /live command - join the live match and show the dashboard."""
    services = get_services(context)
    match, session = join_live_match(services, update.effective_user)
    summary = services.store.match_summary(match.id)

    await update.message.reply_html(
        f"{format_dashboard(match, summary, session)}\n\n"
        f"🎯 Pick a prediction and a stake, then tap <b>🏏 Bowl!</b>",
        reply_markup=game_keyboard()
    )


@handle_errors
async def stake_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /stake command - set the coins wagered per prediction."""
    if not context.args:
        await update.message.reply_html(
            "💰 <b>Set Stake</b>\n\n"
            "Usage: /stake &lt;amount&gt;\n"
            "Example: /stake 50"
        )
        return

    user_id = update.effective_user.id
    amount = parse_positive_int(context.args[0])
    session = get_services(context).sessions.set_stake(user_id, amount)

    await update.message.reply_html(f"✅ Stake set to <b>{session.stake} coins</b>")


@handle_errors
async def bowl_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /bowl command - settle the pending prediction."""
    result = await settle_for_user(context, update.effective_user.id)
    await update.message.reply_html(
        format_settlement(result),
        reply_markup=after_ball_keyboard()
    )


@handle_errors
async def leave_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle the /leave command - leave the current match."""
    session = get_services(context).sessions.leave(update.effective_user.id)
    if session is None:
        await update.message.reply_html("ℹ️ You are not in a match.")
        return
    await update.message.reply_html("👋 You left the match. Use /live to join again.")
