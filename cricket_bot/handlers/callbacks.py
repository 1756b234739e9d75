# handlers/callbacks.py
# All callback query handlers for inline buttons

import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from ..errors import InvalidStakeError
from ..utils.decorators import handle_errors
from ..utils.helpers import is_admin, get_services, parse_positive_int, format_settlement
from .admin import (
    ADMIN_ONLY,
    start_match_action,
    stop_match_action,
    pause_match_action,
    resume_match_action,
)
from .games import (
    after_ball_keyboard,
    edit_dashboard,
    join_live_match,
    settle_for_user,
)

logger = logging.getLogger(__name__)

ADMIN_ACTIONS = {
    "admin_start_match": start_match_action,
    "admin_stop_match": stop_match_action,
    "admin_pause_match": pause_match_action,
    "admin_resume_match": resume_match_action,
}


async def _bowl(query, context: ContextTypes.DEFAULT_TYPE, user_id: int):
    result = await settle_for_user(context, user_id)
    await query.message.reply_html(
        format_settlement(result),
        reply_markup=after_ball_keyboard()
    )


@handle_errors
async def button_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle all inline button callbacks."""
    query = update.callback_query
    await query.answer()

    user_id = query.from_user.id
    data = query.data
    services = get_services(context)

    # Prediction buttons
    if data.startswith("predict_"):
        services.sessions.set_prediction(user_id, data[len("predict_"):])
        await edit_dashboard(query, context, user_id)
        return

    # Stake buttons
    if data.startswith("bet_"):
        amount = parse_positive_int(data[len("bet_"):])
        if amount is None:
            raise InvalidStakeError("Stake must be a positive whole number of coins")
        services.sessions.set_stake(user_id, amount)
        await edit_dashboard(query, context, user_id)
        return

    if data == "confirm_ball":
        await _bowl(query, context, user_id)
        return

    if data == "repeat_ball":
        services.sessions.repeat_prediction(user_id)
        await _bowl(query, context, user_id)
        return

    if data == "refresh_live":
        session = services.sessions.get(user_id)
        if session is None or services.store.get_match(session.match_id).status != 'live':
            join_live_match(services, query.from_user)
        await edit_dashboard(query, context, user_id)
        return

    if data == "leave_match":
        services.sessions.leave(user_id)
        await query.edit_message_text(
            "👋 You left the match. Use /live to join again.",
            parse_mode=ParseMode.HTML
        )
        return

    # Admin panel buttons
    action = ADMIN_ACTIONS.get(data)
    if action is not None:
        if not is_admin(user_id):
            await query.edit_message_text(ADMIN_ONLY, parse_mode=ParseMode.HTML)
            return
        await query.edit_message_text(await action(context, user_id), parse_mode=ParseMode.HTML)
        return

    logger.warning(f"Unknown callback data from user {user_id}: {data}")
