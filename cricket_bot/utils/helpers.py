# utils/helpers.py
# Helper functions for admin checks, service lookup, and message formatting

import logging
from html import escape
from typing import Optional

from telegram.ext import ContextTypes

from ..config import ADMIN_IDS, BALLS_PER_OVER, PREDICTION_TYPES
from ..match_state import next_ball_label
from ..models import Outcome, SettlementResult, Wicket

logger = logging.getLogger(__name__)

MATCH_STATUS_LABELS = {
    'pending': "⏳ Starting soon...",
    'live': "🔥 LIVE NOW",
    'completed': "✅ Match Completed",
    'paused': "⏸️ Match Paused",
}


def is_admin(user_id: int) -> bool:
    """Check if a user is an admin."""
    return user_id in ADMIN_IDS


def get_services(context: ContextTypes.DEFAULT_TYPE):
    """Fetch the GameServices stored in the application's bot_data."""
    return context.bot_data['services']


def get_user_link(user_id: int, name: str) -> str:
    """Generate an HTML user link for Telegram."""
    return f'<a href="tg://user?id={user_id}">{escape(name or "Player")}</a>'


def parse_positive_int(value: str) -> Optional[int]:
    """Parse a positive integer argument, returning None if it is not one."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def create_progress_bar(current: int, total: int, length: int = 10) -> str:
    """
    Create a text-based progress bar.

    Args:
        current: Current value
        total: Total/max value
        length: Length of the progress bar in characters

    Returns:
        String representation of progress bar
    """
    if total <= 0:
        filled = 0
    else:
        filled = min(length, int((current / total) * length))
    empty = length - filled
    return "▓" * filled + "░" * empty


def prediction_label(category: str) -> str:
    prediction = PREDICTION_TYPES.get(category)
    if prediction is None:
        return category
    return f"{prediction['emoji']} {prediction['label']} ({prediction['multiplier']}x)"


def format_outcome(outcome: Outcome) -> str:
    """Short headline for a ball outcome."""
    if isinstance(outcome, Wicket):
        return "🎳 WICKET!"
    if outcome.value == 6:
        return "💥 SIX!"
    if outcome.value == 4:
        return "🎯 FOUR!"
    if outcome.value == 0:
        return "⭕ Dot ball"
    return f"🏏 {outcome.describe()}"


def format_scoreboard(match) -> str:
    """Scoreboard block for a match row."""
    bowled = match.current_over * BALLS_PER_OVER + match.current_ball
    progress = create_progress_bar(bowled, match.total_overs * BALLS_PER_OVER)
    status = MATCH_STATUS_LABELS.get(match.status, match.status)
    return (
        f"🏏 <b>{escape(match.name)}</b>\n\n"
        f"📊 <b>SCOREBOARD</b>\n"
        f"Score: <b>{match.score}/{match.wickets}</b>\n"
        f"Overs: <b>{match.ball_label}</b> / {match.total_overs} {progress}\n"
        f"Run Rate: <b>{match.run_rate:.2f}</b>\n\n"
        f"⏰ {status}"
    )


def format_dashboard(match, summary: dict, session=None) -> str:
    """Live dashboard: scoreboard, crowd stats and the user's current pick."""
    text = (
        f"{format_scoreboard(match)}\n\n"
        f"👥 Players: <b>{summary['players']}</b> | "
        f"🎯 Predictions: <b>{summary['predictions']}</b>\n"
    )
    if match.last_ball_result:
        text += (
            f"\n🎯 <b>LAST BALL</b> ({match.ball_label})\n"
            f"<i>{escape(match.last_ball_result)}</i>\n"
        )
    if match.status == 'live':
        text += f"\n⏭️ Next ball: <b>{next_ball_label(match)}</b>\n"
    if session is not None:
        pick = prediction_label(session.prediction) if session.prediction else "None yet"
        text += (
            f"\n💰 Your stake: <b>{session.stake} coins</b>\n"
            f"🔮 Your prediction: <b>{pick}</b>\n"
        )
    if match.last_updated:
        text += f"\n🔄 Last updated: {match.last_updated:%H:%M:%S} UTC"
    return text


def format_settlement(result: SettlementResult) -> str:
    """Message shown to the player after their ball is bowled."""
    progress = result.progress
    if result.is_winner:
        verdict = (
            f"🎉 <b>YOU WON!</b>\n"
            f"💰 Winnings: <b>{result.winnings:,} coins</b>"
        )
    else:
        verdict = (
            f"😔 <b>You lost</b>\n"
            f"💸 Lost: <b>{result.stake:,} coins</b>"
        )

    text = (
        f"<b>Over {progress.label}</b> {format_outcome(result.outcome)}\n"
        f"<i>{escape(result.call.description)}</i>\n\n"
        f"🔮 Your prediction: {prediction_label(result.category)}\n"
        f"{verdict}\n\n"
        f"📊 Score: <b>{progress.score}/{progress.wickets}</b> "
        f"(RR {progress.run_rate:.2f})\n"
        f"💰 Balance: <b>{result.balance:,} coins</b>"
    )
    if progress.completed:
        text += "\n\n✅ <b>Innings complete!</b> Watch for the next match."
    return text


def format_ball_update(result: SettlementResult) -> str:
    """Short ball-by-ball update sent to the other players of a match."""
    progress = result.progress
    return (
        f"<b>{format_outcome(result.outcome)}</b> Over {progress.label}\n"
        f"<i>{escape(result.call.description)}</i>\n"
        f"📊 Score: <b>{progress.score}/{progress.wickets}</b>"
    )


def history_text(store, target_id: int, title: str) -> str:
    """Recent predictions and totals of one user."""
    user = store.get_user(target_id)
    history = store.recent_predictions(target_id)
    stats = store.user_stats(target_id)

    text = (
        f"📊 <b>{title}</b>\n\n"
        f"👤 User: {escape(user.display_name or 'N/A')} (<code>{target_id}</code>)\n"
        f"💰 Coins: <b>{user.balance:,}</b>\n"
    )
    if user.created_at:
        text += f"📅 Joined: {user.created_at:%Y-%m-%d}\n"

    if not history:
        text += "\nNo prediction history."
    else:
        text += "\n<b>RECENT PREDICTIONS:</b>\n\n"
        for idx, (prediction, match_name) in enumerate(history, 1):
            mark = "✅" if prediction.is_winner else "❌"
            text += (
                f"{idx}. {mark} {escape(match_name)}\n"
                f"   Ball: {prediction.ball_label} | Prediction: {prediction.category}\n"
                f"   Result: {escape(prediction.actual_result)}\n"
                f"   Bet: {prediction.stake} | Won: {prediction.winnings}\n\n"
            )

    total = stats['total_predictions']
    win_rate = (stats['wins'] / total * 100) if total else 0.0
    text += (
        f"\n📈 <b>STATISTICS:</b>\n"
        f"Total Predictions: {total}\n"
        f"Wins: {stats['wins']} ({win_rate:.1f}%)\n"
        f"Total Bet: {stats['total_bet']:,} coins\n"
        f"Total Won: {stats['total_won']:,} coins"
    )
    if stats['total_bet'] > 0:
        roi = (stats['total_won'] - stats['total_bet']) / stats['total_bet'] * 100
        text += f"\nROI: {roi:.1f}%"
    return text
