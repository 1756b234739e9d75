# handlers/basic.py
# Basic command handlers: /start, /help, /coins, /profile, /myid, /history, /leaderboard

from html import escape

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import ContextTypes

from ..config import INITIAL_COINS, PREDICTION_TYPES
from ..utils.decorators import handle_errors
from ..utils.helpers import is_admin, get_services, get_user_link, history_text


@handle_errors
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - register the user and show the welcome message."""
    user = update.effective_user
    services = get_services(context)
    profile, created = services.store.get_or_create_user(user.id, user.username or user.first_name)

    admin_badge = " 👑" if is_admin(user.id) else ""
    greeting = (
        f"🎁 You received <b>{INITIAL_COINS:,} free coins</b> to get started!\n\n"
        if created else
        "👋 Welcome back!\n\n"
    )

    welcome_text = (
        f"🏏 <b>Welcome to Cricket Predictions{admin_badge}</b>\n\n"
        f"{greeting}"
        f"📢 <b>How to play?</b>\n\n"
        f"1. Join the live match with /live\n"
        f"2. Pick what the next ball will be and how much to stake\n"
        f"3. Tap <b>🏏 Bowl!</b> and watch the result\n\n"
        f"💰 Balance: <b>{profile.balance:,} coins</b>"
    )

    keyboard = [
        [InlineKeyboardButton("🔥 Join Live Match", callback_data="refresh_live")]
    ]
    await update.message.reply_html(welcome_text, reply_markup=InlineKeyboardMarkup(keyboard))


@handle_errors
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show help information."""
    user_id = update.effective_user.id

    payouts = "\n".join(
        f"   {p['emoji']} {p['label']}: {p['multiplier']}x "
        f"(bet {p['min_bet']}-{p['max_bet']})"
        for p in PREDICTION_TYPES.values()
    )

    help_text = (
        "🎯 <b>How to Play:</b>\n\n"
        "1️⃣ /live - join the live match\n"
        "2️⃣ Pick a prediction with the buttons\n"
        "3️⃣ Set your stake with the 💰 buttons or /stake &lt;amount&gt;\n"
        "4️⃣ Tap 🏏 Bowl! (or send /bowl) to play the ball\n\n"
        "💸 <b>Payouts</b> (stake × multiplier):\n"
        f"{payouts}\n\n"
        "📋 <b>Commands:</b>\n"
        "/coins - Check your balance\n"
        "/profile - Your wins and losses\n"
        "/history - Your recent predictions\n"
        "/leaderboard - Richest players\n"
        "/leave - Leave the current match\n"
        "/myid - Show your Telegram ID"
    )

    if is_admin(user_id):
        help_text += (
            "\n\n👑 <b>Admin Commands:</b>\n"
            "/admin - Admin panel\n"
            "/startmatch [name] [overs] - Start a new match\n"
            "/stopmatch - Complete the current match\n"
            "/pausematch, /resumematch [id] - Pause or resume\n"
            "/addcoins &lt;user_id&gt; &lt;amount&gt; - Credit coins\n"
            "/resetcoins &lt;user_id&gt; - Reset to the starting balance\n"
            "/userhistory &lt;user_id&gt; - A user's predictions\n"
            "/broadcast &lt;message&gt; - Message every player"
        )

    await update.message.reply_html(help_text)


@handle_errors
async def coins_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /coins, /balance and /bal commands."""
    user = update.effective_user
    profile, _ = get_services(context).store.get_or_create_user(user.id, user.username or user.first_name)

    await update.message.reply_html(
        f"💰 <b>Your Balance</b>\n\n"
        f"<b>{profile.balance:,} coins</b>"
    )


@handle_errors
async def profile_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /profile command - show wins, losses and balance."""
    user = update.effective_user
    profile, _ = get_services(context).store.get_or_create_user(user.id, user.username or user.first_name)

    played = profile.wins + profile.losses
    win_rate = (profile.wins / played * 100) if played else 0.0

    text = (
        f"👤 <b>Profile</b> {get_user_link(user.id, profile.display_name)}\n\n"
        f"💰 Balance: <b>{profile.balance:,} coins</b>\n"
        f"🏆 Wins: <b>{profile.wins}</b>\n"
        f"💔 Losses: <b>{profile.losses}</b>\n"
        f"🎯 Win rate: <b>{win_rate:.1f}%</b>\n"
    )
    if profile.created_at:
        text += f"\n📅 Joined: {profile.created_at:%Y-%m-%d}"
    if profile.last_active:
        text += f"\n🕒 Last active: {profile.last_active:%Y-%m-%d %H:%M} UTC"

    await update.message.reply_html(text)


@handle_errors
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    await update.message.reply_html(
        f"🆔 Your Telegram ID: <code>{user.id}</code>\n"
        f"Name: {escape(user.first_name or '')}"
    )


@handle_errors
async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /history command - recent predictions and totals."""
    user = update.effective_user
    store = get_services(context).store
    store.get_or_create_user(user.id, user.username or user.first_name)

    await update.message.reply_html(history_text(store, user.id, "YOUR HISTORY"))


@handle_errors
async def leaderboard_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /leaderboard command - top players by balance."""
    top = get_services(context).store.top_users()
    if not top:
        await update.message.reply_html("🏆 No players yet. Be the first with /start!")
        return

    medals = {1: "🥇", 2: "🥈", 3: "🥉"}
    lines = [
        f"{medals.get(rank, f'{rank}.')} {escape(player.display_name or 'Player')} - "
        f"<b>{player.balance:,}</b> coins ({player.wins}W/{player.losses}L)"
        for rank, player in enumerate(top, 1)
    ]
    await update.message.reply_html("🏆 <b>LEADERBOARD</b>\n\n" + "\n".join(lines))
