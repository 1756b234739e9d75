# main.py
# Entry point for the cricket bot - registers all handlers and starts polling

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
)

from .config import BOT_TOKEN, DATABASE_URL
from .services import GameServices

# Import all handlers
from .handlers import (
    # Basic commands
    start,
    help_command,
    coins_command,
    profile_command,
    myid_command,
    history_command,
    leaderboard_command,
    # Game commands
    live_command,
    stake_command,
    bowl_command,
    leave_command,
    # Admin commands
    admin_command,
    startmatch_command,
    stopmatch_command,
    pausematch_command,
    resumematch_command,
    addcoins_command,
    resetcoins_command,
    userhistory_command,
    broadcast_command,
    # Callbacks
    button_callback,
)

logger = logging.getLogger(__name__)


async def error_handler(update: object, context):
    """Handle unhandled exceptions."""
    logger.error(f"Unhandled exception: {context.error}", exc_info=context.error)

    try:
        if isinstance(update, Update) and update.effective_message:
            await update.effective_message.reply_html(
                "❌ <b>An unexpected error occurred</b>\n\n"
                "Please try again later. If the problem persists, contact an admin."
            )
    except Exception as e:
        logger.error(f"Error in error handler: {e}")


def build_application(services: GameServices) -> Application:
    """Create the Telegram application with every handler registered."""
    application = Application.builder().token(BOT_TOKEN).build()
    application.bot_data['services'] = services

    # Add error handler
    application.add_error_handler(error_handler)

    # ==================== COMMAND HANDLERS ====================

    # Basic commands
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("coins", coins_command))
    application.add_handler(CommandHandler("balance", coins_command))  # Alias
    application.add_handler(CommandHandler("bal", coins_command))  # Alias
    application.add_handler(CommandHandler("profile", profile_command))
    application.add_handler(CommandHandler("myid", myid_command))
    application.add_handler(CommandHandler("history", history_command))
    application.add_handler(CommandHandler("leaderboard", leaderboard_command))

    # Game commands
    application.add_handler(CommandHandler("live", live_command))
    application.add_handler(CommandHandler("stake", stake_command))
    application.add_handler(CommandHandler("bowl", bowl_command))
    application.add_handler(CommandHandler("leave", leave_command))

    # Admin commands
    application.add_handler(CommandHandler("admin", admin_command))
    application.add_handler(CommandHandler("startmatch", startmatch_command))
    application.add_handler(CommandHandler("stopmatch", stopmatch_command))
    application.add_handler(CommandHandler("pausematch", pausematch_command))
    application.add_handler(CommandHandler("resumematch", resumematch_command))
    application.add_handler(CommandHandler("addcoins", addcoins_command))
    application.add_handler(CommandHandler("resetcoins", resetcoins_command))
    application.add_handler(CommandHandler("userhistory", userhistory_command))
    application.add_handler(CommandHandler("broadcast", broadcast_command))

    # ==================== OTHER HANDLERS ====================

    # Callback query handler (inline buttons)
    application.add_handler(CallbackQueryHandler(button_callback))

    return application


def main():
    """Main function to start the bot."""
    if not BOT_TOKEN:
        raise ValueError("BOT_TOKEN is not set. Put it in the environment or a .env file.")

    services = GameServices.from_url(DATABASE_URL)
    application = build_application(services)

    # Start the bot
    logger.info("Bot starting...")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
