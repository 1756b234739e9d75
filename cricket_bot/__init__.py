# cricket_bot/__init__.py
# Ball-by-ball cricket prediction bot for Telegram

__version__ = "0.1.0"
