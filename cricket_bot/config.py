# config.py
# Configuration constants, tokens, and prediction definitions for the cricket bot

import logging
import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

# ==================== LOGGING CONFIGURATION ====================
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL, logging.INFO)
)
logger = logging.getLogger(__name__)

# ==================== BOT CONFIGURATION ====================
BOT_TOKEN = os.environ.get("BOT_TOKEN", "")
ADMIN_IDS = {
    int(admin_id) for admin_id in os.environ.get("ADMIN_IDS", "").split(",")
    if admin_id.strip()
}
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///cricket_bot.db")

# ==================== COINS & STAKES ====================
INITIAL_COINS = int(os.environ.get("INITIAL_COINS", 1000))
DEFAULT_STAKE = int(os.environ.get("DEFAULT_STAKE", 10))
STAKE_PRESETS = (10, 50, 100)

# ==================== MATCH SETTINGS ====================
DEFAULT_MATCH_NAME = "Cricket T20 Match"
DEFAULT_TOTAL_OVERS = 20
BALLS_PER_OVER = 6
MAX_WICKETS = 10
MAX_CONFLICT_RETRIES = 3

# ==================== BALL OUTCOME DISTRIBUTION ====================
# Contiguous buckets over [0, 1), checked in this order.
# "wicket" or the number of runs scored off the ball.
OUTCOME_PROBABILITIES = (
    ('wicket', Decimal('0.10')),
    (6, Decimal('0.15')),
    (4, Decimal('0.20')),
    (2, Decimal('0.20')),
    (1, Decimal('0.15')),
    (0, Decimal('0.20')),
)

# ==================== PREDICTION TYPES CONFIGURATION ====================
# 'runs' is the exact run count that wins, None means the ball must be a wicket.
PREDICTION_TYPES = {
    'dot_ball': {'label': 'Dot Ball', 'emoji': '🔴', 'runs': 0,
                 'multiplier': Decimal('1.8'), 'min_bet': 10, 'max_bet': 150},
    '2_runs': {'label': '2 Runs', 'emoji': '✌️', 'runs': 2,
               'multiplier': Decimal('1.5'), 'min_bet': 10, 'max_bet': 100},
    '4_runs': {'label': 'Boundary (4)', 'emoji': '🏏', 'runs': 4,
               'multiplier': Decimal('2.0'), 'min_bet': 10, 'max_bet': 200},
    '6_runs': {'label': 'Six (6)', 'emoji': '🚀', 'runs': 6,
               'multiplier': Decimal('3.0'), 'min_bet': 10, 'max_bet': 300},
    'wicket': {'label': 'Wicket', 'emoji': '🎯', 'runs': None,
               'multiplier': Decimal('5.0'), 'min_bet': 20, 'max_bet': 500},
}
