# utils/__init__.py
# Utility functions and decorators for the cricket bot

from .decorators import handle_errors
from .helpers import (
    is_admin,
    get_services,
    get_user_link,
    parse_positive_int,
    create_progress_bar,
    prediction_label,
    format_outcome,
    format_scoreboard,
    format_dashboard,
    format_settlement,
    format_ball_update,
    history_text,
)

__all__ = [
    'handle_errors',
    'is_admin',
    'get_services',
    'get_user_link',
    'parse_positive_int',
    'create_progress_bar',
    'prediction_label',
    'format_outcome',
    'format_scoreboard',
    'format_dashboard',
    'format_settlement',
    'format_ball_update',
    'history_text',
]
