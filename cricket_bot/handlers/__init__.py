# handlers/__init__.py
# Handler modules for the cricket bot

from .basic import (
    start,
    help_command,
    coins_command,
    profile_command,
    myid_command,
    history_command,
    leaderboard_command,
)

from .games import (
    live_command,
    stake_command,
    bowl_command,
    leave_command,
)

from .admin import (
    admin_command,
    startmatch_command,
    stopmatch_command,
    pausematch_command,
    resumematch_command,
    addcoins_command,
    resetcoins_command,
    userhistory_command,
    broadcast_command,
)

from .callbacks import button_callback

__all__ = [
    # Basic
    'start',
    'help_command',
    'coins_command',
    'profile_command',
    'myid_command',
    'history_command',
    'leaderboard_command',
    # Games
    'live_command',
    'stake_command',
    'bowl_command',
    'leave_command',
    # Admin
    'admin_command',
    'startmatch_command',
    'stopmatch_command',
    'pausematch_command',
    'resumematch_command',
    'addcoins_command',
    'resetcoins_command',
    'userhistory_command',
    'broadcast_command',
    # Callbacks
    'button_callback',
]
