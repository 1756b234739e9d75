# match_state.py
# Ball-by-ball match state advancement and admin match lifecycle

import logging
from typing import Optional

from .config import BALLS_PER_OVER, DEFAULT_MATCH_NAME, DEFAULT_TOTAL_OVERS, MAX_WICKETS
from .database import Match, Store, utcnow
from .errors import ConcurrencyConflictError, NotFoundError
from .models import MatchProgress, Outcome, Wicket

logger = logging.getLogger(__name__)


def next_ball_label(match: Match) -> str:
    """Label of the ball about to be bowled, e.g. '3.1' after '2.6'."""
    over, ball = match.current_over, match.current_ball + 1
    if ball > BALLS_PER_OVER:
        over, ball = over + 1, 1
    return f"{over}.{ball}"


def balls_bowled(over: int, ball: int) -> int:
    return over * BALLS_PER_OVER + ball


def run_rate(score: int, over: int, ball: int) -> float:
    bowled = balls_bowled(over, ball)
    if bowled == 0:
        return 0.0
    return round(score * BALLS_PER_OVER / bowled, 2)


class MatchStateAdvancer:
    """
    Applies a ball outcome to a match row.

    The new counters are written with a compare-and-swap on the row's
    version, so two players settling against the same match can never
    overwrite each other's ball. A lost race raises ConcurrencyConflictError
    and the caller decides whether to try again.
    """

    def __init__(self, store: Store):
        self.store = store

    def advance(self, match_id: int, outcome: Outcome,
                description: Optional[str] = None) -> MatchProgress:
        """
        Bowl one ball of a match.

        Args:
            match_id: Match to advance
            outcome: Drawn ball outcome
            description: Commentary kept as the match's last ball, defaults to the outcome

        Returns:
            MatchProgress with the counters after the ball
        """
        match = self.store.get_match(match_id)

        score, wickets = match.score, match.wickets
        if isinstance(outcome, Wicket):
            wickets += 1
        else:
            score += outcome.value

        over, ball = match.current_over, match.current_ball + 1
        if ball > BALLS_PER_OVER:
            over, ball = over + 1, 1

        values = {
            'current_over': over,
            'current_ball': ball,
            'score': score,
            'wickets': wickets,
            'run_rate': run_rate(score, over, ball),
            'last_ball_result': description or outcome.describe(),
        }

        innings_over = (balls_bowled(over, ball) >= match.total_overs * BALLS_PER_OVER
                        or wickets >= MAX_WICKETS)
        completed = innings_over and match.status == 'live'
        if completed:
            values['status'] = 'completed'
            values['ended_at'] = utcnow()

        if not self.store.update_match_if_version(match_id, match.version, **values):
            raise ConcurrencyConflictError(
                f"Match {match_id} changed while bowling ball {over}.{ball}"
            )

        if completed:
            logger.info(f"Match {match_id} innings complete at {over}.{ball}: {score}/{wickets}")

        return MatchProgress(
            match_id=match_id,
            over=over,
            ball=ball,
            score=score,
            wickets=wickets,
            run_rate=values['run_rate'],
            completed=completed,
        )


class MatchService:
    """Admin lifecycle of matches: start, stop, pause, resume."""

    def __init__(self, store: Store, sessions=None):
        self.store = store
        self.sessions = sessions

    def _forget_sessions(self, match_ids):
        if self.sessions is None:
            return
        for match_id in match_ids:
            self.sessions.end_match(match_id)

    def start_match(self, admin_id: int, name: str = DEFAULT_MATCH_NAME,
                    total_overs: int = DEFAULT_TOTAL_OVERS) -> Match:
        """Start a new live match, completing whichever match was live."""
        if total_overs <= 0:
            raise ValueError("A match needs at least one over")

        match, closed_ids = self.store.start_match(name, total_overs)
        self._forget_sessions(closed_ids)
        self.store.record_admin_action(
            admin_id, 'start_match', amount=match.id,
            description=f"Started match '{name}' ({total_overs} overs)"
        )
        logger.info(f"Admin {admin_id} started match {match.id} '{name}', closed {closed_ids}")
        return match

    def stop_match(self, admin_id: int) -> Match:
        """Complete the live match, or the latest paused one if none is live."""
        match = self.store.get_live_match()
        if match is None:
            paused = self.store.find_matches(status='paused')
            if not paused:
                raise NotFoundError("No active match found")
            match = paused[-1]

        match, _ = self.store.change_match_status(match.id, 'completed', ('live', 'paused'))
        self._forget_sessions([match.id])
        self.store.record_admin_action(
            admin_id, 'stop_match', amount=match.id,
            description=f"Stopped match '{match.name}'"
        )
        logger.info(f"Admin {admin_id} stopped match {match.id}")
        return match

    def pause_match(self, admin_id: int) -> Match:
        match = self.store.get_live_match()
        if match is None:
            raise NotFoundError("No live match found")

        match, _ = self.store.change_match_status(match.id, 'paused', ('live',))
        self.store.record_admin_action(
            admin_id, 'pause_match', amount=match.id,
            description=f"Paused match '{match.name}'"
        )
        logger.info(f"Admin {admin_id} paused match {match.id}")
        return match

    def resume_match(self, admin_id: int, match_id: Optional[int] = None) -> Match:
        """Put a paused match back live, completing any other live match first."""
        if match_id is None:
            paused = self.store.find_matches(status='paused')
            if not paused:
                raise NotFoundError("No paused match found")
            match_id = paused[-1].id

        match, closed_ids = self.store.change_match_status(
            match_id, 'live', ('paused', 'pending'), close_live=True
        )
        self._forget_sessions(closed_ids)
        self.store.record_admin_action(
            admin_id, 'resume_match', amount=match.id,
            description=f"Resumed match '{match.name}'"
        )
        logger.info(f"Admin {admin_id} resumed match {match.id}, closed {closed_ids}")
        return match

