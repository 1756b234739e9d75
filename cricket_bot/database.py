# database.py
# Data persistence: SQLAlchemy tables and the store shared by all players

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    case,
    create_engine,
    func,
    select,
    text,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL, DEFAULT_TOTAL_OVERS, INITIAL_COINS
from .errors import (
    InsufficientFundsError,
    MatchStatusError,
    NotFoundError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

Base = declarative_base()

MATCH_STATUSES = ('pending', 'live', 'completed', 'paused')


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ==================== TABLES ====================

class User(Base):
    """Telegram user and their coin wallet."""
    __tablename__ = 'users'

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # Telegram user ID
    display_name = Column(String(100))
    balance = Column(Integer, nullable=False, default=INITIAL_COINS)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)
    last_active = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint('balance >= 0', name='ck_users_balance_non_negative'),
    )


class Match(Base):
    """A cricket match players predict ball by ball."""
    __tablename__ = 'matches'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    total_overs = Column(Integer, nullable=False, default=DEFAULT_TOTAL_OVERS)
    current_over = Column(Integer, nullable=False, default=0)
    current_ball = Column(Integer, nullable=False, default=0)  # 0 until the first ball
    score = Column(Integer, nullable=False, default=0)
    wickets = Column(Integer, nullable=False, default=0)
    run_rate = Column(Float, nullable=False, default=0.0)
    last_ball_result = Column(String(200))
    version = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime)
    ended_at = Column(DateTime)
    last_updated = Column(DateTime, default=utcnow)

    # Only one row may ever be live
    __table_args__ = (
        Index(
            'uq_matches_single_live', 'status', unique=True,
            sqlite_where=text("status = 'live'"),
            postgresql_where=text("status = 'live'"),
        ),
    )

    @property
    def ball_label(self) -> str:
        return f"{self.current_over}.{self.current_ball}"


class Prediction(Base):
    """Immutable audit row for one settled prediction."""
    __tablename__ = 'predictions'

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, ForeignKey('users.id'), nullable=False, index=True)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=False, index=True)
    over_number = Column(Integer, nullable=False)
    ball_number = Column(Integer, nullable=False)
    category = Column(String(20), nullable=False)
    actual_result = Column(String(200), nullable=False)
    stake = Column(Integer, nullable=False)
    winnings = Column(Integer, nullable=False, default=0)
    is_winner = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

    @property
    def ball_label(self) -> str:
        return f"{self.over_number}.{self.ball_number}"


class AdminAction(Base):
    """Audit trail of administrative actions."""
    __tablename__ = 'admin_actions'

    id = Column(Integer, primary_key=True)
    admin_id = Column(BigInteger, nullable=False)
    action_type = Column(String(30), nullable=False)
    target_user_id = Column(BigInteger)
    amount = Column(Integer)
    description = Column(String(500))
    created_at = Column(DateTime, default=utcnow)


# ==================== STORE ====================

class Store:
    """
    Query interface over the bot's tables.

    Every public method runs in its own short transaction. Shared counters
    (balances, match state) are only ever changed by single UPDATE statements
    evaluated by the database, never by writing back a value read earlier.
    Driver failures surface as StoreUnavailableError.
    """

    def __init__(self, url: str = DATABASE_URL, engine=None):
        self.engine = engine if engine is not None else create_engine(url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def init_db(self):
        """Create any missing tables."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not initialise database: {e}") from e
        logger.info("Database tables ready")

    @contextmanager
    def transaction(self) -> Iterator:
        """Yield an ORM session inside a transaction, committing on success."""
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Database operation failed: {e}") from e

    # ==================== USERS ====================

    def get_user(self, user_id: int) -> User:
        with self.transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError(f"User {user_id} not found")
            return user

    def get_or_create_user(self, user_id: int, display_name: Optional[str] = None):
        """
        Fetch a user, registering them with the starting balance on first contact.

        Args:
            user_id: Telegram user ID
            display_name: Name to store or refresh

        Returns:
            Tuple of (User, created)
        """
        with self.transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                user = User(
                    id=user_id,
                    display_name=display_name or 'Unknown',
                    balance=INITIAL_COINS,
                    wins=0,
                    losses=0,
                )
                session.add(user)
                session.flush()
                logger.info(f"Registered user {user_id} with {INITIAL_COINS} coins")
                return user, True

            if display_name:
                user.display_name = display_name
            user.last_active = utcnow()
            return user, False

    def debit(self, user_id: int, amount: int) -> int:
        """
        Take `amount` coins from a user only if the balance covers it.

        Returns:
            The balance after the debit
        """
        with self.transaction() as session:
            new_balance = session.execute(
                update(User)
                .where(User.id == user_id, User.balance >= amount)
                .values(balance=User.balance - amount, last_active=utcnow())
                .returning(User.balance)
                .execution_options(synchronize_session=False)
            ).scalar_one_or_none()

            if new_balance is None:
                user = session.get(User, user_id)
                if user is None:
                    raise NotFoundError(f"User {user_id} not found")
                raise InsufficientFundsError(user.balance, amount)
            return new_balance

    def apply_user_delta(self, user_id: int, balance: int = 0,
                         wins: int = 0, losses: int = 0) -> int:
        """Add deltas to a user's balance and win/loss counters in one statement."""
        with self.transaction() as session:
            new_balance = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    balance=User.balance + balance,
                    wins=User.wins + wins,
                    losses=User.losses + losses,
                    last_active=utcnow(),
                )
                .returning(User.balance)
                .execution_options(synchronize_session=False)
            ).scalar_one_or_none()

            if new_balance is None:
                raise NotFoundError(f"User {user_id} not found")
            return new_balance

    def set_balance(self, user_id: int, amount: int) -> int:
        with self.transaction() as session:
            new_balance = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(balance=amount)
                .returning(User.balance)
                .execution_options(synchronize_session=False)
            ).scalar_one_or_none()

            if new_balance is None:
                raise NotFoundError(f"User {user_id} not found")
            return new_balance

    def list_user_ids(self) -> List[int]:
        with self.transaction() as session:
            return list(session.execute(select(User.id)).scalars())

    def top_users(self, limit: int = 10) -> List[User]:
        with self.transaction() as session:
            return list(session.execute(
                select(User).order_by(User.balance.desc(), User.id).limit(limit)
            ).scalars())

    # ==================== MATCHES ====================

    def get_match(self, match_id: int) -> Match:
        with self.transaction() as session:
            match = session.get(Match, match_id)
            if match is None:
                raise NotFoundError(f"Match {match_id} not found")
            return match

    def find_matches(self, status: Optional[str] = None) -> List[Match]:
        with self.transaction() as session:
            query = select(Match).order_by(Match.id)
            if status is not None:
                query = query.where(Match.status == status)
            return list(session.execute(query).scalars())

    def get_live_match(self) -> Optional[Match]:
        live = self.find_matches(status='live')
        return live[0] if live else None

    def update_match_if_version(self, match_id: int, version: int, **values) -> bool:
        """
        Compare-and-swap update of a match row.

        Writes `values` only if the row still carries `version`, bumping the
        version in the same statement.

        Returns:
            True if the row was updated, False if another writer got there first
        """
        with self.transaction() as session:
            result = session.execute(
                update(Match)
                .where(Match.id == match_id, Match.version == version)
                .values(version=version + 1, last_updated=utcnow(), **values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def start_match(self, name: str, total_overs: int = DEFAULT_TOTAL_OVERS):
        """
        Complete any live match and insert a new live one, atomically.

        Returns:
            Tuple of (new Match, list of IDs of the matches that were completed)
        """
        with self.transaction() as session:
            now = utcnow()
            closed_ids = self._complete_live_matches(session, now)

            match = Match(
                name=name,
                status='live',
                total_overs=total_overs,
                current_over=0,
                current_ball=0,
                score=0,
                wickets=0,
                run_rate=0.0,
                version=0,
                started_at=now,
                last_updated=now,
            )
            session.add(match)
            session.flush()
            return match, closed_ids

    def change_match_status(self, match_id: int, status: str,
                            expected: Sequence[str], close_live: bool = False):
        """
        Move a match to `status` if it is currently in one of `expected`.

        Args:
            match_id: Match to transition
            status: Target status
            expected: Statuses the match may currently be in
            close_live: Complete every other live match in the same transaction

        Returns:
            Tuple of (updated Match, list of IDs of matches completed on the way)
        """
        if status not in MATCH_STATUSES:
            raise ValueError(f"Unknown match status: {status}")

        with self.transaction() as session:
            match = session.get(Match, match_id)
            if match is None:
                raise NotFoundError(f"Match {match_id} not found")
            if match.status not in expected:
                raise MatchStatusError(
                    f"Match {match_id} is {match.status}, expected {' or '.join(expected)}"
                )

            now = utcnow()
            closed_ids = []
            if close_live:
                closed_ids = self._complete_live_matches(session, now, exclude=match_id)

            values = {'status': status, 'version': Match.version + 1, 'last_updated': now}
            if status == 'completed':
                values['ended_at'] = now
            session.execute(
                update(Match)
                .where(Match.id == match_id, Match.status.in_(expected))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            session.refresh(match)
            return match, closed_ids

    @staticmethod
    def _complete_live_matches(session, now: datetime, exclude: Optional[int] = None) -> List[int]:
        query = select(Match.id).where(Match.status == 'live')
        if exclude is not None:
            query = query.where(Match.id != exclude)
        closed_ids = list(session.execute(query).scalars())
        if closed_ids:
            session.execute(
                update(Match)
                .where(Match.id.in_(closed_ids))
                .values(status='completed', ended_at=now, last_updated=now,
                        version=Match.version + 1)
                .execution_options(synchronize_session=False)
            )
        return closed_ids

    def match_summary(self, match_id: int) -> dict:
        """Player and prediction counts for the live dashboard."""
        with self.transaction() as session:
            players, predictions, coins_won = session.execute(
                select(
                    func.count(func.distinct(Prediction.user_id)),
                    func.count(Prediction.id),
                    func.coalesce(func.sum(Prediction.winnings), 0),
                ).where(Prediction.match_id == match_id)
            ).one()
            return {
                'players': players,
                'predictions': predictions,
                'coins_won': coins_won,
            }

    # ==================== PREDICTIONS ====================

    def record_prediction(self, user_id: int, match_id: int, over_number: int,
                          ball_number: int, category: str, actual_result: str,
                          stake: int, winnings: int, is_winner: bool) -> int:
        """Insert a prediction record and return its ID."""
        with self.transaction() as session:
            record = Prediction(
                user_id=user_id,
                match_id=match_id,
                over_number=over_number,
                ball_number=ball_number,
                category=category,
                actual_result=actual_result,
                stake=stake,
                winnings=winnings,
                is_winner=is_winner,
                created_at=utcnow(),
            )
            session.add(record)
            session.flush()
            return record.id

    def find_predictions(self, user_id: Optional[int] = None,
                         match_id: Optional[int] = None) -> List[Prediction]:
        with self.transaction() as session:
            query = select(Prediction).order_by(Prediction.id)
            if user_id is not None:
                query = query.where(Prediction.user_id == user_id)
            if match_id is not None:
                query = query.where(Prediction.match_id == match_id)
            return list(session.execute(query).scalars())

    def recent_predictions(self, user_id: int, limit: int = 10) -> list:
        """Latest predictions of a user with the match name, newest first."""
        with self.transaction() as session:
            rows = session.execute(
                select(Prediction, Match.name)
                .join(Match, Prediction.match_id == Match.id)
                .where(Prediction.user_id == user_id)
                .order_by(Prediction.created_at.desc(), Prediction.id.desc())
                .limit(limit)
            ).all()
            return [(prediction, match_name) for prediction, match_name in rows]

    def user_stats(self, user_id: int) -> dict:
        with self.transaction() as session:
            total, wins, total_bet, total_won = session.execute(
                select(
                    func.count(Prediction.id),
                    func.coalesce(func.sum(case((Prediction.is_winner, 1), else_=0)), 0),
                    func.coalesce(func.sum(Prediction.stake), 0),
                    func.coalesce(func.sum(Prediction.winnings), 0),
                ).where(Prediction.user_id == user_id)
            ).one()
            return {
                'total_predictions': total,
                'wins': wins,
                'total_bet': total_bet,
                'total_won': total_won,
            }

    # ==================== ADMIN AUDIT ====================

    def record_admin_action(self, admin_id: int, action_type: str,
                            target_user_id: Optional[int] = None,
                            amount: Optional[int] = None,
                            description: Optional[str] = None) -> int:
        with self.transaction() as session:
            action = AdminAction(
                admin_id=admin_id,
                action_type=action_type,
                target_user_id=target_user_id,
                amount=amount,
                description=description,
                created_at=utcnow(),
            )
            session.add(action)
            session.flush()
            return action.id

    def find_admin_actions(self, action_type: Optional[str] = None) -> List[AdminAction]:
        with self.transaction() as session:
            query = select(AdminAction).order_by(AdminAction.id)
            if action_type is not None:
                query = query.where(AdminAction.action_type == action_type)
            return list(session.execute(query).scalars())
