"""
SQLAlchemy Storage Implementation

DESIGN DECISION: A relational store behind SQLAlchemy 2.0 is the storage
backend because:
1. SQLite needs no setup for a single user on a laptop
2. The same code runs against PostgreSQL when the app is deployed
3. Filtering, ordering, counting and per-category sums all run in the
   database instead of in Python

TRADEOFFS:
- No optimistic concurrency: two concurrent updates to the same expense
  are last-writer-wins
- Each repository call is its own transaction; there are no multi-record
  transactions

The implementation follows the abstract interface, so business logic
never imports anything from this module outside the component factory.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Select,
    String,
    Uuid,
    create_engine,
    func,
    or_,
    select,
)
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_tracker.config import DatabaseSettings
from expense_tracker.models.expense import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    DateRange,
    Expense,
    ExpenseCreate,
    ExpenseFilter,
)
from expense_tracker.models.user import USERNAME_MAX_LENGTH, User
from expense_tracker.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
    UserStorageInterface,
)


# Attributes an update may touch
UPDATABLE_FIELDS = frozenset({"title", "amount", "category", "date", "description"})


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite does not keep timezone information."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# SCHEMA
# =============================================================================

class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH), unique=True, nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


class ExpenseRecord(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        Index("ix_expenses_user_date", "user_id", "date"),
        Index("ix_expenses_user_category", "user_id", "category"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey(UserRecord.id, ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=False, default=""
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


# =============================================================================
# CONNECTION
# =============================================================================

class Database:
    """
    Owns the engine and hands out transactional sessions.

    One instance per process, created from settings at startup and passed
    to the storage classes.
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        connect_attempts: int = 3,
    ):
        self.url = url
        self._connect_attempts = connect_attempts

        engine_kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url.rstrip("/").endswith("sqlite:") or url.endswith("://"):
                # Every session must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **engine_kwargs)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        return cls(
            url=settings.url,
            echo=settings.echo,
            connect_attempts=settings.connect_attempts,
        )

    def session(self):
        """Context manager yielding a Session that commits on success."""
        return self._session_factory.begin()

    def create_schema(self) -> None:
        """
        Create tables if they do not exist.

        Retried with exponential backoff, since a database server started
        alongside the app may not accept connections yet.
        """
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._connect_attempts),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                retry=retry_if_exception_type(OperationalError),
                reraise=True,
            ):
                with attempt:
                    Base.metadata.create_all(self.engine)
        except OperationalError as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    def dispose(self) -> None:
        self.engine.dispose()


# =============================================================================
# USERS
# =============================================================================

class SqlUserStorage(UserStorageInterface):
    """SQLAlchemy implementation of user storage."""

    def __init__(
        self,
        database: Database,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = database
        self._clock = clock

    def create_user(self, username: str, email: str, password_hash: str) -> User:
        record = UserRecord(
            id=uuid.uuid4(),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=self._clock(),
        )
        try:
            with self._db.session() as session:
                session.add(record)
                session.flush()
                return User.model_validate(record)
        except IntegrityError as e:
            raise DuplicateError("Username or email already registered") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save user: {e}") from e

    def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        try:
            with self._db.session() as session:
                record = session.get(UserRecord, user_id)
                return User.model_validate(record) if record else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e

    def get_user_by_email(self, email: str) -> Optional[User]:
        try:
            with self._db.session() as session:
                record = session.scalars(
                    select(UserRecord).where(UserRecord.email == email)
                ).one_or_none()
                return User.model_validate(record) if record else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e

    def user_exists(self, username: str, email: str) -> bool:
        try:
            with self._db.session() as session:
                found = session.scalars(
                    select(UserRecord.id)
                    .where(or_(UserRecord.username == username, UserRecord.email == email))
                    .limit(1)
                ).first()
                return found is not None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to check user: {e}") from e


# =============================================================================
# EXPENSES
# =============================================================================

class SqlExpenseStorage(ExpenseStorageInterface):
    """
    SQLAlchemy implementation of expense storage.

    Every statement built here starts from _owned(), which pins the
    owner's id before any other predicate is added.
    """

    def __init__(
        self,
        database: Database,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = database
        self._clock = clock

    @staticmethod
    def _owned(stmt: Select, owner_id: uuid.UUID) -> Select:
        return stmt.where(ExpenseRecord.user_id == owner_id)

    @staticmethod
    def _apply_date_range(stmt: Select, date_range: DateRange) -> Select:
        if date_range.start_date:
            stmt = stmt.where(ExpenseRecord.date >= date_range.start_date)
        if date_range.end_date:
            stmt = stmt.where(ExpenseRecord.date <= date_range.end_date)
        return stmt

    def _apply_filters(self, stmt: Select, owner_id: uuid.UUID, filters: ExpenseFilter) -> Select:
        stmt = self._owned(stmt, owner_id)

        if filters.category_value:
            stmt = stmt.where(ExpenseRecord.category == filters.category_value)

        stmt = self._apply_date_range(stmt, filters)

        term = filters.search_term
        if term:
            stmt = stmt.where(
                or_(
                    ExpenseRecord.title.icontains(term, autoescape=True),
                    ExpenseRecord.description.icontains(term, autoescape=True),
                )
            )
        return stmt

    def _get_owned_record(
        self,
        session: Session,
        owner_id: uuid.UUID,
        expense_id: uuid.UUID,
    ) -> Optional[ExpenseRecord]:
        stmt = self._owned(select(ExpenseRecord), owner_id).where(ExpenseRecord.id == expense_id)
        return session.scalars(stmt).one_or_none()

    def create_expense(self, owner_id: uuid.UUID, data: ExpenseCreate) -> Expense:
        now = self._clock()
        record = ExpenseRecord(
            id=uuid.uuid4(),
            user_id=owner_id,
            title=data.title,
            amount=data.amount,
            category=data.category.value,
            date=data.date,
            description=data.description,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._db.session() as session:
                session.add(record)
                session.flush()
                return Expense.model_validate(record)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save expense: {e}") from e

    def get_expense(self, owner_id: uuid.UUID, expense_id: uuid.UUID) -> Optional[Expense]:
        try:
            with self._db.session() as session:
                record = self._get_owned_record(session, owner_id, expense_id)
                return Expense.model_validate(record) if record else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get expense: {e}") from e

    def update_expense(
        self,
        owner_id: uuid.UUID,
        expense_id: uuid.UUID,
        changes: dict[str, Any],
    ) -> Expense:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        try:
            with self._db.session() as session:
                record = self._get_owned_record(session, owner_id, expense_id)
                if record is None:
                    raise NotFoundError(f"Expense not found: {expense_id}")

                for name, value in changes.items():
                    if name == "category":
                        value = getattr(value, "value", value)
                    setattr(record, name, value)
                record.updated_at = self._clock()

                session.flush()
                return Expense.model_validate(record)
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update expense: {e}") from e

    def delete_expense(self, owner_id: uuid.UUID, expense_id: uuid.UUID) -> Expense:
        try:
            with self._db.session() as session:
                record = self._get_owned_record(session, owner_id, expense_id)
                if record is None:
                    raise NotFoundError(f"Expense not found: {expense_id}")

                snapshot = Expense.model_validate(record)
                session.delete(record)
                return snapshot
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete expense: {e}") from e

    def list_expenses(
        self,
        owner_id: uuid.UUID,
        filters: ExpenseFilter,
        limit: int,
        offset: int = 0,
    ) -> list[Expense]:
        stmt = (
            self._apply_filters(select(ExpenseRecord), owner_id, filters)
            .order_by(ExpenseRecord.date.desc(), ExpenseRecord.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            with self._db.session() as session:
                return [Expense.model_validate(r) for r in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list expenses: {e}") from e

    def count_expenses(self, owner_id: uuid.UUID, filters: ExpenseFilter) -> int:
        stmt = self._apply_filters(
            select(func.count()).select_from(ExpenseRecord), owner_id, filters
        )
        try:
            with self._db.session() as session:
                return session.scalar(stmt) or 0
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count expenses: {e}") from e

    def get_category_totals(
        self,
        owner_id: uuid.UUID,
        date_range: DateRange,
    ) -> list[tuple[str, float, int]]:
        stmt = select(
            ExpenseRecord.category,
            func.sum(ExpenseRecord.amount),
            func.count(ExpenseRecord.id),
        )
        stmt = self._apply_date_range(self._owned(stmt, owner_id), date_range)
        stmt = stmt.group_by(ExpenseRecord.category)
        try:
            with self._db.session() as session:
                return [
                    (category, float(total or 0.0), int(count))
                    for category, total, count in session.execute(stmt)
                ]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to summarize expenses: {e}") from e
