"""
Relational Database Storage Implementation

DESIGN DECISION: Expenses live in a single PostgreSQL table accessed
through SQLAlchemy Core because:
1. Every value reaches the database as a bound parameter
2. NUMERIC columns come back as Decimal, never float
3. The same statements run on SQLite, which keeps the tests server-free

TRADEOFFS:
- One connection per process (the CLI runs one command and exits)
- Each operation is its own transaction; nothing spans commands

The table's check constraint is the authoritative guard on amounts.
Callers validate first for friendlier messages, but this module never
relies on that.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import structlog
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Integer,
    MetaData,
    Numeric,
    Table,
    Text,
    create_engine,
    delete,
    func,
    insert,
    inspect,
    select,
)
from sqlalchemy.engine import Connection, Engine, Row
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_ledger.config import get_settings
from expense_ledger.models.expense import Expense, ExpenseRowSet
from expense_ledger.services.storage.interface import (
    ConnectionError,
    ConstraintViolationError,
    ExpenseStorageInterface,
    InvalidInputError,
    NotFoundError,
    SchemaError,
    StorageError,
)


logger = structlog.get_logger(__name__)

POSITIVE_AMOUNT_CHECK = "positive_amount_check"

metadata = MetaData()

# On PostgreSQL this renders as
#   expenses(id SERIAL PRIMARY KEY, amount NUMERIC(6,2) NOT NULL,
#            memo TEXT NOT NULL, created_on DATE NOT NULL)
expenses_table = Table(
    "expenses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("amount", Numeric(6, 2), nullable=False),
    Column("memo", Text, nullable=False),
    Column("created_on", Date, nullable=False),
    CheckConstraint("amount > 0", name=POSITIVE_AMOUNT_CHECK),
)


class DatabaseClient:
    """
    Low-level database client.

    Owns the engine and the single connection used for every statement.
    Provides retry logic for opening the connection.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        if url is None or echo is None:
            settings = get_settings().database
            url = url or settings.url
            echo = settings.echo if echo is None else echo
        self._url = url
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> Connection:
        """
        Open the connection if it is not open yet.
        """
        if self._connection is None:
            try:
                if self._engine is None:
                    self._engine = create_engine(self._url, echo=self._echo)
                self._connection = self._engine.connect()
            except SQLAlchemyError as e:
                raise ConnectionError(f"Failed to connect to the database: {e}") from e
            logger.debug("database_connected", dialect=self._engine.dialect.name)

        return self._connection

    def close(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


def _to_decimal(amount: Union[Decimal, str]) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidInputError(f"Not a decimal amount: {amount!r}")
    if not value.is_finite():
        raise InvalidInputError(f"Not a finite amount: {amount!r}")
    return value


def _to_memo(memo: str) -> str:
    if not isinstance(memo, str) or not memo:
        raise InvalidInputError("Memo must be non-empty text")
    return memo


def _to_date(created_on: Optional[Union[date, str]]) -> date:
    if created_on is None:
        return date.today()
    if isinstance(created_on, datetime):
        return created_on.date()
    if isinstance(created_on, date):
        return created_on
    try:
        return date.fromisoformat(created_on)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Not a valid date: {created_on!r}")


def _row_to_expense(row: Row) -> Expense:
    return Expense(
        id=row.id,
        amount=row.amount,
        memo=row.memo,
        created_on=row.created_on,
    )


class SQLExpenseStorage(ExpenseStorageInterface):
    """
    SQLAlchemy implementation of expense storage.

    The schema is bootstrapped on construction, so a storage object
    that exists always has a table to work with.
    """

    def __init__(self, client: Optional[DatabaseClient] = None):
        self._client = client or DatabaseClient()
        try:
            self._connection = self._client.connect()
            self.ensure_schema()
        except (ConnectionError, SchemaError):
            self._client.close()
            raise

    def ensure_schema(self) -> bool:
        """Create the expenses table unless the database already has it."""
        try:
            with self._connection.begin():
                if inspect(self._connection).has_table(expenses_table.name):
                    return False
                expenses_table.create(self._connection)
        except SQLAlchemyError as e:
            raise SchemaError(
                f"Failed to create table {expenses_table.name}: {e}"
            ) from e

        logger.info("schema_created", table=expenses_table.name)
        return True

    def add_expense(
        self,
        amount: Union[Decimal, str],
        memo: str,
        created_on: Optional[Union[date, str]] = None,
    ) -> Expense:
        """Insert one expense and return it as stored."""
        statement = (
            insert(expenses_table)
            .values(
                amount=_to_decimal(amount),
                memo=_to_memo(memo),
                created_on=_to_date(created_on),
            )
            .returning(*expenses_table.c)
        )
        try:
            with self._connection.begin():
                row = self._connection.execute(statement).one()
        except IntegrityError as e:
            if POSITIVE_AMOUNT_CHECK in str(e.orig):
                raise ConstraintViolationError(
                    f"Amount must be greater than zero (violates {POSITIVE_AMOUNT_CHECK})",
                    constraint=POSITIVE_AMOUNT_CHECK,
                ) from e
            raise ConstraintViolationError(
                f"Expense rejected by the database: {e.orig}"
            ) from e
        except DataError as e:
            raise InvalidInputError(f"Expense rejected by the database: {e.orig}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to add expense: {e}") from e

        logger.debug("expense_inserted", expense_id=row.id)
        return _row_to_expense(row)

    def _select_with_total(self, condition=None) -> ExpenseRowSet:
        # One statement, so the rows and their total come from one snapshot.
        statement = select(
            *expenses_table.c,
            func.sum(expenses_table.c.amount).over().label("total"),
        ).order_by(expenses_table.c.id)
        if condition is not None:
            statement = statement.where(condition)

        with self._connection.begin():
            rows = self._connection.execute(statement).all()

        if not rows:
            return ExpenseRowSet()
        return ExpenseRowSet(
            expenses=[_row_to_expense(row) for row in rows],
            total=rows[0].total,
        )

    def list_expenses(self) -> ExpenseRowSet:
        """Every expense by ascending id."""
        try:
            return self._select_with_total()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list expenses: {e}") from e

    def search_expenses(self, query: str) -> ExpenseRowSet:
        """Case-insensitive substring match on memo; % and _ match literally."""
        condition = expenses_table.c.memo.icontains(query, autoescape=True)
        try:
            return self._select_with_total(condition)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to search expenses: {e}") from e

    def delete_expense(self, expense_id: int) -> Expense:
        """Delete and return one expense in a single statement."""
        statement = (
            delete(expenses_table)
            .where(expenses_table.c.id == expense_id)
            .returning(*expenses_table.c)
        )
        try:
            with self._connection.begin():
                row = self._connection.execute(statement).one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete expense {expense_id}: {e}") from e

        if row is None:
            raise NotFoundError(expense_id)

        logger.debug("expense_removed", expense_id=expense_id)
        return _row_to_expense(row)

    def clear_expenses(self) -> int:
        """Delete every row and report how many there were."""
        try:
            with self._connection.begin():
                result = self._connection.execute(delete(expenses_table))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to clear expenses: {e}") from e

        return result.rowcount

    def close(self) -> None:
        self._client.close()
