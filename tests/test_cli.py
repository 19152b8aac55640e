"""
End-to-end tests for the command-line dispatcher.

Each run builds a fresh LedgerFlow on a file-backed SQLite database,
the way each CLI invocation opens its own connection.
"""

from datetime import date

import pytest
from sqlalchemy import update

from expense_ledger.cli import USAGE, CommandDispatcher, main
from expense_ledger.orchestrator import LedgerFlow
from expense_ledger.services.storage import (
    ConnectionError,
    DatabaseClient,
    SQLExpenseStorage,
    expenses_table,
)


@pytest.fixture
def flow_factory(database_url):
    def factory(audit_logger=None):
        storage = SQLExpenseStorage(DatabaseClient(url=database_url))
        return LedgerFlow(storage, audit_logger=audit_logger)
    return factory


@pytest.fixture
def run(flow_factory, capsys):
    """Run one command line and return its stdout lines."""
    def _run(*argv, answer="y"):
        dispatcher = CommandDispatcher(
            flow_factory=flow_factory,
            confirm=lambda prompt: answer,
        )
        dispatcher.run(list(argv))
        return capsys.readouterr().out.splitlines()
    return _run


def unreachable_factory(**kwargs):
    pytest.fail("the database must not be opened")


class TestUsage:
    """Tests for invocations without a valid command."""

    def test_no_arguments_prints_usage(self, run):
        """Test that a bare invocation prints usage."""
        assert run() == USAGE.splitlines()

    def test_unknown_command_prints_usage(self, run):
        """Test that an unknown command prints usage."""
        assert run("update", "1") == USAGE.splitlines()


class TestEndToEnd:
    """Tests covering whole command sequences."""

    def test_empty_ledger(self, run):
        """Test that an empty list prints no rows and no total."""
        assert run("list") == ["There are no expenses."]

    def test_list_and_search(self, run):
        """Test counts and totals for list and search."""
        today = date.today().isoformat()
        assert run("add", "10.99", "coffee") == ["The expense has been added."]
        assert run("add", "5.00", "tea") == ["The expense has been added."]

        lines = run("list")
        assert lines[0] == "There are 2 expenses."
        assert lines[1] == f"   1 | {today} |      10.99 | coffee"
        assert lines[2] == f"   2 | {today} |       5.00 | tea"
        assert lines[3] == "-" * 40
        assert lines[4] == "Total" + " " * 21 + "15.99"

        lines = run("search", "tea")
        assert lines[0] == "There is 1 expense."
        assert lines[-1] == "Total" + " " * 22 + "5.00"

    def test_round_trip_amount(self, run):
        """Test that 12.5 is listed as 12.50."""
        run("add", "12.5", "book", "2024-02-29")
        lines = run("list")
        assert lines[1] == "   1 | 2024-02-29 |      12.50 | book"

    def test_search_without_match(self, run):
        """Test that a search miss prints only the count line."""
        run("add", "1.00", "bus")
        assert run("search", "train") == ["There are no expenses."]

    def test_list_row_with_empty_memo(self, run, database_url):
        """Test that a row stored with an empty memo is still listed."""
        run("add", "1.00", "seed")
        client = DatabaseClient(url=database_url)
        connection = client.connect()
        with connection.begin():
            connection.execute(update(expenses_table).values(memo=""))
        client.close()

        lines = run("list")
        assert lines[0] == "There is 1 expense."
        assert lines[1].endswith("|       1.00 | ")


class TestAddCommand:
    """Tests for add."""

    def test_zero_amount_rejected_by_database(self, run):
        """Test that the constraint message reaches the user."""
        assert run("add", "0", "free") == ["Amount must be greater than zero."]
        assert run("list") == ["There are no expenses."]

    def test_malformed_amount_never_opens_database(self, capsys):
        """Test that validation happens before the database is touched."""
        dispatcher = CommandDispatcher(flow_factory=unreachable_factory)
        dispatcher.run(["add", "-5", "refund"])
        assert capsys.readouterr().out.splitlines() == [
            "Invalid amount '-5'. Use digits with up to two decimal places.",
        ]

    def test_missing_memo(self, run):
        """Test the missing-argument message."""
        assert run("add", "5") == ["You must provide an amount and memo."]

    def test_invalid_date(self, run):
        """Test the invalid-date message."""
        assert run("add", "5", "tea", "tomorrow") == [
            "Invalid date 'tomorrow'. Use the YYYY-MM-DD format.",
        ]


class TestDeleteCommand:
    """Tests for delete."""

    def test_delete_existing(self, run):
        """Test that the removed row is shown."""
        run("add", "3.00", "snack", "2024-01-02")
        assert run("delete", "1") == [
            "The following expense has been deleted:",
            "   1 | 2024-01-02 |       3.00 | snack",
        ]
        assert run("list") == ["There are no expenses."]

    def test_delete_missing(self, run):
        """Test the not-found message."""
        assert run("delete", "42") == ["There is no expense with the id '42'."]

    def test_delete_several(self, run):
        """Test that every id is handled, found or not."""
        run("add", "1.00", "a", "2024-01-01")
        run("add", "2.00", "b", "2024-01-01")
        lines = run("delete", "2", "9", "1")
        assert lines == [
            "The following expense has been deleted:",
            "   2 | 2024-01-01 |       2.00 | b",
            "There is no expense with the id '9'.",
            "The following expense has been deleted:",
            "   1 | 2024-01-01 |       1.00 | a",
        ]

    def test_invalid_id(self, capsys):
        """Test that a malformed id is rejected before any delete."""
        dispatcher = CommandDispatcher(flow_factory=unreachable_factory)
        dispatcher.run(["delete", "one"])
        assert capsys.readouterr().out.strip() == "Invalid id 'one'. Ids are positive whole numbers."


class TestClearCommand:
    """Tests for clear."""

    def test_clear_confirmed(self, run):
        """Test that answering y removes everything."""
        run("add", "1.00", "a")
        run("add", "2.00", "b")
        assert run("clear", answer="y") == ["All expenses have been deleted."]
        assert run("list") == ["There are no expenses."]

    def test_clear_declined(self, run):
        """Test that any other answer keeps the ledger."""
        run("add", "1.00", "a")
        assert run("clear", answer="n") == []
        assert run("list")[0] == "There is 1 expense."

    def test_clear_empty_ledger(self, run):
        """Test that clearing an empty ledger succeeds."""
        assert run("clear") == ["All expenses have been deleted."]


class TestFatalErrors:
    """Tests for conditions that end the process."""

    def test_connection_error_propagates(self):
        """Test that an unreachable database is not swallowed."""
        def failing_factory(**kwargs):
            raise ConnectionError("Failed to connect to the database")

        dispatcher = CommandDispatcher(flow_factory=failing_factory)
        with pytest.raises(ConnectionError):
            dispatcher.run(["list"])


class TestMain:
    """Tests for the console entry point."""

    def test_main_uses_configured_database(self, database_url, monkeypatch, capsys):
        """Test that EXPENSES_DB_URL selects the database."""
        monkeypatch.setenv("EXPENSES_DB_URL", database_url)

        main(["add", "2.50", "parking", "2024-06-01"])
        main(["list"])

        out = capsys.readouterr().out.splitlines()
        assert out[0] == "The expense has been added."
        assert out[1] == "There is 1 expense."
        assert out[2] == "   1 | 2024-06-01 |       2.50 | parking"
