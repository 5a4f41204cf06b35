"""Shared pytest fixtures for ledgermatch tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from ledgermatch.database.factories import create_sqlite_database
from ledgermatch.domain.entities import AccountingEntry, BankTransaction, RecordStatus
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.domain.ledger_reader import LedgerReader
from ledgermatch.domain.match_writer import MatchWriter
from ledgermatch.domain.reconciliation import ReconciliationService
from ledgermatch.domain.settings import ReconciliationSettingsService
from ledgermatch.logger import configure_logging


@pytest.fixture(autouse=True)
def logging_to_current_stderr():
    """Point log output at this test's stderr."""
    configure_logging(level="WARNING")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def reconciliation_service(temp_db):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a ReconciliationSettingsService with a temporary database."""
    return ReconciliationSettingsService(temp_db)


@pytest.fixture
def reader(temp_db):
    return LedgerReader(temp_db)


@pytest.fixture
def writer(temp_db):
    return MatchWriter(temp_db)


@pytest.fixture
def sample_company(ledger_service):
    """Create a sample company for testing."""
    company_id = ledger_service.create_company(name="Acme SpA", tax_id="76.123.456-7")
    return ledger_service.get_company(company_id)


@pytest.fixture
def sample_bank_account(ledger_service, sample_company):
    """Create a sample bank account for testing."""
    account_id = ledger_service.create_bank_account(
        company_id=sample_company.id, name="Operations", bank_name="Banco Estado"
    )
    return ledger_service.get_bank_account(account_id)


@pytest.fixture
def add_transaction(ledger_service, sample_bank_account):
    """Return a helper that records a bank transaction on the sample account."""

    def _add(amount, when, description=None, reference=None, bank_account_id=None):
        return ledger_service.add_bank_transaction(
            bank_account_id=bank_account_id or sample_bank_account.id,
            date=when,
            amount=Decimal(str(amount)),
            description=description,
            reference=reference,
        )

    return _add


@pytest.fixture
def add_entry(ledger_service, sample_company):
    """Return a helper that records an accounting entry for the sample company."""

    def _add(amount, when, description=None, reference=None, company_id=None):
        return ledger_service.add_accounting_entry(
            company_id=company_id or sample_company.id,
            date=when,
            amount=Decimal(str(amount)),
            description=description,
            reference=reference,
        )

    return _add


def make_transaction(amount, when=date(2024, 3, 1), description=None, reference=None, id=1):
    """Build an unsaved bank transaction for scorer tests."""
    return BankTransaction(
        id=id,
        bank_account_id=1,
        date=when,
        amount=Decimal(str(amount)),
        description=description,
        reference=reference,
        status=RecordStatus.PENDING,
    )


def make_entry(amount, when=date(2024, 3, 1), description=None, reference=None, id=1):
    """Build an unsaved accounting entry for scorer tests."""
    return AccountingEntry(
        id=id,
        company_id=1,
        date=when,
        amount=Decimal(str(amount)),
        description=description,
        reference=reference,
        status=RecordStatus.PENDING,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
