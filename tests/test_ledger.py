"""Tests for LedgerService and LedgerReader."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgermatch.domain.entities import (
    DateRange,
    DocumentDirection,
    DocumentType,
    RecordStatus,
    TransactionType,
)
from ledgermatch.domain.errors import ConflictError, DomainError, NotFoundError, ValidationError


class TestCompanies:
    def test_create_company(self, ledger_service):
        company_id = ledger_service.create_company("  Acme SpA ", tax_id=" ")

        company = ledger_service.get_company(company_id)
        assert company.name == "Acme SpA"
        assert company.tax_id is None

    def test_blank_name(self, ledger_service):
        with pytest.raises(ValidationError):
            ledger_service.create_company("   ")

    def test_duplicate_name(self, ledger_service, sample_company):
        with pytest.raises(ConflictError, match="already exists"):
            ledger_service.create_company(sample_company.name)

    def test_list_companies_sorted_by_name(self, ledger_service):
        ledger_service.create_company("Zeta")
        ledger_service.create_company("Alfa")

        assert [c.name for c in ledger_service.list_companies()] == ["Alfa", "Zeta"]


class TestBankAccounts:
    def test_bank_name_defaults_to_account_name(self, ledger_service, sample_company):
        account_id = ledger_service.create_bank_account(sample_company.id, "Payroll")

        account = ledger_service.get_bank_account(account_id)
        assert account.bank_name == "Payroll"
        assert account.currency == "CLP"
        assert account.company_id == sample_company.id

    def test_currency_is_normalised(self, ledger_service, sample_company):
        account_id = ledger_service.create_bank_account(sample_company.id, "USD acct", currency="usd")

        assert ledger_service.get_bank_account(account_id).currency == "USD"

    def test_invalid_currency(self, ledger_service, sample_company):
        with pytest.raises(ValidationError):
            ledger_service.create_bank_account(sample_company.id, "Odd", currency="DOLLARS")

    def test_unknown_company(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.create_bank_account(12, "Nowhere")

    def test_duplicate_name(self, ledger_service, sample_company, sample_bank_account):
        with pytest.raises(ConflictError):
            ledger_service.create_bank_account(sample_company.id, sample_bank_account.name)

    def test_list_by_company(self, ledger_service, sample_company, sample_bank_account):
        other = ledger_service.create_company("Other")
        ledger_service.create_bank_account(other, "Other account")

        accounts = ledger_service.list_bank_accounts(company_id=sample_company.id)

        assert [a.id for a in accounts] == [sample_bank_account.id]
        assert len(ledger_service.list_bank_accounts()) == 2

    def test_require_bank_account(self, ledger_service):
        with pytest.raises(NotFoundError, match="Bank account 3 not found"):
            ledger_service.require_bank_account(3)


class TestRecords:
    def test_add_bank_transaction(self, ledger_service, sample_bank_account):
        txn_id = ledger_service.add_bank_transaction(
            sample_bank_account.id,
            date=datetime(2024, 3, 10, 15, 30),
            amount=-15000.5,
            description="  Pago proveedor ",
            reference="",
            transaction_type=TransactionType.PAYMENT,
        )

        txn = ledger_service.get_bank_transaction(txn_id)
        assert txn.date == date(2024, 3, 10)
        assert txn.amount == Decimal("-15000.50")
        assert txn.description == "Pago proveedor"
        assert txn.reference is None
        assert txn.status == RecordStatus.PENDING
        assert txn.transaction_type == TransactionType.PAYMENT
        assert txn.bank_account_id == sample_bank_account.id

    def test_invalid_amount(self, ledger_service, sample_bank_account):
        with pytest.raises(ValidationError):
            ledger_service.add_bank_transaction(sample_bank_account.id, date(2024, 3, 1), "abc")
        with pytest.raises(ValidationError):
            ledger_service.add_bank_transaction(sample_bank_account.id, date(2024, 3, 1), "NaN")

    def test_invalid_date(self, ledger_service, sample_bank_account):
        with pytest.raises(ValidationError):
            ledger_service.add_bank_transaction(sample_bank_account.id, "2024-03-01", 10)

    def test_transaction_for_unknown_account(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.add_bank_transaction(8, date(2024, 3, 1), 10)

    def test_add_accounting_entry(self, ledger_service, sample_company):
        entry_id = ledger_service.add_accounting_entry(
            sample_company.id,
            date=date(2024, 3, 10),
            amount=Decimal("-15000"),
            reference=" F1023 ",
            document_type=DocumentType.INVOICE,
            document_direction=DocumentDirection.RECEIVED,
        )

        entry = ledger_service.get_accounting_entry(entry_id)
        assert entry.reference == "F1023"
        assert entry.description is None
        assert entry.document_type == DocumentType.INVOICE
        assert entry.document_direction == DocumentDirection.RECEIVED
        assert entry.status == RecordStatus.PENDING

    def test_entry_for_unknown_company(self, ledger_service):
        with pytest.raises(NotFoundError):
            ledger_service.add_accounting_entry(8, date(2024, 3, 1), 10)

    def test_list_with_filters(self, ledger_service, sample_bank_account, add_transaction, add_entry, writer):
        early = add_transaction(10, date(2024, 2, 1))
        inside = add_transaction(20, date(2024, 3, 15))
        matched = add_transaction(30, date(2024, 3, 16))
        writer.create_manual_match(matched, add_entry(30, date(2024, 3, 16)))

        march = DateRange(date(2024, 3, 1), date(2024, 3, 31))
        listed = ledger_service.list_bank_transactions(sample_bank_account.id, date_range=march)
        pending = ledger_service.list_bank_transactions(
            sample_bank_account.id, status=RecordStatus.PENDING
        )

        assert [t.id for t in listed] == [inside, matched]
        assert [t.id for t in pending] == [early, inside]


class TestLedgerReader:
    def test_reads_pending_in_id_order(self, reader, sample_bank_account, add_transaction, add_entry):
        tx_b = add_transaction(1, date(2024, 3, 9))
        tx_a = add_transaction(2, date(2024, 3, 1))
        entry = add_entry(3, date(2024, 3, 5))

        records = reader.read_unmatched(sample_bank_account.id)

        assert records.bank_account.id == sample_bank_account.id
        assert [t.id for t in records.transactions] == [tx_b, tx_a]
        assert [e.id for e in records.entries] == [entry]

    def test_bounds_are_inclusive(self, reader, sample_bank_account, add_transaction, add_entry):
        add_transaction(1, date(2024, 2, 29))
        first = add_transaction(2, date(2024, 3, 1))
        last = add_transaction(3, date(2024, 3, 31))
        add_transaction(4, date(2024, 4, 1))
        entry = add_entry(5, date(2024, 3, 31))
        add_entry(6, date(2024, 4, 1))

        records = reader.read_unmatched(
            sample_bank_account.id, DateRange(date(2024, 3, 1), date(2024, 3, 31))
        )

        assert [t.id for t in records.transactions] == [first, last]
        assert [e.id for e in records.entries] == [entry]

    def test_open_ended_range(self, reader, sample_bank_account, add_transaction):
        add_transaction(1, date(2024, 2, 29))
        later = add_transaction(2, date(2024, 3, 1))

        records = reader.read_unmatched(sample_bank_account.id, DateRange(start=date(2024, 3, 1)))

        assert [t.id for t in records.transactions] == [later]

    def test_unknown_account(self, reader):
        with pytest.raises(NotFoundError):
            reader.read_unmatched(77)


def test_date_range_rejects_reversed_bounds():
    with pytest.raises(ValidationError, match="is after end") as excinfo:
        DateRange(date(2024, 3, 31), date(2024, 3, 1))

    assert isinstance(excinfo.value, DomainError)
