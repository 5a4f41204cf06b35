"""Tests for creating and removing matches."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from ledgermatch.domain.entities import MatchMethod, RecordStatus
from ledgermatch.domain.errors import ConflictError, NotFoundError, StoreError, ValidationError


@pytest.fixture
def pair(add_transaction, add_entry):
    tx = add_transaction(-15000, date(2024, 3, 10), reference="F1023")
    entry = add_entry(-15000, date(2024, 3, 10), reference="F1023")
    return tx, entry


def statuses(db, tx, entry):
    return db.get_bank_transaction(tx).status, db.get_accounting_entry(entry).status


def test_create_match_flips_both_statuses(writer, temp_db, sample_bank_account, pair):
    tx, entry = pair

    match = writer.create_match(tx, entry, MatchMethod.DATE_AMOUNT, 95)

    assert match.bank_transaction_id == tx
    assert match.accounting_entry_id == entry
    assert match.bank_account_id == sample_bank_account.id
    assert match.method == MatchMethod.DATE_AMOUNT
    assert match.confidence == 95
    assert match.notes == "auto reconciliation with 95% confidence"
    assert match.created_at is not None
    assert statuses(temp_db, tx, entry) == (RecordStatus.RECONCILED, RecordStatus.RECONCILED)


def test_manual_match(writer, pair):
    tx, entry = pair

    match = writer.create_manual_match(tx, entry)

    assert match.method == MatchMethod.MANUAL
    assert match.confidence == 100
    assert match.notes == "manual reconciliation with 100% confidence"


def test_custom_notes_are_kept(writer, pair):
    tx, entry = pair

    match = writer.create_match(tx, entry, MatchMethod.FUZZY, 72, notes="checked by phone")

    assert match.notes == "checked by phone"


@pytest.mark.parametrize("confidence", [0, 101, -5])
def test_confidence_out_of_range(writer, temp_db, pair, confidence):
    tx, entry = pair

    with pytest.raises(ValidationError):
        writer.create_match(tx, entry, MatchMethod.FUZZY, confidence)

    assert statuses(temp_db, tx, entry) == (RecordStatus.PENDING, RecordStatus.PENDING)


def test_missing_transaction(writer, temp_db, pair):
    _, entry = pair

    with pytest.raises(NotFoundError, match="Bank transaction 999 not found"):
        writer.create_match(999, entry, MatchMethod.MANUAL, 100)

    assert temp_db.get_accounting_entry(entry).status == RecordStatus.PENDING
    assert temp_db.list_matches() == []


def test_transaction_without_bank_account(writer, temp_db, pair):
    _, entry = pair
    orphan = temp_db.create_bank_transaction(
        bank_account_id=None, date=date(2024, 3, 10), amount=-15000
    )

    with pytest.raises(NotFoundError, match="has no bank account"):
        writer.create_match(orphan, entry, MatchMethod.MANUAL, 100)

    assert temp_db.list_matches() == []


def test_missing_entry(writer, temp_db, pair):
    tx, _ = pair

    with pytest.raises(NotFoundError, match="Accounting entry 999 not found"):
        writer.create_match(tx, 999, MatchMethod.MANUAL, 100)

    assert temp_db.get_bank_transaction(tx).status == RecordStatus.PENDING


def test_reconciled_transaction_cannot_be_matched_again(
    writer, temp_db, pair, add_entry
):
    tx, entry = pair
    writer.create_manual_match(tx, entry)
    other_entry = add_entry(-15000, date(2024, 3, 11))

    with pytest.raises(ConflictError):
        writer.create_manual_match(tx, other_entry)

    assert temp_db.get_accounting_entry(other_entry).status == RecordStatus.PENDING
    assert len(temp_db.list_matches()) == 1


def test_reconciled_entry_cannot_be_matched_again(writer, temp_db, pair, add_transaction):
    tx, entry = pair
    writer.create_manual_match(tx, entry)
    other_tx = add_transaction(-15000, date(2024, 3, 11))

    with pytest.raises(ConflictError):
        writer.create_manual_match(other_tx, entry)

    assert temp_db.get_bank_transaction(other_tx).status == RecordStatus.PENDING


def test_delete_match_resets_both_statuses(writer, temp_db, pair):
    tx, entry = pair
    match = writer.create_manual_match(tx, entry)

    removed = writer.delete_match(match.id)

    assert removed.id == match.id
    assert temp_db.get_match(match.id) is None
    assert statuses(temp_db, tx, entry) == (RecordStatus.PENDING, RecordStatus.PENDING)


def test_delete_missing_match(writer):
    with pytest.raises(NotFoundError, match="Match 42 not found"):
        writer.delete_match(42)


def test_failed_delete_leaves_match_in_place(writer, temp_db, pair, monkeypatch):
    tx, entry = pair
    match = writer.create_manual_match(tx, entry)
    session = temp_db._get_session()

    def broken_flush(*args, **kwargs):
        raise OperationalError("DELETE FROM reconciliations", {}, Exception("disk I/O error"))

    with monkeypatch.context() as m:
        m.setattr(session, "flush", broken_flush)
        with pytest.raises(StoreError) as excinfo:
            writer.delete_match(match.id)

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert temp_db.get_match(match.id) is not None
    assert statuses(temp_db, tx, entry) == (RecordStatus.RECONCILED, RecordStatus.RECONCILED)


def test_undo_then_rematch(writer, reconciliation_service, temp_db, sample_bank_account, pair):
    """An undone match goes back into the pool for the next auto run."""
    tx, entry = pair
    first = reconciliation_service.auto_reconcile(sample_bank_account.id)
    assert len(first) == 1

    reconciliation_service.undo_match(first[0].id)
    assert statuses(temp_db, tx, entry) == (RecordStatus.PENDING, RecordStatus.PENDING)

    second = reconciliation_service.auto_reconcile(sample_bank_account.id)

    assert [(m.bank_transaction_id, m.accounting_entry_id) for m in second] == [(tx, entry)]
    assert second[0].id != first[0].id
