"""Tests for the Database interface returning domain models."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgermatch.database.factories import create_database, create_sqlite_database
from ledgermatch.database.models import Reconciliation
from ledgermatch.database.sqlalchemy_db import SQLAlchemyDatabase
from ledgermatch.domain import entities
from ledgermatch.domain.entities import MatchMethod, RecordStatus
from ledgermatch.domain.errors import ConflictError, NotFoundError


@pytest.fixture
def company_id(temp_db):
    return temp_db.create_company(name="Acme SpA")


@pytest.fixture
def account_id(temp_db, company_id):
    return temp_db.create_bank_account(company_id=company_id, name="Operations", bank_name="Banco")


def _set_created_at(db, match_id, when):
    session = db._get_session()
    session.query(Reconciliation).filter(Reconciliation.id == match_id).update(
        {Reconciliation.created_at: when}
    )
    session.commit()


def _detach_matches_from_accounts(db):
    """Simulate rows written before matches carried their bank account."""
    session = db._get_session()
    session.query(Reconciliation).update({Reconciliation.bank_account_id: None})
    session.commit()


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_company_returns_domain_model(self, temp_db, company_id):
        company = temp_db.get_company(company_id)

        assert isinstance(company, entities.Company)
        assert company.name == "Acme SpA"
        assert isinstance(company.created_at, datetime)

    def test_get_bank_account_returns_domain_model(self, temp_db, account_id, company_id):
        account = temp_db.get_bank_account(account_id)

        assert isinstance(account, entities.BankAccount)
        assert account.company_id == company_id
        assert account.currency == "CLP"

    def test_bank_transaction_returns_domain_model(self, temp_db, account_id):
        txn_id = temp_db.create_bank_transaction(
            bank_account_id=account_id,
            date=date(2024, 3, 10),
            amount=Decimal("-15000"),
            reference="F1023",
        )

        txn = temp_db.get_bank_transaction(txn_id)

        assert isinstance(txn, entities.BankTransaction)
        assert txn.date == date(2024, 3, 10)
        assert isinstance(txn.amount, Decimal)
        assert txn.reference == "F1023"
        assert txn.status == RecordStatus.PENDING
        assert txn.transaction_type == entities.TransactionType.OTHER

    def test_missing_records_return_none(self, temp_db):
        assert temp_db.get_company(1) is None
        assert temp_db.get_bank_account(1) is None
        assert temp_db.get_bank_transaction(1) is None
        assert temp_db.get_accounting_entry(1) is None
        assert temp_db.get_match(1) is None
        assert temp_db.get_reconciliation_settings(1) is None

    def test_set_status_on_missing_record(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.set_bank_transaction_status(5, RecordStatus.RECONCILED)
        with pytest.raises(NotFoundError):
            temp_db.set_accounting_entry_status(5, RecordStatus.RECONCILED)

    def test_set_record_statuses_is_all_or_nothing(self, temp_db, company_id, account_id):
        txn_id = temp_db.create_bank_transaction(
            bank_account_id=account_id, date=date(2024, 3, 1), amount=Decimal("100")
        )
        entry_id = temp_db.create_accounting_entry(
            company_id=company_id, date=date(2024, 3, 1), amount=Decimal("100")
        )

        with pytest.raises(NotFoundError):
            temp_db.set_record_statuses(
                {txn_id: RecordStatus.RECONCILED}, {entry_id + 1: RecordStatus.RECONCILED}
            )
        assert temp_db.get_bank_transaction(txn_id).status == RecordStatus.PENDING

        temp_db.set_record_statuses({txn_id: RecordStatus.RECONCILED}, {entry_id: RecordStatus.RECONCILED})
        assert temp_db.get_bank_transaction(txn_id).status == RecordStatus.RECONCILED
        assert temp_db.get_accounting_entry(entry_id).status == RecordStatus.RECONCILED

    def test_duplicate_company_name_is_conflict(self, temp_db, company_id):
        with pytest.raises(ConflictError):
            temp_db.create_company(name="Acme SpA")

        # The session is usable after the rollback
        assert len(temp_db.list_companies()) == 1


class TestMatchStorage:
    @pytest.fixture
    def pair(self, temp_db, company_id, account_id):
        txn_id = temp_db.create_bank_transaction(
            bank_account_id=account_id, date=date(2024, 3, 1), amount=Decimal("100")
        )
        entry_id = temp_db.create_accounting_entry(
            company_id=company_id, date=date(2024, 3, 1), amount=Decimal("100")
        )
        return txn_id, entry_id

    def test_create_match_returns_domain_model(self, temp_db, account_id, pair):
        match = temp_db.create_match(pair[0], pair[1], MatchMethod.EXACT, 100)

        assert isinstance(match, entities.Match)
        assert match.bank_account_id == account_id
        assert match.method == MatchMethod.EXACT
        assert temp_db.get_match(match.id) == match

    def test_claim_requires_pending(self, temp_db, pair):
        temp_db.set_accounting_entry_status(pair[1], RecordStatus.RECONCILED)

        with pytest.raises(ConflictError, match="not pending"):
            temp_db.create_match(pair[0], pair[1], MatchMethod.EXACT, 100)

        assert temp_db.list_matches() == []
        assert temp_db.get_bank_transaction(pair[0]).status == RecordStatus.PENDING

    def test_list_matches_includes_rows_without_account(self, temp_db, account_id, pair):
        match = temp_db.create_match(pair[0], pair[1], MatchMethod.MANUAL, 100)
        _detach_matches_from_accounts(temp_db)

        listed = temp_db.list_matches(bank_account_id=account_id)

        assert [m.id for m in listed] == [match.id]
        assert listed[0].bank_account_id is None

    def test_list_matches_by_creation_day(self, temp_db, company_id, account_id, pair):
        first = temp_db.create_match(pair[0], pair[1], MatchMethod.EXACT, 100)
        txn_id = temp_db.create_bank_transaction(
            bank_account_id=account_id, date=date(2024, 3, 30), amount=Decimal("40")
        )
        entry_id = temp_db.create_accounting_entry(
            company_id=company_id, date=date(2024, 3, 30), amount=Decimal("40")
        )
        second = temp_db.create_match(txn_id, entry_id, MatchMethod.DATE_AMOUNT, 95)
        _set_created_at(temp_db, first.id, datetime(2024, 3, 1, 9, 30))
        _set_created_at(temp_db, second.id, datetime(2024, 3, 31, 23, 59))

        def ids(**kwargs):
            return [m.id for m in temp_db.list_matches(bank_account_id=account_id, **kwargs)]

        assert ids() == [first.id, second.id]
        assert ids(start_date=date(2024, 3, 31)) == [second.id]
        assert ids(end_date=date(2024, 3, 30)) == [first.id]
        assert ids(start_date=date(2024, 3, 1), end_date=date(2024, 3, 1)) == [first.id]
        assert ids(start_date=date(2024, 4, 1)) == []

    def test_backfill(self, temp_db, account_id, company_id, pair):
        temp_db.create_match(pair[0], pair[1], MatchMethod.MANUAL, 100)
        orphan_txn = temp_db.create_bank_transaction(
            bank_account_id=None, date=date(2024, 3, 2), amount=Decimal("5")
        )
        orphan_entry = temp_db.create_accounting_entry(
            company_id=company_id, date=date(2024, 3, 2), amount=Decimal("5")
        )
        session = temp_db._get_session()
        session.add(
            Reconciliation(
                bank_transaction_id=orphan_txn,
                accounting_entry_id=orphan_entry,
                method="manual",
                confidence_score=100,
            )
        )
        session.commit()
        _detach_matches_from_accounts(temp_db)

        assert temp_db.backfill_match_bank_accounts() == 1

        accounts = sorted(
            (m.bank_transaction_id, m.bank_account_id) for m in temp_db.list_matches()
        )
        assert accounts == [(pair[0], account_id), (orphan_txn, None)]

    def test_delete_match_returns_deleted_row(self, temp_db, pair):
        match = temp_db.create_match(pair[0], pair[1], MatchMethod.EXACT, 100)

        deleted = temp_db.delete_match(match.id)

        assert deleted.id == match.id
        assert temp_db.list_matches() == []


class TestSettingsStorage:
    def test_save_and_replace(self, temp_db, company_id):
        temp_db.save_reconciliation_settings(
            entities.ReconciliationSettings(company_id=company_id, tolerance_days=3)
        )
        temp_db.save_reconciliation_settings(
            entities.ReconciliationSettings(company_id=company_id, min_match_score=90)
        )

        stored = temp_db.get_reconciliation_settings(company_id)

        assert stored.tolerance_days == 7
        assert stored.min_match_score == 90
        assert stored.amount_tolerance == Decimal("0.01")

    def test_delete(self, temp_db, company_id):
        temp_db.save_reconciliation_settings(entities.ReconciliationSettings(company_id=company_id))
        temp_db.delete_reconciliation_settings(company_id)
        temp_db.delete_reconciliation_settings(company_id)

        assert temp_db.get_reconciliation_settings(company_id) is None


class TestFactories:
    def test_sqlite_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "env.db"
        monkeypatch.setenv("LEDGERMATCH_DB_PATH", str(path))

        db = create_sqlite_database()

        assert db.database_url == f"sqlite:///{path}"
        assert path.exists()

    def test_database_url_from_environment(self, tmp_path, monkeypatch):
        url = f"sqlite:///{tmp_path / 'url.db'}"
        monkeypatch.setenv("LEDGERMATCH_DATABASE_URL", url)

        db = create_database()

        assert isinstance(db, SQLAlchemyDatabase)
        assert db.database_url == url

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGERMATCH_DATABASE_URL", "sqlite:///ignored.db")
        path = tmp_path / "explicit.db"

        db = create_database(str(path))

        assert db.database_url == f"sqlite:///{path}"


class TestRuleStorage:
    def test_create_returns_domain_model(self, temp_db, company_id):
        rule_id = temp_db.create_rule(
            company_id=company_id,
            name="Fees",
            amount_pattern="<100",
            transaction_type=entities.TransactionType.FEE,
            priority=7,
        )

        rule = temp_db.get_rule(rule_id)

        assert isinstance(rule, entities.ReconciliationRule)
        assert rule.name == "Fees"
        assert rule.transaction_type == entities.TransactionType.FEE
        assert rule.description_pattern is None
        assert rule.priority == 7
        assert rule.is_active is True
        assert rule.created_at is not None

    def test_names_are_unique_per_company(self, temp_db, company_id):
        other_company = temp_db.create_company(name="Other Ltda")
        temp_db.create_rule(company_id=company_id, name="Fees", amount_pattern="<100")
        temp_db.create_rule(company_id=other_company, name="Fees", amount_pattern="<100")

        with pytest.raises(ConflictError):
            temp_db.create_rule(company_id=company_id, name="Fees", amount_pattern="<5")

        assert [r.name for r in temp_db.list_rules(company_id)] == ["Fees"]

    def test_update_and_delete(self, temp_db, company_id):
        rule_id = temp_db.create_rule(company_id=company_id, name="Fees", amount_pattern="<100")
        rule = temp_db.get_rule(rule_id)

        temp_db.update_rule(replace(rule, name="Bank fees", is_active=False, transaction_type=None))

        stored = temp_db.get_rule(rule_id)
        assert stored.name == "Bank fees"
        assert stored.is_active is False
        assert temp_db.list_rules(company_id, active_only=True) == []

        temp_db.delete_rule(rule_id)
        assert temp_db.get_rule(rule_id) is None
        with pytest.raises(NotFoundError):
            temp_db.delete_rule(rule_id)
        with pytest.raises(NotFoundError):
            temp_db.update_rule(rule)
