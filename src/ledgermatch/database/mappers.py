"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so column names such as
``transaction_date`` or ``confidence_score`` never leak into the engine.
"""

from decimal import Decimal

from ledgermatch.domain import entities as domain
from ledgermatch.database.models import (
    Company as ORMCompany,
    BankAccount as ORMBankAccount,
    BankTransaction as ORMBankTransaction,
    AccountingEntry as ORMAccountingEntry,
    Reconciliation as ORMReconciliation,
    ReconciliationSettings as ORMReconciliationSettings,
    ReconciliationRule as ORMReconciliationRule,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        tax_id=orm_company.tax_id,
        created_at=orm_company.created_at,
    )


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        company_id=orm_account.company_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        account_number=orm_account.account_number,
        currency=orm_account.currency,
        created_at=orm_account.created_at,
    )


def bank_transaction_to_domain(orm_txn: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    return domain.BankTransaction(
        id=orm_txn.id,
        bank_account_id=orm_txn.bank_account_id,
        date=orm_txn.transaction_date,
        amount=Decimal(orm_txn.amount),
        description=orm_txn.description,
        reference=orm_txn.reference_number,
        status=domain.RecordStatus(orm_txn.status),
        transaction_type=domain.TransactionType(orm_txn.transaction_type),
        created_at=orm_txn.created_at,
    )


def accounting_entry_to_domain(orm_entry: ORMAccountingEntry) -> domain.AccountingEntry:
    """Convert SQLAlchemy AccountingEntry model to domain AccountingEntry entity."""
    direction = orm_entry.document_direction
    return domain.AccountingEntry(
        id=orm_entry.id,
        company_id=orm_entry.company_id,
        date=orm_entry.date,
        amount=Decimal(orm_entry.amount),
        description=orm_entry.description,
        reference=orm_entry.reference,
        status=domain.RecordStatus(orm_entry.status),
        document_type=domain.DocumentType(orm_entry.document_type),
        document_direction=domain.DocumentDirection(direction) if direction else None,
        created_at=orm_entry.created_at,
    )


def match_to_domain(orm_match: ORMReconciliation) -> domain.Match:
    """Convert SQLAlchemy Reconciliation model to domain Match entity."""
    return domain.Match(
        id=orm_match.id,
        bank_transaction_id=orm_match.bank_transaction_id,
        accounting_entry_id=orm_match.accounting_entry_id,
        bank_account_id=orm_match.bank_account_id,
        method=domain.MatchMethod(orm_match.method),
        confidence=orm_match.confidence_score,
        notes=orm_match.notes,
        created_at=orm_match.created_at,
    )


def settings_to_domain(orm_settings: ORMReconciliationSettings) -> domain.ReconciliationSettings:
    """Convert SQLAlchemy ReconciliationSettings model to its domain entity."""
    return domain.ReconciliationSettings(
        company_id=orm_settings.company_id,
        tolerance_days=orm_settings.tolerance_days,
        amount_tolerance=Decimal(orm_settings.amount_tolerance),
        min_match_score=orm_settings.min_match_score,
        updated_at=orm_settings.updated_at,
    )


def rule_to_domain(orm_rule: ORMReconciliationRule) -> domain.ReconciliationRule:
    """Convert SQLAlchemy ReconciliationRule model to its domain entity."""
    return domain.ReconciliationRule(
        id=orm_rule.id,
        company_id=orm_rule.company_id,
        name=orm_rule.rule_name,
        description_pattern=orm_rule.description_pattern,
        amount_pattern=orm_rule.amount_pattern,
        transaction_type=(
            domain.TransactionType(orm_rule.transaction_type) if orm_rule.transaction_type else None
        ),
        priority=orm_rule.rule_priority,
        is_active=bool(orm_rule.is_active),
        created_at=orm_rule.created_at,
        updated_at=orm_rule.updated_at,
    )
