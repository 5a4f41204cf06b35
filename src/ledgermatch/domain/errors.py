"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or a record that is
    no longer pending."""


class StoreError(Exception):
    """The record store failed. The underlying driver error is chained as
    ``__cause__``."""


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def bank_account_not_found(bank_account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {bank_account_id} not found"


def bank_transaction_not_found(transaction_id: int) -> str:
    """Return message for missing bank transaction."""
    return f"Bank transaction {transaction_id} not found"


def bank_transaction_without_account(transaction_id: int) -> str:
    """Return message for a legacy transaction with no bank account link."""
    return f"Bank transaction {transaction_id} has no bank account"


def accounting_entry_not_found(entry_id: int) -> str:
    """Return message for missing accounting entry."""
    return f"Accounting entry {entry_id} not found"


def match_not_found(match_id: int) -> str:
    """Return message for missing match."""
    return f"Match {match_id} not found"


def record_not_pending(kind: str, record_id: int) -> str:
    """Return message when a record is already reconciled."""
    return f"{kind} {record_id} is not pending; it is already reconciled"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing reconciliation rule."""
    return f"Reconciliation rule {rule_id} not found"
