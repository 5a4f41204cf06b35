"""Resolve bank account and company names to IDs."""

from ledgermatch.domain.errors import NotFoundError
from ledgermatch.domain.ledger import LedgerService


def resolve_bank_account(ledger_service: LedgerService, account: str | int) -> int:
    """Resolve a bank account name or ID to its ID.

    Args:
        ledger_service: LedgerService instance
        account: Account name, or ID (int or numeric string)

    Returns:
        Bank account ID

    Raises:
        NotFoundError: If no account matches
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if ledger_service.get_bank_account(account_id) is None:
            raise NotFoundError(f"Bank account ID {account_id} not found")
        return account_id

    for acc in ledger_service.list_bank_accounts():
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Bank account '{account}' not found")


def resolve_company(ledger_service: LedgerService, company: str | int) -> int:
    """Resolve a company name or ID to its ID.

    Raises:
        NotFoundError: If no company matches
    """
    try:
        company_id = int(company)
    except (ValueError, TypeError):
        company_id = None

    if company_id is not None:
        if ledger_service.get_company(company_id) is None:
            raise NotFoundError(f"Company ID {company_id} not found")
        return company_id

    for comp in ledger_service.list_companies():
        if comp.name == company:
            return comp.id

    raise NotFoundError(f"Company '{company}' not found")
