"""CLI helpers for bank account and company resolution."""

from __future__ import annotations

import click
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.utils.account_resolver import resolve_bank_account, resolve_company


def resolve_bank_account_or_exit(
    ctx: click.Context, ledger_service: LedgerService, account: str | int
) -> int:
    """Resolve bank account name or ID, or exit with a CLI error."""
    try:
        return resolve_bank_account(ledger_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_company_or_exit(
    ctx: click.Context, ledger_service: LedgerService, company: str | int
) -> int:
    """Resolve company name or ID, or exit with a CLI error."""
    try:
        return resolve_company(ledger_service, company)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
