"""Commands for recording bank transactions and accounting entries."""

import click
from ledgermatch.cli.account_resolution import (
    resolve_bank_account_or_exit,
    resolve_company_or_exit,
)
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.entities import DocumentDirection, DocumentType, TransactionType
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.utils.amount_parser import parse_amount
from ledgermatch.utils.date_parser import parse_date


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _parse_amount_or_exit(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@click.command("add-transaction")
@click.option("--account", required=True, help="Bank account name or ID")
@click.option(
    "--date",
    required=True,
    help="Statement date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option(
    "--amount", required=True, help="Signed amount, credits positive (e.g., 1500 or -1500)"
)
@click.option("--description", help="Statement description")
@click.option("--reference", help="Reference or document number")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType]),
    default=TransactionType.OTHER.value,
    show_default=True,
    help="Transaction type",
)
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    description: str | None,
    reference: str | None,
    transaction_type: str,
):
    """Record a bank statement line.

    Examples:
        ledgermatch add-transaction --account Operations --date 2024-03-10 --amount -15000 --reference F1023
        ledgermatch add-transaction --account 1 --date today --amount 5000 --description "Transferencia cliente"
    """
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_bank_account_or_exit(ctx, service, account)
    txn_date = _parse_date_or_exit(ctx, date)
    txn_amount = _parse_amount_or_exit(ctx, amount)

    try:
        transaction_id = service.add_bank_transaction(
            bank_account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
            reference=reference,
            transaction_type=TransactionType(transaction_type),
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created bank transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {txn_amount:,.2f}")
    if description:
        click.echo(f"  Description: {description}")
    if reference:
        click.echo(f"  Reference: {reference}")


@click.command("add-entry")
@click.option("--company", required=True, help="Company name or ID")
@click.option(
    "--date",
    required=True,
    help="Entry date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Signed amount (e.g., 1500 or -1500)")
@click.option("--description", help="Entry description")
@click.option("--reference", help="Document number")
@click.option(
    "--document-type",
    type=click.Choice([t.value for t in DocumentType]),
    default=DocumentType.OTHER.value,
    show_default=True,
    help="Document type",
)
@click.option(
    "--direction",
    type=click.Choice([d.value for d in DocumentDirection]),
    help="Whether the document was issued or received",
)
@click.pass_context
def add_entry(
    ctx,
    company: str,
    date: str,
    amount: str,
    description: str | None,
    reference: str | None,
    document_type: str,
    direction: str | None,
):
    """Record an accounting entry.

    Examples:
        ledgermatch add-entry --company "Acme SpA" --date 2024-03-10 --amount -15000 --reference F1023 --document-type invoice --direction received
    """
    service = LedgerService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company)
    entry_date = _parse_date_or_exit(ctx, date)
    entry_amount = _parse_amount_or_exit(ctx, amount)

    try:
        entry_id = service.add_accounting_entry(
            company_id=company_id,
            date=entry_date,
            amount=entry_amount,
            description=description,
            reference=reference,
            document_type=DocumentType(document_type),
            document_direction=DocumentDirection(direction) if direction else None,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created accounting entry {entry_id}")
    click.echo(f"  Date: {entry_date}")
    click.echo(f"  Amount: {entry_amount:,.2f}")
    if reference:
        click.echo(f"  Reference: {reference}")


def register_commands(cli):
    """Register add-transaction and add-entry commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(add_entry)
