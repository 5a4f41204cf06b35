"""Listing commands for both ledgers."""

import click
from ledgermatch.cli.account_resolution import (
    resolve_bank_account_or_exit,
    resolve_company_or_exit,
)
from ledgermatch.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from ledgermatch.domain.entities import RecordStatus
from ledgermatch.domain.ledger import LedgerService

STATUS_CHOICES = [s.value for s in RecordStatus]


def _print_records(records, title: str) -> None:
    click.echo(f"\nFound {len(records)} {title}:")
    click.echo("-" * 100)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>14} {'Status':<11} {'Reference':<16} {'Description':<36}"
    )
    click.echo("-" * 100)
    for record in records:
        click.echo(
            f"{record.id:<6} {str(record.date):<12} {record.amount:>14,.2f} "
            f"{record.status.value:<11} {(record.reference or '')[:16]:<16} "
            f"{(record.description or '')[:36]:<36}"
        )

    pending = [r for r in records if r.status == RecordStatus.PENDING]
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} {'':<12} {sum(r.amount for r in records):>14,.2f} "
        f"Pending: {len(pending)} | Count: {len(records)}"
    )


@click.group()
def transactions_group():
    """View bank transactions."""
    pass


@transactions_group.command("list")
@click.option("--account", required=True, help="Bank account name or ID")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only records with this status")
@period_options
@click.pass_context
def list_transactions(ctx, account: str, status: str | None, start_date, end_date, **periods):
    """List a bank account's transactions.

    Examples:
        ledgermatch transactions list --account Operations --status pending
        ledgermatch transactions list --account 1 --last-month
    """
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_bank_account_or_exit(ctx, service, account)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    transactions = service.list_bank_transactions(
        account_id, date_range=date_range, status=RecordStatus(status) if status else None
    )
    if not transactions:
        click.echo("No transactions found.")
        return
    _print_records(transactions, "transaction(s)")


@click.group()
def entries_group():
    """View accounting entries."""
    pass


@entries_group.command("list")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only records with this status")
@period_options
@click.pass_context
def list_entries(ctx, company: str, status: str | None, start_date, end_date, **periods):
    """List a company's accounting entries.

    Examples:
        ledgermatch entries list --company "Acme SpA" --status pending
    """
    service = LedgerService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    entries = service.list_accounting_entries(
        company_id, date_range=date_range, status=RecordStatus(status) if status else None
    )
    if not entries:
        click.echo("No entries found.")
        return
    _print_records(entries, "entry(ies)")


def register_commands(cli):
    """Register transactions and entries commands with main CLI."""
    cli.add_command(transactions_group, name="transactions")
    cli.add_command(entries_group, name="entries")
