"""Bank account management commands."""

import click
from ledgermatch.cli.account_resolution import resolve_company_or_exit
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService


@click.group()
def bank_account_group():
    """Manage bank accounts."""
    pass


@bank_account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--company", required=True, help="Owning company name or ID")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.option("--number", "account_number", help="Account number")
@click.option("--currency", default="CLP", show_default=True, help="ISO currency code")
@click.pass_context
def create_bank_account(
    ctx,
    name: str,
    company: str,
    bank: str | None,
    account_number: str | None,
    currency: str,
):
    """Create a new bank account.

    If --bank is not provided, the bank name will be set to the account name.

    Examples:
        ledgermatch bank-account create "Operations" --company "Acme SpA"
        ledgermatch bank-account create "Payroll" --company 1 --bank "Banco Estado" --number 0012345
    """
    service = LedgerService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company)

    try:
        account_id = service.create_bank_account(
            company_id=company_id,
            name=name,
            bank_name=bank,
            account_number=account_number,
            currency=currency,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    account = service.get_bank_account(account_id)
    click.echo(f"Created bank account '{account.name}' (ID: {account_id})")
    if bank is None:
        click.echo(f"Bank name set to '{account.bank_name}'")


@bank_account_group.command("list")
@click.option("--company", help="Only accounts of this company (name or ID)")
@click.pass_context
def list_bank_accounts(ctx, company: str | None):
    """List bank accounts."""
    service = LedgerService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company) if company else None

    accounts = service.list_bank_accounts(company_id=company_id)
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {acc.bank_name:15s} | "
            f"Company: {acc.company_id} | {acc.currency}"
        )


def register_commands(cli):
    """Register bank account commands with main CLI."""
    cli.add_command(bank_account_group, name="bank-account")
