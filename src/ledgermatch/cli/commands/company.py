"""Company management commands."""

import click
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService


@click.group()
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name", metavar="COMPANY_NAME")
@click.option("--tax-id", help="Tax identifier (RUT, VAT number, ...)")
@click.pass_context
def create_company(ctx, name: str, tax_id: str | None):
    """Create a new company.

    Examples:
        ledgermatch company create "Acme SpA"
        ledgermatch company create "Acme SpA" --tax-id 76.123.456-7
    """
    service = LedgerService(ctx.obj["db"])

    try:
        company_id = service.create_company(name=name, tax_id=tax_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created company '{name.strip()}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List all companies."""
    service = LedgerService(ctx.obj["db"])

    companies = service.list_companies()
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\nCompanies:")
    click.echo("-" * 60)
    for company in companies:
        tax_id = f" | Tax ID: {company.tax_id}" if company.tax_id else ""
        click.echo(f"ID: {company.id:3d} | {company.name:30s}{tax_id}")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
