"""Reconciliation settings commands."""

import click
from ledgermatch.cli.account_resolution import resolve_company_or_exit
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.domain.settings import ReconciliationSettingsService


def _show(settings) -> None:
    click.echo(f"Settings for company {settings.company_id}:")
    click.echo(f"  Tolerance days:    {settings.tolerance_days}")
    click.echo(f"  Amount tolerance:  {settings.amount_tolerance.normalize()}")
    click.echo(f"  Min match score:   {settings.min_match_score}")


@click.group()
def settings_group():
    """View and change auto-reconciliation settings."""
    pass


@settings_group.command("show")
@click.option("--company", required=True, help="Company name or ID")
@click.pass_context
def show_settings(ctx, company: str):
    """Show a company's reconciliation settings."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, LedgerService(db), company)
    _show(ReconciliationSettingsService(db).get_settings(company_id))


@settings_group.command("set")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--tolerance-days", type=int, help="Maximum day difference for same-amount matches")
@click.option("--amount-tolerance", help="Maximum relative amount difference (e.g., 0.01)")
@click.option("--min-score", "min_match_score", type=int, help="Minimum fuzzy match score (1-100)")
@click.pass_context
def set_settings(
    ctx,
    company: str,
    tolerance_days: int | None,
    amount_tolerance: str | None,
    min_match_score: int | None,
):
    """Change a company's reconciliation settings.

    Examples:
        ledgermatch settings set --company "Acme SpA" --tolerance-days 5
        ledgermatch settings set --company 1 --amount-tolerance 0.02 --min-score 75
    """
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, LedgerService(db), company)

    if tolerance_days is None and amount_tolerance is None and min_match_score is None:
        click.echo("Error: Nothing to update; pass at least one setting.", err=True)
        ctx.exit(1)

    try:
        settings = ReconciliationSettingsService(db).update_settings(
            company_id,
            tolerance_days=tolerance_days,
            amount_tolerance=amount_tolerance,
            min_match_score=min_match_score,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    _show(settings)


@settings_group.command("reset")
@click.option("--company", required=True, help="Company name or ID")
@click.pass_context
def reset_settings(ctx, company: str):
    """Restore default settings for a company."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, LedgerService(db), company)

    try:
        settings = ReconciliationSettingsService(db).reset_settings(company_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    _show(settings)


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
