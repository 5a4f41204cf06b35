"""Reconciliation commands."""

import click
from ledgermatch.cli.account_resolution import resolve_bank_account_or_exit
from ledgermatch.cli.commands.rules import rules_group
from ledgermatch.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.domain.reconciliation import ReconciliationService


def _print_matches(matches) -> None:
    click.echo("-" * 90)
    click.echo(
        f"{'Match':<7} {'Transaction':<12} {'Entry':<8} {'Method':<13} {'Conf.':>5}  {'Created':<20}"
    )
    click.echo("-" * 90)
    for match in matches:
        created = match.created_at.strftime("%Y-%m-%d %H:%M") if match.created_at else ""
        click.echo(
            f"{match.id:<7} {match.bank_transaction_id:<12} {match.accounting_entry_id:<8} "
            f"{match.method.value:<13} {match.confidence:>4}%  {created:<20}"
        )


@click.group()
def reconcile_group():
    """Match bank transactions with accounting entries."""
    pass


@reconcile_group.command("auto")
@click.option("--account", required=True, help="Bank account name or ID")
@click.option(
    "--tolerance-days",
    type=int,
    help="Maximum day difference for same-amount matches (default: company setting)",
)
@click.option(
    "--amount-tolerance",
    help="Maximum relative amount difference, e.g. 0.01 for 1% (default: company setting)",
)
@period_options
@click.pass_context
def auto_reconcile(
    ctx,
    account: str,
    tolerance_days: int | None,
    amount_tolerance: str | None,
    start_date,
    end_date,
    **periods,
):
    """Automatically match pending records of a bank account.

    Runs four passes in order: exact reference, same date and amount,
    same amount within the date tolerance, and fuzzy scoring.

    Examples:
        ledgermatch reconcile auto --account Operations
        ledgermatch reconcile auto --account 1 --last-month --tolerance-days 3
    """
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )
    service = ReconciliationService(db)

    try:
        matches = service.auto_reconcile(
            account_id,
            date_range=date_range,
            tolerance_days=tolerance_days,
            amount_tolerance=amount_tolerance,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not matches:
        click.echo("No new matches found.")
        return

    click.echo(f"Created {len(matches)} match(es):")
    _print_matches(matches)


@reconcile_group.command("manual")
@click.argument("transaction_id", type=int)
@click.argument("entry_id", type=int)
@click.pass_context
def manual_match(ctx, transaction_id: int, entry_id: int):
    """Match a bank transaction with an accounting entry by hand.

    Examples:
        ledgermatch reconcile manual 12 40
    """
    service = ReconciliationService(ctx.obj["db"])

    try:
        match = service.create_manual_match(transaction_id, entry_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Created match {match.id}: transaction {transaction_id} <-> entry {entry_id}"
    )


@reconcile_group.command("undo")
@click.argument("match_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def undo_match(ctx, match_id: int, yes: bool):
    """Undo a match, returning both records to pending.

    Examples:
        ledgermatch reconcile undo 7
        ledgermatch reconcile undo 7 --yes
    """
    service = ReconciliationService(ctx.obj["db"])

    if not yes and not click.confirm(f"Are you sure you want to undo match {match_id}?"):
        click.echo("Undo cancelled.")
        return

    try:
        service.undo_match(match_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Undid match {match_id}")


@reconcile_group.command("list")
@click.option("--account", required=True, help="Bank account name or ID")
@period_options
@click.pass_context
def list_matches(ctx, account: str, start_date, end_date, **periods):
    """List a bank account's matches.

    Date options filter on the day each match was created.

    Examples:
        ledgermatch reconcile list --account Operations
        ledgermatch reconcile list --account 1 --this-month
    """
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )
    service = ReconciliationService(db)

    try:
        matches = service.list_matches(account_id, date_range=date_range)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not matches:
        click.echo("No matches found.")
        return

    click.echo(f"\nFound {len(matches)} match(es):")
    _print_matches(matches)


@reconcile_group.command("report")
@click.option("--account", required=True, help="Bank account name or ID")
@period_options
@click.pass_context
def report(ctx, account: str, start_date, end_date, **periods):
    """Show matches with the transaction and entry each one pairs.

    Date options filter on the day each match was created.

    Examples:
        ledgermatch reconcile report --account Operations --last-month
    """
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )
    service = ReconciliationService(db)

    try:
        details = service.match_report(account_id, date_range=date_range)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not details:
        click.echo("No matches found.")
        return

    click.echo(f"\nReconciliation report: {len(details)} match(es)")
    click.echo("-" * 110)
    click.echo(
        f"{'Match':<7} {'Method':<13} {'Conf.':>5}  {'Tx date':<11} {'Tx amount':>14}  "
        f"{'Entry date':<11} {'Entry amount':>14}  {'Reference':<16}"
    )
    click.echo("-" * 110)
    for detail in details:
        tx, entry = detail.transaction, detail.entry
        click.echo(
            f"{detail.match.id:<7} {detail.match.method.value:<13} {detail.match.confidence:>4}%  "
            f"{str(tx.date):<11} {tx.amount:>14,.2f}  "
            f"{str(entry.date):<11} {entry.amount:>14,.2f}  "
            f"{(entry.reference or tx.reference or '')[:16]:<16}"
        )
    click.echo("-" * 110)
    click.echo(f"{'TOTAL':<27}  {'':<11} {sum(d.transaction.amount for d in details):>14,.2f}")


@reconcile_group.command("score")
@click.argument("transaction_id", type=int)
@click.argument("entry_id", type=int)
@click.option("--amount-tolerance", help="Maximum relative amount difference (default: company setting)")
@click.pass_context
def score(ctx, transaction_id: int, entry_id: int, amount_tolerance: str | None):
    """Show how a transaction and an entry would score, without matching them.

    Examples:
        ledgermatch reconcile score 12 40
    """
    service = ReconciliationService(ctx.obj["db"])

    try:
        breakdown = service.preview_score(transaction_id, entry_id, amount_tolerance=amount_tolerance)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Score: {breakdown.total}")
    if breakdown.rejected:
        click.echo(
            f"  Rejected: amount difference {breakdown.relative_difference:.2%} exceeds tolerance"
        )
        return
    click.echo(f"  Sign:        {breakdown.sign:+d}")
    click.echo(f"  Amount:      {breakdown.amount:+d} (difference {breakdown.relative_difference:.2%})")
    click.echo(f"  Date:        {breakdown.date:+d} ({breakdown.day_difference} day(s) apart)")
    click.echo(f"  Description: {breakdown.description:+d}")


@reconcile_group.command("repair")
@click.option("--account", required=True, help="Bank account name or ID")
@click.pass_context
def repair(ctx, account: str):
    """Make record statuses agree with existing matches."""
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    service = ReconciliationService(db)

    try:
        counts = service.repair_statuses(account_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not any(counts.values()):
        click.echo("All statuses are consistent.")
        return

    click.echo("Repaired statuses:")
    for key, count in counts.items():
        if count:
            click.echo(f"  {key.replace('_', ' ')}: {count}")


@reconcile_group.command("summary")
@click.option("--account", required=True, help="Bank account name or ID")
@click.pass_context
def summary(ctx, account: str):
    """Show reconciliation progress for a bank account."""
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    service = ReconciliationService(db)

    try:
        result = service.get_summary(account_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nReconciliation summary for bank account {account_id}")
    click.echo("=" * 60)
    click.echo(f"Reconciled: {result.reconciled_count:5d}  ({result.reconciled_amount:,.2f})")
    click.echo(f"Pending:    {result.pending_count:5d}  ({result.pending_amount:,.2f})")
    click.echo(f"Progress:   {result.reconciled_ratio:.1%}")
    if result.matches_by_method:
        click.echo("\nMatches by method:")
        for method, count in sorted(result.matches_by_method.items(), key=lambda item: item[0].value):
            click.echo(f"  {method.value:<13} {count}")
    if result.last_match_at:
        click.echo(f"\nLast match: {result.last_match_at:%Y-%m-%d %H:%M}")


def register_commands(cli):
    """Register reconcile commands with main CLI."""
    reconcile_group.add_command(rules_group, name="rules")
    cli.add_command(reconcile_group, name="reconcile")
