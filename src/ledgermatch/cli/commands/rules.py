"""Reconciliation rule commands."""

import click
from ledgermatch.cli.account_resolution import (
    resolve_bank_account_or_exit,
    resolve_company_or_exit,
)
from ledgermatch.cli.date_filters import period_options, pop_period_flags, resolve_cli_date_range
from ledgermatch.cli.error_handling import handle_domain_error
from ledgermatch.domain.entities import TransactionType
from ledgermatch.domain.errors import DomainError, StoreError
from ledgermatch.domain.ledger import LedgerService
from ledgermatch.domain.rules import DEFAULT_RULE_PRIORITY, RulesService

TYPE_CHOICES = [t.value for t in TransactionType]


def _print_rule(rule) -> None:
    state = "active" if rule.is_active else "inactive"
    click.echo(f"Rule {rule.id}: {rule.name} (priority {rule.priority}, {state})")
    if rule.description_pattern:
        click.echo(f"  Description: {rule.description_pattern}")
    if rule.amount_pattern:
        click.echo(f"  Amount:      {rule.amount_pattern}")
    if rule.transaction_type:
        click.echo(f"  Type:        {rule.transaction_type.value}")


@click.group()
def rules_group():
    """Manage user-defined reconciliation rules."""
    pass


@rules_group.command("list")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--active-only", is_flag=True, help="Hide disabled rules")
@click.pass_context
def list_rules(ctx, company: str, active_only: bool):
    """List a company's rules in evaluation order."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, LedgerService(db), company)

    try:
        rules = RulesService(db).list_rules(company_id, active_only=active_only)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not rules:
        click.echo("No rules found.")
        return

    click.echo("-" * 90)
    click.echo(
        f"{'ID':<5} {'Prio':>5}  {'Active':<7} {'Name':<20} {'Type':<11} {'Description':<18} {'Amount':<14}"
    )
    click.echo("-" * 90)
    for rule in rules:
        click.echo(
            f"{rule.id:<5} {rule.priority:>5}  {'yes' if rule.is_active else 'no':<7} "
            f"{rule.name[:20]:<20} "
            f"{(rule.transaction_type.value if rule.transaction_type else ''):<11} "
            f"{(rule.description_pattern or '')[:18]:<18} {(rule.amount_pattern or '')[:14]:<14}"
        )


@rules_group.command("add")
@click.argument("name")
@click.option("--company", required=True, help="Company name or ID")
@click.option("--description-pattern", help="Description substrings, separated by '|'")
@click.option("--amount-pattern", help="Amount conditions such as '=1500|>10000', separated by '|'")
@click.option("--type", "transaction_type", type=click.Choice(TYPE_CHOICES), help="Transaction type")
@click.option(
    "--priority",
    type=int,
    default=DEFAULT_RULE_PRIORITY,
    show_default=True,
    help="Evaluation order, lowest first",
)
@click.option("--inactive", is_flag=True, help="Create the rule disabled")
@click.pass_context
def add_rule(
    ctx,
    name: str,
    company: str,
    description_pattern: str | None,
    amount_pattern: str | None,
    transaction_type: str | None,
    priority: int,
    inactive: bool,
):
    """Create a reconciliation rule.

    Examples:
        ledgermatch reconcile rules add "Payroll" --company "Acme SpA" --description-pattern "sueldo|salary"
        ledgermatch reconcile rules add "Big transfers" --company 1 --type transfer --amount-pattern ">1000000"
    """
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, LedgerService(db), company)
    service = RulesService(db)

    try:
        rule_id = service.create_rule(
            company_id,
            name,
            description_pattern=description_pattern,
            amount_pattern=amount_pattern,
            transaction_type=transaction_type,
            priority=priority,
            is_active=not inactive,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created rule {rule_id}")
    _print_rule(service.require_rule(rule_id))


@rules_group.command("update")
@click.argument("rule_id", type=int)
@click.option("--name", help="New rule name")
@click.option("--description-pattern", help="Description substrings; '' clears it")
@click.option("--amount-pattern", help="Amount conditions; '' clears it")
@click.option("--type", "transaction_type", help="Transaction type; '' clears it")
@click.option("--priority", type=int, help="Evaluation order, lowest first")
@click.pass_context
def update_rule(
    ctx,
    rule_id: int,
    name: str | None,
    description_pattern: str | None,
    amount_pattern: str | None,
    transaction_type: str | None,
    priority: int | None,
):
    """Change a rule's name, criteria or priority."""
    if all(v is None for v in (name, description_pattern, amount_pattern, transaction_type, priority)):
        click.echo("Error: Nothing to update; pass at least one option.", err=True)
        ctx.exit(1)

    try:
        rule = RulesService(ctx.obj["db"]).update_rule(
            rule_id,
            name=name,
            description_pattern=description_pattern,
            amount_pattern=amount_pattern,
            transaction_type=transaction_type,
            priority=priority,
        )
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    _print_rule(rule)


def _toggle(ctx, rule_id: int, is_active: bool) -> None:
    try:
        rule = RulesService(ctx.obj["db"]).set_active(rule_id, is_active)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rule {rule.id} {'enabled' if rule.is_active else 'disabled'}")


@rules_group.command("enable")
@click.argument("rule_id", type=int)
@click.pass_context
def enable_rule(ctx, rule_id: int):
    """Enable a rule."""
    _toggle(ctx, rule_id, True)


@rules_group.command("disable")
@click.argument("rule_id", type=int)
@click.pass_context
def disable_rule(ctx, rule_id: int):
    """Disable a rule without deleting it."""
    _toggle(ctx, rule_id, False)


@rules_group.command("delete")
@click.argument("rule_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_rule(ctx, rule_id: int, yes: bool):
    """Delete a rule."""
    if not yes and not click.confirm(f"Are you sure you want to delete rule {rule_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        RulesService(ctx.obj["db"]).delete_rule(rule_id)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted rule {rule_id}")


@rules_group.command("preview")
@click.option("--account", required=True, help="Bank account name or ID")
@period_options
@click.pass_context
def preview_rules(ctx, account: str, start_date, end_date, **periods):
    """Show the pairs active rules would propose; nothing is matched.

    Examples:
        ledgermatch reconcile rules preview --account Operations --this-month
    """
    db = ctx.obj["db"]
    account_id = resolve_bank_account_or_exit(ctx, LedgerService(db), account)
    date_range = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    try:
        proposals = RulesService(db).preview_matches(account_id, date_range=date_range)
    except (DomainError, StoreError) as e:
        handle_domain_error(ctx, e)

    if not proposals:
        click.echo("No rule matches found.")
        return

    click.echo(f"\nRules propose {len(proposals)} match(es):")
    click.echo("-" * 80)
    click.echo(f"{'Rule':<20} {'Transaction':<12} {'Entry':<8} {'Conf.':>5}  {'Amount':>14}")
    click.echo("-" * 80)
    for proposal in proposals:
        click.echo(
            f"{proposal.rule.name[:20]:<20} {proposal.transaction.id:<12} {proposal.entry.id:<8} "
            f"{proposal.confidence:>4}%  {proposal.transaction.amount:>14,.2f}"
        )
