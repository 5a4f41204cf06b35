"""Main CLI entry point."""

import click
from ledgermatch.database.factories import create_database
from ledgermatch.logger import configure_logging

# Import and register all commands at module level
from ledgermatch.cli.commands import (
    add,
    bank_account,
    company,
    reconcile,
    records,
    settings,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERMATCH_DB_PATH environment variable)",
    envvar="LEDGERMATCH_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="LEDGERMATCH_LOG_LEVEL",
    help="Log verbosity (default: WARNING)",
)
@click.option(
    "--log-json",
    is_flag=True,
    envvar="LEDGERMATCH_LOG_JSON",
    help="Emit logs as JSON lines on stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None, log_json: bool):
    """ledgermatch - Bank reconciliation.

    Match bank statement lines with accounting entries, automatically or by
    hand, and keep both ledgers' reconciliation status in step.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level, json_output=log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
bank_account.register_commands(cli)
add.register_commands(cli)
records.register_commands(cli)
reconcile.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
