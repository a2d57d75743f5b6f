"""Main CLI entry point."""

import click

from ctengine.config.logging import configure_logging
from ctengine.database.factories import create_sqlite_database

# Import and register all commands at module level
from ctengine.cli.commands import chart, journal, tax, trial_balance


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CTENGINE_DB_PATH environment variable)",
    envvar="CTENGINE_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level for messages on stderr (overrides CTENGINE_LOG_LEVEL)",
    envvar="CTENGINE_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """ctengine - Trial balance aggregation and UK Corporation Tax.

    Merge journal entries and AI-extracted figures into per-company,
    per-period trial balances, and compute Corporation Tax from them.
    """
    ctx.ensure_object(dict)

    # Initialize logging and database only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(level=log_level.upper() if log_level else None)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
tax.register_commands(cli)
journal.register_commands(cli)
trial_balance.register_commands(cli)
chart.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
