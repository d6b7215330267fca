"""Command line entry points for offline snapshot work."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.errors import LedgerError
from .logging_config import setup_logging
from .services import migrations, snapshot


def _load_app(path: Path, reference_date: Optional[date]) -> AppContext:
    app = create_app_context(BaseConfig(), reference_date=reference_date)
    result = app.load_snapshot(path)
    if not result.ok:
        raise click.ClickException(f"Cannot load {path}: {result.message}")
    return app


@click.group()
@click.option("--verbose", is_flag=True, default=False, help="Log to the console")
def cli(verbose: bool) -> None:
    """Monifly ledger tools."""

    if verbose:
        setup_logging(BaseConfig(), to_file=False)


@cli.command("migrate")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None)
def migrate_command(source: Path, output: Optional[Path]) -> None:
    """Upgrade a snapshot file to the current schema version."""

    try:
        data = snapshot.load_snapshot(source)
        migrated = migrations.migrate(data, int(data.get("version", 1)))
    except LedgerError as exc:
        raise click.ClickException(exc.message) from exc
    target = snapshot.save_snapshot(migrated, output or source)
    click.echo(f"Migrated {source} to version {migrated['version']}: {target}")


@cli.command("verify")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def verify_command(source: Path) -> None:
    """Check that every wallet balance matches its transaction history."""

    app = _load_app(source, None)
    drifts = app.verify_balances()
    if not drifts:
        click.echo("All wallet balances are consistent")
        return
    for drift in drifts:
        click.echo(
            f"Wallet {drift.wallet_id} ({drift.name}): stored {drift.stored:.2f}, "
            f"expected {drift.expected:.2f}"
        )
    raise SystemExit(1)


@cli.command("forecast")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--months", type=int, default=6, show_default=True)
@click.option("--currency", type=str, default=None, help="Defaults to the display currency")
@click.option("--as-of", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--json", "as_json", is_flag=True, default=False)
def forecast_command(
    source: Path, months: int, currency: Optional[str], as_of, as_json: bool
) -> None:
    """Project cash flow for the coming months."""

    app = _load_app(source, as_of.date() if as_of else None)
    result = app.cashflow_forecast(months, currency)
    if not result.ok:
        raise click.ClickException(result.message or "Forecast failed")
    rows = result.value or []
    if as_json:
        click.echo(json.dumps([asdict(row) for row in rows], indent=2))
        return
    for row in rows:
        click.echo(
            f"{row.period}  net {row.net_change:>12.2f}  "
            f"scheduled +{row.budget_income:.2f}/-{row.budget_expense:.2f}  "
            f"balance {row.projected_balance:>12.2f}"
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
