"""
Command-line interface for the bank reconciliation matching engine.

Commands operate on a JSON snapshot of bank transactions and matchable items.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import load_config, generate_default_config, ReconConfig
from .lifecycle import transitions
from .matching.engine import ReconciliationEngine
from .models.transaction import (
    BankTransaction,
    MatchableItem,
    ReconciliationStats,
    ReconciliationStatus,
)
from .reports.statistics import compute_stats, filter_transactions, list_bank_accounts
from .store.memory import RecordStore
from .store.snapshot import Snapshot, load_snapshot, save_snapshot
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

STATUS_STYLES = {
    ReconciliationStatus.UNRECONCILED: "yellow",
    ReconciliationStatus.MATCHED: "cyan",
    ReconciliationStatus.RECONCILED: "green",
    ReconciliationStatus.DISPUTED: "red",
}

snapshot_argument = click.argument(
    "snapshot_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
config_option = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
output_option = click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the updated snapshot here instead of overwriting the input",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")


def _parse_date(value: Optional[str]):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")


def _setup(config: Optional[Path], verbose: bool) -> ReconConfig:
    """Load configuration and configure logging from it."""
    recon_config = load_config(config)
    level = logging.DEBUG if verbose else recon_config.logging.level
    log_file = Path(recon_config.logging.file) if recon_config.logging.file else None
    setup_logging(level, log_file=log_file, log_format=recon_config.logging.format)
    return recon_config


def _fail(error: Exception, verbose: bool) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    if verbose:
        console.print_exception()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank transaction reconciliation matching engine."""
    pass


@main.command()
@snapshot_argument
@click.argument("transaction_id")
@config_option
@verbose_option
def suggest(snapshot_file: Path, transaction_id: str, config: Optional[Path], verbose: bool):
    """
    Show ranked match suggestions for one bank transaction.

    SNAPSHOT_FILE: JSON snapshot with transactions and matchable items
    TRANSACTION_ID: Id of the bank transaction
    """
    try:
        recon_config = _setup(config, verbose)
        snapshot = load_snapshot(snapshot_file)
        store = RecordStore(snapshot.transactions, snapshot.matchable_items)

        txn = store.get_transaction(transaction_id)
        if txn is None:
            raise click.ClickException(f"Unknown transaction: {transaction_id}")

        engine = ReconciliationEngine(recon_config)
        suggestions = engine.suggest(txn, store.matchable_items())

        console.print(_transaction_line(txn))
        if not suggestions:
            console.print("[yellow]No suggestions above the confidence threshold[/yellow]")
            return

        table = Table(title="Suggested Matches")
        table.add_column("Item")
        table.add_column("Type")
        table.add_column("Reference")
        table.add_column("Amount", justify="right")
        table.add_column("Date")
        table.add_column("Confidence", justify="right")
        table.add_column("Reasons")

        for suggestion in suggestions:
            item = suggestion.item
            table.add_row(
                item.id,
                item.type.value,
                item.reference or "-",
                f"{item.amount:,.2f}",
                str(item.date),
                f"{suggestion.confidence}%",
                ", ".join(suggestion.match_reasons),
            )

        console.print(table)

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command("auto-match")
@snapshot_argument
@config_option
@output_option
@verbose_option
@click.option("--dry-run", is_flag=True, help="Report matches without writing the snapshot")
def auto_match(
    snapshot_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    verbose: bool,
    dry_run: bool,
):
    """
    Automatically match unreconciled transactions with confident suggestions.

    SNAPSHOT_FILE: JSON snapshot with transactions and matchable items
    """
    try:
        recon_config = _setup(config, verbose)
        snapshot = load_snapshot(snapshot_file)

        engine = ReconciliationEngine(recon_config)
        updated, matched_count = engine.auto_match_all(
            snapshot.transactions, snapshot.matchable_items
        )

        console.print(f"[green]{matched_count} transaction(s) matched automatically[/green]")
        _display_stats(compute_stats(updated))

        if dry_run:
            console.print("\n[yellow]Dry run - snapshot not written[/yellow]")
            return

        path = save_snapshot(
            Snapshot(transactions=updated, matchable_items=snapshot.matchable_items),
            output or snapshot_file,
        )
        console.print(f"\n[green]Snapshot written: {path}[/green]")

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command("reconcile-matched")
@snapshot_argument
@output_option
@config_option
@verbose_option
def reconcile_matched(
    snapshot_file: Path, output: Optional[Path], config: Optional[Path], verbose: bool
):
    """
    Confirm every matched transaction as reconciled.

    SNAPSHOT_FILE: JSON snapshot with transactions and matchable items
    """
    try:
        _setup(config, verbose)
        snapshot = load_snapshot(snapshot_file)

        before = compute_stats(snapshot.transactions)
        updated = transitions.reconcile_all_matched(snapshot.transactions)

        console.print(f"[green]{before.matched} transaction(s) reconciled[/green]")
        path = save_snapshot(
            Snapshot(transactions=updated, matchable_items=snapshot.matchable_items),
            output or snapshot_file,
        )
        console.print(f"[green]Snapshot written: {path}[/green]")

    except ReconciliationError as e:
        _fail(e, verbose)


def _run_transition(
    snapshot_file: Path,
    transaction_id: str,
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
    transition: Callable[..., BankTransaction],
    item_id: Optional[str] = None,
    **kwargs,
) -> None:
    """Apply one lifecycle transition to a stored transaction and save."""
    try:
        _setup(config, verbose)
        snapshot = load_snapshot(snapshot_file)
        store = RecordStore(snapshot.transactions, snapshot.matchable_items)

        if item_id:
            kwargs["item"] = _find_item(store, item_id)

        updated = store.apply(transaction_id, transition, **kwargs)
        console.print(_transaction_line(updated))

        # Keep the snapshot's original transaction order
        by_id = {t.id: t for t in store.transactions()}
        ordered = [by_id[t.id] for t in snapshot.transactions]
        save_snapshot(
            Snapshot(transactions=ordered, matchable_items=snapshot.matchable_items),
            output or snapshot_file,
        )

    except ReconciliationError as e:
        _fail(e, verbose)


def _find_item(store: RecordStore, item_id: str) -> MatchableItem:
    for item in store.matchable_items():
        if item.id == item_id:
            return item
    raise click.ClickException(f"Unknown matchable item: {item_id}")


@main.command("match")
@snapshot_argument
@click.argument("transaction_id")
@click.argument("item_id")
@output_option
@config_option
@verbose_option
def match_command(
    snapshot_file: Path,
    transaction_id: str,
    item_id: str,
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """Link a bank transaction to a matchable item."""
    _run_transition(
        snapshot_file,
        transaction_id,
        output,
        config,
        verbose,
        transitions.match,
        item_id=item_id,
    )


@main.command("unmatch")
@snapshot_argument
@click.argument("transaction_id")
@output_option
@config_option
@verbose_option
def unmatch_command(
    snapshot_file: Path,
    transaction_id: str,
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """Remove the link of a bank transaction."""
    _run_transition(
        snapshot_file, transaction_id, output, config, verbose, transitions.unmatch
    )


@main.command("reconcile")
@snapshot_argument
@click.argument("transaction_id")
@click.option("--item", "item_id", help="Item to link if the transaction is not matched yet")
@output_option
@config_option
@verbose_option
def reconcile_command(
    snapshot_file: Path,
    transaction_id: str,
    item_id: Optional[str],
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """Confirm a single bank transaction as reconciled."""
    _run_transition(
        snapshot_file,
        transaction_id,
        output,
        config,
        verbose,
        transitions.reconcile,
        item_id=item_id,
    )


@main.command("dispute")
@snapshot_argument
@click.argument("transaction_id")
@click.option("-n", "--notes", help="Reason for the dispute")
@output_option
@config_option
@verbose_option
def dispute_command(
    snapshot_file: Path,
    transaction_id: str,
    notes: Optional[str],
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """Flag a bank transaction as disputed."""
    _run_transition(
        snapshot_file,
        transaction_id,
        output,
        config,
        verbose,
        transitions.dispute,
        notes=notes,
    )


@main.command("note")
@snapshot_argument
@click.argument("transaction_id")
@click.argument("notes")
@output_option
@config_option
@verbose_option
def note_command(
    snapshot_file: Path,
    transaction_id: str,
    notes: str,
    output: Optional[Path],
    config: Optional[Path],
    verbose: bool,
):
    """Attach notes to a bank transaction without changing its status."""
    _run_transition(
        snapshot_file,
        transaction_id,
        output,
        config,
        verbose,
        transitions.annotate,
        notes=notes,
    )


@main.command()
@snapshot_argument
@click.option(
    "--status",
    type=click.Choice([s.value for s in ReconciliationStatus]),
    help="Only count transactions in this status",
)
@click.option("--account", "bank_account_id", help="Only count this bank account")
@click.option("--from", "date_from", help="First posting date (YYYY-MM-DD)")
@click.option("--to", "date_to", help="Last posting date (YYYY-MM-DD)")
@config_option
@verbose_option
def stats(
    snapshot_file: Path,
    status: Optional[str],
    bank_account_id: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
    config: Optional[Path],
    verbose: bool,
):
    """
    Show reconciliation statistics.

    SNAPSHOT_FILE: JSON snapshot with transactions and matchable items
    """
    start = _parse_date(date_from)
    end = _parse_date(date_to)

    try:
        _setup(config, verbose)
        snapshot = load_snapshot(snapshot_file)

        selected = filter_transactions(
            snapshot.transactions,
            status=ReconciliationStatus(status) if status else None,
            bank_account_id=bank_account_id,
            date_from=start,
            date_to=end,
        )

        accounts = list_bank_accounts(snapshot.transactions)
        if accounts:
            console.print(
                "Accounts: " + ", ".join(f"{a.name} ({a.id})" for a in accounts)
            )
        _display_stats(compute_stats(selected))

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _transaction_line(txn: BankTransaction) -> str:
    style = STATUS_STYLES[txn.reconciliation_status]
    line = (
        f"{escape(txn.id)} {txn.date} {txn.amount:,.2f} {escape(txn.description)} "
        f"[{style}]{txn.reconciliation_status.value}[/{style}]"
    )
    if txn.matched_item_type and txn.matched_item_id:
        line += f" -> {txn.matched_item_type.value} {escape(txn.matched_item_id)}"
    return line


def _display_stats(summary: ReconciliationStats) -> None:
    """Display reconciliation statistics in console."""
    table = Table(title="Reconciliation Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(summary.total))
    table.add_row("Unreconciled", str(summary.unreconciled))
    table.add_row("Matched", str(summary.matched))
    table.add_row("Reconciled", str(summary.reconciled))
    table.add_row("Disputed", str(summary.disputed))
    table.add_row("Total Amount", f"{summary.total_amount:,.2f}")
    table.add_row("Unreconciled Amount", f"{summary.unreconciled_amount:,.2f}")
    table.add_row("Reconciliation Rate", f"{summary.reconciliation_rate:.1f}%")

    console.print(table)


if __name__ == "__main__":
    main()
