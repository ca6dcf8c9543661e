#!/usr/bin/env python3
"""
CLI interface for the statement ledger.
"""
import logging
import typer
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional
from pydantic import TypeAdapter
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from statement_ledger.core.config import load_settings
from statement_ledger.core.document import render_document_text, text_stats
from statement_ledger.core.errors import MalformedInputError
from statement_ledger.core.ledger import LedgerAggregator
from statement_ledger.core.runner import parse_pdf
from statement_ledger.core.store import InMemoryTransactionStore
from statement_ledger.models.schema import BankStatement, Transaction

app = typer.Typer(help="Statement ledger: PDF text reconstruction and bank statements")
console = Console()

LOCAL_OWNER = "local"


def _configure_logging(verbose: bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)


def _load_aggregator(transactions_path: Path, settings_path: Optional[Path],
                     initial_balance: Optional[str]) -> LedgerAggregator:
    if not transactions_path.exists():
        console.print(f"[red]Error: transactions file not found: {transactions_path}[/red]")
        raise typer.Exit(1)

    settings = load_settings(settings_path)
    transactions = TypeAdapter(List[Transaction]).validate_json(transactions_path.read_text())

    store = InMemoryTransactionStore()
    for transaction in transactions:
        store.put(LOCAL_OWNER, transaction)

    aggregator = LedgerAggregator.from_settings(store, LOCAL_OWNER, settings)
    if initial_balance is not None:
        try:
            aggregator.initial_balance = Decimal(initial_balance)
        except InvalidOperation:
            console.print(f"[red]Error: invalid initial balance: {initial_balance}[/red]")
            raise typer.Exit(1)
    return aggregator


def _statements_table(statements: List[BankStatement]) -> Table:
    table = Table(title="Bank Statements")
    table.add_column("Statement")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Transactions", justify="right")
    table.add_column("Starting", justify="right")
    table.add_column("Ending", justify="right")
    table.add_column("Expenditures", justify="right")
    table.add_column("Deposits", justify="right")

    for statement in statements:
        table.add_row(
            statement.id,
            statement.date_range.start.date().isoformat(),
            statement.date_range.end.date().isoformat(),
            str(statement.transaction_count),
            f"{statement.starting_balance:,.2f}",
            f"{statement.ending_balance:,.2f}",
            f"{statement.total_expenditures:,.2f}",
            f"{statement.total_deposits:,.2f}",
        )
    return table


@app.command()
def parse(
    pdf_path: Path = typer.Argument(..., help="Path to PDF file"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON file path"),
    as_text: bool = typer.Option(False, "--text", "-t", help="Write page-marked text instead of JSON"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", "-s", help="Settings YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Reconstruct the text of a PDF and extract provisional transactions."""

    if not pdf_path.exists():
        console.print(f"[red]Error: PDF file not found: {pdf_path}[/red]")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Parsing PDF...", total=None)

            result = parse_pdf(pdf_path, settings=load_settings(settings_path), verbose=verbose)

            if as_text:
                rendered = render_document_text(result.pages)
            else:
                rendered = result.model_dump_json(indent=2)

            if output:
                progress.update(task, description="Writing output...")
                output.write_text(rendered)
                console.print(f"[green]✓ Parsed successfully! Output written to: {output}[/green]")
                stats = text_stats(rendered)
                console.print(f"{stats.words} words, {stats.lines} lines, {stats.characters} characters")
            else:
                console.print(rendered, markup=False)

            if not result.summary.has_content:
                console.print("[yellow]No text found in the PDF. It might contain only images.[/yellow]")

    except Exception as e:
        console.print(f"[red]Error parsing PDF: {e}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(1)


@app.command()
def statements(
    transactions_path: Path = typer.Argument(..., help="JSON file with a list of transactions"),
    initial_balance: Optional[str] = typer.Option(None, "--initial-balance", "-b",
                                                  help="Balance before the first transaction"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", "-s", help="Settings YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Show monthly statements and the overall statement."""
    _configure_logging(verbose)
    aggregator = _load_aggregator(transactions_path, settings_path, initial_balance)

    monthly = aggregator.get_bank_statements()
    if not monthly:
        console.print("[yellow]No transactions found[/yellow]")
        return

    overall = aggregator.get_overall_statement()
    console.print(_statements_table(monthly + [overall]))


@app.command()
def transactions(
    transactions_path: Path = typer.Argument(..., help="JSON file with a list of transactions"),
    statement_id: str = typer.Argument("overall", help="'overall' or a YYYY-MM month key"),
    initial_balance: Optional[str] = typer.Option(None, "--initial-balance", "-b",
                                                  help="Balance before the first transaction"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", "-s", help="Settings YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """List the transactions of one statement with their running balance."""
    _configure_logging(verbose)
    aggregator = _load_aggregator(transactions_path, settings_path, initial_balance)

    try:
        rows = aggregator.get_transactions_by_statement_id(statement_id)
    except MalformedInputError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Statement {statement_id}")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Type")
    table.add_column("Amount", justify="right")
    table.add_column("Balance", justify="right")

    for row in rows:
        table.add_row(
            row.transaction_date.date().isoformat(),
            row.description,
            row.transaction_type.value,
            f"{row.amount:,.2f}",
            f"{row.running_balance:,.2f}",
        )
    console.print(table)


if __name__ == "__main__":
    app()
