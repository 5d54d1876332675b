import os
import json
from typing import List, Any, Dict, Tuple
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from config import settings

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, settings.output_mode).lower()

def print_keys(title: str, keys: List[str], empty_message: str) -> None:
    """Print a sorted key listing (call numbers or emails)."""
    mode = get_output_mode()

    if not keys:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps(keys, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=title, header_style="bold cyan")
        table.add_column(title, style="magenta", no_wrap=True)
        for key in keys:
            table.add_row(key)
        _console.print(table)
    else:
        for key in keys:
            print(key)

def print_loans(loans: List[Tuple[str, int, Any]]) -> None:
    """Print active loans.
    - plain: 'callNumber/copy -> email (due YYYY-MM-DD, renewed)' lines, or 'No active loans.'
    - json: array of objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if not loans:
        print("No active loans.")
        return

    if mode == "json":
        payload = [
            {
                "call_number": call_number,
                "copy_number": copy_number,
                "email": loan.borrower_email,
                "due_date": loan.due_date.isoformat(),
                "renewed": loan.renewed,
            }
            for call_number, copy_number, loan in loans
        ]
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="Loans", show_lines=True, header_style="bold cyan")
        table.add_column("Call Number", style="magenta", no_wrap=True)
        table.add_column("Copy", justify="right")
        table.add_column("Borrower", style="white")
        table.add_column("Due", style="white")
        table.add_column("Renewed", style="white")
        for call_number, copy_number, loan in loans:
            table.add_row(call_number, str(copy_number), loan.borrower_email,
                          loan.due_date.isoformat(), "yes" if loan.renewed else "no")
        _console.print(table)
    else:
        for call_number, copy_number, loan in loans:
            suffix = ", renewed" if loan.renewed else ""
            print(f"{call_number}/{copy_number} -> {loan.borrower_email} (due {loan.due_date.isoformat()}{suffix})")

def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print catalog statistics in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Books:[/] {stats.get('total_books', 0)}\n"
            f"[bold]Copies:[/] {stats.get('total_copies', 0)}\n"
            f"[bold]Borrowers:[/] {stats.get('total_borrowers', 0)}\n"
            f"[bold]Active Loans:[/] {stats.get('active_loans', 0)}"
        )
        _console.print(Panel.fit(content, title="Stats", border_style="blue"))
    else:
        print(f"Books: {stats.get('total_books', 0)}")
        print(f"Copies: {stats.get('total_copies', 0)}")
        print(f"Borrowers: {stats.get('total_borrowers', 0)}")
        print(f"Active Loans: {stats.get('active_loans', 0)}")
