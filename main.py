import logging
from typing import Optional

import typer
from rich.console import Console

from library import Library
import database
from database import StorageError
from config import settings
from utils.ui_helpers import set_output_mode, print_keys, print_loans, print_stats_result
from utils.validators import TextValidator, CopyNumberValidator

console = Console(stderr=True)


class CatalogContext:
    """The catalog loaded for this process and the file it is saved to."""

    def __init__(self, library: Library, data_file: str) -> None:
        self.library = library
        self.data_file = data_file

    def save(self) -> None:
        try:
            database.write_to_file(self.library, self.data_file)
        except StorageError as e:
            console.print(f"[bold red]Could not save library: {e}[/]")
            raise typer.Exit(code=1)


def _catalog(ctx: typer.Context) -> CatalogContext:
    return ctx.obj


def _require_text(**fields: str) -> None:
    for name, value in fields.items():
        if not TextValidator.validate_field(value):
            print(f"Error: {name} must be non-empty and must not contain quotes.")
            raise typer.Exit(code=2)


def _require_copy_number(copy_number: int) -> None:
    if not CopyNumberValidator.validate(copy_number):
        print("Error: copy number must be 1 or greater.")
        raise typer.Exit(code=2)


# --- Typer CLI Application ---
app = typer.Typer(help=settings.app_name)

@app.callback()
def _global_options(
    ctx: typer.Context,
    data_file: Optional[str] = typer.Option(
        None,
        "--data-file",
        "-f",
        help="Library data file (default: LIBRARY_DATA_FILE or library.json)",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global options; loads the catalog once for the command."""
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
    if output:
        set_output_mode(output)
    path = data_file or database.DATABASE_FILE
    try:
        library = database.read_from_file(path)
    except StorageError as e:
        console.print(f"[bold red]Could not load library: {e}[/]")
        raise typer.Exit(code=1)
    ctx.obj = CatalogContext(library, path)

# ------------------------- Catalog ------------------------- #
@app.command("add-book")
def cli_add_book(ctx: typer.Context, title: str, author: str, call_number: str):
    """Add a book with no copies."""
    _require_text(title=title, author=author, call_number=call_number)
    catalog = _catalog(ctx)
    if catalog.library.add_book(title, author, call_number):
        catalog.save()
        print(f"Added book {catalog.library.books[call_number]}")
    else:
        print(f"Book with call number {call_number} already exists.")

@app.command("add-copy")
def cli_add_copy(ctx: typer.Context, call_number: str):
    """Add another copy of an existing book."""
    catalog = _catalog(ctx)
    if catalog.library.add_book_copy(call_number):
        catalog.save()
        print(f"Added copy {catalog.library.get_copy_count(call_number)} of {call_number}")
    else:
        print(f"Book with call number {call_number} not found.")

@app.command("add-borrower")
def cli_add_borrower(ctx: typer.Context, first_name: str, last_name: str, email: str, phone: str):
    """Register a borrower."""
    _require_text(first_name=first_name, last_name=last_name, phone=phone)
    if not TextValidator.validate_email(email):
        print("Error: email must be non-empty and contain no spaces or quotes.")
        raise typer.Exit(code=2)
    catalog = _catalog(ctx)
    if catalog.library.add_borrower(first_name, last_name, email, phone):
        catalog.save()
        print(f"Added borrower {catalog.library.borrowers[email]}")
    else:
        print(f"Borrower with email {email} already exists.")

@app.command("books")
def cli_books(ctx: typer.Context):
    """Print the book report in CSV format."""
    report = _catalog(ctx).library.get_book_csv()
    if report:
        print(report, end="")
    else:
        print("No books in library.")

@app.command("borrowers")
def cli_borrowers(ctx: typer.Context):
    """Print the borrower report in CSV format."""
    report = _catalog(ctx).library.get_borrower_csv()
    if report:
        print(report, end="")
    else:
        print("No borrowers in library.")

@app.command("call-numbers")
def cli_call_numbers(ctx: typer.Context):
    """List call numbers in ascending order."""
    print_keys("Call Numbers", _catalog(ctx).library.get_call_numbers(), "No books in library.")

@app.command("emails")
def cli_emails(ctx: typer.Context):
    """List borrower emails in ascending order."""
    print_keys("Emails", _catalog(ctx).library.get_emails(), "No borrowers in library.")

# ------------------------- Lending ------------------------- #
@app.command("checkout")
def cli_checkout(ctx: typer.Context, call_number: str, copy_number: int, email: str):
    """Check out a copy to a borrower."""
    _require_copy_number(copy_number)
    catalog = _catalog(ctx)
    if catalog.library.checkout(call_number, copy_number, email):
        catalog.save()
        due = catalog.library.get_due_date(call_number, copy_number)
        print(f"Checked out {call_number} copy {copy_number} to {email}, due {due.isoformat()}")
    else:
        print(f"Could not check out {call_number} copy {copy_number} to {email}.")

@app.command("return")
def cli_return(ctx: typer.Context, call_number: str, copy_number: int):
    """Return a checked out copy."""
    _require_copy_number(copy_number)
    catalog = _catalog(ctx)
    if catalog.library.return_copy(call_number, copy_number):
        catalog.save()
        print(f"Returned {call_number} copy {copy_number}")
    else:
        print(f"{call_number} copy {copy_number} is not checked out.")

@app.command("renew")
def cli_renew(ctx: typer.Context, call_number: str, copy_number: int):
    """Renew a loan once."""
    _require_copy_number(copy_number)
    catalog = _catalog(ctx)
    if catalog.library.renew(call_number, copy_number):
        catalog.save()
        due = catalog.library.get_due_date(call_number, copy_number)
        print(f"Renewed {call_number} copy {copy_number}, now due {due.isoformat()}")
    else:
        print(f"Could not renew {call_number} copy {copy_number}.")

@app.command("due-date")
def cli_due_date(ctx: typer.Context, call_number: str, copy_number: int):
    """Show when a checked out copy is due."""
    due = _catalog(ctx).library.get_due_date(call_number, copy_number)
    if due:
        print(due.isoformat())
    else:
        print(f"{call_number} copy {copy_number} is not checked out.")

@app.command("copy-info")
def cli_copy_info(ctx: typer.Context, call_number: str, copy_number: int):
    """Show a copy and its loan, if any."""
    info = _catalog(ctx).library.get_copy_info(call_number, copy_number)
    if info:
        print(info)
    else:
        print(f"{call_number} copy {copy_number} not found.")

@app.command("borrower-info")
def cli_borrower_info(ctx: typer.Context, email: str):
    """Show a borrower and the copies they have on loan."""
    info = _catalog(ctx).library.get_borrower_info(email)
    if info:
        print(info, end="")
    else:
        print(f"Borrower with email {email} not found.")

@app.command("loans")
def cli_loans(ctx: typer.Context):
    """List every active loan."""
    print_loans(_catalog(ctx).library.get_loans())

@app.command("stats")
def cli_stats(ctx: typer.Context):
    """Show catalog statistics."""
    print_stats_result(_catalog(ctx).library.get_statistics())

@app.command("export")
def cli_export(ctx: typer.Context, format: str = "csv", output: str = "library_export"):
    """Export the book and borrower reports to files (csv or json)."""
    library = _catalog(ctx).library
    fmt = format.lower()
    if fmt == "csv":
        files = {
            f"{output}_books.csv": library.get_book_csv().encode("utf-8"),
            f"{output}_borrowers.csv": library.get_borrower_csv().encode("utf-8"),
        }
    elif fmt == "json":
        files = {f"{output}.json": database.dumps(library)}
    else:
        print(f"Unsupported format: {format}. Use csv or json.")
        return

    for filename, data in files.items():
        try:
            with open(filename, "wb") as f:
                f.write(data)
        except OSError as e:
            console.print(f"[bold red]Could not write {filename}: {e}[/]")
            raise typer.Exit(code=1)
    print(f"Exported {len(library.books)} books and {len(library.borrowers)} borrowers to {', '.join(files)}")

if __name__ == "__main__":
    app()
