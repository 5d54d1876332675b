from datetime import date, timedelta

import pytest
from typer.testing import CliRunner

import database
from main import app

runner = CliRunner()


@pytest.fixture
def cli(data_file, monkeypatch):
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")

    def invoke(*args):
        return runner.invoke(app, ["--data-file", data_file, *args])
    return invoke


@pytest.fixture
def stocked(cli):
    cli("add-book", "Title1", "Author1", "CallNumber1")
    cli("add-copy", "CallNumber1")
    cli("add-copy", "CallNumber1")
    cli("add-borrower", "FirstName1", "LastName1", "Email1", "Phone1")
    return cli


def test_books_empty(cli):
    result = cli("books")
    assert result.exit_code == 0
    assert "No books in library." in result.stdout

def test_add_book_persists(cli, data_file):
    result = cli("add-book", "Title1", "Author1", "CallNumber1")
    assert result.exit_code == 0
    assert "Added book Title1 by Author1 (CallNumber1)" in result.stdout
    assert database.read_from_file(data_file).get_call_numbers() == ["CallNumber1"]

def test_add_book_duplicate(cli):
    cli("add-book", "Title1", "Author1", "CallNumber1")
    result = cli("add-book", "Other", "Other", "CallNumber1")
    assert result.exit_code == 0
    assert "already exists" in result.stdout

def test_add_book_rejects_blank_title(cli, data_file):
    result = cli("add-book", " ", "Author1", "CallNumber1")
    assert result.exit_code == 2
    assert database.read_from_file(data_file).get_call_numbers() == []

def test_add_copy(stocked):
    result = stocked("add-copy", "CallNumber1")
    assert "Added copy 3 of CallNumber1" in result.stdout
    result = stocked("add-copy", "Missing")
    assert "not found" in result.stdout

def test_books_report(stocked):
    result = stocked("books")
    assert result.stdout == '"Title1","Author1","CallNumber1",2\n'

def test_borrowers_report(stocked):
    result = stocked("borrowers")
    assert result.stdout == '"FirstName1","LastName1","Email1","Phone1"\n'

def test_checkout_renew_return(stocked):
    due = date.today() + timedelta(days=28)
    result = stocked("checkout", "CallNumber1", "1", "Email1")
    assert f"due {due.isoformat()}" in result.stdout

    result = stocked("copy-info", "CallNumber1", "1")
    assert result.stdout.strip() == f'"CallNumber1", 1, "Title1", "Author1", "Email1", {due.isoformat()}, false'

    result = stocked("renew", "CallNumber1", "1")
    assert "Renewed" in result.stdout
    result = stocked("renew", "CallNumber1", "1")
    assert "Could not renew" in result.stdout

    result = stocked("due-date", "CallNumber1", "1")
    assert result.stdout.strip() == (due + timedelta(days=28)).isoformat()

    result = stocked("return", "CallNumber1", "1")
    assert "Returned" in result.stdout
    result = stocked("copy-info", "CallNumber1", "1")
    assert result.stdout.strip().endswith("Available")

def test_checkout_unknown_borrower(stocked):
    result = stocked("checkout", "CallNumber1", "1", "Nobody")
    assert result.exit_code == 0
    assert "Could not check out" in result.stdout

def test_checkout_rejects_zero_copy_number(stocked):
    result = stocked("checkout", "CallNumber1", "0", "Email1")
    assert result.exit_code == 2

def test_borrower_info(stocked):
    stocked("checkout", "CallNumber1", "2", "Email1")
    result = stocked("borrower-info", "Email1")
    lines = result.stdout.splitlines()
    assert lines[0] == '"FirstName1", "LastName1", "Email1", "Phone1"'
    assert lines[1].startswith('* "CallNumber1", 2, "Title1", "Author1", ')
    assert len(lines) == 2

def test_loans_and_stats(stocked):
    stocked("checkout", "CallNumber1", "1", "Email1")
    result = stocked("loans")
    assert "CallNumber1/1 -> Email1" in result.stdout
    result = stocked("stats")
    assert "Copies: 2" in result.stdout
    assert "Active Loans: 1" in result.stdout

def test_call_numbers_json_output(data_file, monkeypatch):
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")
    runner.invoke(app, ["--data-file", data_file, "add-book", "T", "A", "C2"])
    runner.invoke(app, ["--data-file", data_file, "add-book", "T", "A", "C1"])
    result = runner.invoke(app, ["--data-file", data_file, "--output", "json", "call-numbers"])
    assert result.stdout.strip() == '["C1", "C2"]'

def test_corrupt_data_file_exits(data_file):
    with open(data_file, "w", encoding="utf-8") as f:
        f.write("garbage")
    result = runner.invoke(app, ["--data-file", data_file, "books"])
    assert result.exit_code == 1

def test_export_csv(stocked, tmp_path):
    prefix = str(tmp_path / "out")
    result = stocked("export", "--format", "csv", "--output", prefix)
    assert result.exit_code == 0
    with open(f"{prefix}_books.csv", encoding="utf-8") as f:
        assert f.read() == '"Title1","Author1","CallNumber1",2\n'

def test_add_borrower_message(cli):
    result = cli("add-borrower", "FirstName1", "LastName1", "Email1", "Phone1")
    assert result.exit_code == 0
    assert "Added borrower FirstName1 LastName1 <Email1>" in result.stdout

def test_export_json(stocked, tmp_path):
    prefix = str(tmp_path / "out")
    result = stocked("export", "--format", "json", "--output", prefix)
    assert result.exit_code == 0
    with open(f"{prefix}.json", "rb") as f:
        assert database.loads(f.read()).get_book_csv() == '"Title1","Author1","CallNumber1",2\n'

def test_export_unwritable_prefix_exits(stocked, tmp_path):
    prefix = str(tmp_path / "no_such_dir" / "out")
    result = stocked("export", "--format", "csv", "--output", prefix)
    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)

def test_export_unknown_format(stocked):
    result = stocked("export", "--format", "xml")
    assert result.exit_code == 0
    assert "Unsupported format: xml" in result.stdout
