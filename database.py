import json
import logging
import os
import tempfile
from typing import Optional

from book import Book
from borrower import Borrower
from config import settings
from library import Library

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Default data file: LIBRARY_DATA_FILE from the environment / .env, else library.json
DATABASE_FILE = settings.data_file


class StorageError(Exception):
    """The data file exists but cannot be read, parsed or written."""


def dumps(library: Library) -> bytes:
    """Serialize the whole catalog to UTF-8 encoded JSON."""
    document = {
        "version": SCHEMA_VERSION,
        "books": [library.books[c].to_dict() for c in library.get_call_numbers()],
        "borrowers": [library.borrowers[e].to_dict() for e in library.get_emails()],
    }
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


def loads(data: bytes) -> Library:
    """Rebuild a catalog from bytes produced by dumps().

    Any structural problem is reported as StorageError.
    """
    library = Library()
    try:
        document = json.loads(data.decode("utf-8"))
        if not isinstance(document, dict):
            raise ValueError("top level is not an object")
        if document.get("version") != SCHEMA_VERSION:
            raise ValueError(f"unsupported data file version {document.get('version')}")
        for raw in document.get("borrowers", []):
            borrower = Borrower.from_dict(raw)
            if borrower.email in library.borrowers:
                raise ValueError(f"Duplicate borrower {borrower.email}")
            library.borrowers[borrower.email] = borrower
        for raw in document.get("books", []):
            book = Book.from_dict(raw)
            if book.call_number in library.books:
                raise ValueError(f"Duplicate book {book.call_number}")
            for copy in book.copies:
                if copy.loan and copy.loan.borrower_email not in library.borrowers:
                    raise ValueError(
                        f"Loan of {book.call_number}/{copy.number} refers to unknown borrower {copy.loan.borrower_email}"
                    )
            library.books[book.call_number] = book
    except (UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as exc:
        raise StorageError(f"Corrupt library data: {exc}") from exc
    return library


def read_from_file(path: Optional[str] = None) -> Library:
    """Load the catalog from path. A missing file yields an empty catalog."""
    path = path or DATABASE_FILE
    try:
        with open(path, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        logger.warning("Data file not found: %s (starting empty)", path)
        return Library()
    except OSError as exc:
        raise StorageError(f"Cannot read {path}: {exc}") from exc
    library = loads(data)
    logger.info("Loaded %d books and %d borrowers from %s", len(library.books), len(library.borrowers), path)
    return library


def write_to_file(library: Library, path: Optional[str] = None) -> None:
    """Write the catalog to path, replacing the file atomically."""
    path = path or DATABASE_FILE
    directory = os.path.dirname(os.path.abspath(path))
    data = dumps(library)
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".library_", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}") from exc
    logger.info("Saved %d books and %d borrowers to %s", len(library.books), len(library.borrowers), path)
