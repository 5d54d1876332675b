import csv
import io
import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple, Any

from book import Book, Copy, Loan
from borrower import Borrower
from config import settings

logger = logging.getLogger(__name__)


class Library:
    """Holds every book, copy, borrower and loan of the catalog in memory.

    Operations never raise for expected conditions such as a duplicate key,
    an unknown book or a copy in the wrong state; they report failure by
    returning False or None and leave the catalog untouched.
    """

    def __init__(self, loan_days: Optional[int] = None, today: Optional[Callable[[], date]] = None) -> None:
        self.loan_days = settings.loan_days if loan_days is None else loan_days
        self._today = today or date.today
        self.books: Dict[str, Book] = {}
        self.borrowers: Dict[str, Borrower] = {}

    # ------------------------- Catalog ------------------------- #
    def add_book(self, title: str, author: str, call_number: str) -> bool:
        """Add a book with no copies. False if the call number is taken."""
        if call_number in self.books:
            logger.debug("Book %s already exists", call_number)
            return False
        self.books[call_number] = Book(title=title, author=author, call_number=call_number)
        logger.info("Added book %s", call_number)
        return True

    def add_book_copy(self, call_number: str) -> bool:
        """Append the next numbered copy. False if there is no such book."""
        book = self.books.get(call_number)
        if not book:
            logger.debug("Cannot add copy, no book %s", call_number)
            return False
        copy = book.add_copy()
        logger.info("Added copy %d of %s", copy.number, call_number)
        return True

    def add_borrower(self, first_name: str, last_name: str, email: str, phone: str) -> bool:
        """Add a borrower. False if the email is taken."""
        if email in self.borrowers:
            logger.debug("Borrower %s already exists", email)
            return False
        self.borrowers[email] = Borrower(first_name, last_name, email, phone)
        logger.info("Added borrower %s", email)
        return True

    def get_call_numbers(self) -> List[str]:
        return sorted(self.books)

    def get_emails(self) -> List[str]:
        return sorted(self.borrowers)

    def get_copy_count(self, call_number: str) -> int:
        book = self.books.get(call_number)
        return len(book.copies) if book else 0

    # ------------------------- Reports ------------------------- #
    def get_book_csv(self) -> str:
        """One line per book: "title","author","callNumber",copyCount."""
        rows = []
        for call_number in self.get_call_numbers():
            book = self.books[call_number]
            rows.append([book.title, book.author, book.call_number, len(book.copies)])
        return self._to_csv(rows)

    def get_borrower_csv(self) -> str:
        """One line per borrower: "first","last","email","phone"."""
        rows = []
        for email in self.get_emails():
            b = self.borrowers[email]
            rows.append([b.first_name, b.last_name, b.email, b.phone])
        return self._to_csv(rows)

    @staticmethod
    def _to_csv(rows: List[List[Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
        writer.writerows(rows)
        return buffer.getvalue()

    # ------------------------- Lending ------------------------- #
    def checkout(self, call_number: str, copy_number: int, email: str) -> bool:
        """Lend a copy to a borrower for loan_days days.

        Fails if the book, copy or borrower is unknown, or if the copy is
        already on loan.
        """
        copy = self._find_copy(call_number, copy_number)
        if copy is None or email not in self.borrowers:
            logger.debug("Checkout rejected: %s/%s to %s", call_number, copy_number, email)
            return False
        if not copy.is_available:
            logger.debug("Checkout rejected: %s/%s already on loan", call_number, copy_number)
            return False
        due = self._today() + timedelta(days=self.loan_days)
        copy.loan = Loan(borrower_email=email, due_date=due)
        logger.info("Checked out %s/%d to %s, due %s", call_number, copy_number, email, due.isoformat())
        return True

    def is_checked_out(self, call_number: str, copy_number: int) -> bool:
        copy = self._find_copy(call_number, copy_number)
        return copy is not None and not copy.is_available

    def return_copy(self, call_number: str, copy_number: int) -> bool:
        """Clear the loan on a copy. False if the copy was not on loan."""
        copy = self._find_copy(call_number, copy_number)
        if copy is None or copy.is_available:
            logger.debug("Return rejected: %s/%s is not checked out", call_number, copy_number)
            return False
        copy.loan = None
        logger.info("Returned %s/%d", call_number, copy_number)
        return True

    def get_due_date(self, call_number: str, copy_number: int) -> Optional[date]:
        copy = self._find_copy(call_number, copy_number)
        if copy is None or copy.loan is None:
            return None
        return copy.loan.due_date

    def renew(self, call_number: str, copy_number: int) -> bool:
        """Extend a loan by loan_days days. A loan can be renewed only once."""
        copy = self._find_copy(call_number, copy_number)
        if copy is None or copy.loan is None:
            logger.debug("Renew rejected: %s/%s is not checked out", call_number, copy_number)
            return False
        if not copy.loan.renew(self.loan_days):
            logger.debug("Renew rejected: %s/%s already renewed", call_number, copy_number)
            return False
        logger.info("Renewed %s/%d, due %s", call_number, copy_number, copy.loan.due_date.isoformat())
        return True

    def get_loans(self) -> List[Tuple[str, int, Loan]]:
        """All active loans ordered by call number, then copy number."""
        loans = []
        for call_number in self.get_call_numbers():
            for copy in self.books[call_number].copies:
                if copy.loan is not None:
                    loans.append((call_number, copy.number, copy.loan))
        return loans

    # ------------------------- Display lines ------------------------- #
    def get_copy_info(self, call_number: str, copy_number: int) -> Optional[str]:
        copy = self._find_copy(call_number, copy_number)
        if copy is None:
            return None
        book = self.books[call_number]
        head = f'"{book.call_number}", {copy.number}, "{book.title}", "{book.author}"'
        if copy.loan is None:
            return f"{head}, Available"
        loan = copy.loan
        return f'{head}, "{loan.borrower_email}", {loan.due_date.isoformat()}, {_flag(loan.renewed)}'

    def get_borrower_info(self, email: str) -> Optional[str]:
        borrower = self.borrowers.get(email)
        if not borrower:
            return None
        lines = [f'"{borrower.first_name}", "{borrower.last_name}", "{borrower.email}", "{borrower.phone}"\n']
        for call_number, copy_number, loan in self.get_loans():
            if loan.borrower_email != email:
                continue
            book = self.books[call_number]
            lines.append(
                f'* "{call_number}", {copy_number}, "{book.title}", "{book.author}", '
                f"{loan.due_date.isoformat()}, {_flag(loan.renewed)}\n"
            )
        return "".join(lines)

    def get_statistics(self) -> Dict[str, int]:
        """Get catalog statistics."""
        return {
            "total_books": len(self.books),
            "total_copies": sum(len(b.copies) for b in self.books.values()),
            "total_borrowers": len(self.borrowers),
            "active_loans": len(self.get_loans()),
        }

    # ------------------------- Utilities ------------------------- #
    def _find_copy(self, call_number: str, copy_number: int) -> Optional[Copy]:
        book = self.books.get(call_number)
        if not book:
            return None
        return book.get_copy(copy_number)


def _flag(value: bool) -> str:
    return "true" if value else "false"
