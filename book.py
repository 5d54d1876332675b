from __future__ import annotations

from datetime import date, timedelta
from typing import Any, List, Optional


def typed_field(data: dict, key: str, kind: type) -> Any:
    """Read data[key], raising ValueError unless it is exactly of the given kind."""
    value = data[key]
    # bool is a subclass of int
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"{key} must be {kind.__name__}, got {value!r}")
    return value


class Loan:
    """An active loan of one copy to one borrower."""

    def __init__(self, borrower_email: str, due_date: date, renewed: bool = False) -> None:
        self.borrower_email = borrower_email
        self.due_date = due_date
        self.renewed = renewed

    def renew(self, days: int) -> bool:
        """Push the due date back once. Returns False if already renewed."""
        if self.renewed:
            return False
        self.due_date = self.due_date + timedelta(days=days)
        self.renewed = True
        return True

    def to_dict(self) -> dict:
        return {
            "borrower_email": self.borrower_email,
            "due_date": self.due_date.isoformat(),
            "renewed": self.renewed,
        }

    @staticmethod
    def from_dict(data: dict) -> "Loan":
        return Loan(
            borrower_email=typed_field(data, "borrower_email", str),
            due_date=date.fromisoformat(typed_field(data, "due_date", str)),
            renewed=typed_field(data, "renewed", bool),
        )


class Copy:
    """A physical copy of a book. Available when it carries no loan."""

    def __init__(self, number: int, loan: Optional[Loan] = None) -> None:
        self.number = number
        self.loan = loan

    @property
    def is_available(self) -> bool:
        return self.loan is None

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "loan": self.loan.to_dict() if self.loan else None,
        }

    @staticmethod
    def from_dict(data: dict) -> "Copy":
        loan = data.get("loan")
        return Copy(number=typed_field(data, "number", int), loan=Loan.from_dict(loan) if loan else None)


class Book:
    """A title in the catalog, keyed by call number, with its copies."""

    def __init__(self, title: str, author: str, call_number: str, copies: Optional[List[Copy]] = None) -> None:
        self.title = title
        self.author = author
        self.call_number = call_number
        self.copies: List[Copy] = copies or []

    def __str__(self) -> str:
        return f"{self.title} by {self.author} ({self.call_number})"

    def add_copy(self) -> Copy:
        # Copy numbers stay dense from 1 because copies are never removed.
        copy = Copy(number=len(self.copies) + 1)
        self.copies.append(copy)
        return copy

    def get_copy(self, number: int) -> Optional[Copy]:
        if 1 <= number <= len(self.copies):
            return self.copies[number - 1]
        return None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "call_number": self.call_number,
            "copies": [c.to_dict() for c in self.copies],
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        call_number = typed_field(data, "call_number", str)
        copies = sorted((Copy.from_dict(c) for c in data.get("copies") or []), key=lambda c: c.number)
        for expected, copy in enumerate(copies, 1):
            if copy.number != expected:
                raise ValueError(
                    f"Copy numbers of {call_number} are not sequential: expected {expected}, got {copy.number}"
                )
        return Book(
            title=typed_field(data, "title", str),
            author=typed_field(data, "author", str),
            call_number=call_number,
            copies=copies,
        )
