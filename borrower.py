from __future__ import annotations

from book import typed_field


class Borrower:
    """A library user, keyed by email."""

    def __init__(self, first_name: str, last_name: str, email: str, phone: str) -> None:
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.phone = phone

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} <{self.email}>"

    def to_dict(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }

    @staticmethod
    def from_dict(data: dict) -> "Borrower":
        return Borrower(
            first_name=typed_field(data, "first_name", str),
            last_name=typed_field(data, "last_name", str),
            email=typed_field(data, "email", str),
            phone=typed_field(data, "phone", str),
        )
