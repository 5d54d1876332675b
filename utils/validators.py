import re
from typing import Optional

class TextValidator:
    """Checks for free-text fields entered on the command line."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        return text is None or not text.strip()

    @staticmethod
    def validate_field(text: Optional[str]) -> bool:
        # Quotes would break the quoted copy/borrower info lines
        if TextValidator.is_blank(text):
            return False
        return '"' not in text

    @staticmethod
    def validate_email(email: Optional[str]) -> bool:
        """Lenient: any non-blank value without whitespace or quotes."""
        if not TextValidator.validate_field(email):
            return False
        return re.search(r"\s", email.strip()) is None

class CopyNumberValidator:

    @staticmethod
    def validate(copy_number: int) -> bool:
        return copy_number >= 1
