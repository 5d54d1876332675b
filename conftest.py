from datetime import date

import pytest

from library import Library

TODAY = date(2024, 3, 1)


@pytest.fixture
def lib():
    # Fixed clock so due dates are predictable
    return Library(loan_days=28, today=lambda: TODAY)


@pytest.fixture
def seeded(lib):
    lib.add_book("Title1", "Author1", "CallNumber1")
    lib.add_book("Title2", "Author2", "CallNumber2")
    lib.add_book("Title3", "Author3", "CallNumber3")
    # Two copies for CallNumber1
    lib.add_book_copy("CallNumber1")
    lib.add_book_copy("CallNumber1")
    lib.add_book_copy("CallNumber2")
    lib.add_book_copy("CallNumber3")
    lib.add_borrower("FirstName1", "LastName1", "Email1", "Phone1")
    lib.add_borrower("FirstName2", "LastName2", "Email2", "Phone2")
    return lib


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "library.json")
