"""
Pytest configuration and shared fixtures.
"""

import os

# Set before any roster module builds the global logger
os.environ["ROSTER_LOG_FILE"] = "0"
os.environ["ROSTER_SEED"] = "0"

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, Any

import pytest

from roster.database import Employee, SalaryAssignment
from roster.normalize import years_before
from roster.store import open_store

TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    """Pinned 'today' for date-dependent checks."""
    return TODAY


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "roster.db"


@pytest.fixture
def store(db_path):
    """Open a store on a fresh temporary database."""
    with open_store(db_path) as s:
        yield s


@pytest.fixture
def valid_employee_data(today) -> Dict[str, Any]:
    """Valid employee + initial assignment fields."""
    return {
        "name": "Jane O'Connor",
        "ssn": "123-45-6789",
        "dob": years_before(today, 30),
        "address": "42 Elm Street",
        "city": "San Diego",
        "state": "CA",
        "zip": "92101",
        "phone": "(619) 555-0142",
        "join_date": today,
        "title": "Engineer",
        "salary": Decimal("85000.00"),
    }


def make_employee(ssn: str = "123-45-6789", name: str = "Jane Doe", **overrides) -> Employee:
    fields = {
        "name": name,
        "ssn": ssn,
        "dob": date(1990, 1, 1),
        "address": "1 Main St",
        "city": "Chicago",
        "state": "IL",
        "zip": "60601",
        "phone": "(312) 555-0100",
        "join_date": date(2020, 1, 1),
        "exit_date": None,
    }
    fields.update(overrides)
    return Employee(**fields)


def make_assignment(title: str = "Engineer", salary: str = "90000", **overrides) -> SalaryAssignment:
    fields = {
        "from_date": date(2020, 1, 1),
        "to_date": None,
        "title": title,
        "salary": Decimal(salary),
    }
    fields.update(overrides)
    return SalaryAssignment(**fields)


@pytest.fixture
def populated_store(store, today):
    """
    Store with a mix of active and ended assignments:

    - Alice Walker: Developer, active
    - Bob Manning: Manager, active
    - Carol Smith: Engineer, active, plus an ended Analyst assignment
    - Dan Smithers: Analyst, ended yesterday
    """
    yesterday = date.fromordinal(today.toordinal() - 1)
    alice, _ = store.hire(make_employee("111-11-1111", "Alice Walker"), make_assignment("Developer", "95000"))
    bob, _ = store.hire(make_employee("222-22-2222", "Bob Manning"), make_assignment("Manager", "120000"))
    carol, _ = store.hire(make_employee("333-33-3333", "Carol Smith"), make_assignment("Engineer", "105000"))
    store.create_salary_assignment(
        carol,
        make_assignment("Analyst", "70000", from_date=date(2015, 1, 1), to_date=date(2019, 12, 31)),
    )
    store.hire(
        make_employee("444-44-4444", "Dan Smithers", exit_date=yesterday),
        make_assignment("Analyst", "65000", to_date=yesterday),
    )
    return store
