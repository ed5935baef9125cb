"""
Synthetic sample data for an empty roster.

On first run the CLI fills the store with plausible employees, each
with one salary assignment that starts on the join date and ends on
the exit date when there is one.
"""

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .database import Employee, SalaryAssignment
from .errors import DuplicateKeyError, StoreUnavailable
from .logger import get_logger
from .normalize import resolve_today, years_before
from .store import RecordStore

logger = get_logger()

DEFAULT_SEED_COUNT = 100
MAX_SSN_RETRIES = 10

FIRST_NAMES = [
    "John", "Jane", "Michael", "Sarah", "David", "Emma",
    "Daniel", "Olivia", "James", "Ava", "Robert", "Emily",
    "William", "Isabella", "Joseph", "Mia", "Charles", "Amelia",
    "Thomas", "Harper", "Matthew", "Evelyn", "Anthony", "Abigail",
    "Christopher", "Ella", "Joshua", "Elizabeth", "Andrew", "Sofia",
    "Ryan", "Madison", "Benjamin", "Scarlett", "Samuel", "Victoria",
    "Jacob", "Aria", "Nathan", "Grace", "Logan", "Chloe",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones",
    "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin",
    "Lee", "Perez", "Thompson", "White", "Harris",
    "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson",
    "Walker", "Young", "Allen", "King", "Wright",
    "Scott", "Torres", "Nguyen", "Hill", "Flores",
    "Green", "Adams",
]

TITLES = ["Developer", "Senior Developer", "Manager", "Analyst", "Engineer"]

LOCATIONS = [
    ("Los Angeles", "CA"),
    ("New York", "NY"),
    ("Houston", "TX"),
    ("Miami", "FL"),
    ("Chicago", "IL"),
]


def generate_ssn(rng: random.Random) -> str:
    return f"{rng.randint(100, 998)}-{rng.randint(10, 98)}-{rng.randint(1000, 9998)}"


def generate_employee(rng: random.Random, today: Optional[date] = None) -> Tuple[Employee, SalaryAssignment]:
    """Build one random employee and its salary assignment (not persisted)."""
    today = resolve_today(today)
    city, state = rng.choice(LOCATIONS)
    join_date = years_before(today, rng.randint(1, 19))
    exit_date = today - timedelta(days=rng.randint(1, 364)) if rng.randint(0, 9) == 0 else None

    employee = Employee(
        name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
        ssn=generate_ssn(rng),
        dob=years_before(today, rng.randint(22, 64)),
        address=f"{rng.randint(100, 9998)} Main St",
        city=city,
        state=state,
        zip=f"{rng.randint(10000, 99998)}",
        phone=f"({rng.randint(200, 998)}) {rng.randint(100, 998)}-{rng.randint(1000, 9998)}",
        join_date=join_date,
        exit_date=exit_date,
    )
    assignment = SalaryAssignment(
        from_date=join_date,
        to_date=exit_date,
        title=rng.choice(TITLES),
        salary=Decimal(rng.randint(50000, 149999)),
    )
    return employee, assignment


def seed_if_empty(
    store: RecordStore,
    count: int = DEFAULT_SEED_COUNT,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> int:
    """
    Populate an empty store with `count` synthetic employees.

    Returns the number of employees created (0 when the store already
    has data).

    Raises:
        StoreUnavailable: if the store cannot be read or written
    """
    rng = rng or random.Random()
    try:
        if store.count_employees() > 0:
            return 0

        created = 0
        for _ in range(count):
            for _attempt in range(MAX_SSN_RETRIES):
                employee, assignment = generate_employee(rng, today)
                try:
                    store.hire(employee, assignment)
                except DuplicateKeyError:
                    continue
                created += 1
                break
    except SQLAlchemyError as e:
        logger.critical("Seeding failed", error=type(e).__name__)
        raise StoreUnavailable("Failed to initialize data") from e

    logger.info("Seeded sample employees", count=created)
    return created
