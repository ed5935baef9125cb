import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .normalize import resolve_today, years_before

_SSN_RE = re.compile(r"^\d{3}-\d{2}-\d{4}$", re.ASCII)
_PHONE_RE = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$", re.ASCII)
_STATE_RE = re.compile(r"^[A-Z]{2}$")
_ZIP_RE = re.compile(r"^\d{5}$", re.ASCII)

MIN_AGE = 22
MAX_AGE = 64
MAX_SALARY = Decimal("1000000")

FIELD_MAX_LENGTHS = {
    "name": 100,
    "ssn": 11,
    "address": 100,
    "city": 50,
    "state": 2,
    "zip": 5,
    "phone": 14,
    "title": 50,
}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _letters_and_spaces(v: str, extra: str = "") -> bool:
    return all(c.isalpha() or c.isspace() or c in extra for c in v)


def _as_date(v: Any) -> Optional[date]:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return None


def _matches(pattern: "re.Pattern[str]", v: Any) -> bool:
    return isinstance(v, str) and pattern.fullmatch(v) is not None


def validate_name(name: Any) -> bool:
    return _is_non_empty_str(name) and _letters_and_spaces(name, "'")


def validate_ssn(ssn: Any) -> bool:
    return _matches(_SSN_RE, ssn)


def validate_age(dob: Any, today: Optional[date] = None) -> bool:
    """True when `dob` puts the person between 22 and 64 years old today."""
    dob = _as_date(dob)
    if dob is None:
        return False
    today = resolve_today(today)
    return years_before(today, MAX_AGE) <= dob <= years_before(today, MIN_AGE)


def validate_address(address: Any) -> bool:
    # A street number is the only structure we can check for.
    return _is_non_empty_str(address) and any(c.isdigit() for c in address)


def validate_city(city: Any) -> bool:
    return _is_non_empty_str(city) and _letters_and_spaces(city)


def validate_state(state: Any) -> bool:
    return isinstance(state, str) and _matches(_STATE_RE, state.upper())


def validate_zip(zip_code: Any) -> bool:
    return _matches(_ZIP_RE, zip_code)


def validate_phone(phone: Any) -> bool:
    return _matches(_PHONE_RE, phone)


def validate_title(title: Any) -> bool:
    return _is_non_empty_str(title) and _letters_and_spaces(title)


def validate_salary(salary: Any) -> bool:
    if isinstance(salary, bool) or not isinstance(salary, (Decimal, int, float)):
        return False
    if isinstance(salary, Decimal) and not salary.is_finite():
        return False
    if isinstance(salary, float) and math.isnan(salary):
        return False
    return 0 < salary <= MAX_SALARY


def validate_join_date(join_date: Any, today: Optional[date] = None) -> bool:
    join_date = _as_date(join_date)
    return join_date is not None and join_date <= resolve_today(today)


_STR_CHECKS = [
    ("name", validate_name),
    ("ssn", validate_ssn),
    ("address", validate_address),
    ("city", validate_city),
    ("state", validate_state),
    ("zip", validate_zip),
    ("phone", validate_phone),
    ("title", validate_title),
]


def validate_employee(data: Dict[str, Any], today: Optional[date] = None) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    `data` holds the employee fields plus the initial assignment's
    title and salary, keyed by the names in FIELD_MAX_LENGTHS along
    with dob, join_date and salary.
    """
    errors: List[str] = []

    for field, check in _STR_CHECKS:
        if field not in data:
            errors.append(f"Missing required field: {field}")
        elif not check(data[field]):
            errors.append(f"Field '{field}' is not valid")
        elif len(data[field]) > FIELD_MAX_LENGTHS[field]:
            errors.append(f"Field '{field}' exceeds {FIELD_MAX_LENGTHS[field]} characters")

    if "dob" not in data:
        errors.append("Missing required field: dob")
    elif not validate_age(data["dob"], today):
        errors.append(f"Field 'dob' must give an age between {MIN_AGE} and {MAX_AGE}")

    if "join_date" not in data:
        errors.append("Missing required field: join_date")
    elif not validate_join_date(data["join_date"], today):
        errors.append("Field 'join_date' cannot be in the future")

    if "salary" not in data:
        errors.append("Missing required field: salary")
    elif not validate_salary(data["salary"]):
        errors.append("Field 'salary' must be positive and at most 1,000,000")

    return errors
