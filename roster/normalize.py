from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def normalize_name(name: str) -> str:
    return normalize_text(name)


def normalize_state(state: str) -> str:
    return state.strip().upper()


def normalize_term(term: str) -> str:
    return normalize_text(term).lower()


def resolve_today(today: Optional[date] = None) -> date:
    return today if today is not None else date.today()


def years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def parse_date(text: str) -> date:
    """
    Parse a date typed at a prompt.

    Accepts MM/DD/YYYY (the format shown in prompts) and ISO YYYY-MM-DD.
    Raises ValueError if neither matches.
    """
    value = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {text!r}")


def parse_salary(text: str) -> Decimal:
    """Parse a salary amount, tolerating a leading $ and thousands separators."""
    cleaned = text.strip().lstrip("$").replace(",", "")
    try:
        amount = Decimal(cleaned)
        if not amount.is_finite():
            raise ValueError(f"Unrecognized amount: {text!r}")
        return amount.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValueError(f"Unrecognized amount: {text!r}")
