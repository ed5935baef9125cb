from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from .store import EmployeeRow, TitleRange

RULE_WIDTH = 160
DATE_FORMAT = "%m/%d/%Y"


def truncate(text: Optional[str], max_length: int) -> str:
    if text is None:
        return ""
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


def format_currency(value: Union[Decimal, int, float]) -> str:
    return f"${Decimal(value):,.2f}"


def format_date(value: Optional[date], default: str = "") -> str:
    if value is None:
        return default
    return value.strftime(DATE_FORMAT)


def render_employee_table(rows: Iterable[EmployeeRow]) -> List[str]:
    """Full listing: one line per employee per active assignment."""
    rule = "-" * RULE_WIDTH
    lines = [
        rule,
        f"{'Name':<20} {'SSN':<12} {'DOB':<12} {'Address':<15} {'City':<15} {'State':<6} "
        f"{'Zip':<6} {'Phone':<15} {'Join':<12} {'Exit':<12} {'Title':<15} {'Salary':>12}",
        rule,
    ]
    for employee, assignment in rows:
        lines.append(
            f"{truncate(employee.name, 20):<20} {employee.ssn:<12} {format_date(employee.dob):<12} "
            f"{truncate(employee.address, 15):<15} {truncate(employee.city, 15):<15} "
            f"{employee.state or '':<6} {employee.zip or '':<6} {employee.phone or '':<15} "
            f"{format_date(employee.join_date):<12} {format_date(employee.exit_date, 'Active'):<12} "
            f"{truncate(assignment.title, 15):<15} {format_currency(assignment.salary):>12}"
        )
    lines.append(rule)
    return lines


def render_search_results(rows: Iterable[EmployeeRow]) -> List[str]:
    return [
        f"Name: {employee.name}, Title: {assignment.title}, Salary: {format_currency(assignment.salary)}"
        for employee, assignment in rows
    ]


def render_title_ranges(ranges: Iterable[TitleRange]) -> List[str]:
    return [
        f"Title: {r.title}, Min Salary: {format_currency(r.min_salary)}, "
        f"Max Salary: {format_currency(r.max_salary)}"
        for r in ranges
    ]
