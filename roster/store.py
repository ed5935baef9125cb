"""
Record store.

Responsibilities:
- Persist Employee and SalaryAssignment rows.
- Enforce SSN uniqueness before insert.
- Answer the reporting queries over active assignments.

Non-Responsibilities:
- No field validation (see validators.py).
- No search-term classification (see query.py).

Every write commits before returning; a failed write rolls the
session back before the error propagates.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import (
    Employee,
    SalaryAssignment,
    active_clause,
    get_session,
    init_database,
)
from .errors import DuplicateKeyError, InvalidReferenceError, StoreUnavailable
from .logger import get_logger, mask_ssn

logger = get_logger()

ALL_ROWS_LIMIT = 1000
SEARCH_ROWS_LIMIT = 100

EmployeeRow = Tuple[Employee, SalaryAssignment]


class TitleRange(NamedTuple):
    title: str
    min_salary: Decimal
    max_salary: Decimal


def _is_duplicate_ssn(error: IntegrityError) -> bool:
    return "employee.ssn" in str(error.orig)


class RecordStore:
    """CRUD and reporting queries over one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        bind = self.session.get_bind()
        self.session.close()
        bind.dispose()

    # Writes

    def create_employee(self, candidate: Employee) -> int:
        """
        Insert a new employee and return its surrogate id.

        Raises:
            DuplicateKeyError: if another employee already has this SSN
        """
        self._check_unique_ssn(candidate.ssn)
        self.session.add(candidate)
        self._commit(candidate.ssn)
        logger.info("Employee created", employee_id=candidate.id, ssn=mask_ssn(candidate.ssn))
        return candidate.id

    def create_salary_assignment(self, employee_id: int, assignment: SalaryAssignment) -> int:
        """
        Attach a salary assignment to an existing employee.

        Raises:
            InvalidReferenceError: if employee_id does not exist
        """
        if self.get_employee(employee_id) is None:
            logger.warning("Salary assignment for unknown employee", employee_id=employee_id)
            raise InvalidReferenceError(employee_id)
        assignment.employee_id = employee_id
        self.session.add(assignment)
        self._commit()
        logger.info(
            "Salary assignment created",
            assignment_id=assignment.id,
            employee_id=employee_id,
            title=assignment.title,
        )
        return assignment.id

    def hire(self, candidate: Employee, assignment: SalaryAssignment) -> Tuple[int, int]:
        """
        Create an employee and its initial salary assignment in one transaction.

        Nothing is persisted if either insert fails.

        Returns:
            (employee_id, assignment_id)
        """
        self._check_unique_ssn(candidate.ssn)
        try:
            self.session.add(candidate)
            self.session.flush()
            assignment.employee_id = candidate.id
            self.session.add(assignment)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if _is_duplicate_ssn(e):
                raise DuplicateKeyError(candidate.ssn) from e
            raise
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info(
            "Employee hired",
            employee_id=candidate.id,
            assignment_id=assignment.id,
            ssn=mask_ssn(candidate.ssn),
        )
        return candidate.id, assignment.id

    def _check_unique_ssn(self, ssn: str) -> None:
        if self.ssn_exists(ssn):
            logger.warning("Rejected duplicate SSN", ssn=mask_ssn(ssn))
            raise DuplicateKeyError(ssn)

    def _commit(self, ssn: Optional[str] = None) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if ssn is not None and _is_duplicate_ssn(e):
                raise DuplicateKeyError(ssn) from e
            raise
        except SQLAlchemyError:
            self.session.rollback()
            raise

    # Lookups

    def ssn_exists(self, ssn: str) -> bool:
        return self.session.query(Employee.id).filter(Employee.ssn == ssn).first() is not None

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self.session.get(Employee, employee_id)

    def count_employees(self) -> int:
        return self.session.query(Employee).count()

    # Reporting queries

    def _active_rows(self, today: Optional[date]):
        return (
            self.session.query(Employee, SalaryAssignment)
            .join(SalaryAssignment, SalaryAssignment.employee_id == Employee.id)
            .filter(active_clause(today))
        )

    def all_employees_with_active_assignment(self, today: Optional[date] = None) -> List[EmployeeRow]:
        """One row per employee per active assignment, at most 1000 rows."""
        rows = (
            self._active_rows(today)
            .order_by(Employee.id, SalaryAssignment.id)
            .limit(ALL_ROWS_LIMIT)
            .all()
        )
        return [tuple(row) for row in rows]

    def employees_by_name_fragment(self, fragment: str, today: Optional[date] = None) -> List[EmployeeRow]:
        """Case-insensitive substring match on name; % and _ match literally."""
        rows = (
            self._active_rows(today)
            .filter(Employee.name.icontains(fragment, autoescape=True))
            .order_by(Employee.id, SalaryAssignment.id)
            .limit(SEARCH_ROWS_LIMIT)
            .all()
        )
        return [tuple(row) for row in rows]

    def employees_by_exact_title(self, title: str, today: Optional[date] = None) -> List[EmployeeRow]:
        """Case-insensitive exact match on the assignment title."""
        rows = (
            self._active_rows(today)
            .filter(func.lower(SalaryAssignment.title) == title.lower())
            .order_by(Employee.id, SalaryAssignment.id)
            .limit(SEARCH_ROWS_LIMIT)
            .all()
        )
        return [tuple(row) for row in rows]

    def title_salary_ranges(self, today: Optional[date] = None) -> List[TitleRange]:
        """Min and max salary per title over active assignments."""
        rows = (
            self.session.query(
                SalaryAssignment.title,
                func.min(SalaryAssignment.salary),
                func.max(SalaryAssignment.salary),
            )
            .filter(active_clause(today))
            .group_by(SalaryAssignment.title)
            .order_by(SalaryAssignment.title)
            .all()
        )
        return [TitleRange(title, min_salary, max_salary) for title, min_salary, max_salary in rows]

    def employees_with_overlapping_assignments(self, today: Optional[date] = None) -> List[Tuple[int, int]]:
        """
        Employees holding more than one active assignment.

        Overlap is allowed on insert; this query is how it gets noticed.

        Returns:
            (employee_id, active_count) pairs ordered by employee_id
        """
        active_count = func.count(SalaryAssignment.id)
        rows = (
            self.session.query(SalaryAssignment.employee_id, active_count)
            .filter(active_clause(today))
            .group_by(SalaryAssignment.employee_id)
            .having(active_count > 1)
            .order_by(SalaryAssignment.employee_id)
            .all()
        )
        return [(employee_id, count) for employee_id, count in rows]


def open_store(db_path: Path) -> RecordStore:
    """
    Create the schema if needed and open a store on db_path.

    Raises:
        StoreUnavailable: if the file or schema cannot be opened
    """
    try:
        init_database(db_path)
        session = get_session(db_path)
    except (SQLAlchemyError, OSError) as e:
        logger.critical("Store unavailable", path=str(db_path), error=type(e).__name__)
        raise StoreUnavailable(f"Cannot open store at {db_path}") from e
    logger.debug("Store opened", path=str(db_path))
    return RecordStore(session)
