"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for employee and salary-history storage.
"""

from datetime import date
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
    event,
    or_,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .normalize import resolve_today

Base = declarative_base()


class Employee(Base):
    """Employee personal record."""

    __tablename__ = "employee"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    ssn = Column(String(11), nullable=False, unique=True)  # ###-##-####
    dob = Column(Date, nullable=False)
    address = Column(String(100))
    city = Column(String(50))
    state = Column(String(2))
    zip = Column(String(5))
    phone = Column(String(14))  # (###) ###-####
    join_date = Column(Date, nullable=False)
    exit_date = Column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.name!r}>"


class SalaryAssignment(Base):
    """One title + salary period for one employee."""

    __tablename__ = "salary_assignment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(
        Integer,
        ForeignKey("employee.id", name="fk_salary_assignment_employee"),
        nullable=False,
        index=True,
    )
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=True)  # open-ended while NULL
    title = Column(String(50), nullable=False)
    salary = Column(Numeric(12, 2), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<SalaryAssignment id={self.id} employee_id={self.employee_id} "
            f"title={self.title!r}>"
        )


def is_active(assignment: SalaryAssignment, today: Optional[date] = None) -> bool:
    """An assignment is active while it has no end date or ends after today."""
    today = resolve_today(today)
    return assignment.to_date is None or assignment.to_date > today


def active_clause(today: Optional[date] = None):
    """SQL form of is_active() for use in query filters."""
    today = resolve_today(today)
    return or_(SalaryAssignment.to_date.is_(None), SalaryAssignment.to_date > today)


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_path: Path) -> Engine:
    """
    Create an engine for the SQLite file at db_path.

    Foreign keys are off by default in SQLite; every connection turns
    them on so salary_assignment.employee_id is enforced.
    """
    engine = create_engine(f"sqlite:///{db_path}")
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_db_engine(db_path)
    Session = sessionmaker(bind=engine)
    return Session()
