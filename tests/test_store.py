"""
Tests for store.py - writes, invariants and reporting queries.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from roster.database import Employee, SalaryAssignment, is_active
from roster.errors import DuplicateKeyError, InvalidReferenceError, StoreUnavailable
from roster.normalize import years_before
from roster.store import ALL_ROWS_LIMIT, SEARCH_ROWS_LIMIT, open_store

from conftest import make_assignment, make_employee


class TestOpenStore:

    def test_open_creates_schema(self, db_path):
        with open_store(db_path) as store:
            assert store.count_employees() == 0
        assert db_path.exists()

    def test_unreachable_path_raises_store_unavailable(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("plain file")

        with pytest.raises(StoreUnavailable):
            open_store(blocker / "roster.db")


class TestCreateEmployee:

    def test_assigns_surrogate_id(self, store):
        first = store.create_employee(make_employee("111-11-1111"))
        second = store.create_employee(make_employee("222-22-2222"))

        assert isinstance(first, int)
        assert second != first
        assert store.get_employee(first).ssn == "111-11-1111"

    @pytest.mark.parametrize("ssn", ["123-45-6789", "000-00-0000", "999-99-9999"])
    def test_same_ssn_twice_fails_second_time(self, store, ssn):
        store.create_employee(make_employee(ssn, "First Person"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            store.create_employee(make_employee(ssn, "Second Person"))

        assert exc_info.value.ssn == ssn
        assert store.count_employees() == 1

    def test_store_usable_after_duplicate(self, store):
        store.create_employee(make_employee("111-11-1111"))
        with pytest.raises(DuplicateKeyError):
            store.create_employee(make_employee("111-11-1111"))

        store.create_employee(make_employee("222-22-2222"))
        assert store.count_employees() == 2

    def test_ssn_exists(self, store):
        assert not store.ssn_exists("111-11-1111")
        store.create_employee(make_employee("111-11-1111"))
        assert store.ssn_exists("111-11-1111")


class TestCreateSalaryAssignment:

    def test_attaches_to_existing_employee(self, store):
        employee_id = store.create_employee(make_employee())
        assignment_id = store.create_salary_assignment(employee_id, make_assignment())

        assert isinstance(assignment_id, int)
        rows = store.all_employees_with_active_assignment()
        assert [(e.id, a.id) for e, a in rows] == [(employee_id, assignment_id)]

    def test_unknown_employee_raises_reference_error(self, store):
        with pytest.raises(InvalidReferenceError) as exc_info:
            store.create_salary_assignment(12345, make_assignment())

        assert exc_info.value.employee_id == 12345
        assert store.session.query(SalaryAssignment).count() == 0


class TestHire:

    def test_creates_both_records(self, store):
        employee_id, assignment_id = store.hire(make_employee(), make_assignment())

        assignment = store.session.get(SalaryAssignment, assignment_id)
        assert assignment.employee_id == employee_id

    def test_duplicate_ssn_rejected(self, store):
        store.hire(make_employee("111-11-1111"), make_assignment())

        with pytest.raises(DuplicateKeyError):
            store.hire(make_employee("111-11-1111"), make_assignment())

        assert store.count_employees() == 1
        assert store.session.query(SalaryAssignment).count() == 1

    def test_failed_assignment_leaves_no_employee(self, store):
        """A failing assignment insert rolls back the employee as well."""
        broken = SalaryAssignment(from_date=date(2020, 1, 1), title=None, salary=Decimal("1"))

        with pytest.raises(IntegrityError):
            store.hire(make_employee("555-55-5555"), broken)

        assert store.count_employees() == 0
        assert not store.ssn_exists("555-55-5555")


class TestRoundTrip:

    def test_employee_reads_back_unchanged(self, store, today):
        fields = {
            "name": "Jane O'Connor",
            "ssn": "123-45-6789",
            "dob": years_before(today, 30),
            "address": "42 Elm Street",
            "city": "San Diego",
            "state": "CA",
            "zip": "92101",
            "phone": "(619) 555-0142",
            "join_date": today,
        }
        store.hire(
            Employee(**fields),
            SalaryAssignment(from_date=today, title="Engineer", salary=Decimal("85000.00")),
        )

        rows = store.all_employees_with_active_assignment(today)

        assert len(rows) == 1
        employee, assignment = rows[0]
        for name, value in fields.items():
            assert getattr(employee, name) == value, name
        assert employee.exit_date is None
        assert assignment.from_date == today
        assert assignment.to_date is None
        assert assignment.title == "Engineer"
        assert assignment.salary == Decimal("85000.00")


class TestActiveQueries:

    def test_all_rows_only_active(self, populated_store, today):
        rows = populated_store.all_employees_with_active_assignment(today)

        assert [e.name for e, _ in rows] == ["Alice Walker", "Bob Manning", "Carol Smith"]
        assert all(is_active(a, today) for _, a in rows)

    def test_query_agrees_with_predicate_across_days(self, populated_store):
        all_assignments = populated_store.session.query(SalaryAssignment).all()
        for today in [date(2019, 12, 30), date(2019, 12, 31), date(2024, 6, 14), date(2024, 6, 15)]:
            rows = populated_store.all_employees_with_active_assignment(today)
            expected = sorted(a.id for a in all_assignments if is_active(a, today))
            assert sorted(a.id for _, a in rows) == expected

    def test_one_row_per_active_assignment(self, store, today):
        """Overlapping active assignments are kept, one row each."""
        employee_id, _ = store.hire(make_employee(), make_assignment("Developer"))
        store.create_salary_assignment(employee_id, make_assignment("Manager"))

        rows = store.all_employees_with_active_assignment(today)

        assert [a.title for _, a in rows] == ["Developer", "Manager"]
        assert store.employees_with_overlapping_assignments(today) == [(employee_id, 2)]

    def test_no_overlap_reported_for_single_assignments(self, populated_store, today):
        assert populated_store.employees_with_overlapping_assignments(today) == []

    def test_all_rows_capped(self, store, today):
        session = store.session
        for i in range(ALL_ROWS_LIMIT + 5):
            employee = make_employee(f"{100 + i // 100:03d}-{i % 100:02d}-0000")
            session.add(employee)
            session.flush()
            session.add(make_assignment(employee_id=employee.id))
        session.commit()

        assert len(store.all_employees_with_active_assignment(today)) == ALL_ROWS_LIMIT


class TestSearchQueries:

    def test_name_fragment_case_insensitive(self, populated_store, today):
        rows = populated_store.employees_by_name_fragment("SMITH", today)

        # Dan Smithers' only assignment has ended
        assert [e.name for e, _ in rows] == ["Carol Smith"]

    def test_name_fragment_wildcards_literal(self, populated_store, today):
        assert populated_store.employees_by_name_fragment("%", today) == []
        assert populated_store.employees_by_name_fragment("_", today) == []

    def test_name_fragment_capped(self, store, today):
        for i in range(SEARCH_ROWS_LIMIT + 3):
            store.hire(make_employee(f"200-{i // 100:02d}-{i % 100:04d}", "Sam Same"), make_assignment())

        assert len(store.employees_by_name_fragment("same", today)) == SEARCH_ROWS_LIMIT

    def test_exact_title_case_insensitive(self, populated_store, today):
        rows = populated_store.employees_by_exact_title("MANAGER", today)
        assert [(e.name, a.title) for e, a in rows] == [("Bob Manning", "Manager")]

    def test_exact_title_is_not_substring(self, populated_store, today):
        assert populated_store.employees_by_exact_title("manag", today) == []

    def test_exact_title_active_only(self, populated_store, today):
        # Carol's and Dan's Analyst assignments have both ended
        assert populated_store.employees_by_exact_title("analyst", today) == []


class TestTitleSalaryRanges:

    def test_ranges_over_active_assignments(self, populated_store, today):
        populated_store.hire(
            make_employee("555-55-5555", "Eve Adams"), make_assignment("Developer", "80000")
        )

        ranges = populated_store.title_salary_ranges(today)

        assert [(r.title, r.min_salary, r.max_salary) for r in ranges] == [
            ("Developer", Decimal("80000"), Decimal("95000")),
            ("Engineer", Decimal("105000"), Decimal("105000")),
            ("Manager", Decimal("120000"), Decimal("120000")),
        ]

    def test_min_not_above_max_and_titles_active(self, populated_store, today):
        ranges = populated_store.title_salary_ranges(today)
        active_titles = {a.title for _, a in populated_store.all_employees_with_active_assignment(today)}

        assert ranges
        for r in ranges:
            assert r.min_salary <= r.max_salary
            assert r.title in active_titles

    def test_ended_titles_excluded(self, populated_store, today):
        titles = [r.title for r in populated_store.title_salary_ranges(today)]
        assert "Analyst" not in titles

    def test_empty_store(self, store, today):
        assert store.title_salary_ranges(today) == []

    def test_end_date_moves_with_today(self, store):
        store.hire(make_employee(), make_assignment("Analyst", to_date=date(2024, 6, 15)))

        assert [r.title for r in store.title_salary_ranges(date(2024, 6, 14))] == ["Analyst"]
        assert store.title_salary_ranges(date(2024, 6, 15)) == []
