"""
Interactive add-employee workflow.

Each field is read by a bounded prompt loop: an entry is trimmed,
length-checked, parsed and validated, and after MAX_ATTEMPTS consecutive
rejections the field gives up. Giving up is reported as a result value;
callers that want an exception use WorkflowResult.raise_for_status().
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .database import Employee, SalaryAssignment
from .errors import DuplicateKeyError, TooManyInvalidAttempts, ValidationError
from .logger import get_logger
from .normalize import (
    normalize_name,
    normalize_state,
    normalize_text,
    parse_date,
    parse_salary,
    resolve_today,
)
from .store import RecordStore
from .validators import (
    FIELD_MAX_LENGTHS,
    validate_address,
    validate_age,
    validate_city,
    validate_join_date,
    validate_name,
    validate_phone,
    validate_salary,
    validate_ssn,
    validate_state,
    validate_title,
    validate_zip,
)

logger = get_logger()

MAX_ATTEMPTS = 3
DATE_MAX_LENGTH = 10
SALARY_MAX_LENGTH = 20

CREATED = "created"
TOO_MANY_ATTEMPTS = "too_many_attempts"
DUPLICATE_SSN = "duplicate_ssn"

INVALID_INPUT = "Invalid input. Please try again."


@dataclass
class FieldStep:
    name: str
    prompt: str
    max_length: int
    validate: Callable[[Any], bool]
    parse: Callable[[str], Any] = normalize_text
    retry_message: str = INVALID_INPUT


@dataclass
class FieldResult:
    field: str
    ok: bool
    value: Any = None
    attempts: int = 0


@dataclass
class WorkflowResult:
    status: str
    employee_id: Optional[int] = None
    failed_field: Optional[str] = None
    attempts: int = 0
    ssn: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == CREATED

    def raise_for_status(self) -> None:
        """Raise the matching roster error if the workflow did not create an employee."""
        if self.status == TOO_MANY_ATTEMPTS:
            raise TooManyInvalidAttempts(self.failed_field, self.attempts)
        if self.status == DUPLICATE_SSN:
            raise DuplicateKeyError(self.ssn)


def build_steps(today: Optional[date] = None) -> List[FieldStep]:
    """Prompt steps in the order they are asked."""
    today = resolve_today(today)
    return [
        FieldStep("name", "Enter Name: ", FIELD_MAX_LENGTHS["name"], validate_name, normalize_name),
        FieldStep("ssn", "Enter SSN (###-##-####): ", FIELD_MAX_LENGTHS["ssn"], validate_ssn),
        FieldStep(
            "dob",
            "Enter DOB (MM/dd/yyyy): ",
            DATE_MAX_LENGTH,
            lambda d: validate_age(d, today),
            parse_date,
            "Invalid date. Employee must be between 22 and 64 years old.",
        ),
        FieldStep("address", "Enter Address: ", FIELD_MAX_LENGTHS["address"], validate_address),
        FieldStep("city", "Enter City: ", FIELD_MAX_LENGTHS["city"], validate_city),
        FieldStep(
            "state", "Enter State (2 letters): ", FIELD_MAX_LENGTHS["state"], validate_state, normalize_state
        ),
        FieldStep("zip", "Enter Zip: ", FIELD_MAX_LENGTHS["zip"], validate_zip),
        FieldStep("phone", "Enter Phone (###) ###-####: ", FIELD_MAX_LENGTHS["phone"], validate_phone),
        FieldStep(
            "join_date",
            "Enter Join Date (MM/dd/yyyy): ",
            DATE_MAX_LENGTH,
            lambda d: validate_join_date(d, today),
            parse_date,
            "Invalid date. Join date cannot be in the future.",
        ),
        FieldStep("title", "Enter Title: ", FIELD_MAX_LENGTHS["title"], validate_title),
        FieldStep(
            "salary",
            "Enter Salary: ",
            SALARY_MAX_LENGTH,
            validate_salary,
            parse_salary,
            "Invalid salary. Must be positive and reasonable.",
        ),
    ]


def accept_entry(step: FieldStep, raw: Optional[str]) -> Any:
    """
    Turn one raw entry into a field value.

    Raises:
        ValidationError: if the entry is blank, too long, unparseable or invalid
    """
    text = (raw or "").strip()
    if not text or len(text) > step.max_length:
        raise ValidationError(step.name, raw)
    try:
        value = step.parse(text)
    except ValueError as e:
        raise ValidationError(step.name, raw) from e
    if not step.validate(value):
        raise ValidationError(step.name, raw)
    return value


def collect_field(
    step: FieldStep,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    max_attempts: int = MAX_ATTEMPTS,
) -> FieldResult:
    """
    Prompt for one field until it is accepted or attempts run out.

    An EOF on input counts as an invalid entry.
    """
    attempts = 0
    while attempts < max_attempts:
        try:
            raw = input_fn(step.prompt)
        except EOFError:
            raw = None
        attempts += 1
        try:
            value = accept_entry(step, raw)
        except ValidationError:
            logger.record_validation_failure(step.name)
            logger.debug("Rejected entry", field=step.name, attempt=attempts)
            output_fn(step.retry_message)
            continue
        return FieldResult(step.name, True, value, attempts)
    return FieldResult(step.name, False, None, attempts)


class AddEmployeeWorkflow:
    """
    Collects every field in order, then hires the employee.

    States: pending -> collecting -> persisting -> done, or aborted when
    a field runs out of attempts or the SSN is already taken.
    """

    def __init__(
        self,
        store: RecordStore,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        today: Optional[date] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.store = store
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.today = resolve_today(today)
        self.max_attempts = max_attempts
        self.steps = build_steps(self.today)
        self.values: Dict[str, Any] = {}
        self.state = "pending"

    def run(self) -> WorkflowResult:
        self.state = "collecting"
        for step in self.steps:
            result = collect_field(step, self.input_fn, self.output_fn, self.max_attempts)
            if not result.ok:
                logger.warning("Add employee aborted", field=step.name, attempts=result.attempts)
                self.state = "aborted"
                return WorkflowResult(TOO_MANY_ATTEMPTS, failed_field=step.name, attempts=result.attempts)
            self.values[step.name] = result.value

            if step.name == "ssn" and self.store.ssn_exists(result.value):
                self.state = "aborted"
                return WorkflowResult(DUPLICATE_SSN, failed_field="ssn", ssn=result.value)

        self.state = "persisting"
        employee, assignment = self._build_records()
        try:
            employee_id, _ = self.store.hire(employee, assignment)
        except DuplicateKeyError:
            self.state = "aborted"
            return WorkflowResult(DUPLICATE_SSN, failed_field="ssn", ssn=employee.ssn)

        logger.record_employee_created()
        self.state = "done"
        return WorkflowResult(CREATED, employee_id=employee_id)

    def _build_records(self):
        v = self.values
        employee = Employee(
            name=v["name"],
            ssn=v["ssn"],
            dob=v["dob"],
            address=v["address"],
            city=v["city"],
            state=v["state"],
            zip=v["zip"],
            phone=v["phone"],
            join_date=v["join_date"],
        )
        assignment = SalaryAssignment(
            from_date=v["join_date"],
            title=v["title"],
            salary=v["salary"],
        )
        return employee, assignment
