"""
Error taxonomy for the roster.

Field-level failures are recovered inside the add workflow; everything
else is surfaced to the command boundary in app.py.
"""


class RosterError(Exception):
    """Base class for all roster errors."""
    pass


class ValidationError(RosterError):
    """Raised when a single field fails parsing or its validator."""

    def __init__(self, field: str, value=None):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for field '{field}'")


class TooManyInvalidAttempts(RosterError):
    """Raised when a field prompt exhausts its attempts."""

    def __init__(self, field: str, attempts: int):
        self.field = field
        self.attempts = attempts
        super().__init__(f"Too many invalid attempts for '{field}' ({attempts})")


class DuplicateKeyError(RosterError):
    """Raised when an employee SSN already exists in the store."""

    def __init__(self, ssn: str):
        self.ssn = ssn
        super().__init__("SSN already exists")


class InvalidReferenceError(RosterError):
    """Raised when a salary assignment points at an unknown employee."""

    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} does not exist")


class SearchTermTooLong(RosterError):
    """Raised before dispatch when a search term exceeds the limit."""

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"Search term too long ({length} > {limit})")


class StoreUnavailable(RosterError):
    """Raised when the database cannot be opened, created or seeded."""
    pass


class CommandLineError(RosterError):
    """Raised when the command line cannot be parsed."""
    pass
