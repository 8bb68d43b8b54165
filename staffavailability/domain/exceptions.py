"""
Domain-specific exception hierarchy for the availability engine.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidInputError(AvailabilityError):
    """Raised for malformed identifiers, unordered or cross-midnight windows."""


class EmployeeNotFoundError(AvailabilityError):
    """Raised when the referenced employee does not exist."""

    def __init__(self, employee_id):
        super().__init__(f"Employee not found: {employee_id}")
        self.employee_id = employee_id


class NoScheduleForDateError(AvailabilityError):
    """Raised when an employee has no applicable weekly schedule on a date."""

    def __init__(self, employee_id, day):
        super().__init__(f"No schedule found for employee {employee_id} on {day}")
        self.employee_id = employee_id
        self.day = day


class CollaboratorError(AvailabilityError):
    """Raised when an underlying data fetch fails."""
