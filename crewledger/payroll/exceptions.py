"""
Exceptions raised by the payroll core.

Only two conditions ever leave the core as errors: a referenced employee
that does not exist, and input that cannot describe real piece work.
Everything else (legacy records, stale cached totals, empty periods) is
normalized rather than reported.
"""


class PayrollError(Exception):
    """Base class for payroll core errors."""


class EmployeeNotFoundError(PayrollError):
    """Raised when a payslip is requested for an unknown employee."""

    def __init__(self, employee_id):
        self.employee_id = employee_id
        super().__init__(f"Employee with ID {employee_id} not found")


class InvalidInputError(PayrollError):
    """Raised for non-positive rates or quantities, bad periods and incomplete drafts."""
