"""
Exceptions raised across svcdot.

Registry lookups separate genuine absence (a property, snapshot or value
that simply is not there) from faults in the registry itself. Callers
recover from the former at optional lookups and let the latter abort
the run.
"""


class SvcdotError(Exception):
    """Base class for every svcdot error."""


class OptionsError(SvcdotError):
    """Raised for an invalid size constraint or simplification option."""


class RegistryError(SvcdotError):
    """Base class for errors reported by a registry adapter."""


class ExpectedAbsence(RegistryError):
    """A property, snapshot, group or value does not exist."""


class NotFoundError(ExpectedAbsence):
    def __init__(self, what: str):
        self.what = what
        super().__init__(f"{what} not found")


class ConstraintViolatedError(ExpectedAbsence):
    """A property exists but does not hold exactly one value."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"{what} does not have a single value")


class TypeMismatchError(ExpectedAbsence):
    def __init__(self, what: str, expected: str, actual: str):
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what} is {actual}, expected {expected}")


class FmriParseError(SvcdotError):
    """Raised when a dependency entity is not a service FMRI."""

    def __init__(self, text: str, reason: str = "not a service FMRI"):
        self.text = text
        self.reason = reason
        super().__init__(f"'{text}': {reason}")


class RegistryFault(RegistryError):
    """
    Any registry failure other than a documented absence.

    The registry is assumed to be internally consistent, so a fault
    aborts the whole run with a diagnostic naming the operation.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")
