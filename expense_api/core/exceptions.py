class ExpenseTrackerException(Exception):
    """Base exception for expense tracker"""

    pass


class UnauthorizedException(ExpenseTrackerException):
    """Raised when JWT validation or login fails"""

    pass


class NotFoundException(ExpenseTrackerException):
    """Raised when resource not found"""

    pass


class ForbiddenException(ExpenseTrackerException):
    """Raised when the access policy denies an action"""

    pass


class ValidationException(ExpenseTrackerException):
    """Raised for business logic validation errors"""

    pass


class ConflictException(ExpenseTrackerException):
    """Raised for duplicate memberships or registrations"""

    pass


class ExpiredException(ExpenseTrackerException):
    """Raised when an invitation is past its acceptance window"""

    pass
