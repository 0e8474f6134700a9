"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UnauthorizedError(DomainException):
    """No valid principal on the request"""

    pass


class ForbiddenError(DomainException):
    """Principal has the wrong role or does not own the resource"""

    pass


class NotFoundError(DomainException):
    """Entity does not exist or is not visible to the caller"""

    pass


class PreconditionFailedError(DomainException):
    """Entity is in the wrong lifecycle state for the requested operation"""

    pass


class ConflictError(DomainException):
    """A state-guarded write lost its race against a concurrent writer"""

    pass


class AlreadyPurchasedError(ConflictError):
    """Security was bought by someone else between read and write"""

    pass


class ValidationError(DomainException):
    """Input is malformed or missing required fields"""

    pass


class InsufficientFundsError(DomainException):
    """Wallet debit would take the balance below zero"""

    pass


class SecurityNotAvailableError(PreconditionFailedError):
    """Security is not (or no longer) listed for sale"""

    pass
