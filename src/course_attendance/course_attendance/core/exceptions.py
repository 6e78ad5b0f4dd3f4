class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a course, student or date-set resolves to no matching record."""


class TransactionError(DomainError):
    """Raised when the storage layer fails mid-transaction; all writes are rolled back."""


class ConcurrencyError(TransactionError):
    """Raised when a summary row changed under a concurrent transaction."""
