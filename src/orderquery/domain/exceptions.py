"""Domain-level exceptions.

Every failure the query layer can surface is a subclass of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A value or invariant was violated."""


class InvalidCriteria(ValidationError):
    """A search filter could not be interpreted."""


class InvalidPagination(ValidationError):
    """Offset or limit is out of range."""


class PaginationUnsupported(DomainException):
    """Pagination was requested with a row-duplicating collection fetch."""


class StoreUnavailable(DomainException):
    """The relational store rejected or failed a request."""


class AssemblyInvariantViolation(DomainException):
    """Rows claiming the same order id disagree on root-level fields."""
