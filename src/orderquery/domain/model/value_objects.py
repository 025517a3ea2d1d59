"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderquery.domain.exceptions import InvalidPagination, ValidationError

MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class Address:
    """Postal address embedded in customers and deliveries."""

    city: str
    street: str
    zipcode: str

    def __str__(self) -> str:
        return f"{self.city}, {self.street} ({self.zipcode})"


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that an order line never holds zero or negative
    items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Page:
    """An offset/limit window over root entities."""

    offset: int
    limit: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise InvalidPagination(f"Offset must be >= 0, got {self.offset}")
        if self.limit <= 0:
            raise InvalidPagination(f"Limit must be positive, got {self.limit}")
        if self.limit > MAX_PAGE_SIZE:
            raise InvalidPagination(f"Limit must be <= {MAX_PAGE_SIZE}")

    @staticmethod
    def of(offset: int, limit: int) -> Page:
        """Build a page, clamping an oversized limit to ``MAX_PAGE_SIZE``."""
        if limit > MAX_PAGE_SIZE:
            limit = MAX_PAGE_SIZE
        return Page(offset=offset, limit=limit)
