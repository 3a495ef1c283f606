"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
``status_code`` is the response an HTTP adapter would map the error to.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code = 500


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    status_code = 400


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    status_code = 404


class ConflictError(DomainException):
    """The request conflicts with the current state of a resource."""

    status_code = 409


class InsufficientStockError(ConflictError):
    """A variant does not hold enough stock for the requested quantity."""

    def __init__(
        self,
        product_id: str,
        product_name: str,
        requested: int,
        available: int,
    ) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(requested {requested}, available {available})"
        )


class RaceLostStockError(ConflictError):
    """A concurrent decrement consumed the stock between read and write."""

    def __init__(self, product_id: str, product_name: str) -> None:
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(
            f"Insufficient stock for {product_name} (lost a concurrent update)"
        )


class OrderStateConflictError(ConflictError):
    """The order is not in a status that allows the operation."""


class VersionConflictError(DomainException):
    """Optimistic concurrency check failed: the resource changed meanwhile."""

    status_code = 412

    def __init__(self, expected: int, current: int) -> None:
        self.expected = expected
        self.current = current
        super().__init__(
            f"Version conflict (expected {expected}, current {current})"
        )


class TransactionUnsupportedError(DomainException):
    """The store cannot run multi-document transactions."""

    status_code = 503
