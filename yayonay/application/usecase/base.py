"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any

from yayonay.domain.error import (
    ConcurrentMutationInProgressError,
    DomainError,
    NotAuthorizedError,
    NotFoundError,
    PreconditionFailedError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationError,
)
from yayonay.domain.value import FailureReason

_REASONS: list[tuple[type[DomainError], FailureReason]] = [
    (UnauthenticatedError, FailureReason.UNAUTHENTICATED),
    (StoreUnavailableError, FailureReason.STORE_UNAVAILABLE),
    (PreconditionFailedError, FailureReason.CONFLICT),
    (NotAuthorizedError, FailureReason.UNAUTHORIZED),
    (NotFoundError, FailureReason.NOT_FOUND),
    (ConcurrentMutationInProgressError, FailureReason.CONCURRENT_MUTATION_IN_PROGRESS),
    (ValidationError, FailureReason.INVALID),
]


def reason_for(error: DomainError) -> FailureReason:
    """Structured failure reason for a domain error."""
    for error_type, reason in _REASONS:
        if isinstance(error, error_type):
            return reason
    return FailureReason.INVALID


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass
