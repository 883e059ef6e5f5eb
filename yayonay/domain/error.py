"""Domain layer errors."""

from datetime import timedelta


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class CooldownActiveError(DomainError):
    """Raised when a user votes on an item before the cooldown elapsed."""

    def __init__(self, item_key: str, remaining: timedelta):
        self.item_key = item_key
        self.remaining = remaining
        super().__init__(f"Cooldown active for {item_key}: {remaining} remaining")


class UnauthenticatedError(DomainError):
    """Raised when an operation needs a signed-in user and there is none."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Authentication required to {operation}")


class NotAuthorizedError(DomainError):
    """Raised when a user attempts to modify content they don't own."""

    def __init__(self, resource: str, resource_id: str, user_id: str):
        super().__init__(
            f"User {user_id} is not authorized to modify {resource} {resource_id}"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class ConcurrentMutationInProgressError(DomainError):
    """Raised when a second mutation targets an item with one in flight."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"A mutation is already in progress for {key}")


class StoreUnavailableError(DomainError):
    """Raised when the document store cannot be reached.

    The caller must not assume the write applied.
    """

    def __init__(self, message: str = "Document store unavailable"):
        super().__init__(message)


class PreconditionFailedError(DomainError):
    """Raised when an atomic write's precondition does not hold.

    Nothing in the batch was applied.
    """

    def __init__(self, path: str, field: str | None = None):
        self.path = path
        self.field = field
        target = f"{path}#{field}" if field else path
        super().__init__(f"Precondition failed for {target}")
