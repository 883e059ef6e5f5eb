"""Base models for all domain entities."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for immutability and custom types.
    """

    model_config = ConfigDict(
        frozen=True,  # All domain models are immutable
        arbitrary_types_allowed=True,  # Allow custom value objects
    )


class DocumentModel(DomainModel):
    """Domain model persisted as a document in the shared store.

    Documents use camelCase field names (``yayCount``, ``votesMetadata``),
    Python code uses snake_case. Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible document body."""
        return self.model_dump(mode="json", by_alias=True)
