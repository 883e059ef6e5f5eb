"""Value object bases."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel

T = TypeVar("T")


class ValueObject(BaseModel):
    """Immutable model compared field by field.

    Item references, document operations and snapshots are value objects:
    two with the same fields are interchangeable, and being frozen they can
    be shared between a pending mutation and the projection it overlays.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class RootValueObject(RootModel[T], Generic[T]):
    """Immutable wrapper around one validated primitive (read it via ``.root``)."""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
