"""Domain service base."""


class Service:
    """Common base of the engine's domain services.

    Services work on documents of the shared store through the DocumentStore
    port. They are stateless apart from the reconciler's projections and the
    comment service's undo snapshot, which belong to one client session.
    """
