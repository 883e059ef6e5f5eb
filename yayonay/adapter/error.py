"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class InvalidSessionError(AdapterError):
    """The session handed over by the account system is unusable."""

    pass
