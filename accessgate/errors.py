"""Errors raised by role management."""


class RBACError(Exception):
    """Base class for role-management errors."""

    default_message = "error: role management failure"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class NameNotFoundError(RBACError):
    """A role or user name does not exist."""

    default_message = "error: name does not exist"


class DomainParameterError(RBACError):
    """More than one domain was given."""

    default_message = "error: domain should be 1 parameter"


class NamesNotFoundError(RBACError):
    """One of two names does not exist."""

    default_message = "error: name1 or name2 does not exist"