"""Domain exceptions raised by services and translated to HTTP errors by routers.

Services otherwise stick to the builtins: ``ValueError`` for bad input,
``LookupError`` for missing rows and ``PermissionError`` for ownership checks.
"""


class ConflictError(ValueError):
    """The operation clashes with an existing record (HTTP 409)."""


class NotFoundError(LookupError):
    """A referenced record does not exist (HTTP 404)."""
