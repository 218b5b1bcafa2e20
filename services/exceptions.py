"""Domain exceptions raised by the nutrition services."""


class AdaptusError(Exception):
    """Base class for service-level errors."""


class PhaseValidationError(AdaptusError):
    """A phase write was rejected; nothing was persisted.

    ``code`` is one of ``bad_type``, ``bad_range`` or ``overlap``.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(AdaptusError):
    """A referenced catalog row or log entry does not exist."""

    def __init__(self, what: str, ident: int):
        super().__init__(f"{what} {ident} not found")
        self.what = what
        self.ident = ident


class LogEditError(AdaptusError):
    """A free-form log entry has no food or meal to recompute macros from."""
