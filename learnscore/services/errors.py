"""Typed failures raised by the scoring engine.

Each error is local to one operation; the HTTP layer maps it to a status
code via ``status_code``.
"""


class EngineError(Exception):
    """Base class for engine failures surfaced to the caller."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(EngineError):
    """A referenced lesson, assignment, submission or progress row is missing."""

    status_code = 404


class MalformedInputError(EngineError):
    """Serialized content (answer map, options list) could not be parsed."""

    status_code = 400


class InvariantViolationError(EngineError):
    """A write would leave a record outside its domain invariants."""

    status_code = 422


class PermissionDeniedError(EngineError):
    """The caller does not own the resource it is acting on."""

    status_code = 403
