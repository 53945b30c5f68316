class CourierError(Exception):
    """Base exception for courier."""


class InvalidArgument(CourierError, ValueError):
    pass


class InvalidState(CourierError, RuntimeError):
    pass


class PreconditionError(InvalidState):
    pass


class MissingPermissions(CourierError, PermissionError):
    def __init__(self, permission, message=None):
        super().__init__(message or f"Missing permission: {permission}")
        self.permission = permission


class TransportError(CourierError):
    """The transport failed to produce a response at all."""


class HTTPException(CourierError):
    def __init__(self, status, message, data=None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.data = data


class Forbidden(HTTPException):
    pass


class NotFound(HTTPException):
    pass


class VerificationLevelError(InvalidState):
    """The client account does not meet the guild's verification level."""

    def __init__(self, level):
        super().__init__(f"Messages to this guild need verification level {level.name}")
        self.level = level
