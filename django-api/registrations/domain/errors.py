"""Domain error codes for the registrations module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    NOT_PUBLISHED = "NOT_PUBLISHED"
    REGISTRATION_PAUSED = "REGISTRATION_PAUSED"
    REGISTRATION_NOT_OPEN = "REGISTRATION_NOT_OPEN"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    SOLD_OUT = "SOLD_OUT"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class DistanceNotFoundError(DomainError):
    """Raised when a distance (or its edition) does not exist or was deleted."""

    def __init__(self, distance_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message="Distance not found",
        )
        self.distance_id = distance_id


class InvalidIdentifierError(DomainError):
    """Raised when an identifier is not a valid UUID.

    A malformed id can never match a row, so it reports NOT_FOUND.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message="Invalid identifier format",
        )


class NotPublishedError(DomainError):
    """Raised when the edition is not published."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_PUBLISHED,
            message="Event is not published",
        )


class RegistrationPausedError(DomainError):
    """Raised when the organizer has paused registration."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_PAUSED,
            message="Registration is paused",
        )


class RegistrationNotOpenError(DomainError):
    """Raised before the registration window opens."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_NOT_OPEN,
            message="Registration has not opened yet",
        )


class RegistrationClosedError(DomainError):
    """Raised after the registration window closes."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CLOSED,
            message="Registration has closed",
        )


class SoldOutError(DomainError):
    """Raised when the distance (or its shared pool) has no spots left."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SOLD_OUT,
            message="Distance is sold out",
        )


class AlreadyRegisteredError(DomainError):
    """Raised when the user already holds an active registration in the edition."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="You are already registered for this event",
        )
