"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import Enum
from typing import Self
from uuid import UUID


class RegistrationStatus(str, Enum):
    """Lifecycle states of a registration."""

    STARTED = "started"
    SUBMITTED = "submitted"
    PAYMENT_PENDING = "payment_pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Unconfirmed, time-limited reservations.
HOLD_STATUSES = frozenset(
    {
        RegistrationStatus.STARTED,
        RegistrationStatus.SUBMITTED,
        RegistrationStatus.PAYMENT_PENDING,
    }
)

# Holds a user may pick up again by starting the same distance.
RESUMABLE_STATUSES = frozenset({RegistrationStatus.STARTED, RegistrationStatus.SUBMITTED})


class Visibility(str, Enum):
    """Edition visibility states."""

    DRAFT = "draft"
    PUBLISHED = "published"
    UNLISTED = "unlisted"
    ARCHIVED = "archived"


class CapacityScope(str, Enum):
    """How capacity is counted for a distance."""

    PER_DISTANCE = "per_distance"
    SHARED_POOL = "shared_pool"


class InviteStatus(str, Enum):
    """Registration invite states."""

    DRAFT = "draft"
    SENT = "sent"
    CLAIMED = "claimed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class EditionId:
    """Unique identifier for an EventEdition."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class DistanceId:
    """Unique identifier for an EventDistance."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))


@dataclass(frozen=True)
class RegistrationId:
    """Unique identifier for a Registration."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class PercentOff:
    """Whole-number discount percentage between 0 and 100."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            raise ValueError("Percent off must be between 0 and 100")


@dataclass(frozen=True)
class GroupDiscount:
    """A granted group discount.

    A registration without a group discount carries ``None`` instead of this
    object, so "never granted" and "granted at 0%" stay distinguishable.
    ``amount_cents`` may be unset on rows written before the amount was
    stored; it is then derived from the base price on the next sync.
    """

    percent_off: PercentOff
    amount_cents: int | None = None

    def __post_init__(self) -> None:
        if self.amount_cents is not None and self.amount_cents < 0:
            raise ValueError("Group discount amount cannot be negative")
