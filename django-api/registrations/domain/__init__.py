from registrations.domain.models import (
    DiscountSnapshot,
    Distance,
    Edition,
    GroupDiscountMatch,
    GroupDiscountRule,
    NewRegistration,
    PriceQuote,
    PricingTier,
    Registration,
    StartRegistrationResult,
)
from registrations.domain.value_objects import (
    Capacity,
    CapacityScope,
    DistanceId,
    EditionId,
    GroupDiscount,
    InviteStatus,
    PercentOff,
    RegistrationId,
    RegistrationStatus,
    Visibility,
)

__all__ = [
    "Edition",
    "Distance",
    "PricingTier",
    "Registration",
    "NewRegistration",
    "PriceQuote",
    "StartRegistrationResult",
    "DiscountSnapshot",
    "GroupDiscountRule",
    "GroupDiscountMatch",
    "EditionId",
    "DistanceId",
    "RegistrationId",
    "Capacity",
    "PercentOff",
    "GroupDiscount",
    "RegistrationStatus",
    "Visibility",
    "CapacityScope",
    "InviteStatus",
]
