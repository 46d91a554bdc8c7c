"""
Application-wide constants.

Enumerations and fixed values shared by the models, services and schemas.
"""

from enum import Enum


# ========================================
# Service Kinds
# ========================================

class ServiceKind(str, Enum):
    """
    Services a customer can queue for.

    Inherits from str so values compare equal to their wire form:
        ServiceKind.BEARD == "beard"  # True
    """

    HAIRCUT = "haircut"
    BEARD = "beard"
    HAIRCUT_AND_BEARD = "haircut+beard"

    @classmethod
    def values(cls) -> list[str]:
        return [kind.value for kind in cls]


# ========================================
# Removal Outcomes
# ========================================

class RemovalOutcome(str, Enum):
    """Why an operator took an entry off the queue."""

    SERVED = "served"
    """Customer got their service. Writes a service history record."""

    NO_SHOW = "no_show"
    """Customer was not there when called. No history record."""


# ========================================
# Geography
# ========================================

EARTH_RADIUS_KM = 6371.0

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

# ========================================
# Customers
# ========================================

MIN_PHONE_DIGITS = 10

DEFAULT_HISTORY_LIMIT = 50
