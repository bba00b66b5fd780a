"""
Booking-related enums.
"""

from enum import Enum


class BookingStep(str, Enum):
    """Enumeration of the booking flow steps, in wizard order."""

    SERVICE = "service"
    VEHICLE = "vehicle"
    ADDRESS = "address"
    SCHEDULE = "schedule"
    REVIEW = "review"


class VehicleSize(str, Enum):
    """Vehicle size categories used to index service prices."""

    SMALL = "S"
    MEDIUM = "M"
    LARGE = "L"
    EXTRA_LARGE = "XL"

    @property
    def price_column(self) -> str:
        """Name of the per-size column in the service price table."""
        return _PRICE_COLUMNS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def multiplier(self) -> float:
        """Legacy scaling factor applied to a base price when no column price exists."""
        return _MULTIPLIERS[self]

    @classmethod
    def from_string(cls, value: str) -> "VehicleSize":
        """Convert size codes, column names or labels to a VehicleSize."""
        if isinstance(value, cls):
            return value
        if not value or not isinstance(value, str):
            raise ValueError(f"Invalid vehicle size: {value!r}")

        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        for size in cls:
            if normalized in (
                size.value.lower(),
                size.price_column,
                size.label.lower().replace(" ", "_"),
            ):
                return size

        raise ValueError(f"Invalid vehicle size: {value!r}")


_PRICE_COLUMNS = {
    VehicleSize.SMALL: "small",
    VehicleSize.MEDIUM: "medium",
    VehicleSize.LARGE: "large",
    VehicleSize.EXTRA_LARGE: "extra_large",
}

_LABELS = {
    VehicleSize.SMALL: "Small",
    VehicleSize.MEDIUM: "Medium",
    VehicleSize.LARGE: "Large",
    VehicleSize.EXTRA_LARGE: "Extra Large",
}

_MULTIPLIERS = {
    VehicleSize.SMALL: 1.0,
    VehicleSize.MEDIUM: 1.2,
    VehicleSize.LARGE: 1.4,
    VehicleSize.EXTRA_LARGE: 1.6,
}


class FlowStatus(str, Enum):
    """Lifecycle of a booking flow session."""

    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class PricingStatus(str, Enum):
    """State of the displayed price for the current draft."""

    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class PricingMode(str, Enum):
    """Where the displayed price comes from."""

    SERVER = "server"
    CLIENT = "client"
    BOTH = "both"


class ErrorKind(str, Enum):
    """Classification of errors attached to a flow step."""

    VALIDATION = "validation"
    NETWORK = "network"
    CONFLICT = "conflict"
