"""
Booking-related data models.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..enums import BookingStep, ErrorKind, VehicleSize
from ..exceptions import BookingValidationError
from ...utils.validation import ValidationUtils
from .pricing import PriceBreakdown

# Fields whose change invalidates the displayed price
PRICING_FIELDS = frozenset({"selected_service_ids", "vehicle.size", "address.postcode"})


@dataclass(frozen=True)
class VehicleDetails:
    """Vehicle being detailed."""

    make: str = ""
    model: str = ""
    year: Optional[int] = None
    color: Optional[str] = None
    size: Optional[VehicleSize] = None
    registration: Optional[str] = None
    notes: Optional[str] = None

    def display_name(self) -> str:
        parts = [str(self.year) if self.year else "", self.make, self.model]
        return " ".join(p for p in parts if p).strip()


@dataclass(frozen=True)
class AddressDetails:
    """Service address. ``county`` is optional and UK only."""

    line1: str = ""
    line2: Optional[str] = None
    city: str = ""
    county: Optional[str] = None
    postcode: str = ""


@dataclass(frozen=True)
class ScheduleSelection:
    scheduled_date: Optional[str] = None  # YYYY-MM-DD format
    time_slot_id: Optional[str] = None
    start_time: Optional[str] = None  # HH:MM format


@dataclass(frozen=True)
class ContactDetails:
    """Customer contact details; pre-filled for signed-in users."""

    name: str = ""
    email: str = ""
    phone: str = ""
    is_existing_user: bool = False
    user_id: Optional[str] = None


_SECTIONS = {
    "vehicle": VehicleDetails,
    "address": AddressDetails,
    "schedule": ScheduleSelection,
    "contact": ContactDetails,
}


@dataclass(frozen=True)
class BookingDraft:
    """Not-yet-persisted aggregate of everything entered in the wizard."""

    selected_service_ids: Tuple[str, ...] = ()
    vehicle: VehicleDetails = field(default_factory=VehicleDetails)
    address: AddressDetails = field(default_factory=AddressDetails)
    schedule: ScheduleSelection = field(default_factory=ScheduleSelection)
    contact: ContactDetails = field(default_factory=ContactDetails)
    customer_notes: str = ""
    pricing: Optional[PriceBreakdown] = None

    def with_field(self, path: str, value: Any) -> "BookingDraft":
        """
        Return a copy of the draft with one field replaced.

        Args:
            path: Dotted field path, e.g. ``vehicle.size`` or ``customer_notes``
            value: New value; coerced to the field's canonical type

        Returns:
            New BookingDraft; ``self`` is left untouched

        Raises:
            BookingValidationError: If the path is unknown or the value cannot be coerced
        """
        section, _, name = path.partition(".")

        if not name:
            if section == "selected_service_ids":
                return replace(self, selected_service_ids=_coerce_service_ids(value))
            if section == "customer_notes":
                return replace(self, customer_notes=ValidationUtils.sanitize_text(value or ""))
            raise BookingValidationError(f"Unknown field '{path}'", {path: "Unknown field"})

        section_cls = _SECTIONS.get(section)
        defaults = {f.name: f.default for f in fields(section_cls)} if section_cls else {}
        if name not in defaults:
            raise BookingValidationError(f"Unknown field '{path}'", {path: "Unknown field"})

        coerced = _coerce_value(path, value)
        if coerced is None and defaults[name] == "":
            coerced = ""
        updated = replace(getattr(self, section), **{name: coerced})
        return replace(self, **{section: updated})

    def pricing_inputs(self) -> Tuple[Tuple[str, ...], Optional[VehicleSize], str]:
        """Return the fields that determine the price."""
        return (
            self.selected_service_ids,
            self.vehicle.size,
            ValidationUtils.normalize_uk_postcode(self.address.postcode),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = _coerce_enums(asdict(self))
        data["selected_service_ids"] = list(self.selected_service_ids)
        data["pricing"] = self.pricing.to_dict() if self.pricing else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookingDraft":
        vehicle = dict(data.get("vehicle") or {})
        if vehicle.get("size"):
            vehicle["size"] = VehicleSize.from_string(vehicle["size"])
        pricing = data.get("pricing")
        return cls(
            selected_service_ids=tuple(data.get("selected_service_ids") or ()),
            vehicle=VehicleDetails(**vehicle),
            address=AddressDetails(**(data.get("address") or {})),
            schedule=ScheduleSelection(**(data.get("schedule") or {})),
            contact=ContactDetails(**(data.get("contact") or {})),
            customer_notes=data.get("customer_notes") or "",
            pricing=PriceBreakdown.from_dict(pricing) if pricing else None,
        )


@dataclass(frozen=True)
class StepError:
    """Error overlay attached to a step; not a separate flow state."""

    step: BookingStep
    kind: ErrorKind
    message: str
    field_errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step.value,
            "kind": self.kind.value,
            "message": self.message,
            "field_errors": dict(self.field_errors),
        }


def _coerce_service_ids(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise BookingValidationError(
            "Invalid service selection",
            {"selected_service_ids": "Service selection must be a list"},
        )
    valid, invalid = ValidationUtils.validate_service_identifiers(list(value))
    if invalid:
        raise BookingValidationError(
            "Invalid service selection",
            {"selected_service_ids": "Invalid service identifier"},
        )
    # De-duplicate, keep selection order
    return tuple(dict.fromkeys(valid))


def _coerce_value(path: str, value: Any) -> Any:
    if path == "vehicle.size":
        if value in (None, ""):
            return None
        try:
            return VehicleSize.from_string(value)
        except ValueError:
            raise BookingValidationError("Invalid vehicle size", {path: "Choose a vehicle size"})

    if path == "vehicle.year":
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise BookingValidationError("Invalid vehicle year", {path: "Year must be a number"})

    if path == "contact.is_existing_user":
        return bool(value)

    if value is None:
        return None
    if isinstance(value, str):
        return value.strip()
    return value


def _coerce_enums(obj):
    """Recursively convert Enums to raw values for JSON serialization."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: _coerce_enums(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_coerce_enums(v) for v in obj]
    return obj
