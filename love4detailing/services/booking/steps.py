"""
Step definitions for the booking wizard.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

from ...core.enums import BookingStep
from ...core.models import BookingDraft
from ...utils.validation import ValidationUtils

FieldErrors = Dict[str, str]


@dataclass(frozen=True)
class StepDefinition:
    """A wizard step and the predicate that decides whether it is complete."""

    step: BookingStep
    title: str
    validator: Callable[[BookingDraft], FieldErrors]

    def validate(self, draft: BookingDraft) -> FieldErrors:
        return self.validator(draft)

    def is_valid(self, draft: BookingDraft) -> bool:
        return not self.validator(draft)


def _check(errors: FieldErrors, path: str, result) -> None:
    is_valid, message = result
    if not is_valid:
        errors[path] = message


def validate_service_step(draft: BookingDraft) -> FieldErrors:
    if not draft.selected_service_ids:
        return {"selected_service_ids": "Select at least one service"}
    return {}


def validate_vehicle_step(draft: BookingDraft) -> FieldErrors:
    vehicle = draft.vehicle
    errors: FieldErrors = {}
    if not vehicle.make:
        errors["vehicle.make"] = "Vehicle make is required"
    if not vehicle.model:
        errors["vehicle.model"] = "Vehicle model is required"
    if vehicle.size is None:
        errors["vehicle.size"] = "Choose a vehicle size"
    _check(errors, "vehicle.year", ValidationUtils.validate_vehicle_year(vehicle.year))
    return errors


def validate_address_step(draft: BookingDraft) -> FieldErrors:
    address = draft.address
    errors: FieldErrors = {}
    if not address.line1:
        errors["address.line1"] = "Address line 1 is required"
    if not address.city:
        errors["address.city"] = "City is required"
    _check(errors, "address.postcode", ValidationUtils.validate_uk_postcode(address.postcode))
    return errors


def validate_schedule_step(draft: BookingDraft) -> FieldErrors:
    schedule = draft.schedule
    errors: FieldErrors = {}
    _check(
        errors,
        "schedule.scheduled_date",
        ValidationUtils.validate_iso_date(schedule.scheduled_date or ""),
    )
    if not schedule.time_slot_id:
        errors["schedule.time_slot_id"] = "Choose a time slot"
    return errors


def validate_review_step(draft: BookingDraft) -> FieldErrors:
    contact = draft.contact
    errors: FieldErrors = {}
    _check(errors, "contact.name", ValidationUtils.validate_name(contact.name))
    _check(errors, "contact.email", ValidationUtils.validate_email(contact.email))
    _check(errors, "contact.phone", ValidationUtils.validate_uk_phone(contact.phone))
    return errors


STEP_DEFINITIONS: List[StepDefinition] = [
    StepDefinition(BookingStep.SERVICE, "Choose services", validate_service_step),
    StepDefinition(BookingStep.VEHICLE, "Vehicle details", validate_vehicle_step),
    StepDefinition(BookingStep.ADDRESS, "Service address", validate_address_step),
    StepDefinition(BookingStep.SCHEDULE, "Date and time", validate_schedule_step),
    StepDefinition(BookingStep.REVIEW, "Review and confirm", validate_review_step),
]


def step_for_field(path: str) -> BookingStep:
    """Return the step that owns a dotted field path."""
    section = path.split(".", 1)[0]
    return {
        "selected_service_ids": BookingStep.SERVICE,
        "vehicle": BookingStep.VEHICLE,
        "address": BookingStep.ADDRESS,
        "schedule": BookingStep.SCHEDULE,
    }.get(section, BookingStep.REVIEW)
