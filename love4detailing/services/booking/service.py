"""
Booking service: backend payloads, submission, contact prefill and rebooking.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ...core.enums import VehicleSize
from ...core.exceptions import BookingFlowError, ExternalAPIError
from ...core.models import (
    AddressDetails,
    BookingConfirmation,
    BookingDraft,
    ContactDetails,
    VehicleDetails,
)
from ...utils.logging import get_logger
from ...utils.validation import ValidationUtils
from ..external import BackendAPIService

if TYPE_CHECKING:
    from .flow import BookingFlow

logger = get_logger("love4detailing.booking")


class BookingService:
    """Service for creating bookings against the backend."""

    def __init__(self, backend: BackendAPIService):
        self.backend = backend

    def build_booking_payload(self, draft: BookingDraft) -> Dict[str, Any]:
        """Map a draft onto the ``/bookings/create`` request body."""
        name_parts = draft.contact.name.split()
        first_name = name_parts[0] if name_parts else ""
        last_name = " ".join(name_parts[1:]) or "Customer"

        vehicle = draft.vehicle
        address = draft.address
        lines = {line.service_id: line for line in draft.pricing.lines} if draft.pricing else {}

        payload: Dict[str, Any] = {
            "customer": {
                "firstName": first_name,
                "lastName": last_name,
                "email": draft.contact.email,
                "phone": draft.contact.phone,
            },
            "vehicle": {
                "make": vehicle.make,
                "model": vehicle.model,
                "year": vehicle.year,
                "color": vehicle.color or "",
                "licenseNumber": vehicle.registration or "",
                "vehicleSize": vehicle.size.value if vehicle.size else None,
                "notes": vehicle.notes or "",
            },
            "address": {
                "addressLine1": address.line1,
                "addressLine2": address.line2 or "",
                "city": address.city,
                "county": address.county or "",
                "postalCode": ValidationUtils.normalize_uk_postcode(address.postcode),
                "country": "United Kingdom",
            },
            "services": [
                {
                    "serviceId": service_id,
                    "serviceName": lines[service_id].service_name if service_id in lines else "",
                }
                for service_id in draft.selected_service_ids
            ],
            "timeSlot": {
                "date": draft.schedule.scheduled_date,
                "slotId": draft.schedule.time_slot_id,
                "startTime": draft.schedule.start_time,
            },
            "specialRequests": draft.customer_notes,
        }
        if draft.pricing is not None:
            payload["pricing"] = {
                "subtotal": draft.pricing.service_subtotal,
                "distanceSurcharge": draft.pricing.travel_surcharge,
                "totalPrice": draft.pricing.total,
            }
        if draft.contact.user_id:
            payload["customer"]["userId"] = draft.contact.user_id
        return payload

    def build_booking_idempotency_key(self, draft: BookingDraft) -> str:
        """Build idempotency key for booking to prevent duplicates."""
        raw = {
            "svcs": sorted(draft.selected_service_ids),
            "size": draft.vehicle.size.value if draft.vehicle.size else None,
            "reg": (draft.vehicle.registration or "").upper(),
            "postcode": ValidationUtils.normalize_uk_postcode(draft.address.postcode),
            "line1": draft.address.line1,
            "date": draft.schedule.scheduled_date,
            "slot": draft.schedule.time_slot_id,
            "contact": {
                "email": draft.contact.email.lower(),
                "phone": draft.contact.phone,
            },
        }
        return hashlib.sha256(
            json.dumps(raw, ensure_ascii=False, sort_keys=True).encode("utf-8")
        ).hexdigest()

    async def create_booking(
        self, draft: BookingDraft, idempotency_key: Optional[str] = None
    ) -> BookingConfirmation:
        """Create the final booking."""
        payload = self.build_booking_payload(draft)
        return await self.backend.create_booking(payload, idempotency_key=idempotency_key)

    async def prefill_contact(self, flow: "BookingFlow") -> bool:
        """
        Fill contact details from the signed-in user.

        Returns:
            True if the user is signed in and details were applied; False for
            guest bookings.
        """
        try:
            user = await self.backend.get_auth_user()
        except ExternalAPIError as e:
            logger.warning(f"auth lookup failed, continuing as guest: {e}")
            return False

        if user is None:
            return False

        await flow.update_field("contact.name", user.full_name)
        await flow.update_field("contact.email", user.email)
        if user.phone:
            await flow.update_field("contact.phone", user.phone)
        await flow.update_field("contact.is_existing_user", True)
        await flow.update_field("contact.user_id", user.id)
        return True

    async def start_rebooking(self, flow: "BookingFlow", booking_id: str) -> BookingDraft:
        """
        Start a new booking prefilled from a previous one.

        The time slot is left empty so the customer picks a new one.

        Raises:
            BookingFlowError: If the previous booking cannot be loaded
        """
        try:
            data = await self.backend.get_customer_booking(booking_id)
        except ExternalAPIError as e:
            logger.error(f"failed to load booking {booking_id} for rebooking: {e}")
            raise BookingFlowError("Failed to load booking details")

        flow.reset()
        draft = self.draft_from_previous_booking(data)
        await flow.load_draft(draft)
        logger.info(f"[{flow.session_id}] rebooking from {booking_id}")
        return flow.draft

    @staticmethod
    def draft_from_previous_booking(data: Dict[str, Any]) -> BookingDraft:
        """Build a draft from a ``/customer/bookings/{id}`` record."""
        services = data.get("services") or []
        if isinstance(services, dict):
            services = [services]
        service_ids: List[str] = [
            str(s.get("id") or s.get("service_id")) for s in services
            if s.get("id") or s.get("service_id")
        ]

        vehicle_data = data.get("vehicle_details") or {}
        try:
            size = VehicleSize.from_string(vehicle_data.get("size") or "M")
        except ValueError:
            size = VehicleSize.MEDIUM
        year = vehicle_data.get("year")
        vehicle = VehicleDetails(
            make=vehicle_data.get("make") or "",
            model=vehicle_data.get("model") or "",
            year=int(year) if year else None,
            color=vehicle_data.get("color") or None,
            size=size,
            registration=vehicle_data.get("license_plate") or None,
        )

        address_data = data.get("service_address") or {}
        address = AddressDetails(
            line1=address_data.get("address_line_1") or "",
            line2=address_data.get("address_line_2") or None,
            city=address_data.get("city") or "",
            county=address_data.get("county") or None,
            postcode=ValidationUtils.normalize_uk_postcode(address_data.get("postal_code") or ""),
        )

        customer = data.get("customer") or {}
        name = " ".join(
            p for p in (customer.get("first_name"), customer.get("last_name")) if p
        ).strip()
        contact = ContactDetails(
            name=name,
            email=customer.get("email") or "",
            phone=customer.get("phone") or "",
            is_existing_user=True,
            user_id=customer.get("id"),
        )

        return BookingDraft(
            selected_service_ids=tuple(dict.fromkeys(service_ids)),
            vehicle=vehicle,
            address=address,
            contact=contact,
        )
