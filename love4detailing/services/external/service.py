"""
Backend API service for handling all calls to the hosted backend.
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ...config import ExternalAPIConfig
from ...core.enums import VehicleSize
from ...core.exceptions import AuthRequiredError, ExternalAPIError, SlotUnavailableError
from ...core.models import AuthUser, BookingConfirmation, ServiceCatalogItem, VehicleSizeCategory
from ...utils.logging import get_logger

logger = get_logger("love4detailing.backend")

# Error codes the backend uses when the chosen slot has gone
SLOT_CONFLICT_CODES = frozenset(
    {"SLOT_UNAVAILABLE", "SLOT_CONFLICT", "TIME_SLOT_UNAVAILABLE", "CONFLICT"}
)


class BackendAPIService:
    """Service for calls to the hosted backend (catalog, pricing, bookings, auth)."""

    def __init__(
        self,
        config: Optional[ExternalAPIConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ExternalAPIConfig.from_settings()
        self._transport = transport

    async def _make_request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        slot_conflicts: bool = False,
    ) -> Any:
        """
        Make HTTP request, unwrap the ``{success, data, error}`` envelope.

        Only requests that reserve a slot pass ``slot_conflicts``; elsewhere a
        409 is an ordinary ExternalAPIError.
        """
        url = self.config.backend_url(path)
        request_headers = {**self.config.backend_headers(), **(headers or {})}

        try:
            async with httpx.AsyncClient(
                timeout=self.config.backend_timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    headers=request_headers,
                )
        except httpx.TimeoutException:
            logger.warning(f"{method} {path} timed out")
            raise ExternalAPIError("Request timed out")
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ExternalAPIError(f"Request failed: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error or (isinstance(payload, dict) and payload.get("success") is False):
            self._raise_for_error(response.status_code, payload, slot_conflicts)

        if payload is None:
            raise ExternalAPIError(
                "Invalid JSON in backend response", status_code=response.status_code
            )

        if isinstance(payload, dict) and "success" in payload:
            return payload.get("data")
        return payload

    def _raise_for_error(self, status_code: int, payload: Any, slot_conflicts: bool = False) -> None:
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or f"HTTP error {status_code}"
            code = error.get("code")
        else:
            message = error if isinstance(error, str) else f"HTTP error {status_code}"
            code = None

        logger.info(f"backend error status={status_code} code={code}: {message}")

        if slot_conflicts and (
            status_code == 409 or (code and code.upper() in SLOT_CONFLICT_CODES)
        ):
            raise SlotUnavailableError(message)
        if status_code == 401:
            raise AuthRequiredError(message, status_code=status_code, code=code)
        raise ExternalAPIError(message, status_code=status_code, code=code)

    async def get_services(self) -> List[ServiceCatalogItem]:
        """Get the service catalog with per-size prices."""
        data = await self._make_request("GET", "/services")
        return [ServiceCatalogItem.model_validate(item) for item in data or []]

    async def get_vehicle_sizes(self) -> List[VehicleSizeCategory]:
        """Get vehicle size categories."""
        data = await self._make_request("GET", "/vehicle-sizes")
        return [VehicleSizeCategory.model_validate(item) for item in data or []]

    async def calculate_pricing(
        self,
        service_ids: List[str],
        vehicle_size: VehicleSize,
        postcode: str,
        vehicle_size_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Ask the backend for the authoritative price of a selection."""
        body = {
            "serviceIds": list(service_ids),
            "vehicleSizeId": vehicle_size_id or vehicle_size.value,
            "vehicleSize": vehicle_size.value,
            "customPostcode": postcode,
        }
        data = await self._make_request("POST", "/pricing/calculate", json=body)
        if not isinstance(data, dict):
            raise ExternalAPIError("Malformed pricing response")
        return data

    async def create_booking(
        self,
        payload: Dict[str, Any],
        idempotency_key: Optional[str] = None,
    ) -> BookingConfirmation:
        """Create the booking; the backend persists it and reserves the slot."""
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None
        data = await self._make_request(
            "POST", "/bookings/create", json=payload, headers=headers, slot_conflicts=True
        )
        if not isinstance(data, dict):
            raise ExternalAPIError("Malformed booking response")
        try:
            return BookingConfirmation.model_validate(data)
        except ValidationError as e:
            logger.error(f"booking response missing confirmation fields: {e}")
            raise ExternalAPIError("Malformed booking response")

    async def get_auth_user(self) -> Optional[AuthUser]:
        """Return the signed-in user, or None for guests."""
        try:
            data = await self._make_request("GET", "/auth/user")
        except AuthRequiredError:
            return None

        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser.model_validate(data)

    async def get_customer_booking(self, booking_id: str) -> Dict[str, Any]:
        """Get a previous booking for the signed-in customer."""
        data = await self._make_request("GET", f"/customer/bookings/{booking_id}")
        if not isinstance(data, dict):
            raise ExternalAPIError("Malformed booking details response")
        return data
