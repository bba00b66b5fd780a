"""
Booking flow handler.
"""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict

from ...services import BookingFlow
from ..sessions import FlowRegistry


class CreateFlowRequest(BaseModel):
    """Options for starting a new booking session."""

    model_config = ConfigDict(extra="forbid")

    prefill_contact: bool = True
    rebook_booking_id: Optional[str] = None


class FieldUpdateRequest(BaseModel):
    """Set one draft field by dotted path."""

    model_config = ConfigDict(extra="forbid")

    path: str
    value: Any = None


class FlowHandler:
    """Handler for booking flow endpoints."""

    def __init__(self, registry: FlowRegistry):
        self.registry = registry
        self.router = APIRouter()
        self._setup_routes()

    async def _get_flow(self, session_id: str) -> BookingFlow:
        flow = await self.registry.get(session_id)
        if flow is None:
            raise HTTPException(status_code=404, detail="Booking session not found")
        return flow

    def _setup_routes(self):
        """Setup booking flow routes."""

        @self.router.post("", status_code=201)
        async def create_flow(request: Optional[CreateFlowRequest] = None):
            """Start a new booking session."""
            request = request or CreateFlowRequest()
            flow = self.registry.create()
            if request.rebook_booking_id:
                try:
                    await self.registry.booking.start_rebooking(flow, request.rebook_booking_id)
                except BaseException:
                    self.registry.discard(flow.session_id)
                    raise
            elif request.prefill_contact:
                await self.registry.booking.prefill_contact(flow)
            await self.registry.save(flow)
            return flow.view()

        @self.router.get("/{session_id}")
        async def get_flow(session_id: str):
            flow = await self._get_flow(session_id)
            return flow.view()

        @self.router.put("/{session_id}/fields")
        async def update_field(session_id: str, request: FieldUpdateRequest):
            """Update a single draft field; pricing inputs trigger a reprice."""
            flow = await self._get_flow(session_id)
            await flow.update_field(request.path, request.value)
            await self.registry.save(flow)
            return flow.view()

        @self.router.post("/{session_id}/next")
        async def go_next(session_id: str):
            flow = await self._get_flow(session_id)
            moved = flow.go_next()
            await self.registry.save(flow)
            return {"moved": moved, "flow": flow.view()}

        @self.router.post("/{session_id}/previous")
        async def go_previous(session_id: str):
            flow = await self._get_flow(session_id)
            moved = flow.go_previous()
            await self.registry.save(flow)
            return {"moved": moved, "flow": flow.view()}

        @self.router.post("/{session_id}/pricing")
        async def recompute_price(session_id: str):
            """Retry the price calculation."""
            flow = await self._get_flow(session_id)
            await flow.recompute_price()
            await self.registry.save(flow)
            return flow.view()

        @self.router.post("/{session_id}/submit")
        async def submit(session_id: str):
            """Submit the booking; conflicts and failures come back as an error overlay."""
            flow = await self._get_flow(session_id)
            reference = await flow.submit()
            await self.registry.save(flow)
            return {"booking_reference": reference, "flow": flow.view()}

        @self.router.post("/{session_id}/reset")
        async def reset(session_id: str):
            flow = await self._get_flow(session_id)
            flow.reset()
            await self.registry.save(flow)
            return flow.view()
