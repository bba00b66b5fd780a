"""
Per-application registry of booking flow sessions.
"""

import time
from typing import Callable, Dict, Optional

from ..config import DatabaseConfig, ExternalAPIConfig, PricingConfig, Settings
from ..services import (
    BackendAPIService,
    BookingFlow,
    BookingService,
    DistanceService,
    FlowStateManager,
    PricingService,
)
from ..utils.logging import get_logger

logger = get_logger("love4detailing.api.sessions")


class FlowRegistry:
    """Create, look up and persist BookingFlow sessions.

    Live flows are held in memory and dropped once idle for longer than
    ``expiry_seconds``; the state manager, when configured, still holds
    their last snapshot under its own expiry.
    """

    def __init__(
        self,
        pricing: PricingService,
        booking: BookingService,
        state_manager: Optional[FlowStateManager] = None,
        expiry_seconds: int = 30 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.pricing = pricing
        self.booking = booking
        self.state_manager = state_manager
        self.expiry_seconds = expiry_seconds
        self._clock = clock
        self._flows: Dict[str, BookingFlow] = {}
        self._touched: Dict[str, float] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "FlowRegistry":
        api_config = ExternalAPIConfig.from_settings(settings)
        pricing_config = PricingConfig.from_settings(settings)
        backend = BackendAPIService(api_config)
        distance = DistanceService(api_config, pricing_config)
        state_manager = (
            FlowStateManager(DatabaseConfig.from_settings(settings))
            if settings.persist_drafts
            else None
        )
        return cls(
            pricing=PricingService(backend, distance, pricing_config),
            booking=BookingService(backend),
            state_manager=state_manager,
            expiry_seconds=settings.session_expiry_seconds,
        )

    def __len__(self) -> int:
        return len(self._flows)

    def _register(self, flow: BookingFlow) -> None:
        self._flows[flow.session_id] = flow
        self._touched[flow.session_id] = self._clock()

    def _is_expired(self, session_id: str) -> bool:
        touched = self._touched.get(session_id, 0.0)
        return self._clock() - touched > self.expiry_seconds

    def evict_expired(self) -> int:
        """Drop idle in-memory flows; returns how many were removed."""
        expired = [sid for sid in self._flows if self._is_expired(sid)]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info(f"evicted {len(expired)} idle sessions")
        return len(expired)

    def discard(self, session_id: str) -> None:
        self._flows.pop(session_id, None)
        self._touched.pop(session_id, None)

    def create(self) -> BookingFlow:
        self.evict_expired()
        flow = BookingFlow(self.pricing, self.booking)
        self._register(flow)
        logger.info(f"[{flow.session_id}] session created")
        return flow

    async def get(self, session_id: str) -> Optional[BookingFlow]:
        """Return a live flow, restoring it from storage if needed."""
        flow = self._flows.get(session_id)
        if flow is not None:
            if not self._is_expired(session_id):
                self._touched[session_id] = self._clock()
                return flow
            logger.info(f"[{session_id}] session expired")
            self.discard(session_id)

        if self.state_manager is None:
            return None

        snapshot = await self.state_manager.get_snapshot(session_id)
        if snapshot is None:
            return None

        flow = BookingFlow(self.pricing, self.booking, session_id=session_id)
        flow.restore(snapshot)
        self._register(flow)
        logger.info(f"[{session_id}] session restored")
        return flow

    async def save(self, flow: BookingFlow) -> None:
        if flow.session_id in self._flows:
            self._touched[flow.session_id] = self._clock()
        if self.state_manager is not None:
            await self.state_manager.save_snapshot(flow.session_id, flow.snapshot())
