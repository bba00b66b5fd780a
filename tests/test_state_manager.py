import pytest

from love4detailing.config import DatabaseConfig
from love4detailing.services.booking import BookingFlow
from love4detailing.services.memory import FlowStateManager


class Clock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.mark.asyncio
async def test_save_get_clear_snapshot(tmp_path):
    manager = FlowStateManager(DatabaseConfig(state_db_path=str(tmp_path / "state.db")))

    await manager.save_snapshot("abc", {"session_id": "abc", "current_step": "vehicle"})
    loaded = await manager.get_snapshot("abc")
    assert loaded == {"session_id": "abc", "current_step": "vehicle"}

    await manager.clear_state("abc")
    assert await manager.get_snapshot("abc") is None


@pytest.mark.asyncio
async def test_expired_snapshot_is_dropped(tmp_path):
    clock = Clock()
    config = DatabaseConfig(state_db_path=str(tmp_path / "state.db"), session_expiry_seconds=1800)
    manager = FlowStateManager(config, clock=clock)

    await manager.save_snapshot("abc", {"session_id": "abc"})
    clock.now += 1799
    assert await manager.get_snapshot("abc") is not None

    clock.now += 1801
    assert await manager.get_snapshot("abc") is None


@pytest.mark.asyncio
async def test_flow_round_trip_through_storage(tmp_path, flow, complete_draft, mock_pricing, booking_service):
    manager = FlowStateManager(DatabaseConfig(state_db_path=str(tmp_path / "state.db")))
    flow.draft = complete_draft
    flow.current_index = 3

    await manager.save_snapshot(flow.session_id, flow.snapshot())
    restored = BookingFlow(mock_pricing, booking_service)
    restored.restore(await manager.get_snapshot(flow.session_id))

    assert restored.draft == complete_draft
    assert restored.current_index == 3
