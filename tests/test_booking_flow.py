import asyncio
from dataclasses import replace

import httpx
import pytest

from love4detailing.config import ExternalAPIConfig
from love4detailing.core.enums import (
    BookingStep,
    ErrorKind,
    FlowStatus,
    PricingStatus,
    VehicleSize,
)
from love4detailing.core.exceptions import (
    BookingFlowError,
    BookingValidationError,
    ExternalAPIError,
    SlotUnavailableError,
)
from love4detailing.core.models import (
    AddressDetails,
    ContactDetails,
    PriceBreakdown,
    PriceQuote,
    ScheduleSelection,
    VehicleDetails,
)
from love4detailing.services.booking import BookingFlow, BookingService
from love4detailing.services.external import BackendAPIService


def breakdown(total: float) -> PriceBreakdown:
    return PriceBreakdown.compose(
        service_subtotal=total, travel_surcharge=0.0, within_free_radius=True
    )


def _at_review(flow, draft):
    flow.draft = draft
    flow.current_index = len(flow.steps) - 1
    flow.pricing_status = PricingStatus.READY
    return flow


def test_go_next_on_invalid_step_is_noop(flow):
    assert flow.go_next() is False
    assert flow.current_step is BookingStep.SERVICE
    assert flow.error.kind is ErrorKind.VALIDATION
    assert "selected_service_ids" in flow.field_errors


def test_go_previous_on_first_step_is_noop(flow):
    assert flow.go_previous() is False
    assert flow.current_index == 0


@pytest.mark.asyncio
async def test_step_navigation_forward_and_back(flow):
    await flow.update_field("selected_service_ids", ["s1", "s1"])
    assert flow.draft.selected_service_ids == ("s1",)
    assert flow.go_next()
    assert flow.current_step is BookingStep.VEHICLE
    assert flow.go_previous()
    assert flow.current_step is BookingStep.SERVICE


@pytest.mark.asyncio
async def test_unknown_field_path_rejected(flow):
    with pytest.raises(BookingValidationError):
        await flow.update_field("vehicle.wheels", 4)


@pytest.mark.asyncio
async def test_malformed_postcode_blocks_address_step_without_network(flow, mock_pricing):
    await flow.update_field("selected_service_ids", ["s1"])
    assert flow.go_next()
    await flow.update_field("vehicle.make", "Ford")
    await flow.update_field("vehicle.model", "Focus")
    await flow.update_field("vehicle.size", "M")
    assert flow.go_next()

    await flow.update_field("address.line1", "1 Acre Lane")
    await flow.update_field("address.city", "London")
    await flow.update_field("address.postcode", "NOT A POSTCODE")

    assert flow.field_errors["address.postcode"] == "Enter a valid UK postcode"
    assert flow.go_next() is False
    assert flow.current_step is BookingStep.ADDRESS
    assert "address.postcode" in flow.error.field_errors
    mock_pricing.quote.assert_not_awaited()


@pytest.mark.asyncio
async def test_complete_pricing_inputs_trigger_quote(flow, mock_pricing, fill):
    await fill(flow)

    mock_pricing.quote.assert_awaited_once_with(("s1",), VehicleSize.MEDIUM, "SW2 1AD")
    assert flow.pricing_status is PricingStatus.READY
    assert flow.draft.pricing.total == 40
    assert flow.current_step is BookingStep.REVIEW
    assert flow.can_submit


@pytest.mark.asyncio
async def test_pricing_field_change_drops_breakdown(flow, mock_pricing, fill):
    await fill(flow)
    mock_pricing.quote.return_value = PriceQuote(breakdown=breakdown(50.0))

    await flow.update_field("vehicle.size", "L")

    assert mock_pricing.quote.await_count == 2
    assert flow.draft.pricing.total == 50


@pytest.mark.asyncio
async def test_non_pricing_field_keeps_breakdown(flow, mock_pricing, fill):
    await fill(flow)
    await flow.update_field("vehicle.color", "Blue")
    await flow.update_field("address.postcode", "SW2 1AD")

    assert mock_pricing.quote.await_count == 1
    assert flow.draft.pricing is not None


@pytest.mark.asyncio
async def test_failed_recompute_disables_confirmation(flow, mock_pricing, fill):
    await fill(flow)
    mock_pricing.quote.side_effect = ExternalAPIError("Request timed out")

    assert await flow.recompute_price() is False
    assert flow.pricing_status is PricingStatus.FAILED
    assert flow.draft.pricing is None
    assert flow.error.step is BookingStep.REVIEW
    assert flow.error.kind is ErrorKind.NETWORK
    assert flow.can_submit is False
    with pytest.raises(BookingFlowError):
        await flow.submit()

    mock_pricing.quote.side_effect = None
    mock_pricing.quote.return_value = PriceQuote(breakdown=breakdown(40.0))

    assert await flow.recompute_price() is True
    assert flow.error is None
    assert flow.can_submit


@pytest.mark.asyncio
async def test_stale_quote_is_discarded(flow, mock_pricing, fill):
    await fill(flow)
    release = asyncio.Event()
    calls = []

    async def quote(service_ids, size, postcode):
        calls.append(size)
        if len(calls) == 1:
            await release.wait()
            return PriceQuote(breakdown=breakdown(40.0))
        return PriceQuote(breakdown=breakdown(55.0))

    mock_pricing.quote.side_effect = quote

    slow = asyncio.create_task(flow.recompute_price())
    await asyncio.sleep(0)
    assert flow.pricing_status is PricingStatus.PENDING

    assert await flow.recompute_price() is True
    release.set()
    assert await slow is False

    assert flow.draft.pricing.total == 55
    assert flow.pricing_status is PricingStatus.READY


@pytest.mark.asyncio
async def test_quote_superseded_by_field_edit_is_discarded(flow, mock_pricing, fill):
    await fill(flow)
    release = asyncio.Event()

    async def slow_quote(service_ids, size, postcode):
        await release.wait()
        return PriceQuote(breakdown=breakdown(99.0))

    mock_pricing.quote.side_effect = slow_quote
    pending = asyncio.create_task(flow.recompute_price())
    await asyncio.sleep(0)

    mock_pricing.quote.side_effect = None
    mock_pricing.quote.return_value = PriceQuote(breakdown=breakdown(30.0))
    await flow.update_field("vehicle.size", "S")

    release.set()
    assert await pending is False
    assert flow.draft.pricing.total == 30


@pytest.mark.parametrize(
    "broken",
    [
        {"selected_service_ids": ()},
        {"vehicle": VehicleDetails(make="", model="Focus", size=VehicleSize.MEDIUM)},
        {"address": AddressDetails(line1="1 Acre Lane", city="London", postcode="12345")},
        {"schedule": ScheduleSelection(scheduled_date="02/06/2025", time_slot_id="slot-9")},
        {"contact": ContactDetails(name="Sam Taylor", email="not-an-email", phone="07700 900123")},
    ],
)
def test_any_single_invalid_step_blocks_submission(flow, complete_draft, broken):
    _at_review(flow, replace(complete_draft, **broken))
    assert flow.can_submit is False


@pytest.mark.asyncio
async def test_invalid_vehicle_step_blocks_submit(flow, complete_draft, mock_backend):
    vehicle = replace(complete_draft.vehicle, size=None)
    _at_review(flow, replace(complete_draft, vehicle=vehicle))

    with pytest.raises(BookingFlowError):
        await flow.submit()
    mock_backend.create_booking.assert_not_awaited()


def test_complete_draft_can_submit(flow, complete_draft):
    _at_review(flow, complete_draft)
    assert flow.can_submit
    assert flow.view()["can_submit"] is True


@pytest.mark.asyncio
async def test_submit_success(flow, complete_draft, mock_backend):
    _at_review(flow, complete_draft)

    reference = await flow.submit()

    assert reference == "L4D-1001"
    assert flow.status is FlowStatus.SUBMITTED
    assert flow.booking_reference == "L4D-1001"
    assert flow.draft.selected_service_ids == ()
    _, kwargs = mock_backend.create_booking.call_args
    assert len(kwargs["idempotency_key"]) == 64
    assert flow.go_next() is False
    with pytest.raises(BookingFlowError):
        await flow.update_field("customer_notes", "late edit")


@pytest.mark.asyncio
async def test_slot_conflict_returns_to_schedule(flow, complete_draft, mock_backend):
    _at_review(flow, complete_draft)
    mock_backend.create_booking.side_effect = SlotUnavailableError("Time slot is no longer available")

    assert await flow.submit() is None

    assert flow.current_step is BookingStep.SCHEDULE
    assert flow.status is FlowStatus.IN_PROGRESS
    assert flow.error.kind is ErrorKind.CONFLICT
    assert flow.draft.schedule.time_slot_id is None
    assert flow.draft.schedule.scheduled_date == "2025-06-02"
    assert flow.draft.pricing is not None


@pytest.mark.asyncio
async def test_generic_failure_stays_on_review_and_reuses_key(flow, complete_draft, mock_backend):
    _at_review(flow, complete_draft)
    mock_backend.create_booking.side_effect = ExternalAPIError("HTTP error 500", status_code=500)

    assert await flow.submit() is None
    assert flow.current_step is BookingStep.REVIEW
    assert flow.error.kind is ErrorKind.NETWORK
    assert flow.can_submit

    await flow.submit()
    first, second = mock_backend.create_booking.call_args_list
    assert first.kwargs["idempotency_key"] == second.kwargs["idempotency_key"]


@pytest.mark.asyncio
async def test_double_submission_is_refused(flow, complete_draft, mock_backend):
    _at_review(flow, complete_draft)
    release = asyncio.Event()
    original = mock_backend.create_booking.return_value

    async def slow_create(payload, idempotency_key=None):
        await release.wait()
        return original

    mock_backend.create_booking.side_effect = slow_create
    first = asyncio.create_task(flow.submit())
    await asyncio.sleep(0)
    assert flow.status is FlowStatus.SUBMITTING

    with pytest.raises(BookingFlowError):
        await flow.submit()

    release.set()
    assert await first == "L4D-1001"
    assert mock_backend.create_booking.await_count == 1


@pytest.mark.asyncio
async def test_reset_returns_to_start(flow, fill):
    await fill(flow)
    flow.reset()

    assert flow.current_step is BookingStep.SERVICE
    assert flow.draft.selected_service_ids == ()
    assert flow.pricing_status is PricingStatus.IDLE
    assert flow.error is None


def test_snapshot_restore(flow, complete_draft, mock_pricing, booking_service):
    _at_review(flow, complete_draft)
    restored = BookingFlow(mock_pricing, booking_service)
    restored.restore(flow.snapshot())

    assert restored.session_id == "test-session"
    assert restored.current_step is BookingStep.REVIEW
    assert restored.draft == complete_draft
    assert restored.pricing_status is PricingStatus.READY
    assert restored.can_submit


@pytest.mark.asyncio
async def test_malformed_booking_response_leaves_flow_retryable(mock_pricing, complete_draft):
    def handler(request):
        return httpx.Response(201, json={"success": True, "data": {"id": "b1"}})

    backend = BackendAPIService(
        ExternalAPIConfig(backend_base_url="https://backend.test/api"),
        transport=httpx.MockTransport(handler),
    )
    flow = _at_review(BookingFlow(mock_pricing, BookingService(backend)), complete_draft)

    assert await flow.submit() is None

    assert flow.status is FlowStatus.IN_PROGRESS
    assert flow.current_step is BookingStep.REVIEW
    assert flow.error.kind is ErrorKind.NETWORK
    assert flow.submission_blockers() == []


@pytest.mark.asyncio
async def test_unexpected_submit_error_unlocks_flow(flow, complete_draft, mock_backend):
    _at_review(flow, complete_draft)
    mock_backend.create_booking.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await flow.submit()

    assert flow.status is FlowStatus.IN_PROGRESS
    assert flow.error.kind is ErrorKind.NETWORK
    assert flow.can_submit
    await flow.update_field("customer_notes", "Gate code 1234")


@pytest.mark.asyncio
async def test_conflict_during_pricing_marks_price_failed(flow, mock_pricing, fill):
    await fill(flow)
    mock_pricing.quote.side_effect = SlotUnavailableError("CONFLICT")

    assert await flow.recompute_price() is False

    assert flow.pricing_status is PricingStatus.FAILED
    assert flow.draft.pricing is None
    assert flow.error.kind is ErrorKind.NETWORK


@pytest.mark.asyncio
async def test_unexpected_pricing_error_does_not_leave_pending(flow, mock_pricing, fill):
    await fill(flow)
    mock_pricing.quote.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await flow.recompute_price()

    assert flow.pricing_status is PricingStatus.FAILED
    assert flow.can_submit is False
