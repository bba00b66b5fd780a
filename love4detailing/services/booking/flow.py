"""
Booking flow state machine.

The flow walks a customer through the wizard steps in a fixed order,
holding an immutable BookingDraft that every edit replaces. Pricing is
derived state: any change to a pricing input drops the current breakdown
and, once the inputs are complete, asks the pricing service for a new one.
Quotes that arrive after a newer request was issued are discarded.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ...core.enums import BookingStep, ErrorKind, FlowStatus, PricingStatus
from ...core.exceptions import (
    BookingFlowError,
    ExternalAPIError,
    PricingError,
    SlotUnavailableError,
)
from ...core.models import PRICING_FIELDS, BookingDraft, PriceBreakdown, StepError
from ...utils.logging import get_logger
from ...utils.validation import ValidationUtils
from ..pricing import PricingService, describe_travel, format_price
from .steps import STEP_DEFINITIONS, StepDefinition, step_for_field

if TYPE_CHECKING:
    from .service import BookingService

logger = get_logger("love4detailing.booking.flow")

SLOT_CONFLICT_MESSAGE = "That time slot is no longer available. Please choose another slot."
SUBMIT_FAILED_MESSAGE = "We couldn't confirm your booking. Please try again."
PRICING_FAILED_MESSAGE = "We couldn't calculate your price. Please try again."


class BookingFlow:
    """Drive a single customer's booking from service selection to submission."""

    def __init__(
        self,
        pricing: PricingService,
        booking: "BookingService",
        session_id: Optional[str] = None,
        steps: Sequence[StepDefinition] = STEP_DEFINITIONS,
    ) -> None:
        self.pricing = pricing
        self.booking = booking
        self.session_id = session_id or uuid.uuid4().hex
        self.steps: List[StepDefinition] = list(steps)
        self._pricing_seq = 0
        self._init_state()

    def _init_state(self) -> None:
        self.current_index = 0
        self.draft = BookingDraft()
        self.status = FlowStatus.IN_PROGRESS
        self.pricing_status = PricingStatus.IDLE
        self.pricing_error: Optional[str] = None
        self.price_estimate: Optional[PriceBreakdown] = None
        self.pricing_discrepancy = False
        self.error: Optional[StepError] = None
        self.field_errors: Dict[str, str] = {}
        self.booking_reference: Optional[str] = None
        self._idempotency_key: Optional[str] = None

    # ------------------------------------------------------------------
    # Step navigation
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> BookingStep:
        return self.steps[self.current_index].step

    @property
    def current_definition(self) -> StepDefinition:
        return self.steps[self.current_index]

    @property
    def is_last_step(self) -> bool:
        return self.current_index == len(self.steps) - 1

    def step_errors(self, step: BookingStep) -> Dict[str, str]:
        for definition in self.steps:
            if definition.step == step:
                return definition.validate(self.draft)
        raise BookingFlowError(f"Unknown step '{step}'")

    def go_next(self) -> bool:
        """
        Advance one step if the current step validates.

        Returns:
            True if the flow moved forward. On validation failure the inline
            field errors are recorded and the step does not change.
        """
        if self.status is not FlowStatus.IN_PROGRESS:
            return False

        errors = self.current_definition.validate(self.draft)
        if errors:
            self.field_errors.update(errors)
            self.error = StepError(
                step=self.current_step,
                kind=ErrorKind.VALIDATION,
                message="Please correct the highlighted fields",
                field_errors=errors,
            )
            logger.debug(f"[{self.session_id}] step {self.current_step.value} invalid: {sorted(errors)}")
            return False

        self.error = None
        if self.is_last_step:
            return False

        self._move_to(self.current_index + 1)
        return True

    def go_previous(self) -> bool:
        """Go back one step. On the first step this is a no-op returning False."""
        if self.status is not FlowStatus.IN_PROGRESS or self.current_index == 0:
            return False

        self.error = None
        self._move_to(self.current_index - 1)
        return True

    def _move_to(self, index: int) -> None:
        prev_step = self.current_step
        self.current_index = index
        if prev_step != self.current_step:
            self._log_step_transition(prev_step, self.current_step)

    def _log_step_transition(self, from_step: BookingStep, to_step: BookingStep) -> None:
        logger.info(f"[{self.session_id}] step {from_step.value} -> {to_step.value}")

    # ------------------------------------------------------------------
    # Draft updates
    # ------------------------------------------------------------------

    async def update_field(self, path: str, value: Any) -> BookingDraft:
        """
        Set one draft field by dotted path.

        Raises:
            BookingValidationError: If the path is unknown or the value is malformed
            BookingFlowError: If the booking is no longer editable
        """
        if self.status is not FlowStatus.IN_PROGRESS:
            raise BookingFlowError("Booking can no longer be edited")

        previous = self.draft
        self.draft = previous.with_field(path, value)
        self._idempotency_key = None
        self._refresh_field_error(path, value)

        if path in PRICING_FIELDS and self.draft.pricing_inputs() != previous.pricing_inputs():
            self._invalidate_pricing()
            if self.pricing_inputs_ready():
                await self.recompute_price()

        return self.draft

    def _refresh_field_error(self, path: str, value: Any) -> None:
        self.field_errors.pop(path, None)
        errors = self.step_errors(step_for_field(path))
        if path in errors and value not in (None, "", [], ()):
            self.field_errors[path] = errors[path]

        if self.error is not None and self.error.kind is ErrorKind.VALIDATION:
            remaining = self.step_errors(self.error.step)
            if not remaining:
                self.error = None
            else:
                self.error = replace(self.error, field_errors=remaining)

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def pricing_inputs_ready(self) -> bool:
        """True when services, size and a well-formed postcode are all present."""
        service_ids, size, postcode = self.draft.pricing_inputs()
        if not service_ids or size is None:
            return False
        is_valid, _ = ValidationUtils.validate_uk_postcode(postcode)
        return is_valid

    def _invalidate_pricing(self) -> None:
        # Bumping the sequence discards any quote still in flight
        self._pricing_seq += 1
        self._clear_pricing_overlay()
        self.draft = replace(self.draft, pricing=None)
        self.pricing_status = PricingStatus.IDLE
        self.pricing_error = None
        self.price_estimate = None
        self.pricing_discrepancy = False

    def _clear_pricing_overlay(self) -> None:
        if (
            self.error is not None
            and self.error.kind is ErrorKind.NETWORK
            and self.error.message == self.pricing_error
        ):
            self.error = None

    async def recompute_price(self) -> bool:
        """
        Request a fresh quote for the current pricing inputs.

        Returns:
            True if a quote was applied. False if inputs are incomplete, the
            request failed, or a newer request superseded this one.
        """
        if not self.pricing_inputs_ready():
            self.pricing_status = PricingStatus.IDLE
            return False

        self._pricing_seq += 1
        seq = self._pricing_seq
        service_ids, size, postcode = self.draft.pricing_inputs()
        self.pricing_status = PricingStatus.PENDING

        try:
            quote = await self.pricing.quote(service_ids, size, postcode)
        except (PricingError, ExternalAPIError, BookingFlowError) as e:
            if seq != self._pricing_seq:
                logger.info(f"[{self.session_id}] discarding stale pricing failure seq={seq}")
                return False
            logger.warning(f"[{self.session_id}] pricing failed: {e}")
            self._clear_pricing_overlay()
            self.draft = replace(self.draft, pricing=None)
            self.pricing_status = PricingStatus.FAILED
            self.pricing_error = PRICING_FAILED_MESSAGE
            if self.current_step is BookingStep.REVIEW:
                self.error = StepError(
                    step=BookingStep.REVIEW,
                    kind=ErrorKind.NETWORK,
                    message=PRICING_FAILED_MESSAGE,
                )
            return False
        except BaseException:
            if seq == self._pricing_seq:
                self.draft = replace(self.draft, pricing=None)
                self.pricing_status = PricingStatus.FAILED
                self.pricing_error = PRICING_FAILED_MESSAGE
            raise

        if seq != self._pricing_seq:
            logger.info(
                f"[{self.session_id}] discarding stale quote seq={seq} latest={self._pricing_seq}"
            )
            return False

        self._clear_pricing_overlay()
        self.draft = replace(self.draft, pricing=quote.breakdown)
        self.price_estimate = quote.estimate
        self.pricing_discrepancy = quote.discrepancy
        self.pricing_status = PricingStatus.READY
        self.pricing_error = None
        logger.info(f"[{self.session_id}] price ready total={quote.breakdown.total}")
        return True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submission_blockers(self) -> List[str]:
        """Reasons the booking cannot be submitted yet; empty when it can."""
        blockers: List[str] = []
        if self.status is FlowStatus.SUBMITTING:
            blockers.append("Submission already in progress")
        elif self.status is FlowStatus.SUBMITTED:
            blockers.append("Booking already submitted")
        if not self.is_last_step:
            blockers.append("Not on the review step")
        for definition in self.steps:
            if not definition.is_valid(self.draft):
                blockers.append(f"Step '{definition.title}' is incomplete")
        if self.pricing_status is not PricingStatus.READY or self.draft.pricing is None:
            blockers.append("Price is not available")
        return blockers

    @property
    def can_submit(self) -> bool:
        return not self.submission_blockers()

    async def submit(self) -> Optional[str]:
        """
        Create the booking.

        Returns:
            The booking reference on success, or None when the request failed
            and an error overlay was set.

        Raises:
            BookingFlowError: If the flow is not ready to submit, or a
                submission is already in flight
        """
        blockers = self.submission_blockers()
        if blockers:
            raise BookingFlowError(blockers[0])

        self.status = FlowStatus.SUBMITTING
        self.error = None
        if self._idempotency_key is None:
            self._idempotency_key = self.booking.build_booking_idempotency_key(self.draft)

        logger.info(f"[{self.session_id}] submitting booking key={self._idempotency_key[:12]}")
        try:
            confirmation = await self.booking.create_booking(self.draft, self._idempotency_key)
        except SlotUnavailableError as e:
            logger.warning(f"[{self.session_id}] slot conflict: {e}")
            self.status = FlowStatus.IN_PROGRESS
            self.draft = self.draft.with_field("schedule.time_slot_id", None).with_field(
                "schedule.start_time", None
            )
            self._idempotency_key = None
            schedule_index = next(
                i for i, d in enumerate(self.steps) if d.step is BookingStep.SCHEDULE
            )
            self._move_to(schedule_index)
            self.error = StepError(
                step=BookingStep.SCHEDULE,
                kind=ErrorKind.CONFLICT,
                message=SLOT_CONFLICT_MESSAGE,
                field_errors={"schedule.time_slot_id": "Choose another time slot"},
            )
            return None
        except ExternalAPIError as e:
            logger.error(f"[{self.session_id}] booking submission failed: {e}")
            self._submission_failed()
            return None
        except BaseException:
            # Unexpected errors propagate, but never leave the flow locked in SUBMITTING
            logger.exception(f"[{self.session_id}] submission aborted by unexpected error")
            self._submission_failed()
            raise

        self.status = FlowStatus.SUBMITTED
        self.booking_reference = confirmation.booking_reference
        self.draft = BookingDraft()
        self.pricing_status = PricingStatus.IDLE
        self.price_estimate = None
        self.pricing_discrepancy = False
        self.field_errors = {}
        logger.info(f"[{self.session_id}] booking confirmed ref={self.booking_reference}")
        return self.booking_reference

    def _submission_failed(self) -> None:
        self.status = FlowStatus.IN_PROGRESS
        self.error = StepError(
            step=BookingStep.REVIEW,
            kind=ErrorKind.NETWORK,
            message=SUBMIT_FAILED_MESSAGE,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Start over from the first step with an empty draft."""
        prev_step = self.current_step
        self._pricing_seq += 1
        self._init_state()
        if prev_step != self.current_step:
            self._log_step_transition(prev_step, self.current_step)

    async def load_draft(
        self, draft: BookingDraft, step: Optional[BookingStep] = None
    ) -> None:
        """Replace the draft wholesale, e.g. when rebooking, and reprice it."""
        if self.status is not FlowStatus.IN_PROGRESS:
            raise BookingFlowError("Booking can no longer be edited")

        self.draft = draft
        self._idempotency_key = None
        self.field_errors = {}
        self.error = None
        self._invalidate_pricing()
        if step is not None:
            self._move_to(next(i for i, d in enumerate(self.steps) if d.step is step))
        if self.pricing_inputs_ready():
            await self.recompute_price()

    def snapshot(self) -> Dict[str, Any]:
        """Serializable state for persistence."""
        return {
            "session_id": self.session_id,
            "current_step": self.current_step.value,
            "status": self.status.value,
            "draft": self.draft.to_dict(),
            "pricing_status": self.pricing_status.value,
            "booking_reference": self.booking_reference,
            "idempotency_key": self._idempotency_key,
        }

    def restore(self, data: Dict[str, Any]) -> None:
        """Restore state produced by ``snapshot``."""
        self._init_state()
        self._pricing_seq += 1
        self.session_id = data.get("session_id") or self.session_id
        self.draft = BookingDraft.from_dict(data.get("draft") or {})

        step = BookingStep(data.get("current_step", BookingStep.SERVICE.value))
        self.current_index = next(i for i, d in enumerate(self.steps) if d.step is step)

        status = FlowStatus(data.get("status", FlowStatus.IN_PROGRESS.value))
        # A submission cannot still be in flight after a restore
        self.status = FlowStatus.IN_PROGRESS if status is FlowStatus.SUBMITTING else status

        if self.draft.pricing is not None:
            self.pricing_status = PricingStatus.READY
        self.booking_reference = data.get("booking_reference")
        self._idempotency_key = data.get("idempotency_key")

    def view(self) -> Dict[str, Any]:
        """Presentation-friendly state of the flow."""
        return {
            "session_id": self.session_id,
            "step": self.current_step.value,
            "step_index": self.current_index,
            "title": self.current_definition.title,
            "steps": [
                {
                    "step": d.step.value,
                    "title": d.title,
                    "valid": d.is_valid(self.draft),
                }
                for d in self.steps
            ],
            "status": self.status.value,
            "draft": self.draft.to_dict(),
            "pricing": {
                "status": self.pricing_status.value,
                "breakdown": self.draft.pricing.to_dict() if self.draft.pricing else None,
                "display_total": format_price(self.draft.pricing.total) if self.draft.pricing else None,
                "travel": describe_travel(self.draft.pricing) if self.draft.pricing else None,
                "estimate": self.price_estimate.to_dict() if self.price_estimate else None,
                "discrepancy": self.pricing_discrepancy,
                "error": self.pricing_error,
            },
            "error": self.error.to_dict() if self.error else None,
            "field_errors": dict(self.field_errors),
            "can_submit": self.can_submit,
            "booking_reference": self.booking_reference,
        }
