from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from ..models.booking_status import ACTIVE_STATUSES
from ..models.provider import ProviderRole
from ..schemas.booking import BookingRecord
from ..schemas.provider import ActingContext, BusinessRecord, ProviderRecord, ProviderServiceRecord
from ..utils.errors import AssignmentRejected, Forbidden, GuardFailed

logger = logging.getLogger(__name__)

UNASSIGNED = "unassigned"

_ASSIGNABLE_ROLES = (ProviderRole.OWNER, ProviderRole.PROVIDER)


@dataclass(frozen=True)
class AssignmentResult:
    booking: BookingRecord
    changed: bool
    auto_assigned: bool = False


def _by_id(providers: Iterable[ProviderRecord]) -> List[ProviderRecord]:
    return sorted(providers, key=lambda p: p.id)


def resolve_eligible_providers(
    booking: BookingRecord,
    business: BusinessRecord,
    providers: Iterable[ProviderRecord],
    provider_services: Iterable[ProviderServiceRecord],
) -> List[ProviderRecord]:
    """Providers that may be assigned to ``booking``.

    Independent businesses resolve to their single active owner. Everyone
    else needs an active owner/provider role plus an active
    provider-service row for the booked service; a booking without a
    service id falls back to all active owners/providers.
    """
    active = [p for p in providers if p.business_id == business.id and p.is_active]
    if business.is_independent:
        return _by_id(p for p in active if p.provider_role == ProviderRole.OWNER)[:1]

    candidates = [p for p in active if p.provider_role in _ASSIGNABLE_ROLES]
    if booking.service_id is None:
        logger.info(
            "Booking %s has no service id; offering all %d active providers",
            booking.id,
            len(candidates),
        )
        return _by_id(candidates)

    qualified = {
        row.provider_id
        for row in provider_services
        if row.is_active and row.service_id == booking.service_id
    }
    return _by_id(p for p in candidates if p.id in qualified)


def ensure_can_assign(booking: BookingRecord, context: ActingContext) -> None:
    if booking.business_id != context.business_id:
        raise Forbidden("You do not have access to this booking.")
    if not context.can_assign:
        raise Forbidden("Only owners and dispatchers can assign providers.")


def assign(
    booking: BookingRecord,
    provider_id: Union[int, str, None],
    context: ActingContext,
    business: BusinessRecord,
    eligible: Iterable[ProviderRecord],
) -> AssignmentResult:
    """Compute the booking after assigning ``provider_id``.

    Pass :data:`UNASSIGNED` (or ``None``) to clear the assignment. The
    booking status is never touched, and ``booking`` itself is not mutated.
    """
    ensure_can_assign(booking, context)

    # The owner of an independent business is bound for good once assigned.
    if business.is_independent and booking.has_provider:
        return AssignmentResult(booking=booking, changed=False)

    if booking.booking_status not in ACTIVE_STATUSES:
        raise GuardFailed(
            GuardFailed.TERMINAL_STATUS,
            f"Assignments cannot change once a booking is {booking.booking_status.value}.",
        )

    if provider_id is None or provider_id == UNASSIGNED:
        if not booking.has_provider:
            return AssignmentResult(booking=booking, changed=False)
        return AssignmentResult(booking=booking.model_copy(update={"provider_id": None}), changed=True)

    try:
        target = int(provider_id)
    except (TypeError, ValueError):
        raise AssignmentRejected(
            f"Unknown provider {provider_id!r}.", field_errors={"provider_id": "invalid"}
        )
    if target not in {p.id for p in eligible}:
        raise AssignmentRejected(
            "This provider is not eligible for the booked service.",
            field_errors={"provider_id": "not_eligible"},
        )
    if target == booking.provider_id:
        return AssignmentResult(booking=booking, changed=False)
    return AssignmentResult(booking=booking.model_copy(update={"provider_id": target}), changed=True)


def auto_assign(
    booking: BookingRecord,
    business: BusinessRecord,
    eligible: Iterable[ProviderRecord],
) -> Optional[BookingRecord]:
    """Bind an unassigned independent-business booking to its owner.

    Returns the assigned booking, or ``None`` when nothing should change.
    """
    if not business.is_independent or booking.has_provider:
        return None
    if booking.booking_status not in ACTIVE_STATUSES:
        return None
    owners = [p for p in eligible if p.provider_role == ProviderRole.OWNER]
    if len(owners) != 1:
        return None
    return booking.model_copy(update={"provider_id": owners[0].id})
