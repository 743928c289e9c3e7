import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .. import models
from ..models.booking_status import BookingStatus
from ..utils.errors import NotFound, UpdateFailed

logger = logging.getLogger(__name__)

STALE_MESSAGE = "This booking was changed by someone else. Reload it and try again."


class CRUDBooking:
    def get_booking(self, db: Session, booking_id: int) -> Optional[models.Booking]:
        return db.query(models.Booking).filter(models.Booking.id == booking_id).first()

    def get_booking_for_business(self, db: Session, booking_id: int, business_id: int) -> models.Booking:
        db_booking = self.get_booking(db, booking_id)
        # Bookings of other businesses are reported as missing, not forbidden.
        if db_booking is None or db_booking.business_id != business_id:
            raise NotFound("Booking not found.")
        return db_booking

    def get_bookings_by_business(self, db: Session, business_id: int) -> List[models.Booking]:
        return (
            db.query(models.Booking)
            .filter(models.Booking.business_id == business_id)
            .order_by(models.Booking.booking_date.desc(), models.Booking.start_time.desc(), models.Booking.id)
            .all()
        )

    def _write(
        self,
        db: Session,
        booking_id: int,
        expected_version: Optional[int],
        changes: Dict[str, Any],
        extra: Optional[List[Any]] = None,
    ) -> models.Booking:
        """Apply ``changes`` if the stored version still matches.

        On any failure the session is rolled back, so the stored booking (and
        the instance loaded in this session) keeps its previous state.
        """
        db_booking = self.get_booking(db, booking_id)
        if db_booking is None:
            raise NotFound("Booking not found.")
        if expected_version is not None and db_booking.version_id != expected_version:
            logger.info(
                "Booking %s version mismatch: expected=%s stored=%s",
                booking_id,
                expected_version,
                db_booking.version_id,
            )
            raise UpdateFailed(STALE_MESSAGE)
        try:
            for key, value in changes.items():
                setattr(db_booking, key, value)
            for obj in extra or ():
                db.add(obj)
            db.commit()
        except StaleDataError as exc:
            db.rollback()
            logger.warning("Stale write rejected for booking %s", booking_id)
            raise UpdateFailed(STALE_MESSAGE) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to update booking %s", booking_id)
            raise UpdateFailed("The booking could not be saved. Please try again.") from exc
        db.refresh(db_booking)
        return db_booking

    def update_status(
        self,
        db: Session,
        booking_id: int,
        status: BookingStatus,
        expected_version: Optional[int],
        changed_by: Optional[int] = None,
        reason: Optional[str] = None,
        decline_reason: Optional[str] = None,
        from_status: Optional[BookingStatus] = None,
        provider_id: Optional[int] = None,
    ) -> models.Booking:
        changes: Dict[str, Any] = {"booking_status": status}
        if provider_id is not None:
            changes["provider_id"] = provider_id
        if decline_reason is not None:
            changes["decline_reason"] = decline_reason
        history = models.BookingStatusHistory(
            booking_id=booking_id,
            from_status=from_status,
            status=status,
            changed_by=changed_by,
            reason=reason,
        )
        return self._write(db, booking_id, expected_version, changes, extra=[history])

    def update_provider(
        self,
        db: Session,
        booking_id: int,
        provider_id: Optional[int],
        expected_version: Optional[int],
    ) -> models.Booking:
        return self._write(db, booking_id, expected_version, {"provider_id": provider_id})

    def get_status_history(self, db: Session, booking_id: int) -> List[models.BookingStatusHistory]:
        return (
            db.query(models.BookingStatusHistory)
            .filter(models.BookingStatusHistory.booking_id == booking_id)
            .order_by(models.BookingStatusHistory.id.asc())
            .all()
        )


booking = CRUDBooking()
