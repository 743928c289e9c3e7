import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

_registered = False


def _listener_factory(model_name: str, field: str):
    """Return a SQLAlchemy attribute listener that logs changes of ``field``."""

    def _changed(target, value, oldvalue, initiator):  # noqa: ANN001
        if oldvalue is NO_VALUE or oldvalue == value:
            return value
        entity_id = getattr(target, "id", "unknown")
        logger.info(
            "%s id=%s %s changed from %s to %s",
            model_name,
            entity_id,
            field,
            getattr(oldvalue, "value", oldvalue),
            getattr(value, "value", value),
        )
        return value

    return _changed


def register_status_listeners() -> None:
    """Attach listeners for booking status and provider assignment."""
    global _registered
    if _registered:
        return
    for model, field in (
        (models.Booking, "booking_status"),
        (models.Booking, "provider_id"),
        (models.Payout, "status"),
    ):
        event.listen(
            getattr(model, field),
            "set",
            _listener_factory(model.__name__, field),
            retval=False,
            propagate=True,
        )
    _registered = True
