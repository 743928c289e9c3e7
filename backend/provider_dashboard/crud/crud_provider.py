from typing import List, Optional

from sqlalchemy.orm import Session

from .. import models
from ..utils.errors import NotFound


def get_business(db: Session, business_id: int) -> models.Business:
    business = db.query(models.Business).filter(models.Business.id == business_id).first()
    if business is None:
        raise NotFound("Business not found.")
    return business


def get_providers_by_business(db: Session, business_id: int) -> List[models.Provider]:
    return (
        db.query(models.Provider)
        .filter(models.Provider.business_id == business_id)
        .order_by(models.Provider.id.asc())
        .all()
    )


def get_provider_services(db: Session, provider_ids: List[int], service_id: Optional[int] = None) -> List[models.ProviderService]:
    if not provider_ids:
        return []
    query = db.query(models.ProviderService).filter(models.ProviderService.provider_id.in_(provider_ids))
    if service_id is not None:
        query = query.filter(models.ProviderService.service_id == service_id)
    return query.all()
