from datetime import date

from fastapi import Depends, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.provider import Provider, ProviderRole
from ..schemas.provider import ActingContext
from ..utils.errors import Forbidden
from .auth import oauth2_scheme, SECRET_KEY, ALGORITHM


def get_current_provider(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Provider:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        provider_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise credentials_exception
    provider = db.query(Provider).filter(Provider.id == provider_id).first()
    if provider is None:
        raise credentials_exception
    return provider


def get_acting_context(current_provider: Provider = Depends(get_current_provider)) -> ActingContext:
    if not current_provider.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return ActingContext(
        provider_id=current_provider.id,
        business_id=current_provider.business_id,
        role=current_provider.provider_role,
    )


def get_finance_context(context: ActingContext = Depends(get_acting_context)) -> ActingContext:
    """Owners and dispatchers may see balances and payouts."""
    if context.role not in (ProviderRole.OWNER, ProviderRole.DISPATCHER):
        raise Forbidden("Only owners and dispatchers can view business finances.")
    return context


def get_owner_context(context: ActingContext = Depends(get_acting_context)) -> ActingContext:
    if context.role != ProviderRole.OWNER:
        raise Forbidden("Only the business owner can request payouts.")
    return context


def get_today() -> date:
    """Calendar date the rules compare bookings against."""
    return date.today()
