from .crud_booking import booking
from . import crud_provider
from . import crud_payout
