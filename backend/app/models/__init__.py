from app.models.location import Location
from app.models.lot import Lot
from app.models.unit import Unit
from app.models.transaction import Transaction

__all__ = ["Location", "Lot", "Unit", "Transaction"]
