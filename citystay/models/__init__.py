"""SQLAlchemy models for CityStay.

All models are imported here so that ``Base.metadata.create_all`` can
discover them. If you add a new model, import it in this file.
"""

from citystay.models.property import Property
from citystay.models.reservation import Reservation

__all__ = [
    "Property",
    "Reservation",
]
