"""REST endpoint routers exposed by the API."""
from . import cars, invoices, owners, trips

__all__ = [
    "cars",
    "invoices",
    "owners",
    "trips",
]
