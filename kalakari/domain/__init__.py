"""
Domain Layer - Business Entities

Pydantic models for API requests and the projections returned to clients.
ORM rows are converted with each projection's `from_model()`.
"""
from kalakari.domain.product import Product
from kalakari.domain.order import Order
from kalakari.domain.review import Review
from kalakari.domain.journal import JournalEntry
from kalakari.domain.artisan import ArtisanPublic, ArtisanPrivate
from kalakari.domain.user import UserOut, AddressOut

__all__ = [
    'Product',
    'Order',
    'Review',
    'JournalEntry',
    'ArtisanPublic',
    'ArtisanPrivate',
    'UserOut',
    'AddressOut',
]
