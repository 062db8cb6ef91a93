"""
Repository Layer - Data Access

Each repository wraps a SQLAlchemy Session and centralizes the queries for
one aggregate. Repositories flush but never commit; the request (or service)
owns the transaction.
"""
from kalakari.repositories.product_repository import ProductRepository
from kalakari.repositories.order_repository import OrderRepository
from kalakari.repositories.user_repository import UserRepository, CartRepository
from kalakari.repositories.artisan_repository import ArtisanRepository
from kalakari.repositories.review_repository import ReviewRepository
from kalakari.repositories.wishlist_repository import WishlistRepository
from kalakari.repositories.journal_repository import JournalRepository
from kalakari.repositories.testimonial_repository import TestimonialRepository
from kalakari.repositories.contact_repository import ContactRepository

__all__ = [
    'ProductRepository',
    'OrderRepository',
    'UserRepository',
    'CartRepository',
    'ArtisanRepository',
    'ReviewRepository',
    'WishlistRepository',
    'JournalRepository',
    'TestimonialRepository',
    'ContactRepository',
]
