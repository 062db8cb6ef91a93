"""
Database models
"""
from .user import User, Address, CartItem
from .artisan import Artisan
from .product import Product
from .order import Order, OrderItem, OrderStatusHistory
from .review import Review, ReviewHelpfulVote, ReviewReport
from .wishlist import WishlistItem
from .journal import JournalEntry
from .testimonial import Testimonial
from .contact import ContactMessage

__all__ = [
    "User",
    "Address",
    "CartItem",
    "Artisan",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "Review",
    "ReviewHelpfulVote",
    "ReviewReport",
    "WishlistItem",
    "JournalEntry",
    "Testimonial",
    "ContactMessage",
]
