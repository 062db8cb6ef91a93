"""
Wishlist Repository
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from kalakari.models import Product, WishlistItem


class WishlistRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_for_customer(self, customer_id: int, limit: int = 20, offset: int = 0) -> Tuple[List[WishlistItem], int]:
        query = (
            self.db.query(WishlistItem)
            .options(joinedload(WishlistItem.product).joinedload(Product.artisan))
            .filter(WishlistItem.customer_id == customer_id)
        )
        total = query.count()
        items = query.order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc()).offset(offset).limit(limit).all()
        return items, total

    def find(self, customer_id: int, product_id: int) -> Optional[WishlistItem]:
        return (
            self.db.query(WishlistItem)
            .filter(WishlistItem.customer_id == customer_id, WishlistItem.product_id == product_id)
            .first()
        )

    def add(self, item: WishlistItem) -> WishlistItem:
        self.db.add(item)
        self.db.flush()
        return item

    def remove(self, item: WishlistItem):
        self.db.delete(item)
        self.db.flush()

    def clear(self, customer_id: int) -> int:
        self.db.flush()
        return (
            self.db.query(WishlistItem)
            .filter(WishlistItem.customer_id == customer_id)
            .delete(synchronize_session=False)
        )
