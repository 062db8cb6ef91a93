"""
User Repository - accounts, addresses and cart lines
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from kalakari.models import Address, CartItem, User


class UserRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def find_all(
        self,
        role: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[User], int]:
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)

        total = query.count()
        users = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()
        return users, total

    def count_by_role(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def find_address(self, user_id: int, address_id: int) -> Optional[Address]:
        return self.db.query(Address).filter(Address.id == address_id, Address.user_id == user_id).first()

    def set_default_address(self, user: User, address: Address):
        """Make `address` the only default address of the user"""
        for other in user.addresses:
            other.is_default = False
        address.is_default = True


class CartRepository:

    def __init__(self, db: Session):
        self.db = db

    def items_for(self, user_id: int) -> List[CartItem]:
        return (
            self.db.query(CartItem)
            .options(joinedload(CartItem.product))
            .filter(CartItem.user_id == user_id)
            .order_by(CartItem.id)
            .all()
        )

    def find_line(self, user_id: int, product_id: int, variant_key: Optional[str] = None) -> Optional[CartItem]:
        """Exact line when `variant_key` is given, else the first line for the product"""
        query = self.db.query(CartItem).filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
        if variant_key is not None:
            query = query.filter(CartItem.variant_key == variant_key)
        return query.order_by(CartItem.id).first()

    def add(self, item: CartItem) -> CartItem:
        self.db.add(item)
        self.db.flush()
        return item

    def remove(self, item: CartItem):
        self.db.delete(item)
        self.db.flush()

    def clear(self, user_id: int) -> int:
        self.db.flush()
        deleted = self.db.query(CartItem).filter(CartItem.user_id == user_id).delete(synchronize_session=False)
        self.db.expire_all()
        return deleted
