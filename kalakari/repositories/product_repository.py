"""
Product Repository - Data Access Layer for Products

Catalog queries (public listing with filters, featured, per-artisan) and the
inventory counters used by checkout. Inventory changes are single conditional
UPDATE statements so two concurrent checkouts can never oversell a product.
"""
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, func, or_, update
from sqlalchemy.orm import Session, joinedload

from kalakari.models import Artisan, Product

SORT_COLUMNS = {
    "created_at": Product.created_at,
    "price": Product.price,
    "rating": Product.rating_average,
    "name": Product.name,
    "popularity": Product.stats_orders,
}


def _json_list_contains_any(column, values: List[str]):
    """Case-insensitive any-match of string values inside a JSON array column"""
    text_column = func.lower(cast(column, String))
    return or_(*[text_column.like(f'%"{value.strip().lower()}"%') for value in values])


class ProductRepository:
    """
    Repository for Product data access

    Returns ORM rows; callers convert them with `domain.Product.from_model`.
    """

    def __init__(self, db: Session):
        self.db = db

    def _public_query(self):
        return (
            self.db.query(Product)
            .options(joinedload(Product.artisan))
            .filter(Product.is_active.is_(True), Product.is_approved.is_(True))
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def find_public_by_id(self, product_id: int) -> Optional[Product]:
        """Active and approved product, or None"""
        return self._public_query().filter(Product.id == product_id).first()

    def find_all(
        self,
        category: Optional[str] = None,
        artisan_id: Optional[int] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        state: Optional[str] = None,
        min_rating: Optional[float] = None,
        materials: Optional[List[str]] = None,
        colors: Optional[List[str]] = None,
        in_stock: Optional[bool] = None,
        featured: Optional[bool] = None,
        sort: str = "created_at",
        order: str = "desc",
        limit: int = 12,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        """
        Public catalog listing with filters

        Returns:
            Tuple of (products, total_count)
        """
        query = self._public_query()

        if category:
            query = query.filter(Product.category == category)
        if artisan_id:
            query = query.filter(Product.artisan_id == artisan_id)
        if min_price is not None:
            query = query.filter(Product.price >= min_price)
        if max_price is not None:
            query = query.filter(Product.price <= max_price)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
                cast(Product.tags, String).ilike(pattern),
            ))
        if state:
            query = query.filter(Product.artisan.has(Artisan.state == state))
        if min_rating is not None:
            query = query.filter(Product.rating_average >= min_rating)
        if materials:
            query = query.filter(_json_list_contains_any(Product.materials, materials))
        if colors:
            query = query.filter(_json_list_contains_any(Product.colors, colors))
        if in_stock is True:
            query = query.filter(Product.inventory_available > 0)
        elif in_stock is False:
            query = query.filter(Product.inventory_available == 0)
        if featured is not None:
            query = query.filter(Product.is_featured.is_(featured))

        total = query.count()

        column = SORT_COLUMNS.get(sort, Product.created_at)
        ordering = column.asc() if order == "asc" else column.desc()
        products = query.order_by(ordering, Product.id.desc()).offset(offset).limit(limit).all()

        return products, total

    def find_featured(self, limit: int = 8) -> List[Product]:
        return (
            self._public_query()
            .filter(Product.is_featured.is_(True))
            .order_by(Product.stats_orders.desc(), Product.created_at.desc())
            .limit(limit)
            .all()
        )

    def find_by_artisan(
        self,
        artisan_id: int,
        status: Optional[str] = None,
        limit: int = 12,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        """
        An artisan's own listings

        status: active (live), pending (awaiting approval), inactive (hidden)
        """
        query = self.db.query(Product).filter(Product.artisan_id == artisan_id)

        if status == "active":
            query = query.filter(Product.is_active.is_(True), Product.is_approved.is_(True))
        elif status == "pending":
            query = query.filter(Product.is_approved.is_(False))
        elif status == "inactive":
            query = query.filter(Product.is_active.is_(False))

        total = query.count()
        products = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset).limit(limit).all()
        return products, total

    def find_for_admin(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product).options(joinedload(Product.artisan))

        if status == "pending":
            query = query.filter(Product.is_approved.is_(False))
        elif status == "approved":
            query = query.filter(Product.is_approved.is_(True))
        elif status == "inactive":
            query = query.filter(Product.is_active.is_(False))
        if category:
            query = query.filter(Product.category == category)

        total = query.count()
        products = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset).limit(limit).all()
        return products, total

    def search_names(self, term: str, limit: int = 5) -> List[Product]:
        return (
            self._public_query()
            .filter(or_(Product.name.ilike(f"%{term}%"), cast(Product.tags, String).ilike(f"%{term}%")))
            .order_by(Product.stats_orders.desc(), Product.id)
            .limit(limit)
            .all()
        )

    def matching_categories(self, term: str, limit: int = 3) -> List[str]:
        rows = (
            self.db.query(Product.category)
            .filter(Product.is_active.is_(True), Product.is_approved.is_(True),
                    Product.category.ilike(f"%{term}%"))
            .distinct()
            .order_by(Product.category)
            .limit(limit)
            .all()
        )
        return [row[0] for row in rows]

    def trending_categories(self, limit: int = 6) -> List[Tuple[str, int, int]]:
        """(category, total_views, product_count) by total views"""
        total_views = func.sum(Product.stats_views)
        return (
            self.db.query(Product.category, total_views, func.count(Product.id))
            .filter(Product.is_active.is_(True), Product.is_approved.is_(True))
            .group_by(Product.category)
            .order_by(total_views.desc())
            .limit(limit)
            .all()
        )

    def count_by_approval(self, artisan_id: Optional[int] = None) -> dict:
        query = self.db.query(Product)
        if artisan_id is not None:
            query = query.filter(Product.artisan_id == artisan_id)
        return {
            "total": query.count(),
            "approved": query.filter(Product.is_approved.is_(True)).count(),
            "pending": query.filter(Product.is_approved.is_(False)).count(),
        }

    def add(self, product: Product) -> Product:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: Product):
        self.db.delete(product)
        self.db.flush()

    def increment_views(self, product_id: int):
        self._apply(
            update(Product)
            .where(Product.id == product_id)
            .values(stats_views=Product.stats_views + 1),
            product_id,
        )

    def increment_orders(self, product_id: int, quantity: int):
        self._apply(
            update(Product)
            .where(Product.id == product_id)
            .values(stats_orders=Product.stats_orders + quantity),
            product_id,
        )

    # ------------------------------------------------------------------
    # Inventory counters
    # ------------------------------------------------------------------

    def reserve(self, product_id: int, quantity: int) -> bool:
        """available -= q, reserved += q; False when fewer than q are available"""
        return self._apply(
            update(Product)
            .where(Product.id == product_id, Product.inventory_available >= quantity)
            .values(
                inventory_available=Product.inventory_available - quantity,
                inventory_reserved=Product.inventory_reserved + quantity,
            ),
            product_id,
        )

    def commit_sale(self, product_id: int, quantity: int) -> bool:
        """reserved -= q, total -= q"""
        return self._apply(
            update(Product)
            .where(Product.id == product_id, Product.inventory_reserved >= quantity)
            .values(
                inventory_reserved=Product.inventory_reserved - quantity,
                inventory_total=Product.inventory_total - quantity,
            ),
            product_id,
        )

    def release(self, product_id: int, quantity: int) -> bool:
        """reserved -= q, available += q"""
        return self._apply(
            update(Product)
            .where(Product.id == product_id, Product.inventory_reserved >= quantity)
            .values(
                inventory_reserved=Product.inventory_reserved - quantity,
                inventory_available=Product.inventory_available + quantity,
            ),
            product_id,
        )

    def restock(self, product_id: int, quantity: int) -> bool:
        """Return sold units to stock: total += q, available += q"""
        return self._apply(
            update(Product)
            .where(Product.id == product_id)
            .values(
                inventory_total=Product.inventory_total + quantity,
                inventory_available=Product.inventory_available + quantity,
            ),
            product_id,
        )

    def _apply(self, statement, product_id: int) -> bool:
        # Pending changes must reach the database before the row is re-read
        self.db.flush()
        result = self.db.execute(statement.execution_options(synchronize_session=False))
        product = self.db.get(Product, product_id)
        if product is not None:
            self.db.refresh(product)
        return result.rowcount == 1
