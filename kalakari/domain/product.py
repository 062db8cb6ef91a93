"""
Product Domain Model

Represents a catalog product in the Kalakari system: request schemas for
artisans creating/updating listings, and the projection returned by the API.

Inventory is exposed as {total, available, reserved}:
    total: units the artisan holds
    available: units a customer can still order
    reserved: units held by orders awaiting payment or delivery
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .catalog import PRODUCT_CATEGORIES, DIMENSION_UNITS, check_choice, reject_null


class Inventory(BaseModel):
    total: int = Field(..., ge=0, description="Units held")
    available: int = Field(..., ge=0, description="Units that can be ordered")
    reserved: int = Field(0, ge=0, description="Units held by open orders")

    @model_validator(mode="after")
    def check_within_total(self):
        if self.available > self.total:
            raise ValueError("Available inventory cannot exceed total inventory")
        if self.available + self.reserved > self.total:
            raise ValueError("Available plus reserved inventory cannot exceed total inventory")
        return self


class InventoryUpdate(BaseModel):
    """Artisan-facing stock update; reserved units are managed by orders"""

    total: int = Field(..., ge=0)
    available: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_within_total(self):
        if self.available > self.total:
            raise ValueError("Available inventory cannot exceed total inventory")
        return self


class Dimensions(BaseModel):
    length: Optional[float] = Field(None, ge=0)
    width: Optional[float] = Field(None, ge=0)
    height: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def validate_unit(cls, v):
        return check_choice(v, DIMENSION_UNITS, "unit")


class ShippingInfo(BaseModel):
    weight: Optional[float] = Field(None, ge=0)
    free_shipping: bool = False
    shipping_cost: float = Field(0, ge=0)
    processing_time: Optional[str] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=2000)
    category: str
    subcategory: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=1)
    original_price: Optional[float] = Field(None, ge=0)
    images: List[str] = Field(default_factory=list)
    variants: List[dict] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    inventory: InventoryUpdate
    dimensions: Optional[Dimensions] = None
    shipping: Optional[ShippingInfo] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return check_choice(v, PRODUCT_CATEGORIES, "category")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    category: Optional[str] = None
    subcategory: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=1)
    original_price: Optional[float] = Field(None, ge=0)
    images: Optional[List[str]] = None
    variants: Optional[List[dict]] = None
    materials: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    inventory: Optional[InventoryUpdate] = None
    dimensions: Optional[Dimensions] = None
    shipping: Optional[ShippingInfo] = None
    is_active: Optional[bool] = None

    @field_validator("name", "description", "category", "price", "is_active", mode="before")
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return check_choice(v, PRODUCT_CATEGORIES, "category")


def derive_discount(price, original_price) -> int:
    """Percentage off the original price, 0 when there is no markdown"""
    if not original_price or float(original_price) <= float(price):
        return 0
    return round((float(original_price) - float(price)) / float(original_price) * 100)


class ProductStats(BaseModel):
    views: int = 0
    likes: int = 0
    shares: int = 0
    orders: int = 0


class ProductRating(BaseModel):
    average: float = 0.0
    count: int = 0


class ArtisanSummary(BaseModel):
    id: int
    business_name: str
    craft_type: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    is_verified: bool = False
    rating_average: float = 0.0


class Product(BaseModel):
    """
    Product projection returned by the API

    Built from the ORM row with `Product.from_model(row)`; money columns are
    DECIMAL in the database and floats here.
    """

    id: int
    artisan_id: int
    artisan: Optional[ArtisanSummary] = None
    name: str
    description: str
    category: str
    subcategory: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    discount: int = 0
    images: List[str] = []
    variants: List[dict] = []
    materials: List[str] = []
    colors: List[str] = []
    tags: List[str] = []
    inventory: Inventory
    dimensions: Optional[dict] = None
    shipping: Optional[dict] = None
    is_active: bool
    is_approved: bool
    is_featured: bool
    in_stock: bool
    stats: ProductStats
    rating: ProductRating
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, product, include_artisan: bool = True) -> "Product":
        artisan = None
        if include_artisan and product.artisan is not None:
            artisan = ArtisanSummary(
                id=product.artisan.id,
                business_name=product.artisan.business_name,
                craft_type=product.artisan.craft_type,
                state=product.artisan.state,
                city=product.artisan.city,
                is_verified=product.artisan.is_verified,
                rating_average=product.artisan.rating_average or 0.0,
            )

        return cls(
            id=product.id,
            artisan_id=product.artisan_id,
            artisan=artisan,
            name=product.name,
            description=product.description,
            category=product.category,
            subcategory=product.subcategory,
            price=product.price,
            original_price=product.original_price,
            discount=product.discount or 0,
            images=product.images or [],
            variants=product.variants or [],
            materials=product.materials or [],
            colors=product.colors or [],
            tags=product.tags or [],
            inventory=Inventory.model_construct(
                total=product.inventory_total,
                available=product.inventory_available,
                reserved=product.inventory_reserved,
            ),
            dimensions=product.dimensions,
            shipping=product.shipping,
            is_active=product.is_active,
            is_approved=product.is_approved,
            is_featured=product.is_featured,
            in_stock=product.inventory_available > 0,
            stats=ProductStats(
                views=product.stats_views,
                likes=product.stats_likes,
                shares=product.stats_shares,
                orders=product.stats_orders,
            ),
            rating=ProductRating(average=product.rating_average or 0.0, count=product.rating_count or 0),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
