"""
Testimonial schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .catalog import reject_null


class TestimonialCreate(BaseModel):
    product_id: int
    content: str = Field(..., min_length=10, max_length=1000)
    rating: int = Field(..., ge=1, le=5)
    images: List[str] = Field(default_factory=list, max_length=5)


class TestimonialUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=10, max_length=1000)
    rating: Optional[int] = Field(None, ge=1, le=5)

    @field_validator("content", "rating", mode="before")
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)


class TestimonialModeration(BaseModel):
    is_approved: bool
    is_featured: bool = False
    admin_notes: Optional[str] = Field(None, max_length=500)


class Testimonial(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    user_id: int
    user_name: Optional[str] = None
    content: str
    rating: int
    images: List[str] = []
    is_approved: bool
    is_featured: bool
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, t) -> "Testimonial":
        return cls(
            id=t.id,
            product_id=t.product_id,
            product_name=t.product.name if t.product else None,
            user_id=t.user_id,
            user_name=t.user.name if t.user else None,
            content=t.content,
            rating=t.rating,
            images=t.images or [],
            is_approved=t.is_approved,
            is_featured=t.is_featured,
            approved_at=t.approved_at,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
