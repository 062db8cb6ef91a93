"""
Cart and wishlist schemas
"""
import json
from typing import Optional

from pydantic import BaseModel, Field


class CartAdd(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1, le=100)
    variant: Optional[dict] = None


class CartUpdate(BaseModel):
    # 0 or less removes the line
    quantity: int = Field(..., le=100)
    variant: Optional[dict] = None


class CartRemove(BaseModel):
    variant: Optional[dict] = None


class WishlistAdd(BaseModel):
    product_id: int


def variant_key(variant: Optional[dict]) -> str:
    """Canonical string for a variant so {"a": 1, "b": 2} and {"b": 2, "a": 1} merge"""
    if not variant:
        return ""
    return json.dumps(variant, sort_keys=True, separators=(",", ":"))
