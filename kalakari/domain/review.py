"""
Review schemas
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=100)
    comment: str = Field(..., min_length=1, max_length=1000)
    images: List[str] = Field(default_factory=list, max_length=5)


class ReviewResponse(BaseModel):
    response: str = Field(..., min_length=1, max_length=500)


class ReviewReportRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class ReviewModeration(BaseModel):
    status: Literal["approved", "rejected"]
    notes: Optional[str] = Field(None, max_length=200)


class ArtisanReply(BaseModel):
    text: str
    responded_by: Optional[int] = None
    responded_at: Optional[datetime] = None


class Review(BaseModel):
    id: int
    product_id: int
    customer_id: int
    customer_name: Optional[str] = None
    rating: int
    title: str
    comment: str
    images: List[str] = []
    is_verified: bool
    helpful_count: int
    response: Optional[ArtisanReply] = None
    status: str
    report_count: int = 0
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, review) -> "Review":
        response = None
        if review.response_text:
            response = ArtisanReply(
                text=review.response_text,
                responded_by=review.responded_by,
                responded_at=review.responded_at,
            )
        return cls(
            id=review.id,
            product_id=review.product_id,
            customer_id=review.customer_id,
            customer_name=review.customer.name if review.customer else None,
            rating=review.rating,
            title=review.title,
            comment=review.comment,
            images=review.images or [],
            is_verified=review.is_verified,
            helpful_count=review.helpful_count,
            response=response,
            status=review.status,
            report_count=len(review.reports),
            created_at=review.created_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
