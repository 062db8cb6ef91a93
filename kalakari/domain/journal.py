"""
Journal (editorial) schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .catalog import JOURNAL_CATEGORIES, check_choice, reject_null


class JournalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=100)
    excerpt: Optional[str] = Field(None, max_length=300)
    category: str
    tags: List[str] = Field(default_factory=list)
    featured_image: Optional[str] = ""
    images: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return check_choice(v, JOURNAL_CATEGORIES, "journal category")


class JournalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=100)
    excerpt: Optional[str] = Field(None, max_length=300)
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    featured_image: Optional[str] = None
    images: Optional[List[str]] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator(
        "title", "content", "category", "is_published", "is_featured", mode="before"
    )
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return check_choice(v, JOURNAL_CATEGORIES, "journal category")


class JournalEntry(BaseModel):
    id: int
    title: str
    content: str
    excerpt: Optional[str] = None
    category: str
    tags: List[str] = []
    author_id: int
    author_name: Optional[str] = None
    featured_image: Optional[str] = None
    images: List[str] = []
    is_published: bool
    is_featured: bool
    views: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, entry) -> "JournalEntry":
        return cls(
            id=entry.id,
            title=entry.title,
            content=entry.content,
            excerpt=entry.excerpt,
            category=entry.category,
            tags=entry.tags or [],
            author_id=entry.author_id,
            author_name=entry.author.name if entry.author else None,
            featured_image=entry.featured_image,
            images=entry.images or [],
            is_published=entry.is_published,
            is_featured=entry.is_featured,
            views=entry.views,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
