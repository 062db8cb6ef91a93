"""
Contact-form schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .catalog import check_choice, reject_null
from .user import PHONE_PATTERN

CONTACT_CATEGORIES = ("general", "support", "sales", "partnership", "artisan", "complaint")
CONTACT_STATUSES = ("new", "in-progress", "resolved", "closed")

# Categories that jump the queue
HIGH_PRIORITY_CATEGORIES = ("complaint", "artisan")


def priority_for(category: str) -> str:
    return "high" if category in HIGH_PRIORITY_CATEGORIES else "medium"


def contact_reference(contact_id: int) -> str:
    return f"CONT-{contact_id:06d}"


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    subject: str = Field(..., min_length=5, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)
    category: str = "general"

    @field_validator("name", "subject", "message")
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return check_choice(v, CONTACT_CATEGORIES, "category")


class ContactUpdate(BaseModel):
    status: Optional[str] = None
    response: Optional[str] = Field(None, max_length=2000)
    admin_notes: Optional[str] = Field(None, max_length=1000)
    tags: Optional[List[str]] = None

    @field_validator("status", mode="before")
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return check_choice(v, CONTACT_STATUSES, "status")


class ContactMessage(BaseModel):
    id: int
    reference: str
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    category: str
    status: str
    priority: str
    response: Optional[str] = None
    admin_notes: Optional[str] = None
    tags: List[str] = []
    updated_by: Optional[int] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, c) -> "ContactMessage":
        return cls(
            id=c.id,
            reference=contact_reference(c.id),
            name=c.name,
            email=c.email,
            phone=c.phone,
            subject=c.subject,
            message=c.message,
            category=c.category,
            status=c.status,
            priority=c.priority,
            response=c.response,
            admin_notes=c.admin_notes,
            tags=c.tags or [],
            updated_by=c.updated_by,
            ip_address=c.ip_address,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
