"""
Artisan Domain Models

Request schemas for artisan onboarding and the public/private projections of
an artisan profile. Bank details and identity documents only ever appear in
the private projection returned to the artisan themself (and to admins).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import CRAFT_TYPES, INDIAN_STATES, LANGUAGES, check_choice, reject_null


class BankDetails(BaseModel):
    account_holder_name: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, pattern=r"^[0-9]{9,18}$")
    ifsc_code: Optional[str] = Field(None, pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$")
    bank_name: Optional[str] = Field(None, max_length=100)


class Documents(BaseModel):
    aadhar_number: Optional[str] = Field(None, pattern=r"^[0-9]{12}$")
    pan_number: Optional[str] = Field(None, pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")
    gst_number: Optional[str] = Field(None, max_length=15)


class SocialMedia(BaseModel):
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    website: Optional[str] = None


class ArtisanCreate(BaseModel):
    business_name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    craft_type: str
    state: str
    city: str = Field(..., min_length=1, max_length=100)
    experience: int = Field(0, ge=0, le=50)
    languages: List[str] = Field(default_factory=list)
    social_media: Optional[SocialMedia] = None
    profile_image: Optional[str] = None
    gallery: List[str] = Field(default_factory=list)
    bank_details: Optional[BankDetails] = None
    documents: Optional[Documents] = None

    @field_validator("craft_type")
    @classmethod
    def validate_craft_type(cls, v):
        return check_choice(v, CRAFT_TYPES, "craft type")

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return check_choice(v, INDIAN_STATES, "state")

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v):
        for language in v:
            check_choice(language, LANGUAGES, "language")
        return v


class ArtisanUpdate(BaseModel):
    business_name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    craft_type: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    experience: Optional[int] = Field(None, ge=0, le=50)
    languages: Optional[List[str]] = None
    social_media: Optional[SocialMedia] = None
    profile_image: Optional[str] = None
    gallery: Optional[List[str]] = None

    @field_validator(
        "business_name", "description", "craft_type", "state", "city", "experience", mode="before"
    )
    @classmethod
    def check_not_null(cls, v, info):
        return reject_null(v, info)

    @field_validator("craft_type")
    @classmethod
    def validate_craft_type(cls, v):
        return check_choice(v, CRAFT_TYPES, "craft type")

    @field_validator("state")
    @classmethod
    def validate_state(cls, v):
        return check_choice(v, INDIAN_STATES, "state")

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v):
        for language in v or []:
            check_choice(language, LANGUAGES, "language")
        return v


class ApprovalRequest(BaseModel):
    is_approved: bool
    notes: Optional[str] = Field(None, max_length=500)


class Rating(BaseModel):
    average: float = 0.0
    count: int = 0


class ArtisanPublic(BaseModel):
    """Artisan profile as shown to shoppers"""

    id: int
    user_id: int
    name: Optional[str] = None
    business_name: str
    description: str
    craft_type: str
    state: str
    city: str
    experience: int
    languages: List[str] = []
    social_media: Optional[dict] = None
    profile_image: Optional[str] = None
    gallery: List[str] = []
    is_verified: bool
    is_approved: bool
    rating: Rating
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def _fields_from_model(cls, artisan) -> dict:
        return dict(
            id=artisan.id,
            user_id=artisan.user_id,
            name=artisan.user.name if artisan.user else None,
            business_name=artisan.business_name,
            description=artisan.description,
            craft_type=artisan.craft_type,
            state=artisan.state,
            city=artisan.city,
            experience=artisan.experience or 0,
            languages=artisan.languages or [],
            social_media=artisan.social_media,
            profile_image=artisan.profile_image,
            gallery=artisan.gallery or [],
            is_verified=artisan.is_verified,
            is_approved=artisan.is_approved,
            rating=Rating(average=artisan.rating_average or 0.0, count=artisan.rating_count or 0),
            created_at=artisan.created_at,
        )

    @classmethod
    def from_model(cls, artisan) -> "ArtisanPublic":
        return cls(**cls._fields_from_model(artisan))

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class ArtisanPrivate(ArtisanPublic):
    """Full profile, for the owning artisan and admins"""

    email: Optional[str] = None
    phone: Optional[str] = None
    bank_details: Optional[dict] = None
    documents: Optional[dict] = None
    commission_rate: float = 10.0
    total_sales: float = 0.0

    @classmethod
    def from_model(cls, artisan) -> "ArtisanPrivate":
        fields = cls._fields_from_model(artisan)
        fields.update(
            email=artisan.user.email if artisan.user else None,
            phone=artisan.user.phone if artisan.user else None,
            bank_details=artisan.bank_details,
            documents=artisan.documents,
            commission_rate=artisan.commission_rate,
            total_sales=artisan.total_sales or 0,
        )
        return cls(**fields)
