"""
Catalog vocabularies

Allowed values for product categories, craft types, Indian states, languages
and journal categories. Shared by request validation and the dev fixtures.
"""

PRODUCT_CATEGORIES = (
    "Pottery", "Textiles", "Jewelry", "Woodwork", "Metalwork",
    "Leather", "Bamboo", "Stone", "Glass", "Paper", "Home Decor",
    "Kitchenware", "Accessories", "Clothing", "Footwear", "Festive Decor",
    "Traditional Crafts", "Paintings", "Diyas & Lamps", "Decorations",
    "Candles", "Traditional Items", "Other",
)

CRAFT_TYPES = (
    "Pottery", "Textiles", "Jewelry", "Woodwork", "Metalwork",
    "Leather", "Bamboo", "Stone", "Glass", "Paper", "Other",
)

INDIAN_STATES = (
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand",
    "Karnataka", "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur",
    "Meghalaya", "Mizoram", "Nagaland", "Odisha", "Punjab",
    "Rajasthan", "Sikkim", "Tamil Nadu", "Telangana", "Tripura",
    "Uttar Pradesh", "Uttarakhand", "West Bengal", "Delhi", "Puducherry",
)

LANGUAGES = (
    "Hindi", "English", "Bengali", "Telugu", "Marathi", "Tamil", "Gujarati",
    "Urdu", "Kannada", "Odia", "Punjabi", "Malayalam", "Assamese", "Other",
)

JOURNAL_CATEGORIES = (
    "artisan-spotlight", "craft-techniques", "cultural-heritage",
    "sustainability", "behind-scenes", "tutorials",
)

DIMENSION_UNITS = ("cm", "inches", "kg", "g", "lbs")


def check_choice(value, choices, label: str):
    """Pydantic validator helper: None passes, anything else must be in choices"""
    if value is not None and value not in choices:
        raise ValueError(f"Invalid {label}: {value}")
    return value


def reject_null(value, info):
    """
    Before-validator for partial updates: a field may be omitted, but an
    explicit null cannot clear a column the database requires
    """
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value
