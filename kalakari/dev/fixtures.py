"""
Development fixtures

In-memory users, artisans, products and orders. They back the `/api/dev/*`
routes (frontend work without a database) and are what `python -m
kalakari.seed` writes into a real one.

Ids are fixture-local; seeding lets the database assign its own.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from kalakari.services.order_service import calculate_pricing

MOCK_PASSWORD = "Kalakari2024!"

USERS: List[dict] = [
    {"id": 1, "name": "Admin User", "email": "admin@kalakari.shop", "phone": "9876543210", "role": "admin"},
    {"id": 2, "name": "Priya Sharma", "email": "priya@gmail.com", "phone": "9876543211", "role": "customer"},
    {"id": 3, "name": "Arjun Patel", "email": "arjun@gmail.com", "phone": "9876543212", "role": "customer"},
    {"id": 4, "name": "Sneha Reddy", "email": "sneha@gmail.com", "phone": "9876543213", "role": "customer"},
    {"id": 5, "name": "Raj Mehta", "email": "raj@craftville.com", "phone": "9876543214", "role": "artisan"},
    {"id": 6, "name": "Meera Singh", "email": "meera@handicrafts.com", "phone": "9876543215", "role": "artisan"},
    {"id": 7, "name": "Vikram Kumar", "email": "vikram@woodcraft.com", "phone": "9876543216", "role": "artisan"},
]

ARTISANS: List[dict] = [
    {
        "id": 1,
        "user_id": 5,
        "business_name": "Raj's Craft Corner",
        "description": "Traditional Rajasthan pottery and handicrafts",
        "craft_type": "Pottery",
        "state": "Rajasthan",
        "city": "Jaipur",
        "experience": 10,
        "languages": ["Hindi", "English"],
        "commission_rate": 15.0,
        "rating_average": 4.5,
        "rating_count": 20,
    },
    {
        "id": 2,
        "user_id": 6,
        "business_name": "Meera's Textile Studio",
        "description": "Authentic Gujarat textiles and embroidery",
        "craft_type": "Textiles",
        "state": "Gujarat",
        "city": "Ahmedabad",
        "experience": 12,
        "languages": ["Gujarati", "Hindi", "English"],
        "commission_rate": 18.0,
        "rating_average": 4.8,
        "rating_count": 35,
    },
    {
        "id": 3,
        "user_id": 7,
        "business_name": "Vikram's Wood Works",
        "description": "Kerala wooden sculptures and furniture",
        "craft_type": "Woodwork",
        "state": "Kerala",
        "city": "Kochi",
        "experience": 8,
        "languages": ["Malayalam", "English"],
        "commission_rate": 12.0,
        "rating_average": 4.6,
        "rating_count": 18,
    },
]

# (category, artisan id, [(item, base price, materials, colors)])
_CATALOG = [
    ("Pottery", 1, [
        ("Terracotta Vase", 1200, ["Terracotta"], ["Brown", "Red"]),
        ("Clay Lamp", 250, ["Clay"], ["Brown"]),
        ("Ceramic Mug", 450, ["Ceramic"], ["White", "Blue"]),
    ]),
    ("Textiles", 2, [
        ("Block Print Scarf", 800, ["Cotton"], ["Indigo", "White"]),
        ("Bandhani Dupatta", 1500, ["Silk"], ["Red", "Yellow"]),
        ("Embroidered Cushion Cover", 650, ["Cotton"], ["Green", "Gold"]),
    ]),
    ("Woodwork", 3, [
        ("Carved Elephant", 2200, ["Rosewood"], ["Brown"]),
        ("Wooden Jewelry Box", 950, ["Teak"], ["Brown", "Gold"]),
        ("Spice Box", 700, ["Mango Wood"], ["Natural"]),
    ]),
]

_STATES = ("Rajasthan", "Gujarat", "Kerala", "West Bengal", "Tamil Nadu", "Odisha")

_IMAGE = "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=800&h=600&fit=crop&q=80"


def _build_products() -> List[dict]:
    products = []
    for category, artisan_id, items in _CATALOG:
        for item, base_price, materials, colors in items:
            for offset, state in enumerate(_STATES):
                product_id = len(products) + 1
                price = base_price + offset * 50
                total = 10 + (product_id % 7) * 5
                products.append({
                    "id": product_id,
                    "artisan_id": artisan_id,
                    "name": f"{state} {item}",
                    "description": f"Handcrafted {item.lower()} made by artisans in {state}.",
                    "category": category,
                    "price": Decimal(price),
                    "original_price": Decimal(price + 200) if product_id % 3 == 0 else None,
                    "images": [_IMAGE],
                    "materials": materials,
                    "colors": colors,
                    "tags": [category.lower(), state.lower()],
                    "inventory_total": total,
                    "inventory_available": total,
                    "inventory_reserved": 0,
                    "is_approved": True,
                    "is_featured": product_id % 9 == 1,
                    "stats_views": (product_id * 37) % 500,
                    "stats_orders": product_id % 11,
                    "rating_average": 4.0 + (product_id % 10) / 10,
                    "rating_count": product_id % 25,
                })
    return products


PRODUCTS: List[dict] = _build_products()

_SHIPPING_ADDRESS = {
    "name": "Priya Sharma",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
    "phone": "9876543211",
}

# (order id, customer id, [(product id, quantity)], status, payment status)
_ORDER_SPECS = [
    (1, 2, [(1, 1), (19, 1)], "processing", "completed"),
    (2, 2, [(40, 2)], "delivered", "completed"),
    (3, 3, [(7, 3)], "pending", "pending"),
    (4, 4, [(25, 1), (50, 1)], "shipped", "completed"),
]


def _build_orders() -> List[dict]:
    orders = []
    for order_id, customer_id, lines, status, payment_status in _ORDER_SPECS:
        items = []
        for product_id, quantity in lines:
            product = get_product(product_id)
            items.append({
                "product_id": product_id,
                "artisan_id": product["artisan_id"],
                "product_name": product["name"],
                "quantity": quantity,
                "unit_price": product["price"],
            })
        pricing = calculate_pricing(sum(i["unit_price"] * i["quantity"] for i in items))
        orders.append({
            "id": order_id,
            "order_number": f"ORD20240301{order_id:04d}",
            "customer_id": customer_id,
            "items": items,
            "pricing": pricing,
            "status": status,
            "payment_status": payment_status,
            "payment_method": "razorpay",
            "shipping_address": dict(_SHIPPING_ADDRESS),
            "created_at": datetime(2024, 3, order_id, tzinfo=timezone.utc),
        })
    return orders


def get_user(user_id: int) -> Optional[dict]:
    return next((u for u in USERS if u["id"] == user_id), None)


def get_user_by_email(email: str) -> Optional[dict]:
    email = email.strip().lower()
    return next((u for u in USERS if u["email"] == email), None)


def get_artisan(artisan_id: int) -> Optional[dict]:
    return next((a for a in ARTISANS if a["id"] == artisan_id), None)


def get_product(product_id: int) -> Optional[dict]:
    return next((p for p in PRODUCTS if p["id"] == product_id), None)


ORDERS: List[dict] = _build_orders()

