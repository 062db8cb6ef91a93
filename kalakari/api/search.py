"""
Search API Endpoints
Typeahead suggestions and trending categories
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from kalakari.core.database import get_db
from kalakari.domain.common import envelope
from kalakari.repositories import ArtisanRepository, ProductRepository

router = APIRouter(prefix="/api/search", tags=["Search"])

MIN_QUERY_LENGTH = 2


@router.get("/suggestions")
async def suggestions(
    q: str = Query("", max_length=100),
    limit: int = Query(8, ge=1, le=20),
    db: Session = Depends(get_db),
):
    """
    Mixed product, artisan and category suggestions for a search box

    Queries shorter than two characters return an empty list.
    """
    term = q.strip()
    if len(term) < MIN_QUERY_LENGTH:
        return envelope({"suggestions": []})

    products_repo = ProductRepository(db)
    products = products_repo.search_names(term, limit=5)
    artisans = ArtisanRepository(db).search_names(term, limit=3)

    categories = []
    for category in [p.category for p in products] + products_repo.matching_categories(term, limit=3):
        if category not in categories:
            categories.append(category)

    results = [
        {
            "type": "product",
            "id": p.id,
            "text": p.name,
            "category": p.category,
            "image": (p.images or [None])[0],
        }
        for p in products
    ]
    results += [
        {
            "type": "artisan",
            "id": a.id,
            "text": a.business_name,
            "craft_type": a.craft_type,
        }
        for a in artisans
    ]
    results += [{"type": "category", "text": c} for c in categories[:3]]

    return envelope({"suggestions": results[:limit]})


@router.get("/trending")
async def trending(db: Session = Depends(get_db)):
    rows = ProductRepository(db).trending_categories(limit=6)
    return envelope({
        "trending": [
            {"category": category, "views": int(views or 0), "products": count}
            for category, views, count in rows
        ]
    })
