"""
Journal (editorial) API Endpoints
Published stories are public; writing is admin-only.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kalakari.core.auth import require_admin
from kalakari.core.database import get_db
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.journal import JournalCreate, JournalEntry as JournalOut, JournalUpdate
from kalakari.models import JournalEntry, User
from kalakari.repositories import JournalRepository

router = APIRouter(prefix="/api/journal", tags=["Journal"])


def _derive_excerpt(content: str, length: int = 200) -> str:
    text = " ".join(content.split())
    return text if len(text) <= length else text[:length].rsplit(" ", 1)[0] + "..."


@router.get("")
async def list_entries(
    category: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    entries, total = JournalRepository(db).find_published(
        category=category, featured=featured, search=search, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "entries": [JournalOut.from_model(e).to_dict() for e in entries],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/{entry_id}")
async def get_entry(entry_id: int, db: Session = Depends(get_db)):
    repo = JournalRepository(db)
    entry = repo.find_by_id(entry_id)
    if not entry or not entry.is_published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")

    repo.increment_views(entry)
    db.commit()
    return envelope({"entry": JournalOut.from_model(entry).to_dict()})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_entry(payload: JournalCreate, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    data = payload.model_dump()
    if not data.get("excerpt"):
        data["excerpt"] = _derive_excerpt(payload.content)

    repo = JournalRepository(db)
    entry = repo.add(JournalEntry(author_id=admin.id, **data))
    db.commit()

    return envelope({"entry": JournalOut.from_model(repo.find_by_id(entry.id)).to_dict()},
                    message="Journal entry created successfully")


@router.put("/{entry_id}")
async def update_entry(
    entry_id: int,
    payload: JournalUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    repo = JournalRepository(db)
    entry = repo.find_by_id(entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)

    db.commit()
    db.refresh(entry)
    return envelope({"entry": JournalOut.from_model(entry).to_dict()}, message="Journal entry updated successfully")


@router.delete("/{entry_id}")
async def delete_entry(entry_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    repo = JournalRepository(db)
    entry = repo.find_by_id(entry_id)
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")

    repo.delete(entry)
    db.commit()
    return envelope(message="Journal entry deleted successfully")
