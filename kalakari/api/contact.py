"""
Contact API Endpoints
Anyone may write in; the inbox is admin-only. Nothing is e-mailed.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from kalakari.core.auth import require_admin
from kalakari.core.database import get_db
from kalakari.core.rate_limit import get_client_ip
from kalakari.domain.common import Pagination, envelope, page_offset
from kalakari.domain.contact import (
    CONTACT_STATUSES, ContactCreate, ContactMessage as ContactOut, ContactUpdate, contact_reference, priority_for,
)
from kalakari.models import ContactMessage, User
from kalakari.repositories import ContactRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["Contact"])


def _get_or_404(repo: ContactRepository, contact_id: int) -> ContactMessage:
    contact = repo.find_by_id(contact_id)
    if not contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact submission not found")
    return contact


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_contact(payload: ContactCreate, request: Request, db: Session = Depends(get_db)):
    contact = ContactRepository(db).add(ContactMessage(
        **payload.model_dump(),
        priority=priority_for(payload.category),
        ip_address=get_client_ip(request),
        user_agent=(request.headers.get("user-agent") or "")[:500],
    ))
    db.commit()

    logger.info(f"Contact submission {contact.id} received ({contact.category}, {contact.priority} priority)")
    return envelope(
        {"contact_id": contact.id, "reference": contact_reference(contact.id)},
        message="Thank you for your message! We will get back to you within 24-48 hours.",
    )


@router.get("")
async def list_contacts(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    items, total = ContactRepository(db).find_all(
        status=status_filter, category=category, search=search, limit=limit, offset=page_offset(page, limit)
    )
    return envelope({
        "contacts": [ContactOut.from_model(c).to_dict() for c in items],
        "pagination": Pagination.build(page, limit, total).model_dump(),
    })


@router.get("/stats")
async def contact_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    counts = ContactRepository(db).count_by_status()
    stats = {s: counts.get(s, 0) for s in CONTACT_STATUSES}
    stats["total"] = sum(counts.values())
    return envelope({"stats": stats})


@router.get("/{contact_id}")
async def get_contact(contact_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    contact = _get_or_404(ContactRepository(db), contact_id)
    return envelope({"contact": ContactOut.from_model(contact).to_dict()})


@router.put("/{contact_id}")
async def update_contact(
    contact_id: int,
    payload: ContactUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    contact = _get_or_404(ContactRepository(db), contact_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(contact, field, value)
    contact.updated_by = admin.id

    db.commit()
    db.refresh(contact)
    return envelope({"contact": ContactOut.from_model(contact).to_dict()},
                    message="Contact submission updated successfully")


@router.delete("/{contact_id}")
async def delete_contact(contact_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    repo = ContactRepository(db)
    repo.delete(_get_or_404(repo, contact_id))
    db.commit()
    return envelope(message="Contact submission deleted successfully")
