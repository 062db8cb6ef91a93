"""
Saved addresses (customer self-service)

The first address a user saves becomes the default; setting a new default
clears the flag on the others.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kalakari.core.auth import get_current_user
from kalakari.core.database import get_db
from kalakari.domain.common import envelope
from kalakari.domain.user import AddressIn, AddressOut, AddressUpdate
from kalakari.models import Address, User
from kalakari.repositories import UserRepository

router = APIRouter(prefix="/api/addresses", tags=["Addresses"])


def _addresses(user: User) -> list:
    return [AddressOut.model_validate(a).model_dump() for a in user.addresses]


def _get_address(repo: UserRepository, user: User, address_id: int) -> Address:
    address = repo.find_address(user.id, address_id)
    if not address:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return address


@router.get("")
async def list_addresses(user: User = Depends(get_current_user)):
    return envelope({"addresses": _addresses(user)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_address(payload: AddressIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = UserRepository(db)
    address = Address(**payload.model_dump())
    user.addresses.append(address)

    if payload.is_default or len(user.addresses) == 1:
        repo.set_default_address(user, address)

    db.commit()
    db.refresh(user)
    return envelope({"addresses": _addresses(user)}, message="Address added successfully")


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    payload: AddressUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = UserRepository(db)
    address = _get_address(repo, user, address_id)

    changes = payload.model_dump(exclude_unset=True)
    make_default = changes.pop("is_default", None)
    for field, value in changes.items():
        setattr(address, field, value)
    if make_default:
        repo.set_default_address(user, address)

    db.commit()
    db.refresh(user)
    return envelope({"addresses": _addresses(user)}, message="Address updated successfully")


@router.delete("/{address_id}")
async def delete_address(address_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = UserRepository(db)
    address = _get_address(repo, user, address_id)
    was_default = address.is_default

    user.addresses.remove(address)
    if was_default and user.addresses:
        repo.set_default_address(user, user.addresses[0])

    db.commit()
    db.refresh(user)
    return envelope({"addresses": _addresses(user)}, message="Address deleted successfully")


@router.put("/{address_id}/default")
async def set_default_address(address_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = UserRepository(db)
    address = _get_address(repo, user, address_id)
    repo.set_default_address(user, address)

    db.commit()
    db.refresh(user)
    return envelope({"addresses": _addresses(user)}, message="Default address updated")
