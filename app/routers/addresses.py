from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from app.models.address import Address
from app.models.user import User, get_db
from app.schemas.address import AddressCreate, AddressOut, AddressUpdate
from app.utils.security import get_current_user


router = APIRouter()


def _to_out(a: Address) -> AddressOut:
    return AddressOut(
        id=a.id,
        name=a.name,
        phone=a.phone,
        address=a.address,
        city=a.city,
        state=a.state,
        pincode=a.pincode,
        isDefault=bool(a.is_default),
    )


def _clear_default(db: Session, user_id: int):
    # At most one default address per user
    db.query(Address).filter(Address.user_id == user_id, Address.is_default.is_(True)).update(
        {Address.is_default: False}, synchronize_session="fetch"
    )


def _get_own_address(db: Session, id: int, user: User) -> Address:
    address = db.query(Address).filter(Address.id == id, Address.user_id == user.id).first()
    if not address:
        raise HTTPException(status_code=404, detail="Address not found")
    return address


def _apply_payload(address: Address, payload: AddressCreate) -> None:
    address.name = payload.name.strip()
    address.phone = payload.phone.strip()
    address.address = payload.address.strip()
    address.city = payload.city.strip()
    address.state = payload.state.strip()
    address.pincode = payload.pincode.strip()
    address.is_default = payload.isDefault


@router.get("/", response_model=List[AddressOut])
def get_user_addresses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    addresses = (
        db.query(Address)
        .filter(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
        .all()
    )
    return [_to_out(a) for a in addresses]


@router.post("/", response_model=AddressOut, status_code=201)
def create_address(
    payload: AddressCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if payload.isDefault:
        _clear_default(db, current_user.id)
    address = Address(user_id=current_user.id)
    _apply_payload(address, payload)
    db.add(address)
    db.commit()
    db.refresh(address)
    return _to_out(address)


@router.put("/{id}", response_model=AddressOut)
def update_address(
    id: int,
    payload: AddressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    address = _get_own_address(db, id, current_user)
    if payload.isDefault:
        _clear_default(db, current_user.id)
    _apply_payload(address, payload)
    db.commit()
    db.refresh(address)
    return _to_out(address)


@router.delete("/{id}")
def delete_address(id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    address = _get_own_address(db, id, current_user)
    db.delete(address)
    db.commit()
    return {"message": "Address deleted"}
