import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.models.user import User, get_db
from app.schemas.user import ProfileOut, RegisterSchema
from app.utils.security import get_current_user, hash_password, is_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def to_profile_out(user: User) -> ProfileOut:
    return ProfileOut(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        isAdmin=is_admin(user),
    )


@router.post("/register", response_model=ProfileOut, status_code=201)
def register(payload: RegisterSchema, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(
        name=payload.name,
        email=email,
        phone=payload.phone,
        password=hash_password(payload.password),
        role="user",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return to_profile_out(user)


@router.get("/me", response_model=ProfileOut)
def me(current_user: User = Depends(get_current_user)):
    return to_profile_out(current_user)
