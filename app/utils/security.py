import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User, get_db

logger = logging.getLogger(__name__)

http_basic = HTTPBasic()

# Argon2id with the library defaults
password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    try:
        return password_hasher.verify(stored, password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


def is_admin_email(email: str) -> bool:
    if not email:
        return False
    return email.strip().lower() in get_settings().admin_emails


def is_admin(user: User) -> bool:
    return user.role == "admin" or is_admin_email(user.email)


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.email == credentials.username.strip().lower()).first()
    if not user or not verify_password(credentials.password, user.password):
        logger.info("Rejected credentials for %s", credentials.username)
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
