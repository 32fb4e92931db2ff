# pos_admin/core/auth.py

from fastapi import Depends
from sqlalchemy.orm import Session

from pos_admin.database import get_db
from pos_admin.models.users import User, ROLE_ADMIN
from pos_admin.core.errors import AuthError, Forbidden
from pos_admin.core.hashing import verify_password
from pos_admin.core.jwt import decode_access_token
from pos_admin.core.oauth2 import oauth2_scheme


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()

    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials")

    return user


def authorize(db: Session, token: str | None) -> User:
    if not token:
        raise AuthError("Access token required")

    payload = decode_access_token(token)

    if payload is None:
        raise AuthError("Invalid or expired token")

    user_id = payload.get("sub")

    if user_id is None or not str(user_id).isdigit():
        raise AuthError("Invalid token payload")

    user = db.query(User).filter(User.id == int(user_id)).first()

    if user is None:
        raise AuthError("User not found")

    return user


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    return authorize(db, token)


def get_admin_user(
    current_user: User = Depends(get_current_user),
):
    if current_user.role != ROLE_ADMIN:
        raise Forbidden()
    return current_user
