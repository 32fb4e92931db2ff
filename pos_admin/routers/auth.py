import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from pos_admin.database import Datastore, get_datastore, get_db
from pos_admin.models.users import User, ROLE_ADMIN, ROLE_STAFF
from pos_admin.schemas.user import RoleUpdate, TokenResponse, UserCreate, UserLogin, UserResponse
from pos_admin.core.auth import authenticate, get_admin_user, get_current_user
from pos_admin.core.errors import Conflict, Forbidden, NotFound
from pos_admin.core.hashing import hash_password
from pos_admin.core.jwt import create_user_token
from pos_admin.core.rate_limiter import limiter

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

logger = logging.getLogger("app")


# ---------------- REGISTER ----------------
@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
def register(
    request: Request,
    user_data: UserCreate,
    datastore: Datastore = Depends(get_datastore),
):
    if user_data.role == ROLE_ADMIN:
        logger.warning(f"Refused self-registration with admin role email={user_data.email}")
        raise Forbidden("Admin role cannot be self-assigned")

    email = user_data.email.strip().lower()

    with datastore.transaction() as db:
        if db.query(User).filter(User.email == email).first():
            raise Conflict("User already exists")

        user = User(
            email=email,
            password_hash=hash_password(user_data.password),
            name=user_data.name,
            role=ROLE_STAFF,
        )
        db.add(user)
        db.flush()
        db.refresh(user)

    logger.info(f"User registered id={user.id} email={user.email}")

    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": user,
    }


# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login", response_model=TokenResponse)
@limiter.limit("5/minute")
def login(
    request: Request,
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    user = authenticate(db, credentials.email, credentials.password)

    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": user,
    }


# ---------------- VERIFY ----------------
@router.get("/verify")
def verify_token(current_user: User = Depends(get_current_user)):
    return {
        "valid": True,
        "user": UserResponse.model_validate(current_user),
    }


# ---------------- ROLE MANAGEMENT (ADMIN) ----------------
@router.put("/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    role_data: RoleUpdate,
    datastore: Datastore = Depends(get_datastore),
    admin: User = Depends(get_admin_user),
):
    with datastore.transaction() as db:
        user = db.get(User, user_id)

        if not user:
            raise NotFound("User not found")

        if user.id == admin.id and role_data.role != ROLE_ADMIN:
            raise Conflict("Admins cannot revoke their own admin role")

        user.role = role_data.role

    logger.info(f"User role changed id={user_id} role={role_data.role} by={admin.id}")
    return user
