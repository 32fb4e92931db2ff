# pos_admin/models/users.py

from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime
from sqlalchemy.sql import func

from pos_admin.database import Base

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)

    # Self-registration always yields staff; admin is granted by another admin
    role = Column(String, nullable=False, default=ROLE_STAFF)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'staff')", name="ck_users_role_valid"),
    )
