# pos_admin/models/sales.py

from sqlalchemy import Column, Index, Integer, DateTime, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from pos_admin.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False, default="cash")

    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    user = relationship("User")

    @property
    def user_name(self):
        return self.user.name if self.user else None

    __table_args__ = (
        Index("ix_sales_user_created", "user_id", "created_at"),
    )
