"""SQLAlchemy model for catalog products."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, Numeric, String, func
from sqlalchemy.types import DateTime

from app.db.base import Base

NAME_MAX_LENGTH = 100
PRICE_PRECISION = 10
PRICE_SCALE = 2
# Largest value Numeric(PRICE_PRECISION, PRICE_SCALE) holds: 99999999.99
PRICE_MAX = Decimal(10) ** (PRICE_PRECISION - PRICE_SCALE) - Decimal(1).scaleb(-PRICE_SCALE)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    price = Column(Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False)
    availability = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (CheckConstraint("price > 0", name="ck_products_price_positive"),)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} price={self.price}>"
