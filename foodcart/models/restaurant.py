"""Restaurant model."""
import uuid

from sqlalchemy import Column, String, Integer, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from foodcart.database import Base
from foodcart.services.cart_types import Restaurant as RestaurantRef


def new_id() -> str:
    return str(uuid.uuid4())


class Restaurant(Base):
    """
    Restaurant offering a menu.

    Delivery fee and minimum order are integer cents and are copied into a
    cart when the cart is created.
    """

    __tablename__ = 'restaurant'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    delivery_fee_cents = Column(Integer, nullable=False, default=0)
    minimum_order_cents = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    menu_items = relationship('MenuItem', back_populates='restaurant', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Restaurant(id={self.id}, name='{self.name}')>"

    def to_domain(self) -> RestaurantRef:
        return RestaurantRef(
            id=self.id,
            name=self.name,
            delivery_fee=self.delivery_fee_cents or 0,
            minimum_order=self.minimum_order_cents or 0,
        )
