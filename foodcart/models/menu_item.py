"""Menu item model."""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from foodcart.database import Base
from foodcart.models.restaurant import new_id
from foodcart.services.cart_types import MenuItem as MenuItemRef


class MenuItem(Base):
    """Menu item model."""

    __tablename__ = 'menu_item'

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), ForeignKey('restaurant.id'), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    image_url = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    restaurant = relationship('Restaurant', back_populates='menu_items')
    variants = relationship(
        'MenuItemVariant',
        back_populates='menu_item',
        cascade='all, delete-orphan',
        order_by='MenuItemVariant.position',
    )

    def __repr__(self):
        return f"<MenuItem(id={self.id}, name='{self.name}', price_cents={self.price_cents})>"

    def to_domain(self) -> MenuItemRef:
        """Structural copy used by the cart, variants included."""
        return MenuItemRef(
            id=self.id,
            name=self.name,
            base_price=self.price_cents,
            restaurant_id=self.restaurant_id,
            is_available=bool(self.is_available),
            image_url=self.image_url,
            variant_groups=tuple(variant.to_domain() for variant in self.variants),
        )
