"""Menu item variant models (option groups and their options)."""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from foodcart.database import Base
from foodcart.models.restaurant import new_id
from foodcart.services.cart_types import VariantGroup, VariantOption


class MenuItemVariant(Base):
    """
    Variant group of a menu item (e.g. "Size", "Extras").

    max_selections == 1 renders as a single choice; NULL or 0 means no limit.
    """

    __tablename__ = 'menu_item_variant'

    id = Column(String(36), primary_key=True, default=new_id)
    menu_item_id = Column(String(36), ForeignKey('menu_item.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(80), nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    min_selections = Column(Integer, nullable=False, default=0)
    max_selections = Column(Integer, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    menu_item = relationship('MenuItem', back_populates='variants')
    options = relationship(
        'MenuItemVariantOption',
        back_populates='variant',
        cascade='all, delete-orphan',
        order_by='MenuItemVariantOption.position',
    )

    def __repr__(self):
        return f"<MenuItemVariant(id={self.id}, name='{self.name}', required={self.is_required})>"

    def to_domain(self) -> VariantGroup:
        return VariantGroup(
            id=self.id,
            menu_item_id=self.menu_item_id,
            name=self.name,
            is_required=bool(self.is_required),
            min_selections=self.min_selections or 0,
            max_selections=self.max_selections,
            options=tuple(option.to_domain() for option in self.options),
        )


class MenuItemVariantOption(Base):
    """One option of a variant group with its price modifier in cents."""

    __tablename__ = 'menu_item_variant_option'

    id = Column(String(36), primary_key=True, default=new_id)
    variant_id = Column(String(36), ForeignKey('menu_item_variant.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(80), nullable=False)
    price_modifier_cents = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    variant = relationship('MenuItemVariant', back_populates='options')

    def __repr__(self):
        return f"<MenuItemVariantOption(id={self.id}, name='{self.name}', modifier={self.price_modifier_cents})>"

    def to_domain(self) -> VariantOption:
        return VariantOption(
            id=self.id,
            group_id=self.variant_id,
            name=self.name,
            price_modifier=self.price_modifier_cents or 0,
            is_available=bool(self.is_available),
        )
