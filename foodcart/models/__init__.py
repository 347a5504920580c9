"""Models package - exports all SQLAlchemy models."""
# Catalog Models
from foodcart.models.restaurant import Restaurant
from foodcart.models.menu_item import MenuItem
from foodcart.models.menu_item_variant import MenuItemVariant, MenuItemVariantOption

__all__ = [
    'Restaurant', 'MenuItem', 'MenuItemVariant', 'MenuItemVariantOption',
]
