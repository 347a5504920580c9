"""Catalog Service - menu and restaurant lookups for the cart."""

import logging
from typing import List

from sqlalchemy.orm import Session, selectinload

from foodcart.exceptions import BusinessLogicError, NotFoundError
from foodcart.models import MenuItem, MenuItemVariant, Restaurant
from foodcart.services import cart_types

logger = logging.getLogger(__name__)


def get_restaurant(session: Session, restaurant_id: str) -> cart_types.Restaurant:
    """Restaurant as a cart input; raises NotFoundError when missing or inactive."""
    restaurant = session.query(Restaurant).filter(
        Restaurant.id == restaurant_id,
        Restaurant.active == True  # noqa: E712
    ).first()

    if not restaurant:
        raise NotFoundError('Restaurant not found.')
    return restaurant.to_domain()


def get_menu_item(session: Session, menu_item_id: str) -> cart_types.MenuItem:
    """Menu item with its variant groups and options loaded in one go."""
    item = (session.query(MenuItem)
            .options(selectinload(MenuItem.variants).selectinload(MenuItemVariant.options))
            .filter(MenuItem.id == menu_item_id)
            .first())

    if not item:
        raise NotFoundError('Menu item not found.')
    return item.to_domain()


def get_orderable_item(session: Session, menu_item_id: str) -> cart_types.MenuItem:
    """Like ``get_menu_item`` but refuses items that cannot be ordered right now."""
    item = get_menu_item(session, menu_item_id)
    if not item.is_available:
        logger.info(f"[CATALOG] rejected unavailable menu item {menu_item_id}")
        raise BusinessLogicError(f'"{item.name}" is currently not available.')
    return item


def list_menu(session: Session, restaurant_id: str) -> List[cart_types.MenuItem]:
    """All menu items of a restaurant, ordered by name."""
    items = (session.query(MenuItem)
             .options(selectinload(MenuItem.variants).selectinload(MenuItemVariant.options))
             .filter(MenuItem.restaurant_id == restaurant_id)
             .order_by(MenuItem.name)
             .all())
    return [item.to_domain() for item in items]
