"""
Cart persistence.
Serializes the cart snapshot to a JSON blob and keeps it in a key-value store
(redis in deployments, a dict in tests) under one key per cart session.
Reads never fail: a missing or unreadable blob is reported as "no cart".
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, MutableMapping, Optional

import redis
from redis.exceptions import RedisError, ConnectionError, TimeoutError
from flask import Flask, current_app

from foodcart.exceptions import PersistenceReadError
from foodcart.services.cart_types import Cart, LineItem, SelectedOption

logger = logging.getLogger(__name__)

BLOB_VERSION = 1


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def _line_to_dict(item: LineItem) -> Dict[str, Any]:
    return {
        'menu_item_id': item.product_id,
        'name': item.name,
        'quantity': item.quantity,
        'base_price': item.base_price,
        'unit_price': item.unit_price,
        'total_price': item.total_price,
        'image_url': item.image_url,
        'selected_variant_option_ids': sorted(item.selected_option_ids),
        'selected_variant_options': [
            {'id': opt.id, 'name': opt.name, 'price_modifier_cents': opt.price_modifier}
            for opt in item.selected_options
        ],
    }


def cart_to_dict(cart: Cart) -> Dict[str, Any]:
    """Plain-dict form of a cart, also used for JSON responses."""
    return {
        'restaurant_id': cart.restaurant_id,
        'restaurant_name': cart.restaurant_name,
        'items': [_line_to_dict(item) for item in cart.items],
        'subtotal': cart.subtotal,
        'delivery_fee': cart.delivery_fee,
        'total': cart.total,
        'minimum_order': cart.minimum_order,
    }


def serialize_cart(cart: Cart) -> str:
    """Serialize a cart snapshot to the persisted JSON blob."""
    data = cart_to_dict(cart)
    data['version'] = BLOB_VERSION
    return json.dumps(data, ensure_ascii=False)


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data[key]
    # bool is an int subclass; a flag here means the blob is not ours
    if isinstance(value, bool) or not isinstance(value, int):
        raise PersistenceReadError(f"Field '{key}' is not an integer: {value!r}")
    return value


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise PersistenceReadError(f"Field '{key}' is not a string: {value!r}")
    return value


def _line_from_dict(data: Dict[str, Any]) -> LineItem:
    quantity = _require_int(data, 'quantity')
    if quantity <= 0:
        raise PersistenceReadError(f"Line quantity must be positive: {quantity}")
    unit_price = _require_int(data, 'unit_price')
    options = tuple(
        SelectedOption(
            id=_require_str(opt, 'id'),
            name=_require_str(opt, 'name'),
            price_modifier=_require_int(opt, 'price_modifier_cents'),
        )
        for opt in data.get('selected_variant_options') or ()
    )
    option_ids = data.get('selected_variant_option_ids') or []
    if not isinstance(option_ids, list) or not all(isinstance(o, str) for o in option_ids):
        raise PersistenceReadError("Field 'selected_variant_option_ids' is not a list of ids")
    return LineItem(
        product_id=_require_str(data, 'menu_item_id'),
        name=_require_str(data, 'name'),
        quantity=quantity,
        base_price=_require_int(data, 'base_price'),
        unit_price=unit_price,
        # total is derived, never trusted from the blob
        total_price=quantity * unit_price,
        selected_option_ids=frozenset(option_ids),
        selected_options=options,
        image_url=data.get('image_url'),
    )


def deserialize_cart(blob: str) -> Cart:
    """
    Decode a persisted blob.

    Raises:
        PersistenceReadError: the blob is not valid JSON or not a cart.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError, RecursionError) as e:
        raise PersistenceReadError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PersistenceReadError("Cart blob is not an object")

    try:
        items = data.get('items') or []
        if not isinstance(items, list):
            raise PersistenceReadError("Field 'items' is not a list")
        return Cart(
            restaurant_id=_require_str(data, 'restaurant_id'),
            restaurant_name=_require_str(data, 'restaurant_name'),
            items=tuple(_line_from_dict(item) for item in items),
            delivery_fee=_require_int(data, 'delivery_fee'),
            minimum_order=_require_int(data, 'minimum_order'),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise PersistenceReadError(f"Malformed cart blob: {e!r}") from e


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class CartStore(ABC):
    """Where the cart of one session is kept between requests."""

    @abstractmethod
    def load(self) -> Optional[Cart]:
        """Persisted cart, or None when there is none or it cannot be read."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Replace the persisted cart."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the persisted cart."""


class InMemoryCartStore(CartStore):
    """
    Dict-backed store.

    Several stores may share one ``backing`` dict, each under its own key;
    the blob is stored serialized so reads go through the same codec as redis.
    """

    def __init__(self, key: str = 'shopping_cart', backing: Optional[MutableMapping[str, str]] = None):
        self.key = key
        self.backing = backing if backing is not None else {}

    def load(self) -> Optional[Cart]:
        blob = self.backing.get(self.key)
        if blob is None:
            return None
        try:
            return deserialize_cart(blob)
        except PersistenceReadError as e:
            logger.warning(f"[CART_STORE] ✗ Discarding unreadable cart {self.key}: {e.message}")
            self.backing.pop(self.key, None)
            return None

    def save(self, cart: Cart) -> None:
        self.backing[self.key] = serialize_cart(cart)

    def clear(self) -> None:
        self.backing.pop(self.key, None)


class RedisCartStore(CartStore):
    """
    Redis-backed store for one cart session.

    Key pattern: {prefix}:cart:{session_id}. Every write refreshes the TTL.
    Redis failures are logged and swallowed.
    """

    def __init__(self, client: redis.Redis, session_id: str, prefix: str = 'foodcart', ttl: int = 60 * 60 * 6):
        self.client = client
        self.key = f"{prefix}:cart:{session_id}"
        self.ttl = ttl

    def load(self) -> Optional[Cart]:
        try:
            blob = self.client.get(self.key)
        except UnicodeDecodeError as e:
            # decode_responses=True: a non UTF-8 value fails inside the client
            logger.warning(f"[CART_STORE] ✗ Discarding undecodable cart {self.key}: {e}")
            self._delete()
            return None
        except RedisError as e:
            logger.warning(f"[CART_STORE] ✗ Get error for {self.key}: {e}")
            return None
        if blob is None:
            return None
        try:
            return deserialize_cart(blob)
        except PersistenceReadError as e:
            logger.warning(f"[CART_STORE] ✗ Discarding unreadable cart {self.key}: {e.message}")
            self._delete()
            return None

    def save(self, cart: Cart) -> None:
        try:
            self.client.setex(self.key, self.ttl, serialize_cart(cart))
        except RedisError as e:
            logger.warning(f"[CART_STORE] ✗ Set error for {self.key}: {e}")

    def clear(self) -> None:
        self._delete()

    def _delete(self) -> None:
        try:
            self.client.delete(self.key)
        except RedisError as e:
            logger.warning(f"[CART_STORE] ✗ Delete error for {self.key}: {e}")


# ---------------------------------------------------------------------------
# Application wiring
# ---------------------------------------------------------------------------

class CartStoreFactory:
    """Creates the per-session store for the backend chosen in config."""

    def __init__(self, app: Optional[Flask] = None):
        self.client: Optional[redis.Redis] = None
        self.memory: Dict[str, str] = {}
        self._prefix: str = 'foodcart'
        self._ttl: int = 60 * 60 * 6

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Connect to redis when configured, falling back to the in-process store."""
        self._prefix = app.config.get('CACHE_KEY_PREFIX', 'foodcart')
        self._ttl = app.config.get('CART_TTL_SECONDS', 60 * 60 * 6)
        backend = app.config.get('CART_STORE', 'redis')

        if backend != 'redis':
            logger.info(f"[CART_STORE] Using in-memory cart store (CART_STORE={backend})")
            return

        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')
        try:
            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                retry_on_timeout=True,
                health_check_interval=30
            )
            self.client.ping()
            logger.info(f"[CART_STORE] ✓ Redis connected: {redis_url}")
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"[CART_STORE] ⚠ Redis connection failed: {e}. Using in-memory carts.")
            self.client = None

    @property
    def backend(self) -> str:
        return 'redis' if self.client is not None else 'memory'

    def for_session(self, session_id: str) -> CartStore:
        if self.client is not None:
            return RedisCartStore(self.client, session_id, prefix=self._prefix, ttl=self._ttl)
        return InMemoryCartStore(key=f"{self._prefix}:cart:{session_id}", backing=self.memory)


def init_cart_store(app: Flask) -> CartStoreFactory:
    """Attach the cart store factory to the app."""
    factory = CartStoreFactory(app)
    if not hasattr(app, 'extensions'):
        app.extensions = {}
    app.extensions['cart_store'] = factory
    return factory


def get_cart_store(session_id: str) -> CartStore:
    """Store for a cart session in the current app."""
    factory = current_app.extensions.get('cart_store')
    if factory is None:
        raise RuntimeError("Cart store not initialized.")
    return factory.for_session(session_id)
