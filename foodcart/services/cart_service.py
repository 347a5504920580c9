"""Cart Service - in-progress order for one session.

``CartService`` is the only writer of the persisted cart. Every mutation
builds a new immutable ``Cart`` snapshot, saves it to the store and pushes it
to subscribers before returning; there is no suspension point between reading
the current cart and writing the next one.
"""

import dataclasses
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from foodcart.exceptions import EmptyCartError, InvalidQuantityError, ValidationError
from foodcart.services.cart_store import CartStore
from foodcart.services.cart_types import (
    AddOutcome, AddResult, Cart, LineItem, MenuItem, Restaurant, SelectedOption, option_key,
)
from foodcart.utils.formatters import money_eur

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[Cart]], None]


def _unit_price(base_price: int, selected_options: Iterable[SelectedOption]) -> int:
    return base_price + sum(opt.price_modifier for opt in selected_options)


def _find_line(cart: Cart, product_id: str, option_ids: Optional[Iterable[str]]) -> int:
    """Index of the matching line, -1 if none.

    ``option_ids=None`` matches the first line of the product whatever its
    selection; anything else must equal the line's selection as a set.
    """
    for index, item in enumerate(cart.items):
        if option_ids is None:
            if item.product_id == product_id:
                return index
        elif item.matches(product_id, option_ids):
            return index
    return -1


class CartService:
    """
    Cart aggregator for a single session.

    The cart is loaded from ``store`` once, on construction.
    """

    def __init__(self, store: CartStore):
        self.store = store
        self._listeners: List[Listener] = []
        self._cart: Optional[Cart] = store.load()

    # ------------------------------------------------------------------
    # Read model
    # ------------------------------------------------------------------

    @property
    def cart(self) -> Optional[Cart]:
        return self._cart

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; it is called now with the current cart and after every change."""
        self._listeners.append(listener)
        listener(self._cart)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def item_count(self) -> int:
        return self._cart.item_count if self._cart else 0

    def item_quantity(self, product_id: str, selected_option_ids: Optional[Iterable[str]] = None) -> int:
        """Quantity of the line holding this product with exactly this selection."""
        if not self._cart:
            return 0
        for item in self._cart.items:
            if item.matches(product_id, selected_option_ids):
                return item.quantity
        return 0

    def is_minimum_order_met(self) -> bool:
        if not self._cart:
            return False
        return self._cart.subtotal >= self._cart.minimum_order

    def remaining_for_minimum(self) -> int:
        """Cents still missing to reach the minimum order (0 when met or no cart)."""
        if not self._cart:
            return 0
        return max(0, self._cart.minimum_order - self._cart.subtotal)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(
        self,
        product: MenuItem,
        restaurant: Restaurant,
        quantity: int = 1,
        selected_option_ids: Optional[Iterable[str]] = None,
        selected_options: Optional[Iterable[SelectedOption]] = None,
        replace: bool = False,
    ) -> AddResult:
        """
        Add ``quantity`` of a product with a resolved selection.

        ``product`` must belong to ``restaurant`` (ValidationError otherwise).
        A cart bound to another restaurant is left untouched and a CONFLICT
        result is returned unless ``replace`` is set, in which case the old
        cart is discarded. An identical line (same product, same option set)
        has its quantity increased at its original unit price.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        if product.restaurant_id != restaurant.id:
            raise ValidationError(
                f'"{product.name}" belongs to restaurant {product.restaurant_id}, not {restaurant.id}'
            )

        cart = self._cart
        if cart is not None and cart.restaurant_id != restaurant.id:
            if not replace:
                logger.info(
                    f"[CART] conflict: cart belongs to restaurant {cart.restaurant_id}, "
                    f"add requested for {restaurant.id}"
                )
                return AddResult(outcome=AddOutcome.CONFLICT, cart=cart)
            logger.info(f"[CART] replacing cart of restaurant {cart.restaurant_id} with {restaurant.id}")
            cart = None

        if cart is None:
            cart = Cart(
                restaurant_id=restaurant.id,
                restaurant_name=restaurant.name,
                delivery_fee=restaurant.delivery_fee,
                minimum_order=restaurant.minimum_order,
            )

        option_ids = option_key(selected_option_ids)
        options = tuple(selected_options or ())
        items = list(cart.items)
        index = _find_line(cart, product.id, option_ids)

        if index >= 0:
            existing = items[index]
            new_quantity = existing.quantity + quantity
            line = dataclasses.replace(
                existing,
                quantity=new_quantity,
                total_price=new_quantity * existing.unit_price,
            )
            items[index] = line
            outcome = AddOutcome.INCREASED
        else:
            unit_price = _unit_price(product.base_price, options)
            line = LineItem(
                product_id=product.id,
                name=product.name,
                quantity=quantity,
                base_price=product.base_price,
                unit_price=unit_price,
                total_price=quantity * unit_price,
                selected_option_ids=option_ids,
                selected_options=options,
                image_url=product.image_url,
            )
            items.append(line)
            outcome = AddOutcome.ADDED

        self._commit(dataclasses.replace(cart, items=tuple(items)))
        if outcome is AddOutcome.ADDED:
            logger.info(f"[CART] added {quantity} x {product.name} at {money_eur(line.unit_price)}")
        else:
            logger.info(f"[CART] increased {product.name} to {line.quantity}")
        return AddResult(outcome=outcome, cart=self._cart, line=line)

    def update_quantity(
        self,
        product_id: str,
        new_quantity: int,
        selected_option_ids: Optional[Iterable[str]] = None,
    ) -> Optional[Cart]:
        """Set a line's quantity; zero or less removes the line. Unknown lines are ignored."""
        cart = self._cart
        if cart is None:
            return None

        index = _find_line(cart, product_id, selected_option_ids)
        if index < 0:
            logger.debug(f"[CART] update_quantity: no line for product {product_id}")
            return cart

        items = list(cart.items)
        if new_quantity <= 0:
            removed = items.pop(index)
            logger.info(f"[CART] removed {removed.name}")
        else:
            existing = items[index]
            items[index] = dataclasses.replace(
                existing,
                quantity=new_quantity,
                total_price=new_quantity * existing.unit_price,
            )

        self._commit(dataclasses.replace(cart, items=tuple(items)))
        return self._cart

    def update_selection(
        self,
        product_id: str,
        selected_option_ids: Iterable[str],
        selected_options: Iterable[SelectedOption],
        current_option_ids: Optional[Iterable[str]] = None,
    ) -> Optional[Cart]:
        """
        Replace a line's selection and re-derive its unit price.

        The unit price is the line's base price plus the new modifiers. If the
        edited line becomes identical to another line, the two are merged into
        the earlier one.
        """
        cart = self._cart
        if cart is None:
            return None

        index = _find_line(cart, product_id, current_option_ids)
        if index < 0:
            logger.debug(f"[CART] update_selection: no line for product {product_id}")
            return cart

        option_ids = option_key(selected_option_ids)
        options = tuple(selected_options)
        items = list(cart.items)
        existing = items[index]
        unit_price = _unit_price(existing.base_price, options)
        edited = dataclasses.replace(
            existing,
            unit_price=unit_price,
            total_price=existing.quantity * unit_price,
            selected_option_ids=option_ids,
            selected_options=options,
        )

        twin = next(
            (i for i, item in enumerate(items) if i != index and item.matches(product_id, option_ids)),
            -1,
        )
        if twin >= 0:
            keep, drop = min(twin, index), max(twin, index)
            target = items[twin]
            merged_quantity = target.quantity + edited.quantity
            items[keep] = dataclasses.replace(
                target,
                quantity=merged_quantity,
                total_price=merged_quantity * target.unit_price,
            )
            items.pop(drop)
            logger.info(f"[CART] merged {existing.name} into an identical line ({merged_quantity})")
        else:
            items[index] = edited
            logger.info(f"[CART] updated options of {existing.name}, unit price {money_eur(unit_price)}")

        self._commit(dataclasses.replace(cart, items=tuple(items)))
        return self._cart

    def remove_item(self, product_id: str, selected_option_ids: Optional[Iterable[str]] = None) -> Optional[Cart]:
        return self.update_quantity(product_id, 0, selected_option_ids)

    def clear(self) -> None:
        """Discard the cart and its persisted copy."""
        self._cart = None
        self.store.clear()
        logger.info("[CART] cleared")
        self._notify()

    # ------------------------------------------------------------------
    # Checkout export
    # ------------------------------------------------------------------

    def build_order_payload(
        self,
        delivery_address: str,
        delivery_instructions: Optional[str] = None,
        payment_method: Optional[str] = None,
        customer_info: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
        use_loyalty_reward: bool = False,
    ) -> Dict[str, Any]:
        """
        Project the cart into the order-submission payload.

        Raises:
            EmptyCartError: there is no cart or it has no lines.
            ValidationError: the delivery address is blank.
        """
        cart = self._cart
        if cart is None or cart.is_empty:
            raise EmptyCartError()
        if not isinstance(delivery_address, str) or not delivery_address.strip():
            raise ValidationError("Delivery address is required")

        payload: Dict[str, Any] = {
            'restaurant_id': cart.restaurant_id,
            'delivery_address': delivery_address.strip(),
            'delivery_instructions': delivery_instructions or '',
            'notes': notes or '',
            'payment_method': payment_method or 'cash',
            'items': [
                {
                    'menu_item_id': item.product_id,
                    'quantity': item.quantity,
                    'unit_price': item.unit_price,
                    'selected_variant_option_ids': sorted(item.selected_option_ids),
                }
                for item in cart.items
            ],
        }
        if customer_info:
            payload['customer_info'] = customer_info
        if use_loyalty_reward:
            payload['use_loyalty_reward'] = True
        return payload

    # ------------------------------------------------------------------

    def _commit(self, cart: Cart) -> None:
        """Store the new snapshot, write it through and notify."""
        self._cart = cart
        self.store.save(cart)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._cart)
