"""Cart blueprint - JSON endpoints over the session cart."""
import uuid
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request, session

from foodcart.database import get_session
from foodcart.exceptions import BusinessLogicError, MinimumOrderNotMetError, SelectionIncompleteError
from foodcart.services import catalog_service, variant_service
from foodcart.services.cart_service import CartService
from foodcart.services.cart_store import cart_to_dict, get_cart_store
from foodcart.services.cart_types import AddOutcome, MenuItem, Selection

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')

SESSION_KEY = 'cart_session_id'


def _get_cart_service() -> CartService:
    """Cart service bound to the caller's cart session."""
    session_id = session.get(SESSION_KEY)
    if not session_id:
        session_id = uuid.uuid4().hex
        session[SESSION_KEY] = session_id
    return CartService(get_cart_store(session_id))


def _payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _parse_int(value: Any, field: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise BusinessLogicError(f'Invalid {field}: must be an integer')
    try:
        return int(value)
    except (ValueError, TypeError):
        raise BusinessLogicError(f'Invalid {field}: must be an integer')


def _parse_option_ids(value: Any, field: str) -> Optional[list]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise BusinessLogicError(f'Invalid {field}: must be a list of option ids')
    return value


def _parse_selection(item: MenuItem, raw: Any) -> Selection:
    """Build and validate the selection sent as {group_id: [option_id, ...]}."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise BusinessLogicError('Invalid selection: expected an object of group id -> option ids')
    for group_id, option_ids in raw.items():
        _parse_option_ids(option_ids, f'selection for group {group_id}')

    selection = variant_service.build_selection(item, raw)
    missing = variant_service.incomplete_groups(item, selection)
    if missing:
        raise SelectionIncompleteError(item.name, [group.name for group in missing])
    return selection


def _cart_body(service: CartService, **extra) -> Dict[str, Any]:
    cart = service.cart
    body = {
        'status': 'success',
        'cart': cart_to_dict(cart) if cart else None,
        'item_count': service.item_count(),
        'minimum_order_met': service.is_minimum_order_met(),
        'remaining_for_minimum': service.remaining_for_minimum(),
    }
    body.update(extra)
    return body


@cart_bp.route('/', methods=['GET'])
def get_cart():
    """Current cart with derived counters."""
    return jsonify(_cart_body(_get_cart_service()))


@cart_bp.route('/items', methods=['POST'])
def add_item():
    """Add a menu item with its variant selection."""
    payload = _payload()
    menu_item_id = payload.get('menu_item_id')
    if not menu_item_id:
        raise BusinessLogicError('menu_item_id is required')
    quantity = _parse_int(payload.get('quantity', 1), 'quantity')

    db_session = get_session()
    item = catalog_service.get_orderable_item(db_session, str(menu_item_id))
    restaurant = catalog_service.get_restaurant(db_session, item.restaurant_id)

    selection = _parse_selection(item, payload.get('selection'))
    option_ids, options = variant_service.resolve_selection(item, selection)

    service = _get_cart_service()
    result = service.add_item(
        item, restaurant,
        quantity=quantity,
        selected_option_ids=option_ids,
        selected_options=options,
        replace=payload.get('replace') is True,
    )

    if result.outcome is AddOutcome.CONFLICT:
        current_app.logger.info(f"[cart_add] conflict for restaurant {restaurant.id}")
        body = _cart_body(
            service,
            status='conflict',
            message='Your cart contains items from another restaurant. '
                    'Resend with "replace": true to start a new cart.',
        )
        return jsonify(body), 409

    if result.outcome is AddOutcome.ADDED:
        body = _cart_body(service, outcome=result.outcome.value, message=f'{item.name} was added to your cart')
        return jsonify(body), 201

    body = _cart_body(service, outcome=result.outcome.value, message=f'Quantity of {item.name} was increased')
    return jsonify(body), 200


@cart_bp.route('/items/<product_id>', methods=['PATCH'])
def update_item(product_id):
    """Set the quantity of a line; 0 or less removes it."""
    payload = _payload()
    if 'quantity' not in payload:
        raise BusinessLogicError('quantity is required')
    quantity = _parse_int(payload['quantity'], 'quantity')
    option_ids = _parse_option_ids(payload.get('selected_option_ids'), 'selected_option_ids')

    service = _get_cart_service()
    service.update_quantity(product_id, quantity, option_ids)
    return jsonify(_cart_body(service))


@cart_bp.route('/items/<product_id>/selection', methods=['PUT'])
def update_item_selection(product_id):
    """Change the variant options of a line and re-price it."""
    payload = _payload()
    current_ids = _parse_option_ids(payload.get('current_option_ids'), 'current_option_ids')

    item = catalog_service.get_menu_item(get_session(), product_id)
    selection = _parse_selection(item, payload.get('selection'))
    option_ids, options = variant_service.resolve_selection(item, selection)

    service = _get_cart_service()
    service.update_selection(product_id, option_ids, options, current_option_ids=current_ids)
    return jsonify(_cart_body(service, message=f'Options of {item.name} were updated'))


@cart_bp.route('/items/<product_id>', methods=['DELETE'])
def remove_item(product_id):
    """Remove a line from the cart."""
    option_ids = _parse_option_ids(_payload().get('selected_option_ids'), 'selected_option_ids')
    service = _get_cart_service()
    service.remove_item(product_id, option_ids)
    return jsonify(_cart_body(service))


@cart_bp.route('/', methods=['DELETE'])
def clear_cart():
    """Empty the cart."""
    service = _get_cart_service()
    service.clear()
    return jsonify(_cart_body(service))


@cart_bp.route('/checkout', methods=['POST'])
def checkout():
    """
    Build the order payload for submission.

    Submitting it to the order API is done by the client; the cart is only
    cleared once that submission succeeds.
    """
    payload = _payload()
    service = _get_cart_service()

    order = service.build_order_payload(
        delivery_address=payload.get('delivery_address') or '',
        delivery_instructions=payload.get('delivery_instructions'),
        payment_method=payload.get('payment_method') or current_app.config.get('DEFAULT_PAYMENT_METHOD', 'cash'),
        customer_info=payload.get('customer_info'),
        notes=payload.get('notes'),
        use_loyalty_reward=payload.get('use_loyalty_reward') is True,
    )

    if not service.is_minimum_order_met():
        raise MinimumOrderNotMetError(service.cart.subtotal, service.cart.minimum_order)

    current_app.logger.info(
        f"[checkout] order payload built: restaurant={order['restaurant_id']}, lines={len(order['items'])}"
    )
    return jsonify({'status': 'success', 'order': order})
