"""
Integration test for the checkout flow.
Verifies the minimum-order gate and the exported order payload.
"""


def test_checkout_with_empty_cart(client):
    response = client.post('/cart/checkout', json={'delivery_address': 'Hauptstr. 1, 10115 Berlin'})

    assert response.status_code == 400
    assert response.get_json()['message'] == 'Cart is empty'


def test_checkout_below_minimum_then_above(client, demo_menu):
    """1800 misses the 2000 minimum; one more lemonade gets the order through."""
    menu = demo_menu
    client.post('/cart/items', json={'menu_item_id': menu.lemonade.id, 'quantity': 6})

    cart = client.get('/cart/').get_json()
    assert cart['cart']['subtotal'] == 1800
    assert cart['minimum_order_met'] is False
    assert cart['remaining_for_minimum'] == 200

    response = client.post('/cart/checkout', json={'delivery_address': 'Hauptstr. 1, 10115 Berlin'})
    assert response.status_code == 400
    assert response.get_json()['missing'] == 200

    client.post('/cart/items', json={'menu_item_id': menu.lemonade.id})
    cart = client.get('/cart/').get_json()
    assert cart['minimum_order_met'] is True
    assert cart['cart']['total'] == 2350

    response = client.post('/cart/checkout', json={
        'delivery_address': 'Hauptstr. 1, 10115 Berlin',
        'delivery_instructions': 'Ring twice',
    })
    assert response.status_code == 200
    order = response.get_json()['order']
    assert order['restaurant_id'] == menu.restaurant.id
    assert order['payment_method'] == 'cash'
    assert order['delivery_instructions'] == 'Ring twice'
    assert order['items'] == [
        {'menu_item_id': menu.lemonade.id, 'quantity': 7, 'unit_price': 300, 'selected_variant_option_ids': []},
    ]

    # Building the payload does not empty the cart
    assert client.get('/cart/').get_json()['item_count'] == 7


def test_checkout_requires_address(client, demo_menu):
    menu = demo_menu
    client.post('/cart/items', json={
        'menu_item_id': menu.pizza.id,
        'quantity': 2,
        'selection': {menu.size.id: [menu.large.id]},
    })

    response = client.post('/cart/checkout', json={'delivery_address': '  '})

    assert response.status_code == 400


def test_checkout_payload_with_options(client, demo_menu):
    menu = demo_menu
    client.post('/cart/items', json={
        'menu_item_id': menu.pizza.id,
        'quantity': 2,
        'selection': {menu.size.id: [menu.large.id], menu.extras.id: [menu.olives.id]},
    })

    response = client.post('/cart/checkout', json={
        'delivery_address': 'Hauptstr. 1, 10115 Berlin',
        'payment_method': 'card',
        'customer_info': {'name': 'Alex', 'phone': '+49 30 1234567'},
    })

    assert response.status_code == 200
    order = response.get_json()['order']
    assert order['payment_method'] == 'card'
    assert order['customer_info']['name'] == 'Alex'
    item = order['items'][0]
    assert item['unit_price'] == 1200
    assert item['quantity'] == 2
    assert item['selected_variant_option_ids'] == sorted([menu.large.id, menu.olives.id])
