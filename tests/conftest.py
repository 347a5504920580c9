import pytest
import uuid
from types import SimpleNamespace

from foodcart import create_app
from foodcart import database
from foodcart.database import get_session
from foodcart.cli_commands import seed_demo_restaurant
from foodcart.services.cart_service import CartService
from foodcart.services.cart_store import InMemoryCartStore
from foodcart.services.cart_types import MenuItem, Restaurant, VariantGroup, VariantOption


# ---------------------------------------------------------------------------
# Core fixtures (no Flask, no database)
# ---------------------------------------------------------------------------

@pytest.fixture
def size_group():
    """Required single-choice size group."""
    return VariantGroup(
        id='size',
        menu_item_id='margherita',
        name='Size',
        is_required=True,
        min_selections=1,
        max_selections=1,
        options=(
            VariantOption(id='small', group_id='size', name='Small', price_modifier=0),
            VariantOption(id='large', group_id='size', name='Large', price_modifier=300),
        ),
    )


@pytest.fixture
def extras_group():
    """Optional multi-choice extras group with room for three options."""
    return VariantGroup(
        id='extras',
        menu_item_id='margherita',
        name='Extras',
        is_required=False,
        min_selections=0,
        max_selections=3,
        options=(
            VariantOption(id='cheese', group_id='extras', name='Extra Cheese', price_modifier=150),
            VariantOption(id='olives', group_id='extras', name='Olives', price_modifier=100),
            VariantOption(id='basil', group_id='extras', name='Basil', price_modifier=50),
            VariantOption(id='truffle', group_id='extras', name='Truffle', price_modifier=900, is_available=False),
        ),
    )


@pytest.fixture
def margherita(size_group, extras_group):
    return MenuItem(
        id='margherita',
        name='Margherita',
        base_price=800,
        restaurant_id='napoli',
        variant_groups=(size_group, extras_group),
    )


@pytest.fixture
def lemonade():
    return MenuItem(id='lemonade', name='Lemonade', base_price=300, restaurant_id='napoli')


@pytest.fixture
def napoli():
    return Restaurant(id='napoli', name='Pizzeria Napoli', delivery_fee=250, minimum_order=2000)


@pytest.fixture
def roma():
    return Restaurant(id='roma', name='Trattoria Roma', delivery_fee=0, minimum_order=0)


@pytest.fixture
def store():
    return InMemoryCartStore()


@pytest.fixture
def cart_service(store):
    return CartService(store)


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    with app.app_context():
        database.create_all()
    return app


@pytest.fixture(scope='function')
def client(app):
    """Create test client (one cart session per client)."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.remove()


@pytest.fixture(scope='function')
def demo_menu(session):
    """Seed a restaurant with the Margherita menu and return plain ids/values."""
    suffix = str(uuid.uuid4())[:8]
    restaurant = seed_demo_restaurant(session, name=f'Pizzeria Napoli {suffix}')
    items = {item.name: item.to_domain() for item in restaurant.menu_items}
    pizza = items['Margherita']
    size, extras = pizza.variant_groups
    menu = SimpleNamespace(
        restaurant=restaurant.to_domain(),
        pizza=pizza,
        lemonade=items['Lemonade'],
        size=size,
        extras=extras,
        small=size.options[0],
        large=size.options[1],
        cheese=extras.options[0],
        olives=extras.options[1],
    )
    return menu


@pytest.fixture(scope='function')
def second_restaurant(session):
    """Another restaurant with a single plain item."""
    from foodcart.models import Restaurant as RestaurantRow, MenuItem as MenuItemRow

    suffix = str(uuid.uuid4())[:8]
    row = RestaurantRow(name=f'Trattoria Roma {suffix}', delivery_fee_cents=0, minimum_order_cents=0)
    row.menu_items = [MenuItemRow(name='Tiramisu', price_cents=550)]
    session.add(row)
    session.commit()
    return SimpleNamespace(restaurant=row.to_domain(), tiramisu=row.menu_items[0].to_domain())
