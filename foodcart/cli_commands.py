"""
Flask CLI commands for catalog management.

Commands:
- flask init-db: Create the catalog tables
- flask seed-menu: Insert a demo restaurant with a configurable pizza
"""

import click
from foodcart import database
from foodcart.models import Restaurant, MenuItem, MenuItemVariant, MenuItemVariantOption
from foodcart.services import catalog_service
from foodcart.utils.formatters import money_eur, signed_money_eur


def seed_demo_restaurant(session, name='Pizzeria Napoli'):
    """Create the demo restaurant and its menu; returns the Restaurant row."""
    restaurant = Restaurant(
        name=name,
        delivery_fee_cents=250,
        minimum_order_cents=2000,
    )
    pizza = MenuItem(name='Margherita', price_cents=800, description='Tomato, mozzarella, basil')
    size = MenuItemVariant(name='Size', is_required=True, min_selections=1, max_selections=1, position=0)
    size.options = [
        MenuItemVariantOption(name='Small', price_modifier_cents=0, position=0),
        MenuItemVariantOption(name='Large', price_modifier_cents=300, position=1),
    ]
    extras = MenuItemVariant(name='Extras', is_required=False, min_selections=0, max_selections=3, position=1)
    extras.options = [
        MenuItemVariantOption(name='Extra Cheese', price_modifier_cents=150, position=0),
        MenuItemVariantOption(name='Olives', price_modifier_cents=100, position=1),
    ]
    pizza.variants = [size, extras]

    lemonade = MenuItem(name='Lemonade', price_cents=300)
    restaurant.menu_items = [pizza, lemonade]

    session.add(restaurant)
    session.commit()
    return restaurant


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create catalog tables that do not exist yet."""
        database.create_all()
        click.echo(click.style('✅ Catalog tables ready.', fg='green'))

    @app.cli.command('seed-menu')
    @click.option('--name', default='Pizzeria Napoli', show_default=True, help='Restaurant name')
    def seed_menu(name):
        """Insert a demo restaurant with a pizza that has size and extras options."""
        database.create_all()
        session = database.get_session()

        existing = session.query(Restaurant).filter_by(name=name).first()
        if existing:
            click.echo(click.style(f'❌ A restaurant named "{name}" already exists (id {existing.id}).', fg='red'))
            return

        try:
            restaurant = seed_demo_restaurant(session, name)
        except Exception as e:
            session.rollback()
            click.echo(click.style(f'❌ Could not seed menu: {str(e)}', fg='red'))
            return

        click.echo(click.style(f'\n✅ Restaurant created: {restaurant.name}', fg='green', bold=True))
        click.echo(f'   ID: {restaurant.id}')
        click.echo(f'   Delivery fee: {money_eur(restaurant.delivery_fee_cents)}')
        click.echo(f'   Minimum order: {money_eur(restaurant.minimum_order_cents)}')
        for item in catalog_service.list_menu(session, restaurant.id):
            click.echo(f'\n   {item.name} ({item.id}) {money_eur(item.base_price)}')
            for group in item.variant_groups:
                label = 'required' if group.is_required else 'optional'
                click.echo(f'     {group.name} [{label}, max {group.max_selections or "-"}] ({group.id})')
                for option in group.options:
                    click.echo(f'       - {option.name} {signed_money_eur(option.price_modifier)} ({option.id})')
