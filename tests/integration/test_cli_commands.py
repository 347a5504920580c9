"""
Integration tests for the catalog CLI commands.
"""
import uuid


def test_init_db(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['init-db'])

    assert result.exit_code == 0
    assert 'Catalog tables ready' in result.output


def test_seed_menu_prints_menu_and_refuses_duplicates(app):
    runner = app.test_cli_runner()
    name = f'Pizzeria Test {str(uuid.uuid4())[:8]}'

    result = runner.invoke(args=['seed-menu', '--name', name])
    assert result.exit_code == 0
    assert f'Restaurant created: {name}' in result.output
    assert 'Minimum order: 20,00 €' in result.output
    assert 'Large +3,00 €' in result.output

    result = runner.invoke(args=['seed-menu', '--name', name])
    assert 'already exists' in result.output
