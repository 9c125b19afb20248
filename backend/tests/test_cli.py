# Overview: Pytest coverage for the pos CLI commands.

from cafepos.models import Branch, Category, Product, StockItem, User


def test_seed_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=['pos', 'seed'])
    second = runner.invoke(args=['pos', 'seed'])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert 'Seed complete' in second.output
    assert db_session.query(Branch).count() == 2
    assert db_session.query(User).count() == 2
    assert db_session.query(Product).count() == db_session.query(StockItem).count() > 0
    assert db_session.query(Category).filter_by(shows_favorites=True).count() == 1


def test_create_user(app, db_session, branch):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'pos', 'create-user',
        '--username', 'garson1',
        '--password', 'Password123!',
        '--branch-id', str(branch.id),
    ])

    assert result.exit_code == 0, result.output
    created = db_session.query(User).filter_by(username='garson1').one()
    assert created.role == 'cashier'


def test_create_user_reports_errors(app, db_session, branch):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'pos', 'create-user',
        '--username', 'garson1',
        '--password', 'kisa',
        '--branch-id', str(branch.id),
    ])

    assert result.exit_code != 0
    assert 'at least 8 characters' in result.output
    assert db_session.query(User).count() == 0
