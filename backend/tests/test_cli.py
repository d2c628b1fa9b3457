from atelier.extensions import db
from atelier.models import Employee, Store


def test_seed_defaults_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "seed-defaults"])
    assert result.exit_code == 0
    assert "Created 3" in result.output

    result = runner.invoke(args=["system", "seed-defaults"])
    assert "Created 0" in result.output
    assert db.session.query(Employee).count() == 3


def test_stock_set_and_list(app, on_hand, black):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "stock", "set", "--variant-id", str(black.id), "--store", "online", "--size", "46", "--quantity", "4",
    ])
    assert result.exit_code == 0
    assert on_hand(black, Store.ONLINE, "46") == 4

    result = runner.invoke(args=["stock", "list", "--store", "online"])
    assert result.exit_code == 0
    assert "46" in result.output

    result = runner.invoke(args=[
        "stock", "set", "--variant-id", str(black.id), "--store", "online", "--size", "47", "--quantity", "4",
    ])
    assert result.exit_code != 0
