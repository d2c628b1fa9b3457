import pytest

from atelier.context import RequestContext
from atelier.extensions import db
from atelier.models import PaymentMethod, Sale, Store
from atelier.services import sales_service
from atelier.services.stock_service import InsufficientStockError, StockIntegrityError
from atelier.validation import NotFoundError, ValidationError


def test_card_sale_debits_stock_and_adds_tax(boutique_ctx, stock, on_hand, black):
    stock(black, Store.BOUTIQUE, "42", 10)

    sale = sales_service.record_sale(
        boutique_ctx,
        variant_id=black.id,
        size="42",
        quantity=3,
        payment_method="card",
        unit_price_cents=10000,
    )

    assert on_hand(black, Store.BOUTIQUE, "42") == 7
    assert sale.tax_cents == 1500
    assert sale.total_cents == 31500
    assert sale.payment_method is PaymentMethod.CARD
    assert sale.store is Store.BOUTIQUE
    assert sale.sale_id == "S-B-000001"


def test_cash_sale_has_no_tax(boutique_ctx, stock, black):
    stock(black, Store.BOUTIQUE, "42", 2)

    sale = sales_service.record_sale(
        boutique_ctx, variant_id=black.id, size="42", quantity=2, payment_method="cash",
    )

    # Channel price defaults to the boutique price
    assert sale.unit_price_cents == 50000
    assert sale.tax_cents == 0
    assert sale.total_cents == 100000


def test_online_sale_uses_online_price(online_ctx, stock, on_hand, black):
    stock(black, Store.ONLINE, "44", 1)

    sale = sales_service.record_sale(
        online_ctx, variant_id=black.id, size="44", quantity=1, payment_method="bank_transfer",
    )

    assert sale.unit_price_cents == 45000
    assert sale.sale_id == "S-O-000001"
    assert on_hand(black, Store.ONLINE, "44") == 0


def test_card_tax_rounds_half_up(app):
    _, tax, total = sales_service.compute_sale_totals(10, 1, PaymentMethod.CARD)
    # 5% of 0.10 = 0.005, rounds to 0.01
    assert tax == 1
    assert total == 11


def test_document_numbers_increment_per_store(boutique_ctx, online_ctx, stock, black):
    stock(black, Store.BOUTIQUE, "42", 5)
    stock(black, Store.ONLINE, "42", 5)

    first = sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash")
    second = sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash")
    online = sales_service.record_sale(
        online_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash_on_delivery",
    )

    assert (first.sale_id, second.sale_id) == ("S-B-000001", "S-B-000002")
    assert online.sale_id == "S-O-000001"


def test_insufficient_stock_leaves_no_trace(boutique_ctx, stock, on_hand, black):
    stock(black, Store.BOUTIQUE, "42", 2)

    with pytest.raises(InsufficientStockError) as exc_info:
        sales_service.record_sale(
            boutique_ctx, variant_id=black.id, size="42", quantity=3, payment_method="cash",
        )

    assert exc_info.value.details["on_hand"] == 2
    assert on_hand(black, Store.BOUTIQUE, "42") == 2
    assert db.session.query(Sale).count() == 0


def test_sale_without_stock_entry_is_insufficient(boutique_ctx, black):
    with pytest.raises(InsufficientStockError):
        sales_service.record_sale(
            boutique_ctx, variant_id=black.id, size="38", quantity=1, payment_method="cash",
        )
    assert db.session.query(Sale).count() == 0


def test_sale_rolls_back_when_debit_finds_no_entry(boutique_ctx, black, monkeypatch):
    # Pre-check passes but the entry is gone by the time the debit runs
    monkeypatch.setattr(sales_service, "check_availability", lambda *args, **kwargs: True)

    with pytest.raises(StockIntegrityError):
        sales_service.record_sale(
            boutique_ctx, variant_id=black.id, size="38", quantity=1, payment_method="cash",
        )
    assert db.session.query(Sale).count() == 0


@pytest.mark.parametrize("store, method", [
    (Store.BOUTIQUE, "bank_transfer"),
    (Store.BOUTIQUE, "cash_on_delivery"),
    (Store.ONLINE, "cash"),
    (Store.ONLINE, "card"),
])
def test_payment_method_must_match_store(employee, stock, black, store, method):
    stock(black, store, "42", 5)
    ctx = RequestContext(employee_id=employee.id, store=store)

    with pytest.raises(ValidationError):
        sales_service.record_sale(ctx, variant_id=black.id, size="42", quantity=1, payment_method=method)


def test_sale_validation(boutique_ctx, stock, black):
    stock(black, Store.BOUTIQUE, "42", 5)

    with pytest.raises(ValidationError):
        sales_service.record_sale(boutique_ctx, variant_id=black.id, size="43", quantity=1, payment_method="cash")
    with pytest.raises(ValidationError):
        sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=0, payment_method="cash")
    with pytest.raises(ValidationError):
        sales_service.record_sale(
            boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash", unit_price_cents=-1,
        )
    with pytest.raises(NotFoundError):
        sales_service.record_sale(boutique_ctx, variant_id=9999, size="42", quantity=1, payment_method="cash")


def test_unknown_employee_is_rejected(stock, black):
    stock(black, Store.BOUTIQUE, "42", 5)
    ctx = RequestContext(employee_id=4242, store=Store.BOUTIQUE)

    with pytest.raises(NotFoundError):
        sales_service.record_sale(ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash")


def test_list_and_get_sales(boutique_ctx, stock, black):
    stock(black, Store.BOUTIQUE, "42", 5)
    first = sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash")
    second = sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="card")

    listed = sales_service.list_sales(Store.BOUTIQUE)
    assert [s.sale_id for s in listed] == [second.sale_id, first.sale_id]
    assert sales_service.list_sales(Store.ONLINE) == []
    assert sales_service.get_sale(first.sale_id).id == first.id

    with pytest.raises(NotFoundError):
        sales_service.get_sale("S-B-999999")
