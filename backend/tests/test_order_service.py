import pytest

from atelier.extensions import db
from atelier.models import Order, OrderStatus, Store
from atelier.services import order_service
from atelier.services.order_service import CustomerInfo
from atelier.services.stock_service import InsufficientStockError
from atelier.validation import NotFoundError, ValidationError


@pytest.fixture
def customer():
    return CustomerInfo(
        name="Mariam Saeed",
        phone="+971501234567",
        emirate="Dubai",
        address="Villa 12, Al Wasl Road",
    )


def _order(ctx, variant, customer, quantity=1, **kwargs):
    return order_service.record_order(
        ctx,
        variant_id=variant.id,
        size=kwargs.pop("size", "42"),
        quantity=quantity,
        payment_method=kwargs.pop("payment_method", "cash_on_delivery"),
        customer=customer,
        **kwargs,
    )


def test_order_debits_online_stock(online_ctx, stock, on_hand, black, customer):
    stock(black, Store.ONLINE, "42", 4)
    stock(black, Store.BOUTIQUE, "42", 4)

    order = _order(online_ctx, black, customer, quantity=3)

    assert order.order_id == "ORD-O-000001"
    assert order.status is OrderStatus.PENDING
    assert order.unit_price_cents == 45000
    assert order.total_cents == 135000
    assert on_hand(black, Store.ONLINE, "42") == 1
    assert on_hand(black, Store.BOUTIQUE, "42") == 4


def test_order_is_always_online(boutique_ctx, stock, on_hand, black, customer):
    stock(black, Store.ONLINE, "42", 2)

    _order(boutique_ctx, black, customer, payment_method="bank_transfer")

    assert on_hand(black, Store.ONLINE, "42") == 1


def test_order_emirate_is_validated_and_normalized(online_ctx, stock, black, customer):
    stock(black, Store.ONLINE, "42", 5)

    order = _order(
        online_ctx, black,
        CustomerInfo(name="A", phone="1", emirate="ras al khaimah", address="X"),
    )
    assert order.customer_emirate == "Ras Al Khaimah"

    with pytest.raises(ValidationError):
        _order(online_ctx, black, CustomerInfo(name="A", phone="1", emirate="Muscat", address="X"))


def test_order_requires_customer_fields(online_ctx, stock, black):
    stock(black, Store.ONLINE, "42", 5)

    with pytest.raises(ValidationError):
        _order(online_ctx, black, CustomerInfo(name=" ", phone="1", emirate="Dubai", address="X"))
    with pytest.raises(ValidationError):
        _order(online_ctx, black, CustomerInfo(name="A", phone="1", emirate="Dubai", address=""))


def test_order_rejects_boutique_payment_methods(online_ctx, stock, black, customer):
    stock(black, Store.ONLINE, "42", 5)

    with pytest.raises(ValidationError):
        _order(online_ctx, black, customer, payment_method="card")


def test_order_insufficient_stock(online_ctx, stock, on_hand, black, customer):
    stock(black, Store.ONLINE, "42", 1)

    with pytest.raises(InsufficientStockError):
        _order(online_ctx, black, customer, quantity=2)

    assert on_hand(black, Store.ONLINE, "42") == 1
    assert db.session.query(Order).count() == 0


def test_order_lifecycle(online_ctx, stock, black, customer):
    stock(black, Store.ONLINE, "42", 5)
    order = _order(online_ctx, black, customer)

    order = order_service.update_order_status(order.order_id, "in_delivery")
    assert order.status is OrderStatus.IN_DELIVERY

    order = order_service.update_order_status(order.order_id, OrderStatus.DELIVERED)
    assert order.status is OrderStatus.DELIVERED

    with pytest.raises(ValidationError):
        order_service.update_order_status(order.order_id, "cancelled")


@pytest.mark.parametrize("path, rejected", [
    ([], "delivered"),
    ([], "pending"),
    (["cancelled"], "in_delivery"),
    (["in_delivery"], "in_delivery"),
    (["in_delivery"], "pending"),
])
def test_invalid_transitions(online_ctx, stock, black, customer, path, rejected):
    stock(black, Store.ONLINE, "42", 5)
    order = _order(online_ctx, black, customer)
    for status in path:
        order_service.update_order_status(order.order_id, status)

    with pytest.raises(ValidationError):
        order_service.update_order_status(order.order_id, rejected)


def test_cancel_does_not_restock(online_ctx, stock, on_hand, black, customer):
    stock(black, Store.ONLINE, "42", 2)
    order = _order(online_ctx, black, customer)

    order_service.update_order_status(order.order_id, "cancelled")

    assert on_hand(black, Store.ONLINE, "42") == 1


def test_update_status_unknown_order(db_session):
    with pytest.raises(NotFoundError):
        order_service.update_order_status("ORD-O-999999", "cancelled")
    with pytest.raises(ValidationError):
        order_service.update_order_status("ORD-O-999999", "shipped")


def test_list_orders_by_status(online_ctx, stock, black, customer):
    stock(black, Store.ONLINE, "42", 5)
    first = _order(online_ctx, black, customer)
    second = _order(online_ctx, black, customer)
    order_service.update_order_status(first.order_id, "in_delivery")

    assert [o.order_id for o in order_service.list_orders()] == [second.order_id, first.order_id]
    assert [o.order_id for o in order_service.list_orders(status="pending")] == [second.order_id]
    assert order_service.get_order(first.order_id).status is OrderStatus.IN_DELIVERY
