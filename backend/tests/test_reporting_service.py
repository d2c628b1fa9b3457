from atelier.models import Store
from atelier.services import order_service, reporting_service, sales_service
from atelier.services.order_service import CustomerInfo


def test_dashboard_metrics(boutique_ctx, online_ctx, stock, make_product, black, navy):
    _, dress = make_product(model_number="DRS-200", colors=("Red",))
    stock(black, Store.BOUTIQUE, "42", 10)
    stock(navy, Store.BOUTIQUE, "40", 2)
    stock(dress["Red"], Store.ONLINE, "42", 8)

    sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=2, payment_method="card")
    sales_service.record_sale(boutique_ctx, variant_id=navy.id, size="40", quantity=1, payment_method="cash")
    order_service.record_order(
        online_ctx,
        variant_id=dress["Red"].id,
        size="42",
        quantity=1,
        payment_method="cash_on_delivery",
        customer=CustomerInfo(name="Aisha", phone="0501111111", emirate="Ajman", address="Corniche"),
    )

    boutique = reporting_service.get_dashboard_metrics(Store.BOUTIQUE)
    assert boutique["total_products"] == 1
    assert boutique["today_sales_cents"] == 105000 + 50000
    assert boutique["pending_orders"] == 0
    # navy/40 is down to 1
    assert boutique["low_stock_items"] == 1

    online = reporting_service.get_dashboard_metrics("online")
    assert online["total_products"] == 1
    assert online["today_sales_cents"] == 0
    assert online["pending_orders"] == 1
    assert online["low_stock_items"] == 0


def test_top_products_ranked_by_units(boutique_ctx, stock, make_product, black):
    _, dress = make_product(model_number="DRS-200", store_price_cents=20000, colors=("Red",))
    stock(black, Store.BOUTIQUE, "42", 10)
    stock(dress["Red"], Store.BOUTIQUE, "42", 10)

    sales_service.record_sale(boutique_ctx, variant_id=black.id, size="42", quantity=1, payment_method="cash")
    sales_service.record_sale(boutique_ctx, variant_id=dress["Red"].id, size="42", quantity=3, payment_method="cash")

    top = reporting_service.get_top_products(Store.BOUTIQUE)
    assert [t["model_number"] for t in top] == ["DRS-200", "ABY-100"]
    assert top[0]["units_sold"] == 3
    assert top[0]["revenue_cents"] == 60000

    assert reporting_service.get_top_products(Store.BOUTIQUE, limit=1)[0]["model_number"] == "DRS-200"
    assert reporting_service.get_top_products(Store.ONLINE) == []
