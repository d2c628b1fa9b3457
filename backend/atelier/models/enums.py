"""
Closed vocabularies shared by models, services and routes.

Every value here is persisted as its lowercase string form, so the
wire format and the database format are the same.
"""
from __future__ import annotations

import enum

from ..extensions import db


class Store(str, enum.Enum):
    """The two independent inventory pools."""
    BOUTIQUE = "boutique"
    ONLINE = "online"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    IN_DELIVERY = "in_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ReturnType(str, enum.Enum):
    REFUND = "refund"
    EXCHANGE_COLOR = "exchange_color"
    EXCHANGE_SIZE = "exchange_size"
    EXCHANGE_MODEL = "exchange_model"

    @property
    def is_exchange(self) -> bool:
        return self is not ReturnType.REFUND


# Boutique takes cash or card; online takes bank transfer or cash on delivery
PAYMENT_METHODS_BY_STORE: dict[Store, frozenset[PaymentMethod]] = {
    Store.BOUTIQUE: frozenset({PaymentMethod.CASH, PaymentMethod.CARD}),
    Store.ONLINE: frozenset({PaymentMethod.BANK_TRANSFER, PaymentMethod.CASH_ON_DELIVERY}),
}

EMIRATES = (
    "Abu Dhabi",
    "Dubai",
    "Sharjah",
    "Ajman",
    "Umm Al Quwain",
    "Ras Al Khaimah",
    "Fujairah",
)


def enum_column_type(enum_cls, name: str):
    """SQLAlchemy Enum storing member values (not names) as VARCHAR."""
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
    )
