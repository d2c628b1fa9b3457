from .enums import Store, PaymentMethod, OrderStatus, ReturnType, PAYMENT_METHODS_BY_STORE, EMIRATES
from .catalog import Employee, Product, ProductColor
from .inventory import StockEntry
from .sales import Sale, Order
from .documents import Return, DocumentSequence

__all__ = [
    'Store', 'PaymentMethod', 'OrderStatus', 'ReturnType', 'PAYMENT_METHODS_BY_STORE', 'EMIRATES',
    'Employee', 'Product', 'ProductColor',
    'StockEntry',
    'Sale', 'Order',
    'Return', 'DocumentSequence',
]
