from .tenancy import Business
from .auth import User
from .settings import Settings
from .inventory import Category, Supplier, Product, StockAdjustment, Purchase, PurchaseItem
from .customers import Customer
from .sales import Bill, BillItem, Payment
from .alerts import Alert
from .activity import ActivityLog

__all__ = [
    'Business', 'User', 'Settings',
    'Category', 'Supplier', 'Product', 'StockAdjustment', 'Purchase', 'PurchaseItem',
    'Customer',
    'Bill', 'BillItem', 'Payment',
    'Alert',
    'ActivityLog',
]
