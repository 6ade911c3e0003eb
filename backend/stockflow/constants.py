# Overview: Enumerations and defaults shared by models, schemas and services.

ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLES = (ROLE_ADMIN, ROLE_MANAGER)

PAYMENT_METHODS = ("cash", "card", "upi", "netbanking", "cheque", "other")

PAYMENT_PAID = "paid"
PAYMENT_PENDING = "pending"
PAYMENT_PARTIAL = "partial"
PAYMENT_STATUSES = (PAYMENT_PAID, PAYMENT_PENDING, PAYMENT_PARTIAL)

ALERT_LOW_STOCK = "low_stock"
ALERT_OUT_OF_STOCK = "out_of_stock"
ALERT_OVERSTOCK = "overstock"
ALERT_EXPIRY_WARNING = "expiry_warning"
ALERT_TYPES = (ALERT_LOW_STOCK, ALERT_OUT_OF_STOCK, ALERT_OVERSTOCK, ALERT_EXPIRY_WARNING)

# Stock status labels exposed on product payloads
STOCK_OUT = "OUT_OF_STOCK"
STOCK_LOW = "LOW_STOCK"
STOCK_OVER = "OVERSTOCK"
STOCK_IN = "IN_STOCK"

ADJUSTMENT_INCREASE = "increase"
ADJUSTMENT_DECREASE = "decrease"
ADJUSTMENT_TYPES = (ADJUSTMENT_INCREASE, ADJUSTMENT_DECREASE)
ADJUSTMENT_REASONS = ("damaged", "expired", "theft", "lost", "found", "correction", "return", "other")

WRITE_MODE_TRANSACTIONAL = "transactional"
WRITE_MODE_COMPENSATING = "compensating"
WRITE_MODES = (WRITE_MODE_TRANSACTIONAL, WRITE_MODE_COMPENSATING)

DEFAULT_LOW_STOCK_THRESHOLD = 10
DEFAULT_MAX_STOCK_LEVEL = 100
DEFAULT_BILL_PREFIX = "INV"
DEFAULT_CURRENCY = "INR"
DEFAULT_TAX_RATE = 0
DEFAULT_UNIT = "pcs"

MIN_PASSWORD_LENGTH = 6
