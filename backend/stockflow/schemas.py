# Overview: Typed request inputs; every write endpoint parses its JSON body here.

"""
Request schemas.

Each endpoint maps its camelCase JSON body onto a frozen dataclass before any
service code runs. Parsing is strict: wrong types, unknown enum values,
non-positive quantities and negative prices are rejected with ValidationError
(400). Money parses to Decimal, quantities to int.

Update inputs carry a `changes` dict holding only the fields the client
actually sent, already translated to column names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from .constants import (
    ADJUSTMENT_REASONS,
    ADJUSTMENT_TYPES,
    DEFAULT_CURRENCY,
    DEFAULT_UNIT,
    MIN_PASSWORD_LENGTH,
    PAYMENT_METHODS,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PAYMENT_STATUSES,
)
from .errors import ValidationError
from .money import to_decimal
from .time_utils import parse_iso_date

# Column limits: Integer quantities and Numeric(12, 2) money.
MAX_INT = 2**31 - 1
MAX_MONEY = Decimal("9999999999.99")

# ---------------------------------------------------------------------------
# field readers
# ---------------------------------------------------------------------------

def _body(payload) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def _str(data: dict, key: str, *, required: bool = False, label: str | None = None, max_length: int | None = None):
    label = label or key
    raw = data.get(key)
    if raw is None:
        if required:
            raise ValidationError(f"{label} is required")
        return None
    if not isinstance(raw, (str, int)) or isinstance(raw, bool):
        raise ValidationError(f"{label} must be a string")
    value = str(raw).strip()
    if not value:
        if required:
            raise ValidationError(f"{label} is required")
        return None
    if max_length and len(value) > max_length:
        raise ValidationError(f"{label} exceeds max length {max_length}")
    return value


def _int(data: dict, key: str, *, required: bool = False, default=None, minimum: int | None = None,
         maximum: int = MAX_INT, label: str | None = None):
    label = label or key
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{label} is required")
        return default
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be an integer")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValidationError(f"{label} must be an integer")
        raw = int(raw)
    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped.lstrip("-").isdigit() or len(stripped) > 20:
            raise ValidationError(f"{label} must be an integer")
        raw = int(stripped)
    if not isinstance(raw, int):
        raise ValidationError(f"{label} must be an integer")
    if minimum is not None and raw < minimum:
        if minimum == 1:
            raise ValidationError(f"{label} must be a positive number")
        raise ValidationError(f"{label} must be >= {minimum}")
    if raw > maximum:
        raise ValidationError(f"{label} cannot exceed {maximum}")
    return raw


def _decimal(data: dict, key: str, *, required: bool = False, default=None, minimum: Decimal | None = Decimal("0"),
             maximum: Decimal | None = MAX_MONEY, label: str | None = None):
    label = label or key
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{label} is required")
        return default
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str, Decimal)):
        raise ValidationError(f"{label} must be a number")
    try:
        value = to_decimal(raw.strip() if isinstance(raw, str) else raw)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not value.is_finite():
        raise ValidationError(f"{label} must be a number")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{label} must be a non-negative number")
    if maximum is not None and value > maximum:
        raise ValidationError(f"{label} cannot exceed {maximum}")
    return value


def _percent(data: dict, key: str, label: str | None = None) -> Decimal:
    return _decimal(data, key, default=Decimal("0"), maximum=Decimal("100"), label=label)


def _bool(data: dict, key: str, label: str | None = None):
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, bool):
        raise ValidationError(f"{label or key} must be true or false")
    return raw


def _choice(data: dict, key: str, choices, *, required: bool = False, default=None, label: str | None = None):
    label = label or key
    value = _str(data, key, required=required, label=label)
    if value is None:
        return default
    value = value.lower()
    if value not in choices:
        raise ValidationError(f"{label} must be one of: {', '.join(choices)}")
    return value


def _date(data: dict, key: str, label: str | None = None):
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"{label or key} must be an ISO-8601 date")
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{label or key} must be an ISO-8601 date")


def _email(data: dict, key: str = "email", *, required: bool = False):
    value = _str(data, key, required=required, max_length=255)
    if value is None:
        return None
    value = value.lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValidationError("Please provide a valid email address")
    return value


def _items(data: dict, key: str = "items") -> list[dict]:
    raw = data.get(key)
    if not raw:
        raise ValidationError("Please provide at least one item")
    if not isinstance(raw, list):
        raise ValidationError("items must be a list")
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValidationError("Each item must be an object")
    return raw


def _collect(data: dict, mapping: dict[str, tuple[str, Any]]) -> dict:
    """
    Build a column-name patch from the keys actually present in the body.

    mapping: camelCaseKey -> (column_name, reader(data, key))
    """
    changes = {}
    for key, (column, reader) in mapping.items():
        if key in data:
            changes[column] = reader(data, key)
    return changes


# ---------------------------------------------------------------------------
# auth
# ---------------------------------------------------------------------------

def _password(data: dict, key: str = "password") -> str:
    raw = data.get(key)
    if not raw or not isinstance(raw, str):
        raise ValidationError("Password is required")
    if len(raw) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return raw


@dataclass(frozen=True)
class RegisterInput:
    business_name: str
    owner_name: str
    email: str
    password: str
    phone: str | None = None
    address: str | None = None
    gst_number: str | None = None
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_json(cls, payload) -> "RegisterInput":
        data = _body(payload)
        if not all(data.get(k) for k in ("businessName", "ownerName", "email", "password")):
            raise ValidationError("Please provide all required fields")
        return cls(
            business_name=_str(data, "businessName", required=True, max_length=200),
            owner_name=_str(data, "ownerName", required=True, max_length=200),
            email=_email(data, required=True),
            password=_password(data),
            phone=_str(data, "phone", max_length=32),
            address=_str(data, "address"),
            gst_number=_str(data, "gstNumber", max_length=32),
            currency=(_str(data, "currency", max_length=8) or DEFAULT_CURRENCY).upper(),
        )


@dataclass(frozen=True)
class LoginInput:
    email: str
    password: str

    @classmethod
    def from_json(cls, payload) -> "LoginInput":
        data = _body(payload)
        if not data.get("email") or not data.get("password"):
            raise ValidationError("Please provide email and password")
        password = data["password"]
        if not isinstance(password, str):
            raise ValidationError("Please provide email and password")
        return cls(email=_email(data, required=True), password=password)


@dataclass(frozen=True)
class ForgotPasswordInput:
    email: str

    @classmethod
    def from_json(cls, payload) -> "ForgotPasswordInput":
        data = _body(payload)
        if not data.get("email"):
            raise ValidationError("Please provide email address")
        return cls(email=_email(data, required=True))


@dataclass(frozen=True)
class ResetPasswordInput:
    token: str
    password: str

    @classmethod
    def from_json(cls, payload) -> "ResetPasswordInput":
        data = _body(payload)
        if not data.get("token") or not data.get("password"):
            raise ValidationError("Please provide password and token")
        return cls(token=_str(data, "token", required=True), password=_password(data))


@dataclass(frozen=True)
class ManagerInput:
    full_name: str
    email: str
    password: str
    phone: str | None = None

    @classmethod
    def from_json(cls, payload) -> "ManagerInput":
        data = _body(payload)
        if not data.get("email") or not data.get("fullName") or not data.get("password"):
            raise ValidationError("Please provide email, full name, and password")
        return cls(
            full_name=_str(data, "fullName", required=True, max_length=200),
            email=_email(data, required=True),
            password=_password(data),
            phone=_str(data, "phone", max_length=32),
        )


# ---------------------------------------------------------------------------
# catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductInput:
    product_name: str
    purchase_price: Decimal
    selling_price: Decimal
    sku: str | None = None
    barcode: str | None = None
    unit: str = DEFAULT_UNIT
    category_id: int | None = None
    supplier_id: int | None = None
    current_stock: int = 0
    min_stock_level: int | None = None
    max_stock_level: int | None = None
    expiry_date: date | None = None
    image_url: str | None = None
    description: str | None = None

    @classmethod
    def from_json(cls, payload) -> "ProductInput":
        data = _body(payload)
        return cls(
            product_name=_str(data, "productName", required=True, label="Product name", max_length=255),
            purchase_price=_decimal(data, "purchasePrice", required=True, label="Purchase price"),
            selling_price=_decimal(data, "sellingPrice", required=True, label="Selling price"),
            sku=_str(data, "sku", max_length=64),
            barcode=_str(data, "barcode", max_length=64),
            unit=_str(data, "unit", max_length=16) or DEFAULT_UNIT,
            category_id=_int(data, "categoryId"),
            supplier_id=_int(data, "supplierId"),
            current_stock=_int(data, "currentStock", default=0, minimum=0, label="Current stock"),
            min_stock_level=_int(data, "minStockLevel", minimum=0, label="Minimum stock level"),
            max_stock_level=_int(data, "maxStockLevel", minimum=0, label="Maximum stock level"),
            expiry_date=_date(data, "expiryDate"),
            image_url=_str(data, "imageUrl", max_length=500),
            description=_str(data, "description"),
        )


_PRODUCT_UPDATE_FIELDS = {
    "productName": ("product_name", lambda d, k: _str(d, k, required=True, label="Product name", max_length=255)),
    "categoryId": ("category_id", lambda d, k: _int(d, k)),
    "barcode": ("barcode", lambda d, k: _str(d, k, max_length=64)),
    "unit": ("unit", lambda d, k: _str(d, k, required=True, max_length=16)),
    "purchasePrice": ("purchase_price", lambda d, k: _decimal(d, k, required=True, label="Purchase price")),
    "sellingPrice": ("selling_price", lambda d, k: _decimal(d, k, required=True, label="Selling price")),
    "minStockLevel": ("min_stock_level", lambda d, k: _int(d, k, required=True, minimum=0, label="Minimum stock level")),
    "maxStockLevel": ("max_stock_level", lambda d, k: _int(d, k, required=True, minimum=0, label="Maximum stock level")),
    "supplierId": ("supplier_id", lambda d, k: _int(d, k)),
    "expiryDate": ("expiry_date", _date),
    "imageUrl": ("image_url", lambda d, k: _str(d, k, max_length=500)),
    "description": ("description", lambda d, k: _str(d, k)),
}


@dataclass(frozen=True)
class ProductUpdateInput:
    """current_stock is deliberately absent: stock only moves through stock flows."""
    changes: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload) -> "ProductUpdateInput":
        data = _body(payload)
        changes = _collect(data, _PRODUCT_UPDATE_FIELDS)
        if not changes:
            raise ValidationError("No update data provided")
        return cls(changes=changes)


@dataclass(frozen=True)
class StockAdjustmentInput:
    adjustment_type: str
    quantity: int
    reason: str
    notes: str | None = None

    @classmethod
    def from_json(cls, payload) -> "StockAdjustmentInput":
        data = _body(payload)
        return cls(
            adjustment_type=_choice(data, "adjustmentType", ADJUSTMENT_TYPES, required=True, label="Adjustment type"),
            quantity=_int(data, "quantity", required=True, minimum=1, label="Quantity"),
            reason=_choice(data, "reason", ADJUSTMENT_REASONS, default="other", label="Reason"),
            notes=_str(data, "notes"),
        )


@dataclass(frozen=True)
class CategoryInput:
    category_name: str
    description: str | None = None

    @classmethod
    def from_json(cls, payload) -> "CategoryInput":
        data = _body(payload)
        return cls(
            category_name=_str(data, "categoryName", required=True, label="Category name", max_length=120),
            description=_str(data, "description"),
        )


# ---------------------------------------------------------------------------
# registries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CustomerInput:
    customer_name: str
    phone: str
    email: str | None = None
    address: str | None = None

    @classmethod
    def from_json(cls, payload) -> "CustomerInput":
        data = _body(payload)
        if not data.get("customerName") or not data.get("phone"):
            raise ValidationError("Please provide customer name and phone")
        return cls(
            customer_name=_str(data, "customerName", required=True, max_length=200),
            phone=_str(data, "phone", required=True, max_length=32),
            email=_email(data),
            address=_str(data, "address"),
        )


_CUSTOMER_UPDATE_FIELDS = {
    "customerName": ("customer_name", lambda d, k: _str(d, k, required=True, label="Customer name", max_length=200)),
    "phone": ("phone", lambda d, k: _str(d, k, required=True, label="Phone", max_length=32)),
    "email": ("email", lambda d, k: _email(d, k)),
    "address": ("address", lambda d, k: _str(d, k)),
}


@dataclass(frozen=True)
class CustomerUpdateInput:
    changes: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload) -> "CustomerUpdateInput":
        changes = _collect(_body(payload), _CUSTOMER_UPDATE_FIELDS)
        if not changes:
            raise ValidationError("No update data provided")
        return cls(changes=changes)


@dataclass(frozen=True)
class SupplierInput:
    supplier_name: str
    phone: str
    contact_person: str | None = None
    email: str | None = None
    address: str | None = None
    gst_number: str | None = None

    @classmethod
    def from_json(cls, payload) -> "SupplierInput":
        data = _body(payload)
        if not data.get("supplierName") or not data.get("phone"):
            raise ValidationError("Please provide supplier name and phone")
        return cls(
            supplier_name=_str(data, "supplierName", required=True, max_length=200),
            phone=_str(data, "phone", required=True, max_length=32),
            contact_person=_str(data, "contactPerson", max_length=200),
            email=_email(data),
            address=_str(data, "address"),
            gst_number=_str(data, "gstNumber", max_length=32),
        )


_SUPPLIER_UPDATE_FIELDS = {
    "supplierName": ("supplier_name", lambda d, k: _str(d, k, required=True, label="Supplier name", max_length=200)),
    "contactPerson": ("contact_person", lambda d, k: _str(d, k, max_length=200)),
    "phone": ("phone", lambda d, k: _str(d, k, required=True, label="Phone", max_length=32)),
    "email": ("email", lambda d, k: _email(d, k)),
    "address": ("address", lambda d, k: _str(d, k)),
    "gstNumber": ("gst_number", lambda d, k: _str(d, k, max_length=32)),
}


@dataclass(frozen=True)
class SupplierUpdateInput:
    changes: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload) -> "SupplierUpdateInput":
        changes = _collect(_body(payload), _SUPPLIER_UPDATE_FIELDS)
        if not changes:
            raise ValidationError("No update data provided")
        return cls(changes=changes)


# ---------------------------------------------------------------------------
# sales and purchases
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SaleItemInput:
    product_id: int
    quantity: int
    unit_price: Decimal | None = None  # None -> product's selling price
    discount_percentage: Decimal = Decimal("0")
    tax_percentage: Decimal = Decimal("0")

    @classmethod
    def from_json(cls, data: dict) -> "SaleItemInput":
        return cls(
            product_id=_int(data, "productId", required=True, label="Product ID"),
            quantity=_int(data, "quantity", required=True, minimum=1, label="Quantity"),
            unit_price=_decimal(data, "unitPrice", label="Unit price"),
            discount_percentage=_percent(data, "discountPercentage", label="Item discount percentage"),
            tax_percentage=_percent(data, "taxPercentage", label="Item tax percentage"),
        )


@dataclass(frozen=True)
class SaleInput:
    items: tuple[SaleItemInput, ...]
    payment_method: str
    customer_id: int | None = None
    discount_percentage: Decimal = Decimal("0")
    tax_percentage: Decimal = Decimal("0")
    payment_status: str = PAYMENT_PAID
    paid_amount: Decimal = Decimal("0")
    notes: str | None = None

    @classmethod
    def from_json(cls, payload) -> "SaleInput":
        data = _body(payload)
        raw_items = _items(data)
        if not data.get("paymentMethod"):
            raise ValidationError("Payment method is required")
        return cls(
            items=tuple(SaleItemInput.from_json(item) for item in raw_items),
            payment_method=_choice(data, "paymentMethod", PAYMENT_METHODS, required=True, label="Payment method"),
            customer_id=_int(data, "customerId"),
            discount_percentage=_percent(data, "discountPercentage", label="Discount percentage"),
            tax_percentage=_percent(data, "taxPercentage", label="Tax percentage"),
            payment_status=_choice(data, "paymentStatus", PAYMENT_STATUSES, default=PAYMENT_PAID,
                                   label="Payment status"),
            paid_amount=_decimal(data, "paidAmount", default=Decimal("0"), label="Paid amount"),
            notes=_str(data, "notes"),
        )


@dataclass(frozen=True)
class SaleUpdateInput:
    payment_status: str | None = None
    paid_amount: Decimal | None = None
    notes: str | None = None
    notes_provided: bool = False

    @classmethod
    def from_json(cls, payload) -> "SaleUpdateInput":
        data = _body(payload)
        result = cls(
            payment_status=_choice(data, "paymentStatus", PAYMENT_STATUSES, label="Payment status"),
            paid_amount=_decimal(data, "paidAmount", label="Paid amount"),
            notes=_str(data, "notes"),
            notes_provided="notes" in data,
        )
        if result.payment_status is None and result.paid_amount is None and not result.notes_provided:
            raise ValidationError("No update data provided")
        return result


@dataclass(frozen=True)
class PurchaseItemInput:
    product_id: int
    quantity: int
    purchase_price: Decimal

    @classmethod
    def from_json(cls, data: dict) -> "PurchaseItemInput":
        return cls(
            product_id=_int(data, "productId", required=True, label="Product ID"),
            quantity=_int(data, "quantity", required=True, minimum=1, label="Quantity"),
            purchase_price=_decimal(data, "purchasePrice", required=True, label="Purchase price"),
        )


@dataclass(frozen=True)
class PurchaseInput:
    invoice_number: str
    items: tuple[PurchaseItemInput, ...]
    supplier_id: int | None = None
    purchase_date: date | None = None
    payment_status: str = PAYMENT_PENDING
    notes: str | None = None

    @classmethod
    def from_json(cls, payload) -> "PurchaseInput":
        data = _body(payload)
        invoice_number = _str(data, "invoiceNumber", required=True, label="Invoice number", max_length=64)
        raw_items = _items(data)
        return cls(
            invoice_number=invoice_number,
            items=tuple(PurchaseItemInput.from_json(item) for item in raw_items),
            supplier_id=_int(data, "supplierId"),
            purchase_date=_date(data, "purchaseDate"),
            payment_status=_choice(data, "paymentStatus", PAYMENT_STATUSES, default=PAYMENT_PENDING,
                                   label="Payment status"),
            notes=_str(data, "notes"),
        )


@dataclass(frozen=True)
class PurchaseUpdateInput:
    payment_status: str | None = None
    notes: str | None = None
    notes_provided: bool = False

    @classmethod
    def from_json(cls, payload) -> "PurchaseUpdateInput":
        data = _body(payload)
        result = cls(
            payment_status=_choice(data, "paymentStatus", PAYMENT_STATUSES, label="Payment status"),
            notes=_str(data, "notes"),
            notes_provided="notes" in data,
        )
        if result.payment_status is None and not result.notes_provided:
            raise ValidationError("No update data provided")
        return result


# ---------------------------------------------------------------------------
# barcode
# ---------------------------------------------------------------------------

def _barcode(data: dict) -> str:
    value = data.get("barcode")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Barcode is required")
    return value.strip()


@dataclass(frozen=True)
class BarcodePurchaseInput:
    barcode: str
    quantity: int
    purchase_price: Decimal
    supplier_id: int | None = None
    notes: str | None = None

    @classmethod
    def from_json(cls, payload) -> "BarcodePurchaseInput":
        data = _body(payload)
        return cls(
            barcode=_barcode(data),
            quantity=_int(data, "quantity", required=True, minimum=1, label="Quantity"),
            purchase_price=_decimal(data, "purchasePrice", required=True, label="Purchase price"),
            supplier_id=_int(data, "supplierId"),
            notes=_str(data, "notes"),
        )


@dataclass(frozen=True)
class BarcodeSaleInput:
    barcode: str
    quantity: int
    payment_method: str
    customer_id: int | None = None
    discount: Decimal = Decimal("0")  # absolute amount, not a percentage

    @classmethod
    def from_json(cls, payload) -> "BarcodeSaleInput":
        data = _body(payload)
        barcode = _barcode(data)
        quantity = _int(data, "quantity", required=True, minimum=1, label="Quantity")
        if not data.get("paymentMethod"):
            raise ValidationError("Payment method is required")
        return cls(
            barcode=barcode,
            quantity=quantity,
            payment_method=_choice(data, "paymentMethod", PAYMENT_METHODS, required=True, label="Payment method"),
            customer_id=_int(data, "customerId"),
            discount=_decimal(data, "discount", default=Decimal("0"), label="Discount"),
        )


# ---------------------------------------------------------------------------
# settings
# ---------------------------------------------------------------------------

_SETTINGS_FIELDS = {
    "lowStockThresholdDefault": (
        "low_stock_threshold_default",
        lambda d, k: _int(d, k, required=True, minimum=0, label="Low stock threshold"),
    ),
    "enableEmailAlerts": ("enable_email_alerts", _bool),
    "enableExpiryAlerts": ("enable_expiry_alerts", _bool),
    "enableOverstockAlerts": ("enable_overstock_alerts", _bool),
    "billPrefix": ("bill_prefix", lambda d, k: _str(d, k, required=True, label="Bill prefix", max_length=16)),
    "defaultTaxPercentage": ("default_tax_percentage", lambda d, k: _percent(d, k, label="Default tax percentage")),
    "currencySymbol": ("currency_symbol", lambda d, k: _str(d, k, required=True, label="Currency symbol", max_length=8)),
}


@dataclass(frozen=True)
class SettingsUpdateInput:
    changes: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload) -> "SettingsUpdateInput":
        changes = _collect(_body(payload), _SETTINGS_FIELDS)
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValidationError("No update data provided")
        return cls(changes=changes)


_BUSINESS_FIELDS = {
    "businessName": ("business_name", lambda d, k: _str(d, k, required=True, label="Business name", max_length=200)),
    "ownerName": ("owner_name", lambda d, k: _str(d, k, required=True, label="Owner name", max_length=200)),
    "email": ("email", lambda d, k: _email(d, k, required=True)),
    "phone": ("phone", lambda d, k: _str(d, k, max_length=32)),
    "address": ("address", lambda d, k: _str(d, k)),
    "gstNumber": ("gst_number", lambda d, k: _str(d, k, max_length=32)),
    "currency": ("currency", lambda d, k: _str(d, k, required=True, max_length=8).upper()),
    "taxRate": ("tax_rate", lambda d, k: _percent(d, k, label="Tax rate")),
}


@dataclass(frozen=True)
class BusinessUpdateInput:
    changes: dict = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload) -> "BusinessUpdateInput":
        changes = _collect(_body(payload), _BUSINESS_FIELDS)
        if not changes:
            raise ValidationError("No update data provided")
        return cls(changes=changes)


# ---------------------------------------------------------------------------
# query strings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date

    @classmethod
    def from_args(cls, args, *, required: bool = True) -> "DateRange | None":
        start = args.get("startDate")
        end = args.get("endDate")
        if not start or not end:
            if required:
                raise ValidationError("Please provide start date and end date")
            return None
        start_date = _date({"startDate": start}, "startDate")
        end_date = _date({"endDate": end}, "endDate")
        if start_date > end_date:
            raise ValidationError("startDate must be on or before endDate")
        return cls(start_date=start_date, end_date=end_date)


@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args, *, default_limit: int = 20, max_limit: int = 100) -> "Page":
        values = {"page": args.get("page"), "limit": args.get("limit")}
        page = _int(values, "page", default=1, minimum=1)
        limit = _int(values, "limit", default=default_limit, minimum=1)
        return cls(page=page, limit=min(limit, max_limit))
