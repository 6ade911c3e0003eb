# Overview: Service-layer operations for identifiers; SKU, bill and invoice number synthesis.

"""
Identifier generation.

- SKU: "<first 3 letters of name>-<last 6 digits of ms timestamp>-<3 random>"
- Standard bill number: "<prefix>-<YYYYMM>-<n:04d>" where n is the count of
  the business's bills + 1. Not gap-free; if that number is already taken
  (a bill was deleted) the suffix probes forward to the next free value.
- Barcode bill number: "BILL-<ms timestamp>-<9 random>", collision-resistant
  without reading existing bills.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import date

from ..extensions import db
from ..models import Bill
from .tenant_service import scoped_query

_ALPHABET = string.ascii_uppercase + string.digits


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def _millis() -> int:
    return int(time.time() * 1000)


def generate_sku(product_name: str) -> str:
    prefix = "".join(ch for ch in product_name.upper() if ch.isalnum())[:3] or "PRD"
    timestamp = str(_millis())[-6:]
    return f"{prefix}-{timestamp}-{_random_suffix(3)}"


def next_bill_number(*, business_id: int, prefix: str, on_date: date) -> str:
    """
    Sequential bill number for a business.

    Sequential requests within one business get strictly increasing suffixes.
    Concurrent requests may compute the same candidate; the per-business
    unique constraint on bills rejects the loser.
    """
    count = scoped_query(Bill, business_id).count()
    period = on_date.strftime("%Y%m")
    n = count + 1
    while True:
        candidate = f"{prefix}-{period}-{n:04d}"
        taken = (
            db.session.query(Bill.id)
            .filter(Bill.business_id == business_id, Bill.bill_number == candidate)
            .first()
        )
        if not taken:
            return candidate
        n += 1


def barcode_bill_number() -> str:
    return f"BILL-{_millis()}-{_random_suffix(9)}"


def barcode_invoice_number() -> str:
    return f"BC-{_millis()}-{_random_suffix(6)}"
