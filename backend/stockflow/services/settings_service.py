# Overview: Service-layer operations for per-business settings and profile.

from __future__ import annotations

from ..constants import DEFAULT_BILL_PREFIX, DEFAULT_LOW_STOCK_THRESHOLD
from ..errors import NotFoundError
from ..extensions import db
from ..models import Business, Settings
from ..schemas import BusinessUpdateInput, SettingsUpdateInput


def get_settings(business_id: int) -> Settings:
    """
    Return the business's settings row, creating defaults on first access.

    Registration always creates the row; the fallback covers businesses
    created through the CLI or older data.
    """
    settings = db.session.query(Settings).filter_by(business_id=business_id).first()
    if settings is None:
        business = db.session.get(Business, business_id)
        if business is None:
            raise NotFoundError("Business not found")
        settings = Settings(
            business_id=business_id,
            bill_prefix=DEFAULT_BILL_PREFIX,
            low_stock_threshold_default=DEFAULT_LOW_STOCK_THRESHOLD,
            currency_symbol="₹" if business.currency == "INR" else "$",
        )
        db.session.add(settings)
        db.session.flush()
    return settings


def update_settings(business_id: int, data: SettingsUpdateInput) -> Settings:
    settings = get_settings(business_id)
    for column, value in data.changes.items():
        setattr(settings, column, value)
    db.session.commit()
    return settings


def get_business(business_id: int) -> Business:
    business = db.session.get(Business, business_id)
    if business is None:
        raise NotFoundError("Business not found")
    return business


def update_business(business_id: int, data: BusinessUpdateInput) -> Business:
    business = get_business(business_id)
    for column, value in data.changes.items():
        setattr(business, column, value)
    db.session.commit()
    return business
