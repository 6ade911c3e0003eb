# backend/stockflow/config.py
from __future__ import annotations

import os
import re
from datetime import timedelta


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def parse_duration(value: str | None, default: timedelta) -> timedelta:
    """
    Parse a short duration string such as "7d", "12h", "30m" or "45s".

    A bare number is read as seconds. Empty or unparseable values fall back
    to the default.
    """
    if not value:
        return default
    match = re.fullmatch(r"\s*(\d+)\s*([dhms]?)\s*", value)
    if not match:
        return default
    amount = int(match.group(1))
    unit = match.group(2) or "s"
    if unit == "d":
        return timedelta(days=amount)
    if unit == "h":
        return timedelta(hours=amount)
    if unit == "m":
        return timedelta(minutes=amount)
    return timedelta(seconds=amount)


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Token signing (falls back to SECRET_KEY so a single secret works in dev)
    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_IN = parse_duration(os.environ.get("JWT_EXPIRE"), timedelta(days=7))

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///stockflow.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PORT = int(os.environ.get("PORT", "5000"))

    # "transactional": one DB transaction per sale/purchase, atomic stock updates.
    # "compensating": step-by-step commits with delete-based compensation.
    STOCKFLOW_WRITE_MODE = os.environ.get("STOCKFLOW_WRITE_MODE", "transactional")

    # When enabled, a new alert is skipped if an unresolved alert of the same
    # type already exists for the product.
    STOCKFLOW_DEDUPLICATE_ALERTS = _env_flag("STOCKFLOW_DEDUPLICATE_ALERTS", False)

    CORS_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        ).split(",")
        if origin.strip()
    }

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    PASSWORD_RESET_TTL_MINUTES = int(os.environ.get("PASSWORD_RESET_TTL_MINUTES", "60"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
