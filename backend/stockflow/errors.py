# Overview: Domain exception hierarchy shared by services and routes.

"""
Domain errors.

Services raise these; routes translate them into the JSON envelope with the
attached status code. Anything that is not a StockFlowError is treated as an
unexpected failure (logged, 500).
"""

from __future__ import annotations


class StockFlowError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StockFlowError, ValueError):
    """400-level input problem."""

    status_code = 400


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the product's current stock."""


class DuplicateError(ValidationError):
    """Per-business uniqueness violated (SKU, invoice number, email)."""


class AuthenticationError(StockFlowError):
    status_code = 401


class AuthorizationError(StockFlowError):
    status_code = 403


class NotFoundError(StockFlowError):
    """
    Entity missing, or owned by a different business.

    SECURITY: both cases raise the same error so callers cannot probe for
    records that belong to other tenants.
    """

    status_code = 404


class WriteStepError(StockFlowError):
    """A mandatory write step failed after validation passed."""

    status_code = 500

    def __init__(self, message: str, step: str, details: dict | None = None):
        super().__init__(message, details)
        self.step = step
