# Overview: Multi-step write orchestration for sale, purchase and barcode flows.

"""
WriteUnit: one multi-table business write (bill, purchase, barcode sale...).

Modes (config STOCKFLOW_WRITE_MODE):

transactional (default)
    Every step flushes into one database transaction. The unit commits once
    on clean exit; any exception rolls back everything, so no header,
    item, stock change, payment, or alert from the failed request survives.

compensating
    Every step commits on its own. A mandatory step that fails triggers the
    compensations registered by earlier steps, newest first (for example
    "delete the bill header"), then the error propagates. Side effects
    (stock on multi-item flows, payment, customer running total, alerts) are
    logged and skipped on failure; the document is reported as created
    anyway. Failed side effects are listed in `warnings`.

Domain errors (StockFlowError) propagate unchanged; any other failure in a
mandatory step surfaces as WriteStepError (500).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from flask import current_app

from ..constants import WRITE_MODE_COMPENSATING, WRITE_MODE_TRANSACTIONAL, WRITE_MODES
from ..errors import StockFlowError, WriteStepError
from ..extensions import db

logger = logging.getLogger(__name__)


def current_write_mode() -> str:
    mode = current_app.config.get("STOCKFLOW_WRITE_MODE", WRITE_MODE_TRANSACTIONAL)
    if mode not in WRITE_MODES:
        raise RuntimeError(f"Unknown STOCKFLOW_WRITE_MODE {mode!r}")
    return mode


class WriteUnit:
    def __init__(self, operation: str, mode: str | None = None):
        self.operation = operation
        self.mode = mode or current_write_mode()
        self.warnings: list[str] = []
        self._compensations: list[tuple[str, Callable[[Any], None], Any]] = []

    @property
    def compensating(self) -> bool:
        return self.mode == WRITE_MODE_COMPENSATING

    def __enter__(self) -> "WriteUnit":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            db.session.rollback()
            return False
        if not self.compensating:
            try:
                db.session.commit()
            except Exception as commit_exc:
                db.session.rollback()
                logger.exception("%s: commit failed", self.operation)
                raise WriteStepError(f"Failed to {self.operation}", step="commit") from commit_exc
        return False

    def step(self, name: str, action: Callable[[], Any], *, compensate: Callable[[Any], None] | None = None):
        """
        Run a mandatory write step.

        `compensate(result)` undoes this step's rows; it only runs in
        compensating mode, when a later mandatory step fails.
        """
        try:
            result = action()
            if self.compensating:
                db.session.commit()
            else:
                db.session.flush()
        except Exception as exc:
            db.session.rollback()
            if self.compensating:
                self._unwind(failed_step=name)
            if isinstance(exc, StockFlowError):
                raise
            logger.exception("%s: step '%s' failed", self.operation, name)
            raise WriteStepError(f"Failed to {self.operation}", step=name) from exc

        if compensate is not None:
            self._compensations.append((name, compensate, result))
        return result

    def side_effect(self, name: str, action: Callable[[], Any]):
        """
        Run a downstream effect of an already-created document.

        Transactional mode: same as step(), failure aborts the whole unit.
        Compensating mode: failure is logged, recorded in `warnings`, and the
        workflow continues.
        """
        if not self.compensating:
            return self.step(name, action)

        try:
            result = action()
            db.session.commit()
            return result
        except Exception:
            db.session.rollback()
            logger.exception("%s: side effect '%s' failed; continuing without it", self.operation, name)
            self.warnings.append(name)
            return None

    def _unwind(self, *, failed_step: str) -> None:
        while self._compensations:
            name, compensate, result = self._compensations.pop()
            try:
                compensate(result)
                db.session.commit()
                logger.warning("%s: compensated '%s' after '%s' failed", self.operation, name, failed_step)
            except Exception:
                db.session.rollback()
                logger.exception("%s: compensation for '%s' failed; manual cleanup required", self.operation, name)
