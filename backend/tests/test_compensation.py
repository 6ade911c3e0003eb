"""
Write unit tests.

Verifies, in both write modes:
- A failed item insert leaves no bill or purchase header behind
- A failed barcode stock step removes the document it created
- Transactional mode rolls back every side effect with the document
- Compensating mode keeps the document and reports failed side effects
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from stockflow.constants import WRITE_MODE_COMPENSATING, WRITE_MODE_TRANSACTIONAL
from stockflow.errors import InsufficientStockError, NotFoundError, WriteStepError
from stockflow.extensions import db
from stockflow.models import Alert, Bill, BillItem, Payment, Purchase, PurchaseItem
from stockflow.services import alert_service, purchase_service, sale_service, stock_service
from stockflow.services.write_unit import WriteUnit

from conftest import count, current_stock


def _boom(*args, **kwargs):
    raise SQLAlchemyError("disk I/O error")


def _sale(client, headers, product_id, quantity=1, **extra):
    payload = {"items": [{"productId": product_id, "quantity": quantity}], "paymentMethod": "cash"}
    payload.update(extra)
    return client.post("/api/v1/sales", json=payload, headers=headers)


class TestHeaderItemsPair:

    def test_item_failure_removes_header(self, client, admin_headers, product_a, monkeypatch, write_mode):
        monkeypatch.setattr(sale_service, "_insert_bill_items", _boom)

        resp = _sale(client, admin_headers, product_a.id, paidAmount=100)

        assert resp.status_code == 500
        assert resp.json["success"] is False
        assert count(Bill) == 0
        assert count(BillItem) == 0
        assert count(Payment) == 0
        assert current_stock(product_a.id) == 50

    def test_purchase_item_failure_removes_header(self, client, admin_headers, product_a, monkeypatch,
                                                  write_mode):
        monkeypatch.setattr(purchase_service, "insert_purchase_items", _boom)

        resp = client.post("/api/v1/purchases", json={
            "invoiceNumber": "FAIL-1",
            "items": [{"productId": product_a.id, "quantity": 5, "purchasePrice": 60}],
        }, headers=admin_headers)

        assert resp.status_code == 500
        assert resp.json["error"] == "insert purchase items failed"
        assert count(Purchase) == 0
        assert count(PurchaseItem) == 0
        assert current_stock(product_a.id) == 50


class TestBarcodeStockStep:

    def test_failed_increment_removes_purchase(self, client, admin_headers, product_a, monkeypatch, write_mode):
        monkeypatch.setattr(stock_service, "apply_delta_atomic", _boom)

        resp = client.post(
            "/api/v1/barcode/purchase",
            json={"barcode": product_a.barcode, "quantity": 5, "purchasePrice": 55},
            headers=admin_headers,
        )

        assert resp.status_code == 500
        assert count(Purchase) == 0
        assert count(PurchaseItem) == 0
        assert current_stock(product_a.id) == 50

    def test_failed_decrement_removes_bill(self, client, admin_headers, product_a, monkeypatch, write_mode):
        monkeypatch.setattr(stock_service, "apply_delta_atomic", _boom)

        resp = client.post(
            "/api/v1/barcode/sale",
            json={"barcode": product_a.barcode, "quantity": 2, "paymentMethod": "cash"},
            headers=admin_headers,
        )

        assert resp.status_code == 500
        assert count(Bill) == 0
        assert count(BillItem) == 0
        assert current_stock(product_a.id) == 50


class TestSideEffects:

    def test_transactional_rolls_back_everything(self, client, admin_headers, make_product,
                                                 business_a, monkeypatch):
        product = make_product(business_a, sku="LOW-ALERT", current_stock=12)
        monkeypatch.setattr(alert_service, "generate_for_products", _boom)

        resp = _sale(client, admin_headers, product.id, quantity=5, paidAmount=500)

        assert resp.status_code == 500
        assert count(Bill) == 0
        assert count(Payment) == 0
        assert count(Alert) == 0
        assert current_stock(product.id) == 12

    def test_compensating_keeps_bill_and_reports_warning(self, app, client, admin_headers, make_product,
                                                         business_a, monkeypatch):
        app.config["STOCKFLOW_WRITE_MODE"] = WRITE_MODE_COMPENSATING
        try:
            product = make_product(business_a, sku="LOW-ALERT", current_stock=12)
            monkeypatch.setattr(alert_service, "generate_for_products", _boom)

            resp = _sale(client, admin_headers, product.id, quantity=5, paidAmount=500)

            assert resp.status_code == 201, resp.json
            assert resp.json["data"]["warnings"] == ["generate alerts"]
            assert count(Bill) == 1
            assert count(Payment) == 1
            assert current_stock(product.id) == 7
        finally:
            app.config["STOCKFLOW_WRITE_MODE"] = WRITE_MODE_TRANSACTIONAL

    def test_compensating_stock_failure_keeps_bill(self, app, client, admin_headers, product_a, monkeypatch):
        """Known inconsistency of the legacy mode: bill recorded, stock not adjusted."""
        app.config["STOCKFLOW_WRITE_MODE"] = WRITE_MODE_COMPENSATING
        try:
            monkeypatch.setattr(stock_service, "apply_delta", _boom)

            resp = _sale(client, admin_headers, product_a.id, quantity=2)

            assert resp.status_code == 201
            assert resp.json["data"]["warnings"] == [f"decrement stock for product {product_a.id}"]
            assert count(Bill) == 1
            assert current_stock(product_a.id) == 50
        finally:
            app.config["STOCKFLOW_WRITE_MODE"] = WRITE_MODE_TRANSACTIONAL


class TestStockPrimitive:

    def test_atomic_decrement_refuses_to_go_negative(self, db_session, make_product, business_a):
        product = make_product(business_a, sku="ATOM-1", current_stock=3)

        with pytest.raises(InsufficientStockError) as excinfo:
            stock_service.apply_delta_atomic(business_id=business_a.id, product_id=product.id, delta=-4)
        db_session.rollback()

        assert excinfo.value.details == {"available": 3, "requested": 4}
        assert current_stock(product.id) == 3

    def test_read_modify_write_loses_concurrent_update(self, db_session, make_product, business_a, monkeypatch):
        """Two writers that read the same stale value: the second write overwrites the first."""
        product = make_product(business_a, sku="RMW-1", current_stock=10)
        monkeypatch.setattr(stock_service, "read_stock", lambda business_id, product_id: 10)

        stock_service.apply_delta_read_modify_write(business_id=business_a.id, product_id=product.id, delta=-3)
        stock_service.apply_delta_read_modify_write(business_id=business_a.id, product_id=product.id, delta=-4)
        db_session.commit()

        # 10 - 3 - 4 would be 3
        assert current_stock(product.id) == 6

    def test_other_business_product_not_touched(self, db_session, business_a, product_b):
        with pytest.raises(NotFoundError):
            stock_service.apply_delta_atomic(business_id=business_a.id, product_id=product_b.id, delta=-1)
        db_session.rollback()
        assert current_stock(product_b.id) == 50


class TestWriteUnit:

    def test_unexpected_error_becomes_write_step_error(self, app, db_session):
        with pytest.raises(WriteStepError) as excinfo:
            with WriteUnit("test operation", mode=WRITE_MODE_TRANSACTIONAL) as unit:
                unit.step("explode", _boom)
        assert excinfo.value.step == "explode"
        assert excinfo.value.status_code == 500

    def test_compensations_run_newest_first(self, app, db_session):
        calls = []
        with pytest.raises(WriteStepError):
            with WriteUnit("test operation", mode=WRITE_MODE_COMPENSATING) as unit:
                unit.step("first", lambda: 1, compensate=lambda result: calls.append(("first", result)))
                unit.step("second", lambda: 2, compensate=lambda result: calls.append(("second", result)))
                unit.step("third", _boom)

        assert calls == [("second", 2), ("first", 1)]

    def test_side_effect_failure_recorded_in_compensating_mode(self, app, db_session):
        with WriteUnit("test operation", mode=WRITE_MODE_COMPENSATING) as unit:
            assert unit.side_effect("optional", _boom) is None
            assert unit.step("mandatory", lambda: "ok") == "ok"
        assert unit.warnings == ["optional"]
        assert db.session.is_active
