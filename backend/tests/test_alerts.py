"""
Stock alert tests.

Verifies:
- Stock level classification boundaries
- One alert row per qualifying stock mutation, or one per open condition
  when de-duplication is enabled
- Overstock alerts honour the business setting
- Alert read/resolve/delete endpoints are tenant scoped
"""

import pytest

from stockflow.constants import ALERT_LOW_STOCK, ALERT_OUT_OF_STOCK, ALERT_OVERSTOCK
from stockflow.extensions import db
from stockflow.models import Alert, Settings
from stockflow.services import alert_service

from conftest import count


class TestClassification:

    @pytest.mark.parametrize(
        "stock,expected",
        [
            (0, ALERT_OUT_OF_STOCK),
            (1, ALERT_LOW_STOCK),
            (9, ALERT_LOW_STOCK),
            (10, None),
            (100, None),
            (101, ALERT_OVERSTOCK),
        ],
    )
    def test_thresholds(self, stock, expected):
        assert alert_service.classify_stock_level(stock, 10, 100) == expected

    @pytest.mark.parametrize(
        "stock,expected",
        [(0, ALERT_OUT_OF_STOCK), (3, ALERT_LOW_STOCK), (60, ALERT_OVERSTOCK), (20, None)],
    )
    def test_narrow_band(self, stock, expected):
        assert alert_service.classify_stock_level(stock, 5, 50) == expected

    def test_zero_minimum_still_reports_out_of_stock(self):
        assert alert_service.classify_stock_level(0, 0, 100) == ALERT_OUT_OF_STOCK


def _sell_one(client, headers, product_id):
    resp = client.post(
        "/api/v1/sales",
        json={"items": [{"productId": product_id, "quantity": 1}], "paymentMethod": "cash"},
        headers=headers,
    )
    assert resp.status_code == 201, resp.json


class TestGeneration:

    def test_every_mutation_below_threshold_adds_alert(self, client, admin_headers, make_product, business_a):
        product = make_product(business_a, sku="ALERT-1", current_stock=9)

        _sell_one(client, admin_headers, product.id)
        _sell_one(client, admin_headers, product.id)

        assert count(Alert) == 2

    def test_deduplicated_when_enabled(self, app, client, admin_headers, make_product, business_a):
        product = make_product(business_a, sku="ALERT-2", current_stock=9)
        app.config["STOCKFLOW_DEDUPLICATE_ALERTS"] = True
        try:
            _sell_one(client, admin_headers, product.id)
            _sell_one(client, admin_headers, product.id)
            assert count(Alert) == 1

            # a different condition still alerts
            for _ in range(7):
                _sell_one(client, admin_headers, product.id)
            types = sorted(a.alert_type for a in db.session.query(Alert).all())
            assert types == [ALERT_LOW_STOCK, ALERT_OUT_OF_STOCK]
        finally:
            app.config["STOCKFLOW_DEDUPLICATE_ALERTS"] = False

    def test_restock_resolves_open_alerts(self, client, admin_headers, make_product, business_a):
        product = make_product(business_a, sku="ALERT-3", current_stock=6)
        _sell_one(client, admin_headers, product.id)
        assert count(Alert) == 1

        resp = client.post("/api/v1/purchases", json={
            "invoiceNumber": "RESTOCK-1",
            "items": [{"productId": product.id, "quantity": 40, "purchasePrice": 20}],
        }, headers=admin_headers)

        assert resp.status_code == 201, resp.json
        db.session.expire_all()
        alert = db.session.query(Alert).one()
        assert alert.is_resolved is True
        assert alert.is_read is True

    def test_resolve_leaves_other_products_alone(self, db_session, make_product, business_a):
        low = make_product(business_a, sku="ALERT-4", current_stock=2)
        other = make_product(business_a, sku="ALERT-5", current_stock=2)
        alert_service.generate_for_product(business_id=business_a.id, product_id=low.id)
        alert_service.generate_for_product(business_id=business_a.id, product_id=other.id)

        assert alert_service.resolve_open_alerts(business_id=business_a.id, product_id=low.id) == 1
        db_session.commit()

        db_session.expire_all()
        open_ids = [a.product_id for a in db_session.query(Alert).filter_by(is_resolved=False)]
        assert open_ids == [other.id]

    def test_overstock_alerts_can_be_disabled(self, db_session, client, admin_headers, product_a, business_a):
        settings = db_session.query(Settings).filter_by(business_id=business_a.id).one()
        settings.enable_overstock_alerts = False
        db_session.commit()

        resp = client.post("/api/v1/purchases", json={
            "invoiceNumber": "OVR-1",
            "items": [{"productId": product_a.id, "quantity": 100, "purchasePrice": 1}],
        }, headers=admin_headers)

        assert resp.status_code == 201
        assert count(Alert) == 0

    def test_message_text(self, db_session, make_product, business_a):
        product = make_product(business_a, sku="MSG", product_name="Sugar 1kg", current_stock=3)

        alert = alert_service.generate_for_product(business_id=business_a.id, product_id=product.id)

        assert alert.message == 'Product "Sugar 1kg" is running low. Current stock: 3, Minimum required: 10'


class TestAlertEndpoints:

    def _alert(self, business, product, alert_type=ALERT_LOW_STOCK):
        alert = Alert(business_id=business.id, product_id=product.id, alert_type=alert_type,
                      message="test", is_read=False, is_resolved=False)
        db.session.add(alert)
        db.session.commit()
        return alert

    def test_read_resolve_delete(self, client, admin_headers, business_a, product_a):
        alert = self._alert(business_a, product_a)

        unread = client.get("/api/v1/alerts?isRead=false", headers=admin_headers)
        assert [a["id"] for a in unread.json["data"]] == [alert.id]

        read = client.put(f"/api/v1/alerts/{alert.id}/read", headers=admin_headers)
        assert read.json["data"]["is_read"] is True

        resolved = client.put(f"/api/v1/alerts/{alert.id}/resolve", headers=admin_headers)
        assert resolved.json["data"]["is_resolved"] is True

        deleted = client.delete(f"/api/v1/alerts/{alert.id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert count(Alert) == 0

    def test_bad_alert_type_filter(self, client, admin_headers):
        resp = client.get("/api/v1/alerts?alertType=fire", headers=admin_headers)
        assert resp.status_code == 400

    def test_other_business_alert_is_404(self, client, admin_headers, business_b, product_b):
        alert = self._alert(business_b, product_b)

        assert client.put(f"/api/v1/alerts/{alert.id}/read", headers=admin_headers).status_code == 404
        assert client.delete(f"/api/v1/alerts/{alert.id}", headers=admin_headers).status_code == 404
        assert count(Alert) == 1


class TestAlertCommands:

    def test_regenerate_and_clear(self, app, db_session, make_product, business_a):
        make_product(business_a, sku="CLI-LOW", current_stock=1)
        make_product(business_a, sku="CLI-OK", current_stock=50)
        runner = app.test_cli_runner()

        result = runner.invoke(args=["alerts", "regenerate", "--business-id", str(business_a.id)])
        assert result.exit_code == 0, result.output
        assert "created 1 alerts" in result.output
        assert count(Alert) == 1

        db.session.query(Alert).update({"is_resolved": True})
        db.session.commit()

        result = runner.invoke(args=["alerts", "clear-resolved"])
        assert result.exit_code == 0, result.output
        assert count(Alert) == 0
