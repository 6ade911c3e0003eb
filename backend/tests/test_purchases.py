"""
Purchase (stock intake) tests.

Verifies:
- A purchase increments stock for every item
- Invoice numbers are unique per business, not globally
- Products and suppliers of another business are rejected
"""

from stockflow.models import Alert, Purchase, PurchaseItem, Supplier

from conftest import count, current_stock


def _purchase(client, headers, invoice, items, **extra):
    payload = {"invoiceNumber": invoice, "items": items}
    payload.update(extra)
    return client.post("/api/v1/purchases", json=payload, headers=headers)


class TestCreatePurchase:

    def test_increments_stock(self, client, admin_headers, product_a, make_product, business_a, write_mode):
        other = make_product(business_a, sku="PUR-2", current_stock=0)

        resp = _purchase(client, admin_headers, "INV-1001", [
            {"productId": product_a.id, "quantity": 10, "purchasePrice": 55},
            {"productId": other.id, "quantity": 4, "purchasePrice": 12.5},
        ])

        assert resp.status_code == 201, resp.json
        data = resp.json["data"]
        assert data["total_amount"] == 600.0
        assert data["payment_status"] == "pending"
        assert len(data["items"]) == 2
        assert "warnings" not in data

        assert current_stock(product_a.id) == 60
        assert current_stock(other.id) == 4
        assert count(PurchaseItem) == 2

    def test_overstock_alert(self, client, admin_headers, product_a):
        resp = _purchase(client, admin_headers, "INV-OVER",
                         [{"productId": product_a.id, "quantity": 60, "purchasePrice": 50}])

        assert resp.status_code == 201
        alerts = count(Alert)
        assert alerts == 1
        listing = client.get("/api/v1/alerts?alertType=overstock", headers=admin_headers)
        assert listing.json["data"][0]["product_id"] == product_a.id

    def test_duplicate_invoice_rejected(self, client, admin_headers, product_a):
        item = [{"productId": product_a.id, "quantity": 1, "purchasePrice": 50}]
        assert _purchase(client, admin_headers, "DUP-1", item).status_code == 201

        resp = _purchase(client, admin_headers, "DUP-1", item)

        assert resp.status_code == 400
        assert resp.json["message"] == "Invoice number already exists"
        assert count(Purchase) == 1
        assert current_stock(product_a.id) == 51

    def test_oversized_quantity_is_400(self, client, admin_headers, product_a):
        resp = _purchase(client, admin_headers, "BIG-1",
                         [{"productId": product_a.id, "quantity": 10**20, "purchasePrice": 1}])

        assert resp.status_code == 400
        assert resp.json["message"] == f"Quantity cannot exceed {2**31 - 1}"
        assert count(Purchase) == 0
        assert current_stock(product_a.id) == 50

    def test_same_invoice_in_other_business(self, client, admin_headers, admin_b_headers, product_a, product_b):
        assert _purchase(client, admin_headers, "SHARED-1",
                         [{"productId": product_a.id, "quantity": 1, "purchasePrice": 1}]).status_code == 201
        assert _purchase(client, admin_b_headers, "SHARED-1",
                         [{"productId": product_b.id, "quantity": 1, "purchasePrice": 1}]).status_code == 201

    def test_other_business_product_is_404(self, client, admin_headers, product_a, product_b):
        resp = _purchase(client, admin_headers, "X-1",
                         [{"productId": product_b.id, "quantity": 1, "purchasePrice": 1}])

        assert resp.status_code == 404
        assert count(Purchase) == 0
        assert current_stock(product_b.id) == 50

    def test_other_business_supplier_is_404(self, client, db_session, admin_headers, product_a, business_b):
        supplier = Supplier(business_id=business_b.id, supplier_name="Beta Supply", phone="9000000002")
        db_session.add(supplier)
        db_session.commit()

        resp = _purchase(client, admin_headers, "X-2",
                         [{"productId": product_a.id, "quantity": 1, "purchasePrice": 1}],
                         supplierId=supplier.id)

        assert resp.status_code == 404
        assert count(Purchase) == 0


class TestPurchaseLifecycle:

    def test_list_update_delete(self, client, admin_headers, product_a):
        created = _purchase(client, admin_headers, "LIFE-1",
                            [{"productId": product_a.id, "quantity": 5, "purchasePrice": 20}]).json["data"]

        listing = client.get("/api/v1/purchases?search=LIFE", headers=admin_headers)
        assert listing.status_code == 200
        assert listing.json["data"]["purchases"][0]["total_items"] == 1

        updated = client.put(f"/api/v1/purchases/{created['id']}", json={"paymentStatus": "paid"},
                             headers=admin_headers)
        assert updated.json["data"]["payment_status"] == "paid"

        deleted = client.delete(f"/api/v1/purchases/{created['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert count(Purchase) == 0
        assert count(PurchaseItem) == 0
        # stock added by the purchase stays
        assert current_stock(product_a.id) == 55
