"""
Sale (bill) workflow tests.

Verifies:
- Totals, stock decrement, payment and customer total on a successful bill
- Insufficient stock rejects the whole bill before anything is written
- Bill numbers are sequential per business
- Delete removes items and payments without restoring stock
"""

from decimal import Decimal

from stockflow.models import ActivityLog, Bill, BillItem, Customer, Payment

from conftest import count, current_stock


def _sale(client, headers, items, **extra):
    payload = {"items": items, "paymentMethod": "cash"}
    payload.update(extra)
    return client.post("/api/v1/sales", json=payload, headers=headers)


class TestCreateBill:

    def test_creates_bill_with_items_and_decrements_stock(self, client, admin_headers, product_a):
        resp = _sale(
            client,
            admin_headers,
            [{"productId": product_a.id, "quantity": 2, "unitPrice": 100,
              "discountPercentage": 10, "taxPercentage": 5}],
            paidAmount=200,
        )

        assert resp.status_code == 201, resp.json
        bill = resp.json["data"]["bill"]
        assert bill["subtotal"] == 200.0
        assert bill["total_amount"] == 200.0
        assert bill["balance_amount"] == 0.0
        assert bill["items"][0]["total"] == 189.0
        assert bill["items"][0]["product_name"] == "Product A"
        assert "warnings" not in resp.json["data"]

        assert current_stock(product_a.id) == 48
        assert count(Payment) == 1
        assert count(ActivityLog) == 1

    def test_unit_price_defaults_to_selling_price(self, client, admin_headers, product_a):
        resp = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 3}])

        assert resp.status_code == 201
        assert resp.json["data"]["bill"]["subtotal"] == 300.0
        # nothing paid -> no payment row
        assert count(Payment) == 0

    def test_customer_total_updated(self, client, db_session, admin_headers, business_a, product_a):
        customer = Customer(business_id=business_a.id, customer_name="Ravi", phone="9000000001",
                            total_purchases=Decimal("0"))
        db_session.add(customer)
        db_session.commit()

        resp = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 1}],
                     customerId=customer.id, discountPercentage=10, taxPercentage=18)

        assert resp.status_code == 201
        # 100 - 10% = 90, + 18% = 106.20
        assert resp.json["data"]["bill"]["total_amount"] == 106.2
        db_session.expire_all()
        assert db_session.get(Customer, customer.id).total_purchases == Decimal("106.20")

    def test_insufficient_stock_rejects_without_writes(self, client, admin_headers, make_product, business_a):
        product = make_product(business_a, sku="LOW-1", current_stock=5)

        resp = _sale(client, admin_headers, [{"productId": product.id, "quantity": 6}])

        assert resp.status_code == 400
        assert resp.json["success"] is False
        assert "Insufficient stock" in resp.json["message"]
        assert count(Bill) == 0
        assert count(BillItem) == 0
        assert current_stock(product.id) == 5

    def test_quantities_summed_per_product(self, client, admin_headers, make_product, business_a):
        product = make_product(business_a, sku="SUM-1", current_stock=5)

        resp = _sale(client, admin_headers, [
            {"productId": product.id, "quantity": 3},
            {"productId": product.id, "quantity": 3},
        ])

        assert resp.status_code == 400
        assert resp.json["details"]["items"][0]["requested"] == 6
        assert count(Bill) == 0

    def test_unknown_product_is_404(self, client, admin_headers, business_a):
        resp = _sale(client, admin_headers, [{"productId": 999999, "quantity": 1}])
        assert resp.status_code == 404

    def test_missing_items_is_400(self, client, admin_headers, business_a):
        resp = client.post("/api/v1/sales", json={"paymentMethod": "cash"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Please provide at least one item"

    def test_unknown_payment_method_is_400(self, client, admin_headers, product_a):
        resp = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 1}], paymentMethod="barter")
        assert resp.status_code == 400

    def test_oversized_unit_price_is_400(self, client, admin_headers, product_a):
        resp = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 1, "unitPrice": "1e30"}])

        assert resp.status_code == 400
        assert resp.json["message"] == "Unit price cannot exceed 9999999999.99"
        assert count(Bill) == 0
        assert current_stock(product_a.id) == 50


class TestBillNumbers:

    def test_sequential_within_business(self, client, admin_headers, product_a):
        numbers = []
        for _ in range(3):
            resp = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 1}])
            assert resp.status_code == 201
            numbers.append(resp.json["data"]["bill"]["bill_number"])

        assert numbers == sorted(numbers)
        assert len(set(numbers)) == 3
        assert all(number.startswith("INV-") for number in numbers)
        assert numbers[0].endswith("-0001")
        assert numbers[2].endswith("-0003")

    def test_legacy_bills_path(self, client, admin_headers, product_a):
        resp = client.post(
            "/api/v1/bills",
            json={"items": [{"productId": product_a.id, "quantity": 1}], "paymentMethod": "upi"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        listing = client.get("/api/v1/bills", headers=admin_headers)
        assert listing.json["data"]["pagination"]["total"] == 1


class TestBillLifecycle:

    def test_list_get_update(self, client, admin_headers, product_a):
        created = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 2}],
                        paymentStatus="partial", paidAmount=50).json["data"]["bill"]

        listing = client.get("/api/v1/sales?paymentStatus=partial", headers=admin_headers)
        assert listing.status_code == 200
        assert [b["id"] for b in listing.json["data"]["bills"]] == [created["id"]]

        detail = client.get(f"/api/v1/sales/{created['id']}", headers=admin_headers)
        assert detail.status_code == 200
        assert len(detail.json["data"]["payments"]) == 1

        updated = client.put(
            f"/api/v1/sales/{created['id']}",
            json={"paymentStatus": "paid", "paidAmount": 200},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json["data"]["payment_status"] == "paid"
        assert updated.json["data"]["balance_amount"] == 0.0

    def test_delete_does_not_restore_stock(self, client, admin_headers, product_a):
        created = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 4}],
                        paidAmount=400).json["data"]["bill"]
        assert current_stock(product_a.id) == 46

        resp = client.delete(f"/api/v1/sales/{created['id']}", headers=admin_headers)

        assert resp.status_code == 200
        assert count(Bill) == 0
        assert count(BillItem) == 0
        assert count(Payment) == 0
        assert current_stock(product_a.id) == 46

    def test_manager_cannot_delete(self, client, admin_headers, manager_headers, product_a):
        created = _sale(client, admin_headers, [{"productId": product_a.id, "quantity": 1}]).json["data"]["bill"]

        resp = client.delete(f"/api/v1/sales/{created['id']}", headers=manager_headers)

        assert resp.status_code == 403
        assert count(Bill) == 1
