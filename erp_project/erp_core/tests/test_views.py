import json
from decimal import Decimal

from django.test import TestCase

from ..models import Invoice, Product
from .helpers import make_customer, make_good, seed_accounts


class ApiTestCase(TestCase):

    def setUp(self):
        seed_accounts()

    def post(self, url, data=None):
        return self.client.post(url, data=json.dumps(data or {}), content_type="application/json")


class MasterDataApiTests(ApiTestCase):

    def test_create_and_list_partners(self):
        response = self.post("/api/partners/", {
            "name": "Initech",
            "types": {"customer": {"payment_terms_days": 30}},
            "email": "ap@initech.test",
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["partner"]["types"], ["customer"])

        listed = self.client.get("/api/partners/", {"type": "customer"}).json()
        self.assertEqual([p["name"] for p in listed["partners"]], ["Initech"])

    def test_validation_error_payload(self):
        response = self.post("/api/partners/", {"name": "Odd", "types": ["supplier"]})
        self.assertEqual(response.status_code, 400)
        error = response.json()["error"]
        self.assertEqual(error["kind"], "validation")
        self.assertIn("types", error["fields"])

    def test_malformed_body_is_a_validation_error(self):
        response = self.client.post("/api/partners/", data="{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_product_stock_adjustment_and_insufficient_stock(self):
        response = self.post("/api/products/", {
            "code": "WID-001", "name": "Widget", "unit_price": "250.00",
            "tax_rate": "23", "opening_stock": "3",
        })
        self.assertEqual(response.status_code, 201)
        product_id = response.json()["product"]["id"]

        response = self.post(f"/api/products/{product_id}/stock/", {"kind": "out", "quantity": "5"})
        self.assertEqual(response.status_code, 409)
        error = response.json()["error"]
        self.assertEqual(error["kind"], "insufficient_stock")
        self.assertEqual(Decimal(error["identifiers"]["available"]), Decimal("3"))

        response = self.post(f"/api/products/{product_id}/stock/", {"kind": "in", "quantity": "2"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()["movement"]["balance_after"]), Decimal("5"))
        self.assertEqual(Product.objects.get(pk=product_id).stock_quantity, Decimal("5"))

    def test_low_stock_report(self):
        make_good("A-LOW", stock=1, low_stock_threshold=Decimal("2"))
        make_good("B-OK", stock=10, low_stock_threshold=Decimal("2"))
        response = self.client.get("/api/reports/low-stock/")
        products = response.json()["products"]
        self.assertEqual([p["code"] for p in products], ["A-LOW"])
        self.assertTrue(products[0]["is_low_on_stock"])


class DocumentApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.customer = make_customer()
        self.widget = make_good("WID-001", price="250.00", tax="23", stock=20)

    def test_sales_flow_over_http(self):
        response = self.post("/api/sales-orders/", {
            "customer_id": self.customer.pk,
            "order_date": "2025-06-02",
            "lines": [{"product": "WID-001", "quantity": 2}],
        })
        self.assertEqual(response.status_code, 201)
        order = response.json()["document"]
        self.assertEqual(order["number"], "SO-2025-000001")
        self.assertEqual(Decimal(order["totals"]["gross"]), Decimal("615.00"))

        response = self.post(f"/api/sales-orders/{order['id']}/confirm/")
        self.assertEqual(response.json()["document"]["status"], "confirmed")

        response = self.post(f"/api/sales-orders/{order['id']}/deliveries/", {
            "quantities": {},
        })
        self.assertEqual(response.status_code, 400)

        response = self.post("/api/invoices/", {
            "sales_order_id": order["id"], "issue_date": "2025-06-03",
        })
        self.assertEqual(response.status_code, 201)
        invoice_id = response.json()["document"]["id"]
        response = self.post(f"/api/invoices/{invoice_id}/issue/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["document"]["status"], "issued")
        self.assertEqual(response.json()["document"]["journal_entry"], "JE-2025-000001")
        self.assertEqual(Invoice.objects.get(pk=invoice_id).status, "issued")

    def test_invalid_transition_is_a_conflict(self):
        response = self.post("/api/sales-orders/", {"customer_id": self.customer.pk})
        order_id = response.json()["document"]["id"]
        self.post(f"/api/sales-orders/{order_id}/cancel/")
        response = self.post(f"/api/sales-orders/{order_id}/confirm/")
        self.assertEqual(response.status_code, 409)
        error = response.json()["error"]
        self.assertEqual(error["kind"], "invalid_transition")
        self.assertEqual(error["identifiers"]["status"], "cancelled")

    def test_unknown_collection_action_and_document(self):
        self.assertEqual(self.post("/api/widgets/").status_code, 404)
        self.assertEqual(self.post("/api/sales-orders/1/teleport/").status_code, 404)
        response = self.post("/api/invoices/999/issue/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["kind"], "not_found")

    def test_archived_customer_is_referential_integrity(self):
        self.post(f"/api/partners/{self.customer.pk}/archive/")
        response = self.post("/api/sales-orders/", {"customer_id": self.customer.pk})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["kind"], "referential_integrity")


class LedgerApiTests(ApiTestCase):

    def test_manual_entry_reversal_and_trial_balance(self):
        response = self.post("/api/journal-entries/", {
            "entry_date": "2025-04-10",
            "description": "Owner capital",
            "lines": [
                {"account": "1000", "debit": "500.00"},
                {"account": "3000", "credit": "500.00"},
            ],
        })
        self.assertEqual(response.status_code, 201)
        entry = response.json()["entry"]
        self.assertEqual(entry["number"], "JE-2025-000001")

        report = self.client.get("/api/reports/trial-balance/").json()["trial_balance"]
        self.assertTrue(report["is_balanced"])
        self.assertEqual(Decimal(report["total_debit"]), Decimal("500.00"))

        response = self.post(f"/api/journal-entries/{entry['id']}/reverse/", {"entry_date": "2025-04-11"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["entry"]["reference_type"], "reversal")

        listed = self.client.get("/api/journal-entries/", {"reference_type": "manual"}).json()
        self.assertEqual([e["number"] for e in listed["entries"]], ["JE-2025-000001"])

    def test_unbalanced_entry_is_unprocessable(self):
        with self.assertLogs("erp_core.services.ledger", level="ERROR"):
            response = self.post("/api/journal-entries/", {
                "entry_date": "2025-04-10",
                "lines": [
                    {"account": "1000", "debit": "500.00"},
                    {"account": "3000", "credit": "400.00"},
                ],
            })
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["kind"], "unbalanced_entry")

    def test_unknown_account_is_invalid_account(self):
        response = self.post("/api/journal-entries/", {
            "entry_date": "2025-04-10",
            "lines": [
                {"account": "1999", "debit": "5"},
                {"account": "3000", "credit": "5"},
            ],
        })
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["error"]["kind"], "invalid_account")

    def test_dashboard(self):
        make_customer()
        counts = self.client.get("/api/dashboard/").json()["counts"]
        self.assertEqual(counts["active_partners"], 1)
        self.assertEqual(counts["open_sales_orders"], 0)
