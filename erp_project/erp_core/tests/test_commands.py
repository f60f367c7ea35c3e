from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from ..conf import DEFAULT_POSTING_ACCOUNTS
from ..models import Account, BusinessPartner, Product, StockMovement


class SeedCommandTests(TestCase):

    def test_chart_of_accounts_is_idempotent(self):
        out = StringIO()
        call_command("seed_chart_of_accounts", stdout=out)
        codes = set(Account.objects.values_list("code", flat=True))
        self.assertTrue(set(DEFAULT_POSTING_ACCOUNTS.values()) <= codes)
        self.assertIn("1000", codes)
        self.assertEqual(Account.objects.get(code="2100").ac_type, "liability")

        out = StringIO()
        call_command("seed_chart_of_accounts", stdout=out)
        self.assertIn("0 new account(s)", out.getvalue())
        self.assertEqual(Account.objects.count(), len(codes))

    def test_seed_demo(self):
        call_command("seed_demo", opening_stock=Decimal("7"), stdout=StringIO())
        call_command("seed_demo", stdout=StringIO())

        self.assertEqual(BusinessPartner.objects.count(), 3)
        jane = BusinessPartner.objects.get(name="Jane Doe")
        self.assertEqual(jane.get_type("employee").monthly_salary, Decimal("4200.00"))
        widget = Product.objects.get(code="WID-001")
        self.assertEqual(widget.stock_quantity, Decimal("7"))
        self.assertEqual(StockMovement.objects.filter(product=widget).count(), 1)
        self.assertFalse(Product.objects.get(code="SRV-INST").track_inventory)
