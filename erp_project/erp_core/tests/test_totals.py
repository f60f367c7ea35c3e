import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from ..models import SalesOrderLine
from ..services import apply_product_defaults, change_line_product, confirm_sales_order, create_sales_order
from ..totals import allocate, compute_totals, line_total, money
from .helpers import make_customer, make_good, seed_accounts


class ComputeTotalsTests(SimpleTestCase):

    def test_single_line_with_tax(self):
        totals = compute_totals([{"quantity": 2, "unit_price": "100", "tax_rate": "23"}])
        self.assertEqual(totals["net"], Decimal("200.00"))
        self.assertEqual(totals["tax"], Decimal("46.00"))
        self.assertEqual(totals["gross"], Decimal("246.00"))

    def test_empty_document_is_zero(self):
        self.assertEqual(
            compute_totals([]),
            {"net": Decimal("0.00"), "tax": Decimal("0.00"), "gross": Decimal("0.00")},
        )

    def test_sums_are_rounded_once(self):
        # three lines of 0.333 tax each: rounding per line would give 0.99
        lines = [{"quantity": 1, "unit_price": "1.11", "tax_rate": "30"}] * 3
        totals = compute_totals(lines)
        self.assertEqual(totals["net"], Decimal("3.33"))
        self.assertEqual(totals["tax"], Decimal("1.00"))
        self.assertEqual(totals["gross"], Decimal("4.33"))

    def test_round_half_up(self):
        self.assertEqual(money("0.005"), Decimal("0.01"))
        self.assertEqual(money("2.345"), Decimal("2.35"))
        self.assertEqual(line_total("3", "0.99", "10"), Decimal("3.27"))

    def test_float_inputs_do_not_leak_binary_noise(self):
        self.assertEqual(money(0.1 + 0.2), Decimal("0.30"))


class AllocateTests(SimpleTestCase):

    def test_split_sums_to_the_rounded_total(self):
        amounts = {"4000": Decimal("0.005"), "4100": Decimal("0.005")}
        split = allocate(amounts, Decimal("0.01"))
        self.assertEqual(split, {"4000": Decimal("0.01"), "4100": Decimal("0.00")})

    def test_missing_cents_go_to_the_largest_remainders(self):
        amounts = {"a": Decimal("1.004"), "b": Decimal("1.008"), "c": Decimal("1.007")}
        split = allocate(amounts, Decimal("3.02"))
        self.assertEqual(split, {"a": Decimal("1.00"), "b": Decimal("1.01"), "c": Decimal("1.01")})
        self.assertEqual(sum(split.values()), Decimal("3.02"))

    def test_exact_amounts_are_untouched(self):
        amounts = {"x": Decimal("250"), "y": Decimal("160.00")}
        self.assertEqual(allocate(amounts, Decimal("410")), {"x": Decimal("250.00"), "y": Decimal("160.00")})

    def test_nothing_to_allocate(self):
        self.assertEqual(allocate({}, Decimal("0")), {})


class DocumentTotalsTests(TestCase):

    def setUp(self):
        seed_accounts()
        self.customer = make_customer()
        self.widget = make_good("WID-001", price="100.00", tax="23")

    """ 2 × 100.00 @ 23 % """
    def test_sales_order_totals(self):
        order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"product": self.widget.pk, "quantity": 2}],
        )
        self.assertEqual(
            order.totals(),
            {"net": Decimal("200.00"), "tax": Decimal("46.00"), "gross": Decimal("246.00")},
        )
        line = order.lines.get()
        # defaults copied from the product
        self.assertEqual(line.unit_price, Decimal("100.00"))
        self.assertEqual(line.tax_rate, Decimal("23.00"))
        self.assertEqual(line.description, self.widget.name)
        self.assertEqual(line.line_total, Decimal("246.00"))

    def test_explicit_values_win_over_product_defaults(self):
        order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"product": self.widget.pk, "quantity": 1, "unit_price": "90", "tax_rate": "0"}],
        )
        line = order.lines.get()
        self.assertEqual(line.unit_price, Decimal("90.00"))
        self.assertEqual(line.tax_rate, Decimal("0.00"))

    def test_custom_line_without_product(self):
        order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"description": "Rush fee", "quantity": 1, "unit_price": "15", "tax_rate": "0"}],
        )
        self.assertEqual(order.totals()["gross"], Decimal("15.00"))

    def test_line_quantity_must_be_positive(self):
        with self.assertRaises(ValidationError):
            create_sales_order(
                self.customer.pk,
                datetime.date(2025, 3, 1),
                lines=[{"product": self.widget.pk, "quantity": 0}],
            )

    def test_apply_product_defaults_fills_only_missing_values(self):
        line = apply_product_defaults({"quantity": 1, "unit_price": Decimal("5")}, self.widget)
        self.assertEqual(line["unit_price"], Decimal("5"))
        self.assertEqual(line["tax_rate"], self.widget.tax_rate)
        self.assertEqual(line["description"], self.widget.name)

    def test_change_line_product_reapplies_defaults_on_drafts_only(self):
        gadget = make_good("GAD-001", price="250.00", tax="8")
        order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"product": self.widget.pk, "quantity": 2}],
        )
        line = order.lines.get()
        change_line_product(line, gadget)
        line.refresh_from_db()
        self.assertEqual(line.product_id, gadget.pk)
        self.assertEqual(line.unit_price, Decimal("250.00"))
        self.assertEqual(line.tax_rate, Decimal("8.00"))
        self.assertEqual(line.line_total, Decimal("540.00"))

        confirm_sales_order(order.pk)
        line = SalesOrderLine.objects.get(pk=line.pk)
        with self.assertRaises(ValidationError):
            change_line_product(line, self.widget)

    def test_later_product_price_change_does_not_touch_existing_lines(self):
        order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"product": self.widget.pk, "quantity": 1}],
        )
        self.widget.unit_price = Decimal("120.00")
        self.widget.save()
        self.assertEqual(order.lines.get().unit_price, Decimal("100.00"))
