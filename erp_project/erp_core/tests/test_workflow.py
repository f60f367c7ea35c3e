import datetime

from django.db import transaction
from django.test import SimpleTestCase, TestCase

from ..exceptions import InvalidTransitionError
from ..models import AuditLog, Delivery, SalesOrder
from ..services import (adjust_stock, cancel_sales_order, confirm_sales_order,
                        create_delivery, create_sales_order, ship_delivery)
from ..workflow import TRANSITIONS, allowed_operations, get_transition
from .helpers import make_customer, make_good, seed_accounts


class TransitionTableTests(SimpleTestCase):

    def test_no_rule_leads_back_to_draft(self):
        for (doc_type, operation), rule in TRANSITIONS.items():
            self.assertNotEqual(rule.target, "draft", (doc_type, operation))

    def test_allowed_operations(self):
        self.assertEqual(allowed_operations("sales_order", "draft"), ["cancel", "confirm"])
        self.assertEqual(allowed_operations("invoice", "issued"), ["mark_paid"])
        self.assertEqual(allowed_operations("invoice", "paid"), [])
        self.assertEqual(allowed_operations("payroll_run", "draft"), ["cancel", "confirm"])

    def test_unknown_operation(self):
        with self.assertRaises(InvalidTransitionError) as cm:
            get_transition("invoice", "reopen")
        self.assertEqual(cm.exception.identifiers["operation"], "reopen")


class DocumentTransitionTests(TestCase):

    def setUp(self):
        seed_accounts()
        self.customer = make_customer()
        self.widget = make_good()
        self.order = create_sales_order(
            self.customer.pk,
            datetime.date(2025, 3, 1),
            lines=[{"product": self.widget.pk, "quantity": 1}],
        )

    def test_confirm_then_cancel(self):
        confirm_sales_order(self.order.pk)
        cancel_sales_order(self.order.pk)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "cancelled")

    def test_disallowed_transition_carries_identifiers(self):
        cancel_sales_order(self.order.pk)
        with self.assertRaises(InvalidTransitionError) as cm:
            confirm_sales_order(self.order.pk)
        err = cm.exception
        self.assertEqual(err.kind, "invalid_transition")
        self.assertEqual(err.identifiers["document_type"], "sales_order")
        self.assertEqual(err.identifiers["document_id"], self.order.pk)
        self.assertEqual(err.identifiers["status"], "cancelled")
        self.assertEqual(err.identifiers["operation"], "confirm")

    def test_stale_instance_cannot_rerun_a_transition(self):
        stale = SalesOrder.objects.get(pk=self.order.pk)
        fresh = SalesOrder.objects.get(pk=self.order.pk)
        fresh.transition("confirm")
        # the stale copy still believes it is a draft
        self.assertEqual(stale.status, "draft")
        with self.assertRaises(InvalidTransitionError):
            stale.transition("confirm")
        self.assertEqual(SalesOrder.objects.get(pk=self.order.pk).status, "confirmed")

    def test_rejected_transition_writes_no_audit_row(self):
        cancel_sales_order(self.order.pk)
        before = AuditLog.objects.count()
        with self.assertRaises(InvalidTransitionError):
            cancel_sales_order(self.order.pk)
        self.assertEqual(AuditLog.objects.count(), before)

    def test_processed_documents_cannot_be_deleted(self):
        confirm_sales_order(self.order.pk)
        self.order.refresh_from_db()
        with self.assertRaises(InvalidTransitionError):
            self.order.delete()
        self.assertTrue(SalesOrder.objects.filter(pk=self.order.pk).exists())

    def test_rejected_delete_leaves_outer_transaction_usable(self):
        confirm_sales_order(self.order.pk)
        self.order.refresh_from_db()
        with transaction.atomic():
            with self.assertRaises(InvalidTransitionError):
                self.order.delete()
            # the guard fires before any SQL, so the block can keep querying
            self.assertEqual(SalesOrder.objects.get(pk=self.order.pk).status, "confirmed")
            self.assertEqual(self.order.lines.count(), 1)

    def test_ready_delivery_can_be_deleted_shipped_cannot(self):
        confirm_sales_order(self.order.pk)
        line = self.order.lines.get()
        adjust_stock(self.widget.pk, "in", 5)
        ready = create_delivery(self.order.pk, {line.pk: 1})
        ready.delete()
        self.assertFalse(Delivery.objects.filter(pk=ready.pk).exists())

        shipped = ship_delivery(create_delivery(self.order.pk, {line.pk: 1}).pk)
        with self.assertRaises(InvalidTransitionError) as cm:
            shipped.delete()
        self.assertEqual(cm.exception.identifiers["operation"], "delete")
        self.assertEqual(cm.exception.identifiers["status"], "shipped")

    def test_draft_documents_can_be_deleted(self):
        self.order.delete()
        self.assertFalse(SalesOrder.objects.filter(pk=self.order.pk).exists())
