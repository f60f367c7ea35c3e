import datetime
import logging
from collections import OrderedDict
from django.core.exceptions import ValidationError
from django.db import transaction
from ..exceptions import InvalidTransitionError, ReferentialIntegrityError
from ..models import (PurchaseOrder, PurchaseOrderLine, VendorInvoice,
                      VendorInvoiceLine)
from ..totals import ZERO, allocate, compute_totals
from .audit_helper import log_action
from .documents import check_transition, create_lines
from .inventory import adjust_stock
from .ledger import post_journal_entry, posting_account
from .numbering import next_number
from .partners import require_partner

logger = logging.getLogger(__name__)

BILLABLE_ORDER_STATUSES = ("confirmed", "received")


# ----------------------------------------------
# Purchase order workflows
# ----------------------------------------------
def create_purchase_order(
    vendor_id,
    order_date=None,
    lines=(),
    expected_date=None,
    notes="",
    actor=None,
):
    vendor = require_partner(vendor_id, "vendor")
    order_date = order_date or datetime.date.today()
    number = next_number("purchase_order", order_date)
    with transaction.atomic():
        order = PurchaseOrder(
            number=number,
            vendor=vendor,
            order_date=order_date,
            expected_date=expected_date,
            notes=notes or "",
        )
        order.save()
        created = create_lines(order, PurchaseOrderLine, lines)
        log_action(
            action="create",
            instance=order,
            actor=actor,
            changes={"number": number, "lines": len(created), "totals": order.totals()},
        )
    logger.info("Created purchase order %s for %s", number, vendor.pk)
    return order


def confirm_purchase_order(purchase_order_id, actor=None):
    with transaction.atomic():
        order = PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
        if order.is_draft() and not order.lines.exists():
            raise ValidationError("Cannot confirm a purchase order with no lines")
        order.transition("confirm")
        log_action(action="confirm", instance=order, actor=actor)
    return order


def cancel_purchase_order(purchase_order_id, actor=None):
    with transaction.atomic():
        order = PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
        order.transition("cancel")
        log_action(action="cancel", instance=order, actor=actor)
    return order


def receive_purchase_order(purchase_order_id, received_on=None, actor=None):
    """Goods arrive: confirmed → received and stock comes in per goods line."""
    received_on = received_on or datetime.date.today()
    with transaction.atomic():
        order = PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
        order.transition("receive", received_date=received_on)
        received = {}
        for line in order.lines.select_related("product"):
            if line.product is not None and line.product.is_stocked:
                adjust_stock(
                    line.product_id,
                    "in",
                    line.quantity,
                    reference_type="purchase_order",
                    reference_id=order.pk,
                    notes=f"Purchase order {order.number}",
                    actor=actor,
                )
                received[line.product.code] = line.quantity
        log_action(action="receive", instance=order, actor=actor, changes={"received": received})
    return order


# ----------------------------------------------
# Vendor invoices
# ----------------------------------------------
def _expense_account_for(product):
    return product.expense_account


def create_vendor_invoice(
    vendor_id=None,
    issue_date=None,
    due_date=None,
    lines=None,
    purchase_order_id=None,
    vendor_reference="",
    notes="",
    actor=None,
):
    """Draft a vendor invoice; lines are snapshotted from the purchase order."""
    issue_date = issue_date or datetime.date.today()
    order = None
    if purchase_order_id is not None:
        order = PurchaseOrder.objects.filter(pk=purchase_order_id).first()
        if order is None:
            raise ReferentialIntegrityError(
                f"Purchase order {purchase_order_id} does not exist",
                purchase_order_id=purchase_order_id,
            )
        if order.status not in BILLABLE_ORDER_STATUSES:
            raise InvalidTransitionError(
                f"Cannot bill purchase order {order.number} in status '{order.status}'",
                document_type="purchase_order",
                document_id=order.pk,
                status=order.status,
                operation="bill",
            )
        if vendor_id is not None and int(vendor_id) != order.vendor_id:
            raise ValidationError({"vendor": "Vendor does not match the purchase order"})
        vendor = require_partner(order.vendor_id, "vendor")
        if lines is None:
            lines = [
                {
                    "product": line.product,
                    "description": line.description,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "tax_rate": line.tax_rate,
                }
                for line in order.lines.select_related("product")
            ]
    else:
        vendor = require_partner(vendor_id, "vendor")

    number = next_number("vendor_invoice", issue_date)
    with transaction.atomic():
        invoice = VendorInvoice(
            number=number,
            vendor=vendor,
            purchase_order=order,
            vendor_reference=vendor_reference or "",
            issue_date=issue_date,
            due_date=due_date,
            notes=notes or "",
        )
        invoice.save()
        created = create_lines(invoice, VendorInvoiceLine, lines, account_for=_expense_account_for)
        log_action(
            action="create",
            instance=invoice,
            actor=actor,
            changes={
                "number": number,
                "purchase_order": order.number if order else None,
                "lines": len(created),
            },
        )
    logger.info("Created vendor invoice %s for %s", number, vendor.pk)
    return invoice


def vendor_invoice_posting_lines(invoice: VendorInvoice, lines) -> list:
    """Dr expense per expense account, Dr tax receivable, Cr payable."""
    label = f"Vendor invoice {invoice.number}"
    expense = OrderedDict()
    default_expense = None
    for line in lines:
        account = line.account or (line.product.expense_account if line.product else None)
        if account is None:
            default_expense = default_expense or posting_account("expense")
            account = default_expense
        expense[account] = expense.get(account, ZERO) + line.quantity * line.unit_price

    totals = compute_totals(lines)
    debits = list(allocate(expense, totals["net"]).items())
    tax = totals["tax"]
    payable = totals["gross"]

    posting = [
        {
            "account": account,
            "debit": amount,
            "credit": ZERO,
            "description": f"Expense: {label}",
        }
        for account, amount in sorted(debits, key=lambda item: item[0].code)
        if amount > 0
    ]
    if tax > 0:
        posting.append({
            "account": posting_account("tax_receivable"),
            "debit": tax,
            "credit": ZERO,
            "description": f"Tax: {label}",
        })
    posting.append({
        "account": posting_account("payable"),
        "debit": ZERO,
        "credit": payable,
        "description": label,
    })
    return posting


def mark_vendor_invoice_received(vendor_invoice_id: int, actor=None) -> VendorInvoice:
    """draft → received; the bill is booked against accounts payable."""
    issue_date = VendorInvoice.objects.values_list("issue_date", flat=True).get(
        pk=vendor_invoice_id
    )
    je_number = next_number("journal_entry", issue_date)

    with transaction.atomic():
        invoice = VendorInvoice.objects.select_for_update().get(pk=vendor_invoice_id)
        check_transition(invoice, "receive")
        lines = list(invoice.lines.select_related("product__expense_account", "account"))
        if not lines:
            raise ValidationError("Cannot receive a vendor invoice with no lines")
        totals = compute_totals(lines)
        if totals["gross"] <= 0:
            raise ValidationError("Cannot receive a zero-value vendor invoice")

        invoice.transition("receive")
        entry = post_journal_entry(
            invoice.issue_date,
            f"Vendor invoice {invoice.number}",
            "vendor_invoice",
            invoice.pk,
            vendor_invoice_posting_lines(invoice, lines),
            actor=actor,
            number=je_number,
        )
        VendorInvoice.objects.filter(pk=invoice.pk).update(journal_entry=entry)
        invoice.journal_entry = entry
        log_action(
            action="receive",
            instance=invoice,
            actor=actor,
            changes={"journal_entry": entry.number, "totals": totals},
        )
    return invoice


def mark_vendor_invoice_paid(vendor_invoice_id, actor=None):
    with transaction.atomic():
        invoice = VendorInvoice.objects.select_for_update().get(pk=vendor_invoice_id)
        invoice.transition("mark_paid")
        log_action(action="mark_paid", instance=invoice, actor=actor)
    return invoice
