import datetime
import logging
from collections import OrderedDict
from django.core.exceptions import ValidationError
from django.db import transaction
from ..exceptions import InvalidTransitionError, ReferentialIntegrityError
from ..models import (Delivery, DeliveryLine, Invoice, InvoiceLine, SalesOrder,
                      SalesOrderLine)
from ..totals import ZERO, allocate, compute_totals, to_decimal
from .audit_helper import log_action
from .documents import check_transition, create_lines
from .inventory import adjust_stock
from .ledger import post_journal_entry, posting_account
from .numbering import next_number
from .partners import require_partner

logger = logging.getLogger(__name__)

INVOICEABLE_ORDER_STATUSES = ("confirmed", "partially_delivered", "delivered")


# ----------------------------------------------
# Sales order workflows
# ----------------------------------------------
def create_sales_order(
    customer_id,
    order_date=None,
    lines=(),
    ship_to_name="",
    ship_to_address="",
    notes="",
    actor=None,
):
    customer = require_partner(customer_id, "customer")
    order_date = order_date or datetime.date.today()
    number = next_number("sales_order", order_date)
    with transaction.atomic():
        order = SalesOrder(
            number=number,
            customer=customer,
            order_date=order_date,
            ship_to_name=ship_to_name or "",
            ship_to_address=ship_to_address or "",
            notes=notes or "",
        )
        order.save()
        created = create_lines(order, SalesOrderLine, lines)
        log_action(
            action="create",
            instance=order,
            actor=actor,
            changes={"number": number, "lines": len(created), "totals": order.totals()},
        )
    logger.info("Created sales order %s for %s", number, customer.pk)
    return order


"""Move order from draft → confirmed (needs at least one line)."""
def confirm_sales_order(order_id, actor=None):
    with transaction.atomic():
        order = SalesOrder.objects.select_for_update().get(pk=order_id)
        if order.is_draft() and not order.lines.exists():
            raise ValidationError("Cannot confirm a sales order with no lines")
        order.transition("confirm")
        log_action(action="confirm", instance=order, actor=actor)
    return order


def cancel_sales_order(order_id, actor=None):
    with transaction.atomic():
        order = SalesOrder.objects.select_for_update().get(pk=order_id)
        order.transition("cancel")
        log_action(action="cancel", instance=order, actor=actor)
    return order


# ----------------------------------------------
# Deliveries
# ----------------------------------------------
def _normalize_quantities(quantities):
    normalized = {}
    for key, value in (quantities or {}).items():
        try:
            line_id = int(key)
        except (TypeError, ValueError):
            raise ValidationError({"quantities": f"Invalid order line id '{key}'"})
        normalized[line_id] = to_decimal(value)
    return normalized


def create_delivery(
    sales_order_id,
    quantities,
    planned_date=None,
    carrier="",
    ship_to_name="",
    ship_to_address="",
    notes="",
    actor=None,
):
    """
    Plan a shipment for an open sales order.

    ``quantities`` maps order line id → quantity to deliver. Every goods
    line of the order gets a delivery line; each quantity must fit in what
    is still unshipped on its order line.
    """
    quantities = _normalize_quantities(quantities)
    number = next_number("delivery", planned_date)

    with transaction.atomic():
        order = SalesOrder.objects.select_for_update().get(pk=sales_order_id)
        if order.status not in ("confirmed", "partially_delivered"):
            raise InvalidTransitionError(
                f"Cannot deliver sales order {order.number} in status '{order.status}'",
                document_type="sales_order",
                document_id=order.pk,
                status=order.status,
                operation="create_delivery",
            )

        order_lines = list(order.lines.select_related("product"))
        by_id = {line.pk: line for line in order_lines}
        unknown = sorted(set(quantities) - set(by_id))
        if unknown:
            raise ValidationError(
                {"quantities": f"Lines {unknown} do not belong to {order.number}"}
            )

        planned = []
        for line in order_lines:
            qty = quantities.get(line.pk, ZERO)
            if not line.is_deliverable:
                if qty:
                    raise ValidationError(
                        {"quantities": f"Line {line.pk} is not a deliverable good"}
                    )
                continue
            if qty < 0:
                raise ValidationError({"delivered_quantity": "Quantities must be >= 0"})
            remaining = line.remaining_quantity()
            if qty > remaining:
                raise ValidationError({
                    "delivered_quantity": (
                        f"Line {line.pk}: {qty} exceeds the remaining {remaining}"
                    )
                })
            planned.append((line, qty))

        if not any(qty > 0 for _, qty in planned):
            raise ValidationError(
                {"quantities": "A delivery needs at least one positive quantity"}
            )

        delivery = Delivery(
            number=number,
            sales_order=order,
            planned_date=planned_date,
            carrier=carrier or "",
            ship_to_name=ship_to_name or order.ship_to_name,
            ship_to_address=ship_to_address or order.ship_to_address,
            notes=notes or "",
        )
        delivery.save()
        for position, (line, qty) in enumerate(planned, start=1):
            DeliveryLine(
                delivery=delivery,
                order_line=line,
                product=line.product,
                ordered_quantity=line.quantity,
                delivered_quantity=qty,
                position=position,
            ).save()
        log_action(
            action="create",
            instance=delivery,
            actor=actor,
            changes={
                "number": number,
                "sales_order": order.number,
                "quantities": {line.pk: qty for line, qty in planned},
            },
        )
    logger.info("Created delivery %s for %s", number, order.number)
    return delivery


def ship_delivery(delivery_id: int, shipped_on=None, actor=None) -> Delivery:
    """
    Ship a ready delivery: stock leaves the warehouse and the order moves
    to partially_delivered or delivered, all in one transaction.
    The order row is locked first so two shipments of the same order
    serialize and the second one sees what the first shipped.
    An order whose invoice is already issued moves on to invoiced with its
    last shipment.
    """
    shipped_on = shipped_on or datetime.date.today()
    with transaction.atomic():
        order_id = Delivery.objects.values_list("sales_order_id", flat=True).get(pk=delivery_id)
        order = SalesOrder.objects.select_for_update().get(pk=order_id)
        delivery = Delivery.objects.select_for_update().get(pk=delivery_id)
        check_transition(delivery, "ship")
        check_transition(order, "record_partial_delivery")

        lines = list(delivery.lines.select_related("order_line", "product"))
        for line in lines:
            if line.delivered_quantity <= 0:
                continue
            already = line.order_line.shipped_quantity(exclude_delivery=delivery)
            if already + line.delivered_quantity > line.order_line.quantity:
                raise ValidationError({
                    "delivered_quantity": (
                        f"Order line {line.order_line_id}: shipping {line.delivered_quantity} "
                        f"on top of {already} exceeds the ordered {line.order_line.quantity}"
                    )
                })

        delivery.transition("ship", actual_date=shipped_on)

        for line in lines:
            if line.delivered_quantity > 0 and line.product.is_stocked:
                adjust_stock(
                    line.product_id,
                    "out",
                    line.delivered_quantity,
                    reference_type="delivery",
                    reference_id=delivery.pk,
                    notes=f"Delivery {delivery.number}",
                    actor=actor,
                )

        complete = all(
            line.remaining_quantity() <= 0
            for line in order.lines.select_related("product")
            if line.is_deliverable
        )
        order.transition("record_full_delivery" if complete else "record_partial_delivery")
        # invoiced ahead of the last shipment: close the order now
        if complete and order.invoices.filter(status__in=("issued", "paid")).exists():
            order.transition("mark_invoiced")
        log_action(
            action="ship",
            instance=delivery,
            actor=actor,
            changes={"sales_order": order.number, "order_status": order.status},
        )
    return delivery


# ----------------------------------------------
# Customer invoices
# ----------------------------------------------
def _revenue_account_for(product):
    return product.revenue_account


def create_invoice(
    customer_id=None,
    issue_date=None,
    due_date=None,
    lines=None,
    sales_order_id=None,
    notes="",
    actor=None,
):
    """
    Draft a customer invoice, either from explicit lines or by snapshotting
    the lines of a sales order. A snapshot is not re-synced when the order
    changes later.
    """
    issue_date = issue_date or datetime.date.today()
    order = None
    if sales_order_id is not None:
        order = SalesOrder.objects.filter(pk=sales_order_id).select_related("customer").first()
        if order is None:
            raise ReferentialIntegrityError(
                f"Sales order {sales_order_id} does not exist", sales_order_id=sales_order_id
            )
        if order.status not in INVOICEABLE_ORDER_STATUSES:
            raise InvalidTransitionError(
                f"Cannot invoice sales order {order.number} in status '{order.status}'",
                document_type="sales_order",
                document_id=order.pk,
                status=order.status,
                operation="invoice",
            )
        if customer_id is not None and int(customer_id) != order.customer_id:
            raise ValidationError({"customer": "Customer does not match the sales order"})
        customer = require_partner(order.customer_id, "customer")
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
        customer = require_partner(customer_id, "customer")

    if due_date is None:
        terms = customer.get_type("customer").payment_terms_days or 0
        due_date = issue_date + datetime.timedelta(days=terms)

    number = next_number("invoice", issue_date)
    with transaction.atomic():
        if order is not None:
            # concurrent invoicing of the same order serializes on this lock
            order = SalesOrder.objects.select_for_update().get(pk=order.pk)
            if order.status not in INVOICEABLE_ORDER_STATUSES:
                raise InvalidTransitionError(
                    f"Cannot invoice sales order {order.number} in status '{order.status}'",
                    document_type="sales_order",
                    document_id=order.pk,
                    status=order.status,
                    operation="invoice",
                )
            if order.invoices.exclude(status="cancelled").exists():
                raise ValidationError(
                    {"sales_order": f"Sales order {order.number} is already invoiced"}
                )
        invoice = Invoice(
            number=number,
            customer=customer,
            sales_order=order,
            issue_date=issue_date,
            due_date=due_date,
            notes=notes or "",
        )
        invoice.save()
        created = create_lines(invoice, InvoiceLine, lines, account_for=_revenue_account_for)
        log_action(
            action="create",
            instance=invoice,
            actor=actor,
            changes={
                "number": number,
                "sales_order": order.number if order else None,
                "lines": len(created),
            },
        )
    logger.info("Created invoice %s for %s", number, customer.pk)
    return invoice


def invoice_posting_lines(invoice: Invoice, lines) -> list:
    """
    Dr receivable for the gross amount, Cr revenue per revenue account,
    Cr tax payable for the aggregate tax. The rounded net is split over the
    revenue accounts cent by cent, so the receivable equals the invoice
    gross and the entry always balances.
    """
    label = f"Invoice {invoice.number}"
    revenue = OrderedDict()
    default_revenue = None
    for line in lines:
        account = line.account or (line.product.revenue_account if line.product else None)
        if account is None:
            default_revenue = default_revenue or posting_account("revenue")
            account = default_revenue
        revenue[account] = revenue.get(account, ZERO) + line.quantity * line.unit_price

    totals = compute_totals(lines)
    credits = list(allocate(revenue, totals["net"]).items())
    tax = totals["tax"]
    receivable = totals["gross"]

    posting = [{
        "account": posting_account("receivable"),
        "debit": receivable,
        "credit": ZERO,
        "description": label,
    }]
    for account, amount in sorted(credits, key=lambda item: item[0].code):
        if amount > 0:
            posting.append({
                "account": account,
                "debit": ZERO,
                "credit": amount,
                "description": f"Revenue: {label}",
            })
    if tax > 0:
        posting.append({
            "account": posting_account("tax_payable"),
            "debit": ZERO,
            "credit": tax,
            "description": f"Tax: {label}",
        })
    return posting


"""Move invoice from draft → issued and post revenue to the ledger."""
def issue_invoice(invoice_id: int, actor=None) -> Invoice:
    issue_date = Invoice.objects.values_list("issue_date", flat=True).get(pk=invoice_id)
    je_number = next_number("journal_entry", issue_date)

    with transaction.atomic():
        invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        check_transition(invoice, "issue")
        lines = list(invoice.lines.select_related("product__revenue_account", "account"))
        if not lines:
            raise ValidationError("Cannot issue an invoice with no lines")
        totals = compute_totals(lines)
        if totals["gross"] <= 0:
            raise ValidationError("Cannot issue a zero-value invoice")

        invoice.transition("issue")
        entry = post_journal_entry(
            invoice.issue_date,
            f"Invoice {invoice.number}",
            "invoice",
            invoice.pk,
            invoice_posting_lines(invoice, lines),
            actor=actor,
            number=je_number,
        )
        Invoice.objects.filter(pk=invoice.pk).update(journal_entry=entry)
        invoice.journal_entry = entry

        if invoice.sales_order_id:
            order = SalesOrder.objects.select_for_update().get(pk=invoice.sales_order_id)
            if order.status == "delivered":
                order.transition("mark_invoiced")

        log_action(
            action="issue",
            instance=invoice,
            actor=actor,
            changes={"journal_entry": entry.number, "totals": totals},
        )
    return invoice


def mark_invoice_paid(invoice_id, actor=None):
    with transaction.atomic():
        invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        invoice.transition("mark_paid")
        log_action(action="mark_paid", instance=invoice, actor=actor)
    return invoice


def cancel_invoice(invoice_id, actor=None):
    with transaction.atomic():
        invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        invoice.transition("cancel")
        log_action(action="cancel", instance=invoice, actor=actor)
    return invoice
