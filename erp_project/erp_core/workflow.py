from collections import namedtuple

from .exceptions import InvalidTransitionError

# ---------------------------------------------------------
# Transition table: (document type, operation) → rule
# Every state machine moves forward only; no status is revisited.
# ---------------------------------------------------------
Transition = namedtuple("Transition", ["sources", "target"])

TRANSITIONS = {
    # Sales order
    ("sales_order", "confirm"): Transition(("draft",), "confirmed"),
    ("sales_order", "cancel"): Transition(("draft", "confirmed"), "cancelled"),
    ("sales_order", "record_partial_delivery"): Transition(
        ("confirmed", "partially_delivered"), "partially_delivered"
    ),
    ("sales_order", "record_full_delivery"): Transition(
        ("confirmed", "partially_delivered"), "delivered"
    ),
    ("sales_order", "mark_invoiced"): Transition(("delivered",), "invoiced"),
    # Delivery
    ("delivery", "ship"): Transition(("ready",), "shipped"),
    # Customer invoice
    ("invoice", "issue"): Transition(("draft",), "issued"),
    ("invoice", "mark_paid"): Transition(("issued",), "paid"),
    ("invoice", "cancel"): Transition(("draft",), "cancelled"),
    # Purchase order
    ("purchase_order", "confirm"): Transition(("draft",), "confirmed"),
    ("purchase_order", "receive"): Transition(("confirmed",), "received"),
    ("purchase_order", "cancel"): Transition(("draft",), "cancelled"),
    # Vendor invoice
    ("vendor_invoice", "receive"): Transition(("draft",), "received"),
    ("vendor_invoice", "mark_paid"): Transition(("received",), "paid"),
    # Payroll run
    ("payroll_run", "confirm"): Transition(("draft",), "confirmed"),
    ("payroll_run", "pay"): Transition(("confirmed",), "paid"),
    ("payroll_run", "cancel"): Transition(("draft",), "cancelled"),
}


def get_transition(document_type, operation):
    try:
        return TRANSITIONS[(document_type, operation)]
    except KeyError:
        raise InvalidTransitionError(
            f"Unknown operation '{operation}' for {document_type}",
            document_type=document_type,
            operation=operation,
        )


def allowed_operations(document_type, status):
    """Operations that may be applied to a document in the given status."""
    return sorted(
        operation
        for (doc_type, operation), rule in TRANSITIONS.items()
        if doc_type == document_type and status in rule.sources
    )
