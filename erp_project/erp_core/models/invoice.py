from django.db import models
from .account import Account
from .base import DocumentLine, TotalsMixin, WorkflowDocument
from .journal import JournalEntry
from .partner import BusinessPartner
from .sales import SalesOrder

INV_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("issued", "Issued"),
    ("paid", "Paid"),
    ("cancelled", "Cancelled"),
]


class Invoice(TotalsMixin, WorkflowDocument):  # Represents a customer invoice
    document_type = "invoice"

    customer = models.ForeignKey(
        BusinessPartner,
        # prevent deleting customer who has an invoice
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    # Optional source order; lines are snapshotted from it on creation
    sales_order = models.ForeignKey(
        SalesOrder,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    issue_date = models.DateField()
    # payment deadline (defaults from customer's payment terms)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=INV_STATUS_CHOICES, default="draft")
    """ Workflow:
        draft = not yet finalized.
        issued = posted to the ledger, awaiting payment.
        paid = fully settled.
        cancelled = dropped before issue. """

    # Revenue posting written on issue
    journal_entry = models.ForeignKey(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )

    class Meta:
        ordering = ("-issue_date", "-id")
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["customer", "issue_date"]),
        ]
        constraints = [
            # One live invoice per sales order; a cancelled one frees the order
            models.UniqueConstraint(
                fields=["sales_order"],
                condition=~models.Q(status="cancelled") & models.Q(sales_order__isnull=False),
                name="uq_invoice_active_sales_order",
                violation_error_message="This sales order already has an invoice.",
            ),
        ]

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class InvoiceLine(DocumentLine):
    parent_field = "invoice"

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="lines")
    # Revenue account credited for this line; None → product's or default
    account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    class Meta(DocumentLine.Meta):
        pass
