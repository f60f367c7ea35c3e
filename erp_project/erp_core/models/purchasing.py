from django.db import models
from .account import Account
from .base import DocumentLine, TotalsMixin, WorkflowDocument
from .journal import JournalEntry
from .partner import BusinessPartner

PO_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("confirmed", "Confirmed"),
    ("received", "Received"),
    ("cancelled", "Cancelled"),
]


class PurchaseOrder(TotalsMixin, WorkflowDocument):  # Order placed with a vendor
    document_type = "purchase_order"

    vendor = models.ForeignKey(
        BusinessPartner, on_delete=models.PROTECT, related_name="purchase_orders"
    )
    order_date = models.DateField()
    expected_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=PO_STATUS_CHOICES, default="draft")

    class Meta:
        ordering = ("-order_date", "-id")
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["vendor", "order_date"]),
        ]

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class PurchaseOrderLine(DocumentLine):
    parent_field = "order"

    order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="lines")

    class Meta(DocumentLine.Meta):
        pass


VINV_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("received", "Received"),
    ("paid", "Paid"),
]


class VendorInvoice(TotalsMixin, WorkflowDocument):  # Bill received from a vendor
    document_type = "vendor_invoice"

    vendor = models.ForeignKey(
        BusinessPartner, on_delete=models.PROTECT, related_name="vendor_invoices"
    )
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="vendor_invoices",
    )
    # the vendor's own invoice number
    vendor_reference = models.CharField(max_length=64, blank=True, default="")
    issue_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=VINV_STATUS_CHOICES, default="draft")

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
            models.Index(fields=["vendor", "issue_date"]),
        ]

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class VendorInvoiceLine(DocumentLine):
    parent_field = "vendor_invoice"

    vendor_invoice = models.ForeignKey(
        VendorInvoice, on_delete=models.CASCADE, related_name="lines"
    )
    # Expense account debited for this line; None → product's or default
    account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT, related_name="+"
    )

    class Meta(DocumentLine.Meta):
        pass
