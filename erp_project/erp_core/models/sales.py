from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .base import DocumentLine, TotalsMixin, WorkflowDocument
from .partner import BusinessPartner

SO_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("confirmed", "Confirmed"),
    ("partially_delivered", "Partially delivered"),
    ("delivered", "Delivered"),
    ("invoiced", "Invoiced"),
    ("cancelled", "Cancelled"),
]


class SalesOrder(TotalsMixin, WorkflowDocument):  # Customer order
    document_type = "sales_order"

    customer = models.ForeignKey(
        BusinessPartner,
        # keep history: a customer with orders can only be archived
        on_delete=models.PROTECT,
        related_name="sales_orders",
    )
    order_date = models.DateField()
    status = models.CharField(max_length=20, choices=SO_STATUS_CHOICES, default="draft")
    """ Workflow:
        draft → confirmed → partially_delivered → delivered → invoiced
        draft/confirmed → cancelled """

    # Optional overrides of the customer's address for this order
    ship_to_name = models.CharField(max_length=200, blank=True, default="")
    ship_to_address = models.TextField(blank=True, default="")

    class Meta:
        ordering = ("-order_date", "-id")
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["customer", "order_date"]),
        ]

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def shipping_name(self):
        return self.ship_to_name or self.customer.name

    @property
    def shipping_address(self):
        return self.ship_to_address or self.customer.address


class SalesOrderLine(DocumentLine):
    parent_field = "order"

    order = models.ForeignKey(SalesOrder, on_delete=models.CASCADE, related_name="lines")

    class Meta(DocumentLine.Meta):
        pass

    @property
    def is_deliverable(self):
        return self.product_id is not None and self.product.product_type == "good"

    def shipped_quantity(self, exclude_delivery=None):
        """Quantity already leaving the warehouse on shipped deliveries."""
        qs = self.delivery_lines.filter(delivery__status="shipped")
        if exclude_delivery is not None:
            qs = qs.exclude(delivery=exclude_delivery)
        total = qs.aggregate(total=models.Sum("delivered_quantity"))["total"]
        return total or Decimal("0")

    def remaining_quantity(self):
        return self.quantity - self.shipped_quantity()


DELIVERY_STATUS_CHOICES = [
    ("ready", "Ready"),
    ("shipped", "Shipped"),
]


class Delivery(WorkflowDocument):  # Shipment of (part of) a sales order
    document_type = "delivery"
    deletable_status = "ready"

    sales_order = models.ForeignKey(
        SalesOrder, on_delete=models.PROTECT, related_name="deliveries"
    )
    status = models.CharField(max_length=10, choices=DELIVERY_STATUS_CHOICES, default="ready")
    planned_date = models.DateField(null=True, blank=True)
    actual_date = models.DateField(null=True, blank=True)
    carrier = models.CharField(max_length=120, blank=True, default="")
    ship_to_name = models.CharField(max_length=200, blank=True, default="")
    ship_to_address = models.TextField(blank=True, default="")

    class Meta:
        ordering = ("-id",)
        verbose_name_plural = "deliveries"

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class DeliveryLine(models.Model):
    delivery = models.ForeignKey(Delivery, on_delete=models.CASCADE, related_name="lines")
    order_line = models.ForeignKey(
        SalesOrderLine, on_delete=models.PROTECT, related_name="delivery_lines"
    )
    product = models.ForeignKey(
        "erp_core.Product", on_delete=models.PROTECT, related_name="delivery_lines"
    )
    # copied from the order line when the delivery is created
    ordered_quantity = models.DecimalField(max_digits=14, decimal_places=4)
    delivered_quantity = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("position", "id")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(delivered_quantity__gte=0),
                name="dl_non_negative_delivered",
            ),
            models.UniqueConstraint(
                fields=["delivery", "order_line"], name="uq_delivery_order_line"
            ),
        ]

    def __str__(self):
        return f"{self.product} {self.delivered_quantity}/{self.ordered_quantity}"

    def clean(self):
        if self.delivered_quantity is not None and self.delivered_quantity < 0:
            raise ValidationError({"delivered_quantity": "Delivered quantity must be >= 0"})
        if (
            self.delivered_quantity is not None
            and self.ordered_quantity is not None
            and self.delivered_quantity > self.ordered_quantity
        ):
            raise ValidationError(
                {"delivered_quantity": "Cannot deliver more than was ordered"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
