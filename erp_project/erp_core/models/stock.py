from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .product import Product

MOVEMENT_TYPES = [
    ("in", "In"),
    ("out", "Out"),
    ("adjustment", "Adjustment"),
]

DIRECTIONS = [
    (1, "Increase"),
    (-1, "Decrease"),
]


# ---------- Stock movements (append-only audit log) ----------
class StockMovement(models.Model):
    """
    One row per change of Product.stock_quantity.
    quantity is always >= 0; direction says which way it moved, so
    replaying Σ direction × quantity from zero gives the stored stock.
    """

    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="movements")
    movement_type = models.CharField(max_length=12, choices=MOVEMENT_TYPES)
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    direction = models.SmallIntegerField(choices=DIRECTIONS, default=1)
    # Stock level right after this movement
    balance_after = models.DecimalField(max_digits=14, decimal_places=4)

    # What caused it: "delivery", "purchase_order", "manual", "opening"…
    reference_type = models.CharField(max_length=30, default="manual")
    reference_id = models.BigIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("created_at", "id")
        indexes = [
            models.Index(fields=["product", "created_at"]),
            models.Index(fields=["reference_type", "reference_id"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="sm_non_negative_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.product.code} {self.movement_type} {self.quantity}"

    @property
    def signed_quantity(self):
        return self.quantity * self.direction

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Stock movements are append-only.")
        if self.quantity is None or Decimal(self.quantity) < 0:
            raise ValidationError({"quantity": "Movement quantity must be >= 0"})
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Stock movements cannot be deleted.")
