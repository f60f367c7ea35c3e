import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..exceptions import InvalidTransitionError
from ..totals import compute_totals, line_total
from ..workflow import get_transition
from .product import Product

logger = logging.getLogger(__name__)


# ---------- Header documents (orders, deliveries, invoices, payroll runs) ----------
class WorkflowDocument(models.Model):
    """
    Abstract header with a number, a status and a guarded status change.
    Subclasses set ``document_type`` (key of the workflow table) and declare
    their own ``status`` field.
    """

    document_type = None
    # the only status in which the row may still be deleted
    deletable_status = "draft"

    number = models.CharField(max_length=32, unique=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True

    def __str__(self):
        return self.number or f"{self.document_type} {self.pk}"

    def transition(self, operation, **changes):
        """
        Move to the target status of ``operation``.
        The write is a conditional UPDATE on the allowed source statuses, so a
        stale instance (or a concurrent caller that already moved the row)
        updates nothing and gets InvalidTransitionError.
        """
        rule = get_transition(self.document_type, operation)
        model = type(self)
        updated = model.objects.filter(pk=self.pk, status__in=rule.sources).update(
            status=rule.target, **changes
        )
        if not updated:
            current = (
                model.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            logger.warning(
                "Rejected %s on %s %s (status=%s)",
                operation, self.document_type, self.pk, current,
            )
            raise InvalidTransitionError(
                f"Cannot {operation} {self.document_type} {self.number or self.pk} "
                f"in status '{current}'",
                document_type=self.document_type,
                document_id=self.pk,
                status=current,
                operation=operation,
            )
        previous = self.status
        self.status = rule.target
        for field, value in changes.items():
            setattr(self, field, value)
        logger.info(
            "%s %s: %s -> %s (%s)",
            self.document_type, self.number or self.pk, previous, rule.target, operation,
        )
        return self

    def is_draft(self):
        return self.status == "draft"

    def delete(self, *args, **kwargs):
        """Drafts may be thrown away; anything that moved on is cancelled instead."""
        if self.status != self.deletable_status:
            raise InvalidTransitionError(
                f"Cannot delete {self.document_type} {self.number} in status '{self.status}'",
                document_type=self.document_type,
                document_id=self.pk,
                status=self.status,
                operation="delete",
            )
        return super().delete(*args, **kwargs)


class TotalsMixin:
    """Headers whose lines carry quantity / unit_price / tax_rate."""

    def totals(self):
        return compute_totals(self.lines.all())


# ---------- Document line (shared by orders and invoices) ----------
class DocumentLine(models.Model):
    """
    Abstract line. ``parent_field`` names the FK to the header; lines can
    only be written while that header is a draft.
    """

    parent_field = None

    product = models.ForeignKey(
        Product,
        null=True,
        blank=True,  # custom (free text) lines are allowed
        on_delete=models.PROTECT,
        related_name="+",
    )
    description = models.CharField(max_length=400, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    unit_price = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    # quantity × unit_price × (1 + tax_rate/100), kept in sync by save()
    line_total = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    position = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ("position", "id")

    def __str__(self):
        return f"{self.description or self.product} x {self.quantity}"

    @property
    def parent(self):
        return getattr(self, self.parent_field)

    def clean(self):
        errors = {}
        if self.quantity is None or self.quantity <= 0:
            errors["quantity"] = "Quantity must be > 0"
        if self.unit_price is None or self.unit_price < 0:
            errors["unit_price"] = "Unit price must be >= 0"
        if self.tax_rate is None or not (0 <= self.tax_rate <= 100):
            errors["tax_rate"] = "Tax rate must be between 0 and 100"
        if not self.description and self.product is None:
            errors["description"] = "A line needs a product or a description"
        if errors:
            raise ValidationError(errors)

        parent = self.parent
        if parent is not None and not parent.is_draft():
            raise ValidationError(
                f"Lines of {parent} cannot change once it is {parent.status}."
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        self.line_total = line_total(self.quantity, self.unit_price, self.tax_rate)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        parent = self.parent
        if parent is not None and not parent.is_draft():
            raise ValidationError(f"Lines of {parent} cannot be removed once it is {parent.status}.")
        return super().delete(*args, **kwargs)
