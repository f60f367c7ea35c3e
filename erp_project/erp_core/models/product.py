from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import ActiveManager
from .mixins import ArchiveInsteadOfDeleteMixin
from .account import Account

PRODUCT_TYPES = [
    ("good", "Good"),
    ("service", "Service"),
]


# ---------- Products (goods & services) ----------
class Product(ArchiveInsteadOfDeleteMixin, models.Model):  # Something the business sells & purchases
    code = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    product_type = models.CharField(max_length=10, choices=PRODUCT_TYPES, default="good")

    unit_price = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    # percent, e.g. 23 for 23 %
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))

    # Services never track stock
    track_inventory = models.BooleanField(default=True)

    # Denormalized running total of StockMovement rows.
    # Only services.inventory.adjust_stock writes it.
    stock_quantity = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))
    low_stock_threshold = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal("0"))

    """ Example: "Web Hosting" → posts revenue to "4100: Service Revenue". """
    revenue_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="revenue_products",
    )
    expense_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="expense_products",
    )
    inventory_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="inventory_products",
    )

    # archived products stay referenced by historical documents
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveManager()

    class Meta:
        ordering = ("code",)
        indexes = [models.Index(fields=["name"])]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name="product_non_negative_price",
            ),
            models.CheckConstraint(
                condition=models.Q(tax_rate__gte=0) & models.Q(tax_rate__lte=100),
                name="product_tax_rate_range",
            ),
        ]

    def __str__(self):
        return f"{self.code} {self.name}"

    @property
    def is_stocked(self):
        return self.product_type == "good" and self.track_inventory

    @property
    def is_low_on_stock(self):
        return self.is_stocked and self.stock_quantity <= self.low_stock_threshold

    def clean(self):
        # Services never carry stock or an inventory account
        if self.product_type == "service":
            self.track_inventory = False
            self.inventory_account = None

        errors = {}
        if self.unit_price is not None and self.unit_price < 0:
            errors["unit_price"] = "Unit price must be >= 0"
        if self.tax_rate is not None and not (0 <= self.tax_rate <= 100):
            errors["tax_rate"] = "Tax rate must be between 0 and 100"
        if self.low_stock_threshold is not None and self.low_stock_threshold < 0:
            errors["low_stock_threshold"] = "Low stock threshold must be >= 0"

        # Account references must point at the right part of the chart
        for field, ac_type in (
            ("revenue_account", "revenue"),
            ("expense_account", "expense"),
            ("inventory_account", "asset"),
        ):
            account = getattr(self, field)
            if account is not None and account.ac_type != ac_type:
                errors[field] = f"{account} is not a {ac_type} account"

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        # stock_quantity of an existing row is owned by adjust_stock;
        # a plain save() of a stale instance must not overwrite it
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in ("stock_quantity", "created_at")
            ]
        return super().save(*args, **kwargs)
