from django.core.exceptions import ValidationError
from django.db import models
from ..managers import PartnerManager
from .mixins import ArchiveInsteadOfDeleteMixin

PARTNER_TYPES = [
    ("customer", "Customer"),
    ("vendor", "Vendor"),
    ("employee", "Employee"),
]

APP_ROLES = [
    ("admin", "Admin"),
    ("accountant", "Accountant"),
    ("sales", "Sales"),
    ("warehouse", "Warehouse"),
]


# ---------- Business partner (base record) ----------
class BusinessPartner(ArchiveInsteadOfDeleteMixin, models.Model):
    """
    Anyone the business deals with.
    Customer/vendor/employee roles are PartnerType rows, so one partner can
    hold several at once.
    """

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    tax_id = models.CharField(max_length=50, blank=True, default="")
    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PartnerManager()

    class Meta:
        ordering = ("name",)
        indexes = [models.Index(fields=["name"])]

    def __str__(self):
        return self.name

    def type_codes(self):
        return sorted(t.partner_type for t in self.types.all())

    def get_type(self, partner_type):
        return self.types.filter(partner_type=partner_type).first()

    def has_type(self, partner_type):
        return self.types.filter(partner_type=partner_type).exists()

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


# ---------- Partner type tag + its attributes ----------
class PartnerType(models.Model):
    partner = models.ForeignKey(
        BusinessPartner, on_delete=models.CASCADE, related_name="types"
    )
    partner_type = models.CharField(max_length=10, choices=PARTNER_TYPES)

    # customer
    credit_limit = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    payment_terms_days = models.PositiveIntegerField(null=True, blank=True)
    # vendor
    bank_account = models.CharField(max_length=64, blank=True, default="")
    # employee
    monthly_salary = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    hire_date = models.DateField(null=True, blank=True)
    job_title = models.CharField(max_length=120, blank=True, default="")
    app_role = models.CharField(max_length=20, choices=APP_ROLES, blank=True, default="")

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["partner", "partner_type"], name="uq_partner_type"
            ),
        ]

    def __str__(self):
        return f"{self.partner} ({self.partner_type})"

    # attributes that only make sense for one type
    TYPE_FIELDS = {
        "customer": ("credit_limit", "payment_terms_days"),
        "vendor": ("bank_account",),
        "employee": ("monthly_salary", "hire_date", "job_title", "app_role"),
    }

    def clean(self):
        errors = {}
        for partner_type, fields in self.TYPE_FIELDS.items():
            if partner_type == self.partner_type:
                continue
            for field in fields:
                if getattr(self, field) not in (None, ""):
                    errors[field] = f"'{field}' is only valid for {partner_type} partners"
        if self.credit_limit is not None and self.credit_limit < 0:
            errors["credit_limit"] = "Credit limit must be >= 0"
        if self.monthly_salary is not None and self.monthly_salary < 0:
            errors["monthly_salary"] = "Monthly salary must be >= 0"
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
