from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .base import WorkflowDocument
from .journal import JournalEntry
from .partner import BusinessPartner

PAYROLL_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("confirmed", "Confirmed"),
    ("paid", "Paid"),
    ("cancelled", "Cancelled"),
]


class PayrollRun(WorkflowDocument):  # Monthly salary run
    document_type = "payroll_run"

    period_year = models.PositiveIntegerField()
    period_month = models.PositiveSmallIntegerField()
    run_date = models.DateField()
    status = models.CharField(max_length=10, choices=PAYROLL_STATUS_CHOICES, default="draft")

    journal_entry = models.ForeignKey(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )

    class Meta:
        ordering = ("-period_year", "-period_month", "-id")
        constraints = [
            # At most one live run per period; cancelled runs don't count
            models.UniqueConstraint(
                fields=["period_year", "period_month"],
                condition=~models.Q(status="cancelled"),
                name="uq_payroll_period_active",
                violation_error_message="A payroll run for this period already exists.",
            ),
            models.CheckConstraint(
                condition=models.Q(period_month__gte=1) & models.Q(period_month__lte=12),
                name="payroll_month_range",
            ),
        ]

    @property
    def period(self):
        return f"{self.period_year}-{self.period_month:02d}"

    def gross_total(self):
        total = self.lines.aggregate(total=models.Sum("gross_salary"))["total"]
        return total or Decimal("0.00")

    def clean(self):
        if self.period_month is not None and not (1 <= self.period_month <= 12):
            raise ValidationError({"period_month": "Month must be between 1 and 12"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class PayrollLine(models.Model):
    run = models.ForeignKey(PayrollRun, on_delete=models.CASCADE, related_name="lines")
    employee = models.ForeignKey(
        BusinessPartner, on_delete=models.PROTECT, related_name="payroll_lines"
    )
    gross_salary = models.DecimalField(max_digits=18, decimal_places=2)
    notes = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ("id",)
        constraints = [
            models.UniqueConstraint(fields=["run", "employee"], name="uq_payroll_line_employee"),
            models.CheckConstraint(
                condition=models.Q(gross_salary__gte=0), name="payroll_line_non_negative"
            ),
        ]

    def __str__(self):
        return f"{self.employee}: {self.gross_salary}"
