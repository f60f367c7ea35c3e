import hashlib
import json
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .account import Account

REFERENCE_TYPES = [
    ("invoice", "Customer invoice"),
    ("vendor_invoice", "Vendor invoice"),
    ("payroll", "Payroll run"),
    ("manual", "Manual entry"),
    ("reversal", "Reversal"),
]


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    """
    Immutable once written: the posting service creates header and lines in
    one transaction and nothing updates or deletes them afterwards.
    Corrections are made with a reversing entry.
    """

    # human-readable (e.g. "JE-2025-000001")
    number = models.CharField(max_length=32, unique=True)
    entry_date = models.DateField()
    description = models.TextField(blank=True, default="")

    # Link back to the business document that caused the posting
    reference_type = models.CharField(max_length=20, choices=REFERENCE_TYPES)
    reference_id = models.BigIntegerField(null=True, blank=True)

    # Entry this one reverses (reference_type == "reversal")
    reverses = models.OneToOneField(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="reversed_by",
    )

    # sha256 of the canonical payload, for audit replay
    posting_fingerprint = models.CharField(max_length=64, blank=True, default="")
    created_by = models.CharField(max_length=150, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-entry_date", "-id")
        indexes = [
            models.Index(fields=["entry_date"]),
            models.Index(fields=["reference_type", "reference_id"]),
        ]
        constraints = [
            # One posting per source document: a second issue/pay
            # of the same document can never write another entry
            models.UniqueConstraint(
                fields=["reference_type", "reference_id"],
                condition=models.Q(reference_id__isnull=False),
                name="uq_je_source_document",
            ),
        ]

    def __str__(self):
        return f"{self.number} {self.entry_date}"

    # Aggregate all debit and credit amounts across entry’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        aggs = self.lines.aggregate(
            total_debit=models.Sum("debit_amount"),
            total_credit=models.Sum("credit_amount"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )

    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    @staticmethod
    def build_payload(entry_date, reference_type, reference_id, lines):
        """Deterministic JSON snapshot of what matters for posting.

        ``lines`` is a sequence of (account_id, debit, credit, description).
        The same data always produces the same string.
        """
        payload = {
            "date": entry_date.isoformat(),
            "ref": [reference_type, reference_id],
            "lines": [
                {
                    "acct": account_id,
                    "debit": str(debit),
                    "credit": str(credit),
                    "desc": desc or "",
                }
                for account_id, debit, credit, desc in lines
            ],
        }
        return json.dumps(payload, separators=(",", ":"), sort_keys=True)

    @classmethod
    def fingerprint_for(cls, entry_date, reference_type, reference_id, lines):
        payload = cls.build_payload(entry_date, reference_type, reference_id, lines)
        return hashlib.sha256(payload.encode()).hexdigest()

    def _stored_lines(self):
        return [
            (line.account_id, line.debit_amount, line.credit_amount, line.description)
            for line in self.lines.order_by("position", "id")
        ]

    def verify_fingerprint(self):
        """True when the stored lines still hash to the posted fingerprint."""
        fp = self.fingerprint_for(
            self.entry_date, self.reference_type, self.reference_id, self._stored_lines()
        )
        return fp == self.posting_fingerprint

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Cannot modify a posted JournalEntry. It is immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Journal entries cannot be deleted; post a reversing entry.")


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="lines",
    )
    # Must point to one Account (can’t delete account if lines exist → PROTECT)
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="journal_lines")
    description = models.CharField(max_length=400, blank=True, default="")
    debit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("position", "id")
        indexes = [
            models.Index(fields=["account"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(debit_amount__gte=0) &
                    models.Q(credit_amount__gte=0)
                ),
                name="jl_non_negative_amounts",
            ),
            # exactly one side carries an amount
            models.CheckConstraint(
                condition=(
                    (models.Q(debit_amount=0) & models.Q(credit_amount__gt=0)) |
                    (models.Q(credit_amount=0) & models.Q(debit_amount__gt=0))
                ),
                name="jl_debit_xor_credit",
            ),
        ]

    def __str__(self):
        return f"{self.account.code} D {self.debit_amount} / C {self.credit_amount}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Cannot modify a line of a posted JournalEntry.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Journal lines cannot be deleted.")
