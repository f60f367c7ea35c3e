from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import ActiveManager
from .mixins import ArchiveInsteadOfDeleteMixin

# Choice Lists
AC_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("revenue", "Revenue"),
    ("expense", "Expense"),
]

# Fixed display order for reports (trial balance)
AC_TYPE_ORDER = [code for code, _ in AC_TYPES]

# First digit of an account code decides its type
CODE_PREFIX_TYPES = {
    "1": "asset",
    "2": "liability",
    "3": "equity",
    "4": "revenue",
    "5": "expense",
}

# Debit-normal types (assets/expenses), the rest are credit-normal
DEBIT_NORMAL_TYPES = ("asset", "expense")


class Account(ArchiveInsteadOfDeleteMixin, models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique and its first digit must match ac_type
    - parent builds a tree (e.g. 1000 Cash → 1010 Petty Cash), no cycles
    - inactive accounts stay for history but reject new postings
    """

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    ac_type = models.CharField(max_length=10, choices=AC_TYPES)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        # you can’t delete a parent if children exist
        on_delete=models.PROTECT,
        related_name="children",
    )
    # “soft deactivate” accounts (stop new postings) without deleting history
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveManager()

    class Meta:
        ordering = ("code",)
        indexes = [
            # For reports grouped by ac_type (Trial Balance)
            models.Index(fields=["ac_type"]),
            models.Index(fields=["parent"]),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def normal_balance(self):
        return "debit" if self.ac_type in DEBIT_NORMAL_TYPES else "credit"

    def clean(self):
        errors = {}
        expected = CODE_PREFIX_TYPES.get((self.code or "")[:1])
        if expected is None:
            errors["code"] = "Account code must start with 1-5 (asset … expense)."
        elif expected != self.ac_type:
            errors["ac_type"] = (
                f"Account code {self.code} belongs to type '{expected}', not '{self.ac_type}'."
            )

        # Walk up the tree; meeting ourselves again means a cycle
        node = self.parent
        seen = set()
        while node is not None:
            if (self.pk and node.pk == self.pk) or node.pk in seen:
                errors["parent"] = "Account hierarchy cannot contain a cycle."
                break
            seen.add(node.pk)
            node = node.parent

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


# ---------- Account Balance (denormalized running totals) ----------
class AccountBalance(models.Model):
    """
    Running debit/credit totals per account.
    Incremented with F() expressions inside the posting transaction and
    rebuilt from journal lines by tasks.recompute_account_balances.
    """

    account = models.OneToOneField(
        Account, on_delete=models.CASCADE, related_name="balance"
    )
    debit_total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    credit_total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(debit_total__gte=0) &
                    models.Q(credit_total__gte=0)
                ),
                name="ab_non_negative_totals",
            ),
        ]

    def __str__(self):
        return f"{self.account.code}: D {self.debit_total} / C {self.credit_total}"

    @property
    def balance(self):
        return self.debit_total - self.credit_total
