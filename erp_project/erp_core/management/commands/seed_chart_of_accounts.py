from django.core.management.base import BaseCommand
from django.db import transaction

from erp_core.conf import DEFAULT_POSTING_ACCOUNTS, posting_account_code
from erp_core.models import Account
from erp_core.models.account import CODE_PREFIX_TYPES

# Display names for the accounts the posting rules need
ROLE_NAMES = {
    "receivable": "Accounts Receivable",
    "tax_receivable": "Input Tax Receivable",
    "inventory": "Inventory",
    "payable": "Accounts Payable",
    "tax_payable": "Output Tax Payable",
    "salary_payable": "Salaries Payable",
    "revenue": "Sales Revenue",
    "expense": "General Expenses",
    "salary_expense": "Salaries Expense",
}

# Accounts every chart gets besides the posting ones
EXTRA_ACCOUNTS = [
    ("1000", "Cash"),
    ("3000", "Owner's Equity"),
]


def seed_chart_of_accounts():
    """Create missing default accounts. Returns the newly created ones."""
    wanted = [(posting_account_code(role), ROLE_NAMES[role]) for role in DEFAULT_POSTING_ACCOUNTS]
    wanted += EXTRA_ACCOUNTS
    created = []
    with transaction.atomic():
        for code, name in wanted:
            account, was_created = Account.objects.get_or_create(
                code=code,
                defaults={"name": name, "ac_type": CODE_PREFIX_TYPES[code[:1]]},
            )
            if was_created:
                created.append(account)
    return created


class Command(BaseCommand):
    help = "Create the default chart of accounts used by the posting rules (idempotent)."

    def handle(self, *args, **options):
        created = seed_chart_of_accounts()
        for account in created:
            self.stdout.write(f"Created account {account}")
        self.stdout.write(
            self.style.SUCCESS(f"Chart of accounts ready ({len(created)} new account(s)).")
        )
