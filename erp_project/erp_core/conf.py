from django.conf import settings

DEFAULT_POSTING_ACCOUNTS = {
    "receivable": "1200",
    "tax_receivable": "1300",
    "inventory": "1400",
    "payable": "2100",
    "tax_payable": "2200",
    "salary_payable": "2300",
    "revenue": "4000",
    "expense": "5000",
    "salary_expense": "5200",
}

DEFAULT_NUMBER_PREFIXES = {
    "sales_order": "SO",
    "delivery": "DEL",
    "invoice": "INV",
    "purchase_order": "PO",
    "vendor_invoice": "VINV",
    "journal_entry": "JE",
    "payroll_run": "PR",
}


def posting_account_code(role):
    """Account code configured for a posting role (e.g. "receivable")."""
    codes = {**DEFAULT_POSTING_ACCOUNTS, **getattr(settings, "ERP_POSTING_ACCOUNTS", {})}
    try:
        return codes[role]
    except KeyError:
        raise KeyError(f"No posting account configured for role '{role}'")


def allow_negative_stock():
    return bool(getattr(settings, "ERP_ALLOW_NEGATIVE_STOCK", False))


def number_prefix(document_type):
    prefixes = {**DEFAULT_NUMBER_PREFIXES, **getattr(settings, "ERP_NUMBER_PREFIXES", {})}
    return prefixes[document_type]


def number_padding():
    return int(getattr(settings, "ERP_NUMBER_PADDING", 6))
