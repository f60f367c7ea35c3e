from decimal import Decimal

from ..management.commands.seed_chart_of_accounts import seed_chart_of_accounts
from ..models import Account
from ..services import create_partner, create_product


def seed_accounts():
    """Default chart of accounts, keyed by code."""
    seed_chart_of_accounts()
    return {account.code: account for account in Account.objects.all()}


def make_customer(name="Acme Retail", **attrs):
    return create_partner(name, {"customer": attrs})


def make_vendor(name="Globex Supplies", **attrs):
    return create_partner(name, {"vendor": attrs})


def make_employee(name, salary, **attrs):
    attrs["monthly_salary"] = None if salary is None else Decimal(salary)
    return create_partner(name, {"employee": attrs})


def make_good(code="WID-001", price="100.00", tax="23", stock=0, **fields):
    return create_product(
        code=code,
        name=fields.pop("name", f"Product {code}"),
        unit_price=Decimal(price),
        tax_rate=Decimal(tax),
        opening_stock=Decimal(stock),
        **fields,
    )


def make_service(code="SRV-001", price="80.00", tax="23", **fields):
    return create_product(
        code=code,
        name=fields.pop("name", f"Service {code}"),
        product_type="service",
        unit_price=Decimal(price),
        tax_rate=Decimal(tax),
        **fields,
    )
