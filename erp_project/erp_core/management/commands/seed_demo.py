import datetime
from decimal import Decimal

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction

from erp_core.models import BusinessPartner, Product
from erp_core.services import create_partner, create_product


class Command(BaseCommand):
    help = "Seeds the database with demo data (chart of accounts, partners, products)."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--opening-stock",  # Define flag
            type=Decimal,
            default=Decimal("25"),
            help="Opening stock of the demo goods (default: 25)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        opening = options["opening_stock"]
        self.stdout.write(self.style.NOTICE("Seeding demo data..."))
        call_command("seed_chart_of_accounts", stdout=self.stdout)

        partners = [
            ("Acme Retail", {"customer": {"credit_limit": Decimal("10000"), "payment_terms_days": 14}}),
            ("Globex Supplies", {"vendor": {"bank_account": "DE89370400440532013000"}}),
            (
                "Jane Doe",
                {
                    "employee": {
                        "monthly_salary": Decimal("4200.00"),
                        "hire_date": datetime.date(2023, 1, 9),
                        "job_title": "Accountant",
                        "app_role": "accountant",
                    }
                },
            ),
        ]
        for name, types in partners:
            if BusinessPartner.objects.filter(name=name).exists():
                continue
            create_partner(name, types, actor="seed_demo")
            self.stdout.write(f"Created partner {name}")

        products = [
            {"code": "WID-001", "name": "Widget", "unit_price": Decimal("100.00"),
             "tax_rate": Decimal("23"), "low_stock_threshold": Decimal("5"),
             "opening_stock": opening},
            {"code": "GAD-001", "name": "Gadget", "unit_price": Decimal("250.00"),
             "tax_rate": Decimal("23"), "low_stock_threshold": Decimal("2"),
             "opening_stock": opening},
            {"code": "SRV-INST", "name": "Installation", "product_type": "service",
             "unit_price": Decimal("80.00"), "tax_rate": Decimal("23")},
        ]
        for fields in products:
            if Product.objects.filter(code=fields["code"]).exists():
                continue
            create_product(actor="seed_demo", **fields)
            self.stdout.write(f"Created product {fields['code']}")

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
