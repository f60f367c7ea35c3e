import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import InvalidTransitionError
from ..models import JournalEntry, PartnerType, PayrollLine, PayrollRun
from ..services import (archive_partner, cancel_payroll_run, confirm_payroll_run,
                        create_payroll_run, generate_lines, pay_payroll_run,
                        trial_balance)
from .helpers import make_customer, make_employee, seed_accounts

D = datetime.date(2024, 6, 28)


class GenerateLinesTests(TestCase):

    def test_profiles_without_salary_are_skipped_zero_salary_is_kept(self):
        jane = make_employee("Jane Doe", "4200.00")
        make_employee("Intern", None)
        volunteer = make_employee("Volunteer", "0")
        profiles = PartnerType.objects.filter(partner_type="employee").order_by("partner__name")
        lines = generate_lines(profiles)
        self.assertEqual(
            [(l.employee, l.gross_salary) for l in lines],
            [(jane, Decimal("4200.00")), (volunteer, Decimal("0.00"))],
        )
        self.assertIsNone(lines[0].pk)


class PayrollRunTests(TestCase):

    def setUp(self):
        seed_accounts()
        self.jane = make_employee("Jane Doe", "4200.00")
        self.john = make_employee("John Roe", "3100.50", job_title="Clerk")
        make_customer()

    def test_run_snapshots_active_employees(self):
        archived = make_employee("Gone Away", "5000.00")
        archive_partner(archived.pk)
        run = create_payroll_run(2024, 6, run_date=D)
        self.assertEqual(run.number, "PR-2024-000001")
        self.assertEqual(run.period, "2024-06")
        self.assertEqual(run.status, "draft")
        self.assertEqual(
            list(run.lines.values_list("employee__name", "gross_salary")),
            [("Jane Doe", Decimal("4200.00")), ("John Roe", Decimal("3100.50"))],
        )
        self.assertEqual(run.gross_total(), Decimal("7300.50"))

    def test_salary_changes_do_not_touch_existing_runs(self):
        run = create_payroll_run(2024, 6, run_date=D)
        PartnerType.objects.filter(partner=self.jane).update(monthly_salary=Decimal("9999.00"))
        self.assertEqual(run.lines.get(employee=self.jane).gross_salary, Decimal("4200.00"))

    """ Period already taken by a confirmed run """
    def test_second_live_run_for_a_period_is_rejected(self):
        run = create_payroll_run(2024, 6, run_date=D)
        confirm_payroll_run(run.pk)
        lines_before = PayrollLine.objects.count()
        with self.assertRaises(ValidationError) as cm:
            create_payroll_run(2024, 6, run_date=D)
        self.assertIn("period", cm.exception.message_dict)
        self.assertEqual(PayrollLine.objects.count(), lines_before)
        self.assertEqual(PayrollRun.objects.count(), 1)

    def test_cancelled_run_frees_the_period(self):
        run = create_payroll_run(2024, 6, run_date=D)
        cancel_payroll_run(run.pk)
        again = create_payroll_run(2024, 6, run_date=D)
        self.assertEqual(again.status, "draft")
        self.assertEqual(
            PayrollRun.objects.filter(period_year=2024, period_month=6).count(), 2
        )

    def test_month_must_be_valid(self):
        for month in (0, 13):
            with self.assertRaises(ValidationError) as cm:
                create_payroll_run(2024, month, run_date=D)
            self.assertIn("period_month", cm.exception.message_dict)
        self.assertFalse(PayrollRun.objects.exists())

    def test_confirm_requires_lines(self):
        PartnerType.objects.filter(partner_type="employee").update(monthly_salary=None)
        run = create_payroll_run(2024, 7, run_date=D)
        self.assertEqual(run.lines.count(), 0)
        with self.assertRaises(ValidationError):
            confirm_payroll_run(run.pk)
        self.assertEqual(PayrollRun.objects.get(pk=run.pk).status, "draft")

    def test_pay_posts_salary_expense_against_payable(self):
        run = create_payroll_run(2024, 6, run_date=D)
        confirm_payroll_run(run.pk)
        paid = pay_payroll_run(run.pk, paid_on=datetime.date(2024, 7, 1))
        self.assertEqual(paid.status, "paid")
        entry = PayrollRun.objects.get(pk=run.pk).journal_entry
        self.assertEqual((entry.reference_type, entry.reference_id), ("payroll", run.pk))
        lines = [
            (l.account.code, l.debit_amount, l.credit_amount)
            for l in entry.lines.select_related("account")
        ]
        self.assertEqual(lines, [
            ("5200", Decimal("7300.50"), Decimal("0.00")),
            ("2300", Decimal("0.00"), Decimal("7300.50")),
        ])
        self.assertTrue(trial_balance()["is_balanced"])

    def test_pay_and_cancel_follow_the_workflow(self):
        run = create_payroll_run(2024, 6, run_date=D)
        with self.assertRaises(InvalidTransitionError):
            pay_payroll_run(run.pk)
        self.assertFalse(JournalEntry.objects.filter(reference_type="payroll").exists())

        confirm_payroll_run(run.pk)
        with self.assertRaises(InvalidTransitionError):
            cancel_payroll_run(run.pk)

        pay_payroll_run(run.pk)
        with self.assertRaises(InvalidTransitionError):
            pay_payroll_run(run.pk)
        self.assertEqual(JournalEntry.objects.filter(reference_type="payroll").count(), 1)

    def test_zero_salary_employees_are_on_the_run_but_post_nothing(self):
        PartnerType.objects.filter(partner_type="employee").update(monthly_salary=Decimal("0.00"))
        run = create_payroll_run(2024, 8, run_date=D)
        self.assertEqual(run.lines.count(), 2)
        confirm_payroll_run(run.pk)
        pay_payroll_run(run.pk)
        run.refresh_from_db()
        self.assertEqual(run.status, "paid")
        self.assertIsNone(run.journal_entry)
