import datetime
import logging
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from ..models import PartnerType, PayrollLine, PayrollRun
from ..totals import ZERO
from .audit_helper import log_action
from .documents import check_transition
from .ledger import post_journal_entry, posting_account
from .numbering import next_number

logger = logging.getLogger(__name__)


def generate_lines(employees) -> list[PayrollLine]:
    """
    Unsaved PayrollLine per employee profile that has a salary set.
    Profiles with no salary are skipped; a zero salary still gets its line.
    """
    lines = []
    for profile in employees:
        salary = profile.monthly_salary
        if salary is None:
            continue
        lines.append(PayrollLine(employee=profile.partner, gross_salary=salary))
    return lines


def _period_taken(period_year, period_month):
    return ValidationError(
        {"period": f"A payroll run for {period_year}-{period_month:02d} already exists."}
    )


def create_payroll_run(period_year, period_month, run_date=None, notes="", actor=None):
    """Open a draft run for a period and snapshot every active employee's salary."""
    period_year = int(period_year)
    period_month = int(period_month)
    if not 1 <= period_month <= 12:
        raise ValidationError({"period_month": "Month must be between 1 and 12"})
    run_date = run_date or datetime.date.today()
    number = next_number("payroll_run", run_date)

    with transaction.atomic():
        live = PayrollRun.objects.filter(
            period_year=period_year, period_month=period_month
        ).exclude(status="cancelled")
        if live.exists():
            raise _period_taken(period_year, period_month)
        try:
            with transaction.atomic():
                run = PayrollRun.objects.create(
                    number=number,
                    period_year=period_year,
                    period_month=period_month,
                    run_date=run_date,
                    notes=notes or "",
                )
        except IntegrityError as exc:
            raise _period_taken(period_year, period_month) from exc

        profiles = PartnerType.objects.filter(
            partner_type="employee", partner__is_active=True
        ).select_related("partner").order_by("partner__name")
        lines = generate_lines(profiles)
        for line in lines:
            line.run = run
        PayrollLine.objects.bulk_create(lines)
        log_action(
            action="create",
            instance=run,
            actor=actor,
            changes={"period": run.period, "lines": len(lines), "gross": run.gross_total()},
        )
    logger.info("Created payroll run %s for %s (%d lines)", number, run.period, len(lines))
    return run


def confirm_payroll_run(run_id, actor=None):
    with transaction.atomic():
        run = PayrollRun.objects.select_for_update().get(pk=run_id)
        if run.is_draft() and not run.lines.exists():
            raise ValidationError("Cannot confirm a payroll run with no lines")
        run.transition("confirm")
        log_action(action="confirm", instance=run, actor=actor)
    return run


def cancel_payroll_run(run_id, actor=None):
    with transaction.atomic():
        run = PayrollRun.objects.select_for_update().get(pk=run_id)
        run.transition("cancel")
        log_action(action="cancel", instance=run, actor=actor)
    return run


def pay_payroll_run(run_id: int, paid_on=None, actor=None) -> PayrollRun:
    """confirmed → paid; Dr salary expense / Cr salary payable for the gross."""
    paid_on = paid_on or datetime.date.today()
    je_number = next_number("journal_entry", paid_on)

    with transaction.atomic():
        run = PayrollRun.objects.select_for_update().get(pk=run_id)
        check_transition(run, "pay")
        gross = run.gross_total()
        run.transition("pay")
        entry = None
        if gross > ZERO:
            label = f"Payroll {run.number} ({run.period})"
            entry = post_journal_entry(
                paid_on,
                label,
                "payroll",
                run.pk,
                [
                    {"account": posting_account("salary_expense"), "debit": gross, "description": label},
                    {"account": posting_account("salary_payable"), "credit": gross, "description": label},
                ],
                actor=actor,
                number=je_number,
            )
            PayrollRun.objects.filter(pk=run.pk).update(journal_entry=entry)
            run.journal_entry = entry
        log_action(
            action="pay",
            instance=run,
            actor=actor,
            changes={"gross": gross, "journal_entry": entry.number if entry else None},
        )
    return run
