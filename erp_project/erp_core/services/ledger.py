import logging
from collections import OrderedDict
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, Sum
from ..conf import posting_account_code
from ..exceptions import InvalidAccountError, InvalidTransitionError, UnbalancedEntryError
from ..models import Account, AccountBalance, JournalEntry, JournalLine
from ..models.account import AC_TYPE_ORDER
from ..totals import ZERO, money
from .audit_helper import log_action
from .numbering import next_number

logger = logging.getLogger(__name__)


# ----------------------------
# Account lookups
# ----------------------------
def resolve_account(ref):
    """Active Account from an instance, a primary key or a code."""
    if isinstance(ref, Account):
        account = Account.objects.filter(pk=ref.pk).first()
    elif isinstance(ref, int):
        account = Account.objects.filter(pk=ref).first()
    else:
        account = Account.objects.filter(code=str(ref)).first()
    if account is None:
        raise InvalidAccountError(f"Account {ref} does not exist", account=ref)
    if not account.is_active:
        raise InvalidAccountError(
            f"Account {account.code} is inactive and cannot take postings",
            account=account.code,
        )
    return account


def posting_account(role: str) -> Account:
    """Account configured for a posting role (receivable, tax_payable…)."""
    return resolve_account(posting_account_code(role))


def _line_amounts(index, line):
    debit = money(line.get("debit") or 0)
    credit = money(line.get("credit") or 0)
    if debit < 0 or credit < 0:
        raise ValidationError({"lines": f"Line {index}: amounts must be >= 0"})
    if (debit > 0) == (credit > 0):
        raise ValidationError(
            {"lines": f"Line {index}: exactly one of debit or credit must be non-zero"}
        )
    return debit, credit


# ----------------------------
# Journal-related workflows
# ----------------------------
def post_journal_entry(
    entry_date,
    description,
    reference_type,
    reference_id,
    lines,
    actor=None,
    number=None,
    reverses=None,
) -> JournalEntry:
    """
    Write a balanced JournalEntry with its lines and bump the running
    account balances, all in one transaction.

    ``lines`` are mappings with ``account`` (instance, id or code), ``debit``,
    ``credit`` and an optional ``description``.
    """
    lines = list(lines)
    if len(lines) < 2:
        raise ValidationError({"lines": "A journal entry needs at least two lines"})

    prepared = []
    for index, line in enumerate(lines, start=1):
        debit, credit = _line_amounts(index, line)
        account = resolve_account(line.get("account"))
        prepared.append((account, debit, credit, line.get("description") or ""))

    total_debit = sum((p[1] for p in prepared), ZERO)
    total_credit = sum((p[2] for p in prepared), ZERO)
    if total_debit != total_credit:
        logger.error(
            "Unbalanced entry for %s %s: debit=%s credit=%s",
            reference_type, reference_id, total_debit, total_credit,
        )
        raise UnbalancedEntryError(
            f"Debits ({total_debit}) must equal credits ({total_credit})",
            reference_type=reference_type,
            reference_id=reference_id,
            debit=total_debit,
            credit=total_credit,
        )

    if number is None:
        number = next_number("journal_entry", entry_date)
    fingerprint = JournalEntry.fingerprint_for(
        entry_date,
        reference_type,
        reference_id,
        [(account.pk, debit, credit, desc) for account, debit, credit, desc in prepared],
    )

    with transaction.atomic():
        if reference_id is not None and JournalEntry.objects.filter(
            reference_type=reference_type, reference_id=reference_id
        ).exists():
            raise _already_posted(reference_type, reference_id)
        try:
            with transaction.atomic():
                entry = JournalEntry.objects.create(
                    number=number,
                    entry_date=entry_date,
                    description=description or "",
                    reference_type=reference_type,
                    reference_id=reference_id,
                    reverses=reverses,
                    posting_fingerprint=fingerprint,
                    created_by=actor or "",
                )
        except IntegrityError as exc:
            # lost the race for the one-entry-per-document constraint
            raise _already_posted(reference_type, reference_id) from exc

        per_account = OrderedDict()
        for position, (account, debit, credit, desc) in enumerate(prepared, start=1):
            JournalLine.objects.create(
                entry=entry,
                account=account,
                description=desc,
                debit_amount=debit,
                credit_amount=credit,
                position=position,
            )
            d, c = per_account.get(account.pk, (ZERO, ZERO))
            per_account[account.pk] = (d + debit, c + credit)

        for account_id, (debit, credit) in per_account.items():
            AccountBalance.objects.get_or_create(account_id=account_id)
            AccountBalance.objects.filter(account_id=account_id).update(
                debit_total=F("debit_total") + debit,
                credit_total=F("credit_total") + credit,
            )

        log_action(
            action="post",
            instance=entry,
            actor=actor,
            changes={
                "number": entry.number,
                "reference": [reference_type, reference_id],
                "total": total_debit,
            },
        )

    logger.info(
        "Posted %s (%s %s) for %s",
        entry.number, reference_type, reference_id, total_debit,
    )
    return entry


def _already_posted(reference_type, reference_id):
    return InvalidTransitionError(
        f"{reference_type} {reference_id} has already been posted",
        document_type=reference_type,
        document_id=reference_id,
        operation="post",
    )


def reverse_journal_entry(entry_id: int, entry_date=None, actor=None) -> JournalEntry:
    """Post the mirror image of an entry (debits and credits swapped)."""
    original = JournalEntry.objects.get(pk=entry_id)
    if original.reference_type == "reversal":
        raise InvalidTransitionError(
            f"{original.number} is itself a reversal",
            document_type="journal_entry",
            document_id=original.pk,
            operation="reverse",
        )
    if JournalEntry.objects.filter(reverses=original).exists():
        raise InvalidTransitionError(
            f"{original.number} has already been reversed",
            document_type="journal_entry",
            document_id=original.pk,
            operation="reverse",
        )

    entry_date = entry_date or original.entry_date
    mirror = [
        {
            "account": line.account,
            "debit": line.credit_amount,
            "credit": line.debit_amount,
            "description": f"Reversal: {line.description}".strip(),
        }
        for line in original.lines.select_related("account")
    ]
    return post_journal_entry(
        entry_date,
        f"Reversal of {original.number}",
        "reversal",
        original.pk,
        mirror,
        actor=actor,
        reverses=original,
    )


# ----------------------------
# Ledger queries
# ----------------------------
def trial_balance(as_of=None) -> dict:
    """
    Debit/credit totals per account with activity up to ``as_of``,
    grouped by account type (asset, liability, equity, revenue, expense).
    """
    lines = JournalLine.objects.all()
    if as_of is not None:
        lines = lines.filter(entry__entry_date__lte=as_of)
    rows = (
        lines.values("account_id", "account__code", "account__name", "account__ac_type")
        .annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
        .order_by("account__code")
    )

    groups = OrderedDict((ac_type, []) for ac_type in AC_TYPE_ORDER)
    for row in rows:
        debit = row["debit"] or ZERO
        credit = row["credit"] or ZERO
        groups[row["account__ac_type"]].append({
            "account_id": row["account_id"],
            "code": row["account__code"],
            "name": row["account__name"],
            "debit": debit,
            "credit": credit,
            "balance": debit - credit,
        })

    total_debit = total_credit = ZERO
    result_groups = []
    for ac_type, accounts in groups.items():
        debit = sum((a["debit"] for a in accounts), ZERO)
        credit = sum((a["credit"] for a in accounts), ZERO)
        total_debit += debit
        total_credit += credit
        result_groups.append({
            "ac_type": ac_type,
            "accounts": accounts,
            "debit": debit,
            "credit": credit,
        })

    return {
        "as_of": as_of,
        "groups": result_groups,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "is_balanced": total_debit == total_credit,
    }


def list_journal_entries(date_from=None, date_to=None, reference_type=None):
    qs = JournalEntry.objects.prefetch_related("lines__account").order_by("-entry_date", "-id")
    if date_from is not None:
        qs = qs.filter(entry_date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(entry_date__lte=date_to)
    if reference_type:
        qs = qs.filter(reference_type=reference_type)
    return qs


def account_balance(account):
    """Stored running totals for one account (instance, id or code)."""
    if isinstance(account, Account):
        acc = account
    elif isinstance(account, int):
        acc = Account.objects.get(pk=account)
    else:
        acc = Account.objects.get(code=str(account))
    row = AccountBalance.objects.filter(account=acc).first()
    debit = row.debit_total if row else Decimal("0.00")
    credit = row.credit_total if row else Decimal("0.00")
    return {
        "account": acc.code,
        "debit": debit,
        "credit": credit,
        "balance": debit - credit,
    }
