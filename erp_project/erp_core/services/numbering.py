import datetime
from django.db import IntegrityError, transaction
from django.db.models import F
from ..conf import number_padding, number_prefix
from ..models import DocumentSequence


def format_number(document_type, year, value):
    return f"{number_prefix(document_type)}-{year}-{value:0{number_padding()}d}"


def next_number(document_type: str, on_date=None) -> str:
    """
    Draw the next number for ``document_type`` in the year of ``on_date``.
    The counter row is locked and bumped with an F() expression in its own
    short transaction: numbers can be skipped (a later failure leaves a
    gap) but are never handed out twice.
    """
    year = (on_date or datetime.date.today()).year
    with transaction.atomic():
        seq = _locked_sequence(document_type, year)
        DocumentSequence.objects.filter(pk=seq.pk).update(last_value=F("last_value") + 1)
        seq.refresh_from_db(fields=["last_value"])
    return format_number(document_type, year, seq.last_value)


def _locked_sequence(document_type, year):
    qs = DocumentSequence.objects.select_for_update()
    try:
        return qs.get(document_type=document_type, year=year)
    except DocumentSequence.DoesNotExist:
        pass
    try:
        # savepoint: a concurrent creator may win the insert
        with transaction.atomic():
            DocumentSequence.objects.create(document_type=document_type, year=year)
    except IntegrityError:
        pass
    return qs.get(document_type=document_type, year=year)
