import logging
from celery import shared_task
from django.db import models, transaction

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def recompute_account_balances():
    """Rebuild every AccountBalance row from the journal lines."""
    # import models lazily to avoid circular imports at module import time
    from .models import Account, AccountBalance, JournalLine

    totals = {
        row["account_id"]: row
        for row in JournalLine.objects.values("account_id").annotate(
            debit=models.Sum("debit_amount"),
            credit=models.Sum("credit_amount"),
        )
    }
    updated = 0
    with transaction.atomic():
        for account in Account.objects.all():
            row = totals.get(account.pk, {})
            AccountBalance.objects.update_or_create(
                account=account,
                defaults={
                    # If nothing was posted, Django returns None → so fallback to 0
                    "debit_total": row.get("debit") or 0,
                    "credit_total": row.get("credit") or 0,
                },
            )
            updated += 1
    logger.info("Recomputed balances for %d accounts", updated)
    return updated


@shared_task
def verify_stock_levels():
    """Replay stock movements and report products whose stored level differs."""
    from .models import Product
    from .services.inventory import replay_stock

    mismatches = []
    for product in Product.objects.filter(product_type="good", track_inventory=True):
        replayed = replay_stock(product)
        if replayed != product.stock_quantity:
            logger.warning(
                "Stock mismatch for %s: stored %s, replayed %s",
                product.code, product.stock_quantity, replayed,
            )
            mismatches.append({
                "product_id": product.pk,
                "code": product.code,
                "stored": str(product.stock_quantity),
                "replayed": str(replayed),
            })
    logger.info("Verified stock levels: %d mismatch(es)", len(mismatches))
    return mismatches
