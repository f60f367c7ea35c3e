import logging
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from ..conf import allow_negative_stock
from ..exceptions import InsufficientStockError, ReferentialIntegrityError
from ..models import Product, StockMovement
from ..totals import to_decimal
from .audit_helper import log_action

logger = logging.getLogger(__name__)

MOVEMENT_KINDS = ("in", "out", "adjustment")


def adjust_stock(
    product_id,
    kind,
    quantity,
    reference_type="manual",
    reference_id=None,
    notes=None,
    allow_negative=None,
    actor=None,
) -> StockMovement:
    """
    Change a product's stock and record the StockMovement in one unit.

    ``in``/``out`` move by ``quantity``; ``adjustment`` sets ``quantity`` as
    the new absolute level. A stock-out below zero raises
    InsufficientStockError unless negative stock is allowed.
    """
    if kind not in MOVEMENT_KINDS:
        raise ValidationError({"kind": f"Unknown movement kind '{kind}'"})
    quantity = to_decimal(quantity)
    if allow_negative is None:
        allow_negative = allow_negative_stock()
    if kind in ("in", "out") and quantity <= 0:
        raise ValidationError({"quantity": "Quantity must be > 0"})
    if kind == "adjustment" and quantity < 0 and not allow_negative:
        raise ValidationError({"quantity": "Target stock level must be >= 0"})

    with transaction.atomic():
        try:
            product = Product.objects.select_for_update().get(pk=product_id)
        except Product.DoesNotExist:
            raise ReferentialIntegrityError(
                f"Product {product_id} does not exist", product_id=product_id
            )
        if not product.is_active:
            raise ReferentialIntegrityError(
                f"Product {product.code} is archived", product_id=product.pk
            )
        if not product.is_stocked:
            raise ValidationError(
                {"product": f"Product {product.code} does not track inventory"}
            )

        current = product.stock_quantity
        rows = Product.objects.filter(pk=product.pk)
        if kind == "in":
            direction, moved = 1, quantity
            rows.update(stock_quantity=F("stock_quantity") + moved)
        elif kind == "out":
            direction, moved = -1, quantity
            if not allow_negative:
                # guard and write in one statement
                rows = rows.filter(stock_quantity__gte=moved)
            if not rows.update(stock_quantity=F("stock_quantity") - moved):
                logger.warning(
                    "Rejected stock-out of %s %s (available %s)",
                    moved, product.code, current,
                )
                raise InsufficientStockError(
                    f"Not enough stock for {product.code}: requested {moved}, available {current}",
                    product_id=product.pk,
                    requested=moved,
                    available=current,
                )
        else:
            change = quantity - current
            direction = 1 if change >= 0 else -1
            moved = abs(change)
            if not rows.filter(stock_quantity=current).update(stock_quantity=quantity):
                raise ValidationError(
                    {"quantity": f"Stock of {product.code} changed during the adjustment; retry"}
                )

        product.refresh_from_db(fields=["stock_quantity"])
        movement = StockMovement.objects.create(
            product=product,
            movement_type=kind,
            quantity=moved,
            direction=direction,
            balance_after=product.stock_quantity,
            reference_type=reference_type,
            reference_id=reference_id,
            notes=notes or "",
        )
        log_action(
            action=f"stock_{kind}",
            instance=product,
            actor=actor,
            changes={
                "quantity": moved,
                "direction": direction,
                "stock_quantity": [current, product.stock_quantity],
                "reference": [reference_type, reference_id],
            },
        )

    logger.info(
        "Stock %s %s %s: %s -> %s (%s %s)",
        kind, product.code, moved, current, product.stock_quantity,
        reference_type, reference_id,
    )
    return movement


def low_stock_report():
    """Active stock-tracked goods at or below their threshold, by code."""
    return Product.objects.active().filter(
        product_type="good",
        track_inventory=True,
        stock_quantity__lte=F("low_stock_threshold"),
    ).order_by("code")


def replay_stock(product: Product) -> Decimal:
    """Stock level rebuilt from the movement log."""
    total = Decimal("0")
    for quantity, direction in StockMovement.objects.filter(product=product).values_list(
        "quantity", "direction"
    ):
        total += quantity * direction
    return total
