import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from ..models import Account, Product
from ..totals import to_decimal
from .audit_helper import log_action
from .inventory import adjust_stock

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = ("revenue_account", "expense_account", "inventory_account")


def _resolve_account_fields(fields):
    """Account references may be given as instances, ids or codes."""
    for field in ACCOUNT_FIELDS:
        value = fields.get(field)
        if value is None or isinstance(value, Account):
            continue
        lookup = {"pk": value} if isinstance(value, int) else {"code": str(value)}
        account = Account.objects.filter(**lookup).first()
        if account is None:
            raise ValidationError({field: f"Account {value} does not exist"})
        fields[field] = account
    return fields


def create_product(actor=None, **fields):
    """
    Create a product. ``stock_quantity`` (or ``opening_stock``) is booked as
    an opening stock movement so the movement log explains the level.
    """
    opening = to_decimal(fields.pop("opening_stock", None) or fields.pop("stock_quantity", None))
    fields.pop("stock_quantity", None)
    fields = _resolve_account_fields(fields)

    with transaction.atomic():
        product = Product(**fields)
        product.save()  # clean() forces services to track_inventory=False
        if opening:
            if not product.is_stocked:
                raise ValidationError(
                    {"stock_quantity": "Only stock-tracked goods can carry stock"}
                )
            adjust_stock(
                product.pk, "in", opening,
                reference_type="opening", notes="Opening stock", actor=actor,
            )
            product.refresh_from_db(fields=["stock_quantity"])
        log_action(
            action="create",
            instance=product,
            actor=actor,
            changes={"code": product.code, "type": product.product_type, "opening_stock": opening},
        )
    logger.info("Created product %s", product.code)
    return product


def update_product(product_id, actor=None, **fields):
    if "stock_quantity" in fields:
        raise ValidationError(
            {"stock_quantity": "Stock is changed through stock adjustments only"}
        )
    fields = _resolve_account_fields(fields)
    with transaction.atomic():
        product = Product.objects.select_for_update().get(pk=product_id)
        changes = {}
        for field, value in fields.items():
            if field in ("id", "pk", "created_at"):
                raise ValidationError({field: "This field cannot be changed"})
            changes[field] = [getattr(product, field), value]
            setattr(product, field, value)
        if product.product_type == "service" and product.stock_quantity != 0:
            raise ValidationError(
                {"product_type": "A product holding stock cannot become a service"}
            )
        product.save()
        log_action(action="update", instance=product, actor=actor, changes=changes)
    return product


def archive_product(product_id, actor=None):
    with transaction.atomic():
        product = Product.objects.select_for_update().get(pk=product_id)
        Product.objects.filter(pk=product.pk).update(is_active=False)
        product.is_active = False
        log_action(action="archive", instance=product, actor=actor)
    logger.info("Archived product %s", product.code)
    return product


def list_products(search=None, product_type=None, include_inactive=False):
    qs = Product.objects.all()
    if not include_inactive:
        qs = qs.active()
    if product_type:
        qs = qs.filter(product_type=product_type)
    if search:
        qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
    return qs.order_by("code")
