import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from ..exceptions import InvalidTransitionError, ReferentialIntegrityError
from ..models import Product
from ..workflow import get_transition
from .audit_helper import log_action

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = ("unit_price", "tax_rate", "description")


def _product_values(product):
    return {
        "unit_price": product.unit_price,
        "tax_rate": product.tax_rate,
        "description": product.name,
    }


def apply_product_defaults(line, product, overwrite=False):
    """
    Copy price, tax rate and description from the product's current values.
    Without ``overwrite`` only the values the caller left out are filled.
    Works on line mappings and on line instances.
    """
    values = _product_values(product)
    if isinstance(line, dict):
        line["product"] = product
        for field in DEFAULT_FIELDS:
            if overwrite or line.get(field) in (None, ""):
                line[field] = values[field]
        return line

    line.product = product
    for field in DEFAULT_FIELDS:
        if overwrite or getattr(line, field, None) in (None, ""):
            setattr(line, field, values[field])
    return line


def resolve_product(ref):
    """Active product from an instance, an id or a code."""
    if isinstance(ref, Product):
        product = ref
    elif isinstance(ref, int):
        product = Product.objects.filter(pk=ref).first()
    else:
        product = Product.objects.filter(code=str(ref)).first()
    if product is None:
        raise ReferentialIntegrityError(f"Product {ref} does not exist", product=ref)
    if not product.is_active:
        raise ReferentialIntegrityError(
            f"Product {product.code} is archived", product_id=product.pk
        )
    return product


def create_lines(header, line_model, lines, account_for=None):
    """
    Create ``line_model`` rows for ``header`` from mappings with product,
    description, quantity, unit_price, tax_rate (and optionally account).
    ``account_for(product)`` supplies a default account for lines that
    have a product but no explicit account.
    """
    created = []
    for position, raw in enumerate(lines or (), start=1):
        data = dict(raw)
        product_ref = data.pop("product", None) or data.pop("product_id", None)
        data.pop("product_id", None)
        if product_ref is not None:
            apply_product_defaults(data, resolve_product(product_ref))
        else:
            data["product"] = None
        if account_for is not None and data.get("account") is None and data["product"] is not None:
            data["account"] = account_for(data["product"])
        data.setdefault("position", position)
        line = line_model(**{line_model.parent_field: header}, **data)
        line.save()
        created.append(line)
    return created


def change_line_product(line, product, actor=None):
    """Swap the product of a draft document line and re-apply its defaults."""
    product = resolve_product(product)
    with transaction.atomic():
        header_model = type(line.parent)
        header = header_model.objects.select_for_update().get(pk=line.parent.pk)
        if not header.is_draft():
            raise ValidationError(
                f"Lines of {header} cannot change once it is {header.status}."
            )
        setattr(line, line.parent_field, header)
        previous = line.product_id
        apply_product_defaults(line, product, overwrite=True)
        if hasattr(line, "account"):
            line.account = _default_account(header, product)
        line.save()
        log_action(
            action="change_product",
            instance=header,
            actor=actor,
            changes={"line": line.pk, "product": [previous, product.pk]},
        )
    return line


def _default_account(header, product):
    if header.document_type == "invoice":
        return product.revenue_account
    if header.document_type == "vendor_invoice":
        return product.expense_account
    return None


def check_transition(document, operation: str) -> None:
    """Raise InvalidTransitionError early, before any side effect is written."""
    rule = get_transition(document.document_type, operation)
    if document.status not in rule.sources:
        logger.warning(
            "Rejected %s on %s %s (status=%s)",
            operation, document.document_type, document.pk, document.status,
        )
        raise InvalidTransitionError(
            f"Cannot {operation} {document.document_type} {document.number} "
            f"in status '{document.status}'",
            document_type=document.document_type,
            document_id=document.pk,
            status=document.status,
            operation=operation,
        )
