import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from ..exceptions import ReferentialIntegrityError
from ..models import BusinessPartner, PartnerType
from ..models.partner import PARTNER_TYPES
from .audit_helper import log_action

logger = logging.getLogger(__name__)

TYPE_CODES = [code for code, _ in PARTNER_TYPES]


def _normalize_types(types):
    """
    Accept ["customer", "vendor"] or {"customer": {"credit_limit": 100}, ...}
    and return {type: attrs}.
    """
    if isinstance(types, str):
        types = [types]
    if isinstance(types, dict):
        normalized = {code: dict(attrs or {}) for code, attrs in types.items()}
    else:
        normalized = {code: {} for code in types}
    unknown = sorted(set(normalized) - set(TYPE_CODES))
    if unknown:
        raise ValidationError({"types": f"Unknown partner type(s): {', '.join(unknown)}"})
    return normalized


def require_partner(partner_id, partner_type: str) -> BusinessPartner:
    """Active partner carrying the given type tag."""
    partner = BusinessPartner.objects.filter(pk=partner_id).first()
    if partner is None:
        raise ReferentialIntegrityError(
            f"Partner {partner_id} does not exist", partner_id=partner_id
        )
    if not partner.is_active:
        raise ReferentialIntegrityError(
            f"Partner {partner.name} is archived", partner_id=partner.pk
        )
    if not partner.has_type(partner_type):
        raise ValidationError({partner_type: f"{partner.name} is not a {partner_type}"})
    return partner


def _upsert_type(partner, code, attrs):
    tag = PartnerType.objects.filter(partner=partner, partner_type=code).first()
    if tag is None:
        tag = PartnerType(partner=partner, partner_type=code)
    for field, value in attrs.items():
        setattr(tag, field, value)
    tag.save()
    return tag


# ----------------------------
# Partner commands
# ----------------------------
def create_partner(name, types, actor=None, **fields):
    types = _normalize_types(types)
    if not types:
        raise ValidationError({"types": "A partner needs at least one type"})
    with transaction.atomic():
        partner = BusinessPartner(name=name, **fields)
        partner.save()
        for code, attrs in types.items():
            _upsert_type(partner, code, attrs)
        log_action(
            action="create",
            instance=partner,
            actor=actor,
            changes={"name": name, "types": sorted(types)},
        )
    logger.info("Created partner %s (%s)", partner.pk, ", ".join(sorted(types)))
    return partner


def update_partner(partner_id, types=None, actor=None, **fields):
    """
    Update base fields and, when ``types`` is given, replace the set of type
    tags: listed tags are upserted, the others removed.
    """
    with transaction.atomic():
        partner = BusinessPartner.objects.select_for_update().get(pk=partner_id)
        changes = {}
        for field, value in fields.items():
            if field in ("id", "pk", "created_at"):
                raise ValidationError({field: "This field cannot be changed"})
            changes[field] = [getattr(partner, field), value]
            setattr(partner, field, value)
        partner.save()

        if types is not None:
            types = _normalize_types(types)
            if not types:
                raise ValidationError({"types": "A partner needs at least one type"})
            removed = list(
                partner.types.exclude(partner_type__in=list(types)).values_list(
                    "partner_type", flat=True
                )
            )
            partner.types.exclude(partner_type__in=list(types)).delete()
            for code, attrs in types.items():
                _upsert_type(partner, code, attrs)
            changes["types"] = {"set": sorted(types), "removed": sorted(removed)}

        log_action(action="update", instance=partner, actor=actor, changes=changes)
    return partner


def archive_partner(partner_id, actor=None):
    with transaction.atomic():
        partner = BusinessPartner.objects.select_for_update().get(pk=partner_id)
        BusinessPartner.objects.filter(pk=partner.pk).update(is_active=False)
        partner.is_active = False
        log_action(action="archive", instance=partner, actor=actor)
    logger.info("Archived partner %s", partner.pk)
    return partner


# ----------------------------
# Partner queries
# ----------------------------
def list_partners(search=None, partner_type=None, include_inactive=False):
    qs = BusinessPartner.objects.all()
    if not include_inactive:
        qs = qs.active()
    if partner_type:
        qs = qs.with_type(partner_type)
    if search:
        qs = qs.filter(
            Q(name__icontains=search) | Q(email__icontains=search) | Q(tax_id__icontains=search)
        )
    return qs.prefetch_related("types").order_by("name")
