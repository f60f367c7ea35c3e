import functools
import json
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import services
from .exceptions import ErpError, error_result

# HTTP status per error kind
STATUS_BY_KIND = {
    "validation": 400,
    "not_found": 404,
    "invalid_transition": 409,
    "insufficient_stock": 409,
    "unbalanced_entry": 422,
    "referential_integrity": 422,
    "invalid_account": 422,
}


def json_view(view):
    """Turn core failures into structured JSON error payloads."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except (ErpError, ValidationError, ObjectDoesNotExist) as exc:
            result = error_result(exc)
            return JsonResponse(
                {"ok": False, "error": result},
                status=STATUS_BY_KIND.get(result["kind"], 400),
            )

    return csrf_exempt(wrapper)


def _body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _date(value, field):
    if value in (None, ""):
        return None
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationError({field: f"'{value}' is not a valid date (YYYY-MM-DD)"})
    return parsed


def _dates(data, *fields):
    for field in fields:
        if field in data:
            data[field] = _date(data[field], field)
    return data


def _flag(request, name):
    return request.GET.get(name, "").lower() in ("1", "true", "yes")


# ----------------------------------------------
# Serializers
# ----------------------------------------------
def partner_json(partner):
    return {
        "id": partner.pk,
        "name": partner.name,
        "email": partner.email,
        "tax_id": partner.tax_id,
        "is_active": partner.is_active,
        "types": partner.type_codes(),
    }


def product_json(product):
    return {
        "id": product.pk,
        "code": product.code,
        "name": product.name,
        "product_type": product.product_type,
        "unit_price": product.unit_price,
        "tax_rate": product.tax_rate,
        "track_inventory": product.track_inventory,
        "stock_quantity": product.stock_quantity,
        "low_stock_threshold": product.low_stock_threshold,
        "is_low_on_stock": product.is_low_on_stock,
        "is_active": product.is_active,
    }


def document_json(document):
    data = {
        "id": document.pk,
        "type": document.document_type,
        "number": document.number,
        "status": document.status,
    }
    if hasattr(document, "totals"):
        data["totals"] = document.totals()
    journal_entry = getattr(document, "journal_entry", None)
    if journal_entry is not None:
        data["journal_entry"] = journal_entry.number
    return data


def journal_entry_json(entry):
    return {
        "id": entry.pk,
        "number": entry.number,
        "entry_date": entry.entry_date,
        "description": entry.description,
        "reference_type": entry.reference_type,
        "reference_id": entry.reference_id,
        "lines": [
            {
                "account": line.account.code,
                "debit": line.debit_amount,
                "credit": line.credit_amount,
                "description": line.description,
            }
            for line in entry.lines.all()
        ],
    }


# ----------------------------------------------
# Master data
# ----------------------------------------------
@json_view
@require_http_methods(["GET", "POST"])
def partners_view(request):
    if request.method == "POST":
        data = _body(request)
        partner = services.create_partner(
            data.pop("name", ""), data.pop("types", []), actor=data.pop("actor", None), **data
        )
        return JsonResponse({"ok": True, "partner": partner_json(partner)}, status=201)
    partners = services.list_partners(
        search=request.GET.get("search"),
        partner_type=request.GET.get("type"),
        include_inactive=_flag(request, "include_inactive"),
    )
    return JsonResponse({"ok": True, "partners": [partner_json(p) for p in partners]})


@json_view
@require_POST
def archive_partner_view(request, partner_id):
    partner = services.archive_partner(partner_id, actor=_body(request).get("actor"))
    return JsonResponse({"ok": True, "partner": partner_json(partner)})


@json_view
@require_http_methods(["GET", "POST"])
def products_view(request):
    if request.method == "POST":
        data = _body(request)
        product = services.create_product(actor=data.pop("actor", None), **data)
        return JsonResponse({"ok": True, "product": product_json(product)}, status=201)
    products = services.list_products(
        search=request.GET.get("search"),
        product_type=request.GET.get("type"),
        include_inactive=_flag(request, "include_inactive"),
    )
    return JsonResponse({"ok": True, "products": [product_json(p) for p in products]})


@json_view
@require_POST
def adjust_stock_view(request, product_id):
    data = _body(request)
    movement = services.adjust_stock(
        product_id,
        data.get("kind"),
        data.get("quantity"),
        notes=data.get("notes"),
        actor=data.get("actor"),
    )
    return JsonResponse({
        "ok": True,
        "movement": {
            "id": movement.pk,
            "movement_type": movement.movement_type,
            "quantity": movement.quantity,
            "direction": movement.direction,
            "balance_after": movement.balance_after,
        },
    })


# ----------------------------------------------
# Documents
# ----------------------------------------------
CREATE_COMMANDS = {
    "sales-orders": (services.create_sales_order, ("order_date",)),
    "invoices": (services.create_invoice, ("issue_date", "due_date")),
    "purchase-orders": (services.create_purchase_order, ("order_date", "expected_date")),
    "vendor-invoices": (services.create_vendor_invoice, ("issue_date", "due_date")),
    "payroll-runs": (services.create_payroll_run, ("run_date",)),
}

ACTION_COMMANDS = {
    ("sales-orders", "confirm"): services.confirm_sales_order,
    ("sales-orders", "cancel"): services.cancel_sales_order,
    ("deliveries", "ship"): services.ship_delivery,
    ("invoices", "issue"): services.issue_invoice,
    ("invoices", "mark-paid"): services.mark_invoice_paid,
    ("invoices", "cancel"): services.cancel_invoice,
    ("purchase-orders", "confirm"): services.confirm_purchase_order,
    ("purchase-orders", "cancel"): services.cancel_purchase_order,
    ("purchase-orders", "receive"): services.receive_purchase_order,
    ("vendor-invoices", "receive"): services.mark_vendor_invoice_received,
    ("vendor-invoices", "mark-paid"): services.mark_vendor_invoice_paid,
    ("payroll-runs", "confirm"): services.confirm_payroll_run,
    ("payroll-runs", "cancel"): services.cancel_payroll_run,
    ("payroll-runs", "pay"): services.pay_payroll_run,
}


@json_view
@require_POST
def create_document_view(request, collection):
    try:
        command, date_fields = CREATE_COMMANDS[collection]
    except KeyError:
        return JsonResponse({"ok": False, "error": {"kind": "not_found"}}, status=404)
    data = _dates(_body(request), *date_fields)
    document = command(**data)
    return JsonResponse({"ok": True, "document": document_json(document)}, status=201)


@json_view
@require_POST
def document_action_view(request, collection, document_id, action):
    command = ACTION_COMMANDS.get((collection, action))
    if command is None:
        return JsonResponse({"ok": False, "error": {"kind": "not_found"}}, status=404)
    document = command(document_id, actor=_body(request).get("actor"))
    return JsonResponse({"ok": True, "document": document_json(document)})


@json_view
@require_POST
def create_delivery_view(request, order_id):
    data = _dates(_body(request), "planned_date")
    delivery = services.create_delivery(order_id, data.pop("quantities", {}), **data)
    return JsonResponse({"ok": True, "document": document_json(delivery)}, status=201)


# ----------------------------------------------
# Ledger
# ----------------------------------------------
@json_view
@require_http_methods(["GET", "POST"])
def journal_entries_view(request):
    if request.method == "POST":
        data = _body(request)
        entry = services.post_journal_entry(
            _date(data.get("entry_date"), "entry_date"),
            data.get("description", ""),
            "manual",
            None,
            data.get("lines", []),
            actor=data.get("actor"),
        )
        return JsonResponse({"ok": True, "entry": journal_entry_json(entry)}, status=201)
    entries = services.list_journal_entries(
        date_from=_date(request.GET.get("date_from"), "date_from"),
        date_to=_date(request.GET.get("date_to"), "date_to"),
        reference_type=request.GET.get("reference_type"),
    )
    return JsonResponse({"ok": True, "entries": [journal_entry_json(e) for e in entries]})


@json_view
@require_POST
def reverse_entry_view(request, entry_id):
    data = _body(request)
    entry = services.reverse_journal_entry(
        entry_id, _date(data.get("entry_date"), "entry_date"), actor=data.get("actor")
    )
    return JsonResponse({"ok": True, "entry": journal_entry_json(entry)}, status=201)


# ----------------------------------------------
# Reports
# ----------------------------------------------
@json_view
@require_GET
def trial_balance_view(request):
    report = services.trial_balance(as_of=_date(request.GET.get("as_of"), "as_of"))
    return JsonResponse({"ok": True, "trial_balance": report})


@json_view
@require_GET
def low_stock_view(request):
    return JsonResponse({
        "ok": True,
        "products": [product_json(p) for p in services.low_stock_report()],
    })


@json_view
@require_GET
def dashboard_view(request):
    return JsonResponse({
        "ok": True,
        "counts": services.get_dashboard_counts(),
        "recent_sales_orders": [document_json(o) for o in services.recent_sales_orders()],
    })
