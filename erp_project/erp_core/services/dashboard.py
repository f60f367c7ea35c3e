from ..models import BusinessPartner, Product, PurchaseOrder, SalesOrder
from .inventory import low_stock_report

OPEN_STATUSES = ("draft", "confirmed")


def get_dashboard_counts():
    """Headline counts for the start page. Read only."""
    return {
        "open_sales_orders": SalesOrder.objects.filter(status__in=OPEN_STATUSES).count(),
        "open_purchase_orders": PurchaseOrder.objects.filter(status__in=OPEN_STATUSES).count(),
        "active_partners": BusinessPartner.objects.active().count(),
        "active_products": Product.objects.active().count(),
        "low_stock_products": low_stock_report().count(),
    }


def recent_sales_orders(limit=5):
    return SalesOrder.objects.select_related("customer").order_by("-created_at", "-id")[:limit]
