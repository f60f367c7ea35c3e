from django.urls import path

from . import views

urlpatterns = [
    path("dashboard/", views.dashboard_view, name="dashboard"),
    # master data
    path("partners/", views.partners_view, name="partners"),
    path("partners/<int:partner_id>/archive/", views.archive_partner_view, name="partner-archive"),
    path("products/", views.products_view, name="products"),
    path("products/<int:product_id>/stock/", views.adjust_stock_view, name="product-stock"),
    # ledger
    path("journal-entries/", views.journal_entries_view, name="journal-entries"),
    path(
        "journal-entries/<int:entry_id>/reverse/",
        views.reverse_entry_view,
        name="journal-entry-reverse",
    ),
    # reports
    path("reports/trial-balance/", views.trial_balance_view, name="trial-balance"),
    path("reports/low-stock/", views.low_stock_view, name="low-stock"),
    # documents (sales-orders, deliveries, invoices, purchase-orders,
    # vendor-invoices, payroll-runs)
    path(
        "sales-orders/<int:order_id>/deliveries/",
        views.create_delivery_view,
        name="sales-order-deliveries",
    ),
    path("<slug:collection>/", views.create_document_view, name="document-create"),
    path(
        "<slug:collection>/<int:document_id>/<slug:action>/",
        views.document_action_view,
        name="document-action",
    ),
]
