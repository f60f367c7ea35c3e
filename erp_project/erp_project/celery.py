import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "erp_project.settings")

celery_app = Celery("erp_project")

# CELERY_* names in settings.py (broker url, eager mode)
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# Nightly integrity checks: denormalized balances and stock levels are
# rebuilt / replayed from the journal and movement logs
celery_app.conf.beat_schedule = {
    "recompute-account-balances": {
        "task": "erp_core.tasks.recompute_account_balances",
        "schedule": 86400.0,
    },
    "verify-stock-levels": {
        "task": "erp_core.tasks.verify_stock_levels",
        "schedule": 86400.0,
    },
}

# finds erp_core.tasks
celery_app.autodiscover_tasks()
