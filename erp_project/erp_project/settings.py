"""
Mini ERP – Django settings
==========================
Every value can be overridden from the environment. Defaults target local
development and the test suite (SQLite, eager Celery).
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
# BASE_DIR = erp_project/ (where manage.py lives)
BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower().strip('"').strip("'") in ("true", "1", "yes", "on")


# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("ERP_SECRET_KEY", "erp-dev-key-replace-before-deployment")

DEBUG = env_bool("ERP_DEBUG", True)

ALLOWED_HOSTS = [
    h for h in os.environ.get("ERP_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h
]

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "erp_core.apps.ErpCoreConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "erp_project.urls"

# ── Database ──────────────────────────────────────────────────
# SQLite by default; set ERP_DB_ENGINE=django.db.backends.postgresql for production
DB_ENGINE = os.environ.get("ERP_DB_ENGINE", "django.db.backends.sqlite3")

if DB_ENGINE.endswith("sqlite3"):
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("ERP_DB_NAME", str(BASE_DIR / "db.sqlite3")),
            # writers take the database lock at BEGIN, so atomic blocks serialize
            "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
            # file-backed so threaded tests share one database
            "TEST": {"NAME": str(BASE_DIR / "test_db.sqlite3")},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("ERP_DB_NAME", "erp"),
            "USER": os.environ.get("ERP_DB_USER", "erp"),
            "PASSWORD": os.environ.get("ERP_DB_PASSWORD", "erp"),
            "HOST": os.environ.get("ERP_DB_HOST", "localhost"),
            "PORT": os.environ.get("ERP_DB_PORT", "5432"),
        }
    }

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Celery ────────────────────────────────────────────────────
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", True)
# eager mode (dev, tests) never needs a real broker
CELERY_BROKER_URL = os.environ.get(
    "CELERY_BROKER_URL",
    "memory://" if CELERY_TASK_ALWAYS_EAGER else "redis://localhost:6379/0",
)

# ── Logging ───────────────────────────────────────────────────
ERP_LOG_LEVEL = os.environ.get("ERP_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "erp_core": {
            "handlers": ["console"],
            "level": ERP_LOG_LEVEL,
            "propagate": False,
        },
    },
}

# ── ERP posting rules ─────────────────────────────────────────
# Account codes used when documents post to the ledger.
# A product's own revenue/expense account wins over these defaults.
ERP_POSTING_ACCOUNTS = {
    "receivable": os.environ.get("ERP_ACCOUNT_RECEIVABLE", "1200"),
    "tax_receivable": os.environ.get("ERP_ACCOUNT_TAX_RECEIVABLE", "1300"),
    "inventory": os.environ.get("ERP_ACCOUNT_INVENTORY", "1400"),
    "payable": os.environ.get("ERP_ACCOUNT_PAYABLE", "2100"),
    "tax_payable": os.environ.get("ERP_ACCOUNT_TAX_PAYABLE", "2200"),
    "salary_payable": os.environ.get("ERP_ACCOUNT_SALARY_PAYABLE", "2300"),
    "revenue": os.environ.get("ERP_ACCOUNT_REVENUE", "4000"),
    "expense": os.environ.get("ERP_ACCOUNT_EXPENSE", "5000"),
    "salary_expense": os.environ.get("ERP_ACCOUNT_SALARY_EXPENSE", "5200"),
}

# Reject stock-outs that would push a product below zero
ERP_ALLOW_NEGATIVE_STOCK = env_bool("ERP_ALLOW_NEGATIVE_STOCK", False)

ERP_NUMBER_PADDING = int(os.environ.get("ERP_NUMBER_PADDING", "6"))
