from .celery import celery_app

__all__ = ("celery_app",)

""" Worker: "celery -A erp_project worker -l info"
    Nightly checks: "celery -A erp_project beat -l info" """
