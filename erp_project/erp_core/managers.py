from django.db import models


# -----------------------------------------
# Soft-delete aware querysets for master data
# (accounts, products, partners are archived, never deleted)
# -----------------------------------------
class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class ActiveManager(models.Manager.from_queryset(ActiveQuerySet)):
    # Enables query:
    # Product.objects.active()
    pass


class PartnerQuerySet(ActiveQuerySet):
    def with_type(self, partner_type):
        return self.filter(types__partner_type=partner_type).distinct()

    def customers(self):
        return self.with_type("customer")

    def vendors(self):
        return self.with_type("vendor")


class PartnerManager(models.Manager.from_queryset(PartnerQuerySet)):
    pass
