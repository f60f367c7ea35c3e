from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Account, AccountBalance

""" Every account gets its running-balance row as soon as it exists."""


@receiver(post_save, sender=Account)
def create_account_balance(sender, instance, created, **kwargs):
    if created:
        AccountBalance.objects.get_or_create(account=instance)
