from django.db import models


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # Gives accountability and traceability across whole system
    # Who performed the action; blank for automated runs (tasks, seeding)
    actor = models.CharField(max_length=150, blank=True, default="")
    # Type of event being logged
    action = models.CharField(max_length=50)  # create, update, confirm, issue, post…
    # What kind of object was affected (e.g. "Invoice", "JournalEntry")
    object_type = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    # Before/after details of what changed, in JSON format
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["object_type", "object_id"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self):
        return (
            f"[{self.created_at:%Y-%m-%d %H:%M}] {self.actor or 'system'} "
            f"{self.action} {self.object_type}({self.object_id})"
        )
