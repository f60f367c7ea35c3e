from django.db import models


class DocumentSequence(models.Model):
    """Per (document type, year) counter behind human-readable numbers."""

    document_type = models.CharField(max_length=30)
    year = models.PositiveIntegerField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["document_type", "year"], name="uq_sequence_type_year"
            ),
        ]

    def __str__(self):
        return f"{self.document_type}/{self.year}: {self.last_value}"
