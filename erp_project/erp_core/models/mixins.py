from django.db.models import ProtectedError
from ..exceptions import ReferentialIntegrityError


class ArchiveInsteadOfDeleteMixin:
    """Master data that documents point at can only be archived."""

    def delete(self, *args, **kwargs):
        try:
            return super().delete(*args, **kwargs)
        except ProtectedError as exc:
            referenced_by = sorted({type(obj).__name__ for obj in exc.protected_objects})
            raise ReferentialIntegrityError(
                f"{self} is still referenced by {', '.join(referenced_by)}; archive it instead.",
                object_type=type(self).__name__,
                object_id=self.pk,
                referenced_by=referenced_by,
            ) from exc
