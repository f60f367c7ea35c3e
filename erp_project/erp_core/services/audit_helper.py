from ..models import AuditLog


def _jsonable(value):
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)  # Decimal, date, model instances


def log_action(*, action: str, instance, actor=None, changes: dict | None = None):
    """
    Central audit logger.
    Call it inside the caller's atomic block so the row only survives
    when the change itself commits.
    """
    return AuditLog.objects.create(
        actor=actor or "",
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=_jsonable(changes) if changes is not None else None,
    )
