import logging

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request):
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(user, action, entity_type='', entity_id='', patient_id=None, details=None, request=None):
    """Write an audit log entry. Failures are logged and never raised."""

    role_name = getattr(getattr(user, 'role', None), 'name', '') or ''

    try:
        # savepoint so a failed insert does not poison the caller's transaction
        with transaction.atomic():
            AuditLog.objects.create(
                user=user if getattr(user, 'is_authenticated', False) else None,
                role_name=role_name,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else '',
                patient_id=patient_id,
                details=details,
                ip_address=client_ip(request),
            )
    except Exception:
        logger.exception('AuditLog write failed (action=%s, entity=%s %s)', action, entity_type, entity_id)
