from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model

from facilities.models import ActivityEvent

User = get_user_model()


def log_action(*, user: Optional[User], action: str, organization=None, object_type: Optional[str] = None,
               object_id=None, detail: Optional[Dict[str, Any]] = None) -> ActivityEvent:
    return ActivityEvent.objects.create(
        user=user if isinstance(user, User) and user.pk else None,
        organization=organization,
        action=action,
        object_type=object_type,
        object_id=str(object_id) if object_id is not None else None,
        detail=detail or {},
    )
