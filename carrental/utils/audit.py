"""
Journal d'audit / Audit trail helper.
"""

import json

from sqlalchemy.ext.asyncio import AsyncSession

from carrental.models.audit import AuditLog
from carrental.models.user import User
from carrental.utils.clock import Clock


def log_audit(
    db: AsyncSession,
    clock: Clock,
    entity_type: str,
    entity_id: int,
    action: str,
    user: User | str | None,
    changes: dict | None = None,
) -> None:
    """Ajouter une entrée d'audit à la transaction courante / Add an audit entry to the current transaction."""
    db.add(AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changes=json.dumps(changes) if changes else None,
        user=user.email if isinstance(user, User) else user,
        timestamp=clock.now().isoformat(timespec="seconds"),
    ))
