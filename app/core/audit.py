"""Audit trail for payment and enrollment events."""

from typing import Any

from app.models.audit_log import AuditLog


async def log_event(
    user_id: Any,
    event_type: str,
    entity_type: str,
    entity_id: Any = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Append to audit_logs; ids are stored as strings so ObjectIds and gateway ids mix."""
    await AuditLog(
        user_id=str(user_id) if user_id is not None else None,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        metadata=metadata or {},
    ).insert()
