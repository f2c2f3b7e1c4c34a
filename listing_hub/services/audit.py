from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from listing_hub.models.audit_log import AuditLog

def audit(
    db: AsyncSession,
    *,
    tenant_id: str | None,
    actor_account_id: str | None,
    action: str,
    target_type: str | None = None,
    target_id: str | None = None,
    detail: dict | None = None,
) -> None:
    # Added to the caller's unit of work; committed with it.
    db.add(AuditLog(
        tenant_id=tenant_id,
        actor_account_id=actor_account_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        detail=detail or {},
    ))
