"""
Audit Recorder

Persists one AuditLog row per mutating action. Writes happen in their own
short session so that a failed audit insert can never roll back, or fail, the
action that triggered it.
"""

import logging
from enum import Enum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasknest.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    REGISTER_TENANT = "REGISTER_TENANT"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    UPDATE_TENANT = "UPDATE_TENANT"
    DELETE_TENANT = "DELETE_TENANT"
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    UPDATE_TASK_STATUS = "UPDATE_TASK_STATUS"
    DELETE_TASK = "DELETE_TASK"


class AuditRecorder:
    """Fire-and-forget audit sink.

    ``record`` never raises: every failure is logged and swallowed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: UUID | str | None = None,
        tenant_id: UUID | None = None,
        user_id: UUID | None = None,
        ip: str | None = None,
    ) -> bool:
        """Write an audit entry. Returns False when the write failed."""
        entry = AuditLog(
            tenant_id=tenant_id,
            user_id=user_id,
            action=action.value,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            ip_address=ip,
        )
        try:
            async with self.session_factory() as session:
                session.add(entry)
                await session.commit()
        except Exception:
            logger.exception(
                "Failed to write audit entry %s %s:%s",
                action.value,
                entity_type,
                entity_id,
            )
            return False
        return True
