"""
Unit tests for the audit recorder.
"""
import logging
import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from tasknest.models.audit_log import AuditLog
from tasknest.services.audit_recorder import AuditAction, AuditRecorder


class TestAuditRecorder:

    @pytest.mark.asyncio
    async def test_records_entry(self, session_factory):
        tenant_id, user_id, entity_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        recorder = AuditRecorder(session_factory)

        ok = await recorder.record(
            AuditAction.CREATE_PROJECT,
            "project",
            entity_id,
            tenant_id=tenant_id,
            user_id=user_id,
            ip="10.0.0.7",
        )

        assert ok is True
        async with session_factory() as session:
            entry = (await session.execute(select(AuditLog))).scalar_one()
        assert entry.action == "CREATE_PROJECT"
        assert entry.entity_type == "project"
        assert entry.entity_id == str(entity_id)
        assert entry.tenant_id == tenant_id
        assert entry.user_id == user_id
        assert entry.ip_address == "10.0.0.7"

    @pytest.mark.asyncio
    async def test_entry_without_actor(self, session_factory):
        ok = await AuditRecorder(session_factory).record(AuditAction.LOGIN, "user")

        assert ok is True

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, caplog):
        factory = MagicMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
        recorder = AuditRecorder(factory)

        with caplog.at_level(logging.ERROR, logger="tasknest.services.audit_recorder"):
            ok = await recorder.record(AuditAction.DELETE_TASK, "task", uuid.uuid4())

        assert ok is False
        assert "Failed to write audit entry DELETE_TASK" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_swallowed(self):
        factory = MagicMock(side_effect=RuntimeError("boom"))

        ok = await AuditRecorder(factory).record(AuditAction.LOGOUT, "user")

        assert ok is False
