"""
Unit tests for the declarative models.
"""
from tasknest.models import AuditLog, Project, Task, Tenant, User
from tasknest.models.base import Base


class TestTenantScopedModels:

    def test_tenant_id_references_tenants(self):
        for model in (Project, Task):
            column = model.__table__.c.tenant_id
            assert not column.nullable
            assert column.index
            [foreign_key] = column.foreign_keys
            assert foreign_key.target_fullname == "tenants.id"
            assert foreign_key.ondelete == "CASCADE"

    def test_all_tables_are_registered(self):
        assert {"tenants", "users", "projects", "tasks", "audit_logs"} <= set(Base.metadata.tables)
        assert {m.__tablename__ for m in (Tenant, User, Project, Task, AuditLog)} <= set(Base.metadata.tables)
