"""
Integration tests for project API endpoints.
"""
import uuid

import pytest
from fastapi import status

from tasknest.models.project import Project
from tasknest.models.task import Task, TaskStatus


async def create_project(async_client, headers, name="Website Relaunch", **fields) -> dict:
    response = await async_client.post(
        "/api/projects", json={"name": name, **fields}, headers=headers
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


class TestCreateProject:

    @pytest.mark.asyncio
    async def test_member_creates_project(self, async_client, acme, audit_count):
        project = await create_project(
            async_client, acme.member_headers, description="Q3 launch"
        )

        assert project["tenant_id"] == str(acme.tenant.id)
        assert project["created_by"] == str(acme.member.id)
        assert project["status"] == "active"
        assert project["task_count"] == 0
        assert project["completed_task_count"] == 0
        assert await audit_count("CREATE_PROJECT") == 1

    @pytest.mark.asyncio
    async def test_fourth_project_exceeds_quota(self, async_client, acme, count_rows):
        for n in range(3):
            await create_project(async_client, acme.admin_headers, name=f"P{n}")

        response = await async_client.post(
            "/api/projects", json={"name": "One too many"}, headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Subscription limit reached. Maximum 3 projects allowed."
        assert await count_rows(Project) == 3

    @pytest.mark.asyncio
    async def test_super_admin_has_no_tenant(self, async_client, super_admin_headers):
        response = await async_client.post(
            "/api/projects", json={"name": "Nowhere"}, headers=super_admin_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "User is not associated with a tenant"

    @pytest.mark.asyncio
    async def test_name_is_required(self, async_client, acme):
        response = await async_client.post(
            "/api/projects", json={"description": "nameless"}, headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestListProjects:

    @pytest.mark.asyncio
    async def test_lists_only_own_tenant(self, async_client, acme, globex):
        await create_project(async_client, acme.admin_headers, name="Acme One")
        await create_project(async_client, globex.admin_headers, name="Globex One")

        response = await async_client.get("/api/projects", headers=acme.member_headers)

        assert response.status_code == status.HTTP_200_OK
        names = [p["name"] for p in response.json()["data"]["items"]]
        assert names == ["Acme One"]

    @pytest.mark.asyncio
    async def test_task_counters(self, async_client, acme, db_session):
        project = await create_project(async_client, acme.admin_headers)
        project_id = uuid.UUID(project["id"])
        db_session.add_all([
            Task(tenant_id=acme.tenant.id, project_id=project_id, title="Done", status=TaskStatus.COMPLETED),
            Task(tenant_id=acme.tenant.id, project_id=project_id, title="Open"),
        ])
        await db_session.commit()

        response = await async_client.get("/api/projects", headers=acme.admin_headers)

        item = response.json()["data"]["items"][0]
        assert item["task_count"] == 2
        assert item["completed_task_count"] == 1

    @pytest.mark.asyncio
    async def test_filters(self, async_client, acme):
        await create_project(async_client, acme.admin_headers, name="Mobile App")
        await create_project(async_client, acme.admin_headers, name="Archive", status="archived")

        by_status = await async_client.get(
            "/api/projects", params={"status": "archived"}, headers=acme.admin_headers
        )
        by_search = await async_client.get(
            "/api/projects", params={"search": "mobile"}, headers=acme.admin_headers
        )

        assert [p["name"] for p in by_status.json()["data"]["items"]] == ["Archive"]
        assert [p["name"] for p in by_search.json()["data"]["items"]] == ["Mobile App"]


class TestGetProject:

    @pytest.mark.asyncio
    async def test_get_project(self, async_client, acme):
        project = await create_project(async_client, acme.admin_headers)

        response = await async_client.get(
            f"/api/projects/{project['id']}", headers=acme.member_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["id"] == project["id"]

    @pytest.mark.asyncio
    async def test_other_tenant_project_is_not_found(self, async_client, acme, globex):
        project = await create_project(async_client, globex.admin_headers)

        response = await async_client.get(
            f"/api/projects/{project['id']}", headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Project not found"


class TestUpdateProject:

    @pytest.mark.asyncio
    async def test_owner_updates(self, async_client, acme, audit_count):
        project = await create_project(async_client, acme.member_headers)

        response = await async_client.put(
            f"/api/projects/{project['id']}",
            json={"status": "completed", "description": "Shipped"},
            headers=acme.member_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["description"] == "Shipped"
        assert await audit_count("UPDATE_PROJECT") == 1

    @pytest.mark.asyncio
    async def test_member_cannot_update_admins_project(self, async_client, acme):
        project = await create_project(async_client, acme.admin_headers)

        response = await async_client.put(
            f"/api/projects/{project['id']}",
            json={"name": "Mine now"},
            headers=acme.member_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_admin_updates_members_project(self, async_client, acme):
        project = await create_project(async_client, acme.member_headers)

        response = await async_client.put(
            f"/api/projects/{project['id']}",
            json={"name": "Reviewed"},
            headers=acme.admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"name": None}, {"status": None}])
    async def test_required_field_cannot_be_cleared(self, async_client, acme, body):
        project = await create_project(async_client, acme.admin_headers)

        response = await async_client.put(
            f"/api/projects/{project['id']}", json=body, headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == f"{next(iter(body))} cannot be null"

    @pytest.mark.asyncio
    async def test_description_can_be_cleared(self, async_client, acme):
        project = await create_project(async_client, acme.admin_headers, description="Draft")

        response = await async_client.put(
            f"/api/projects/{project['id']}", json={"description": None}, headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["description"] is None

    @pytest.mark.asyncio
    async def test_rejects_foreign_keys_in_body(self, async_client, acme):
        project = await create_project(async_client, acme.admin_headers)

        response = await async_client.put(
            f"/api/projects/{project['id']}",
            json={"tenantId": str(uuid.uuid4())},
            headers=acme.admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestDeleteProject:

    @pytest.mark.asyncio
    async def test_delete_cascades_tasks(self, async_client, acme, count_rows, audit_count):
        project = await create_project(async_client, acme.admin_headers)
        await async_client.post(
            f"/api/projects/{project['id']}/tasks",
            json={"title": "Doomed"},
            headers=acme.admin_headers,
        )

        response = await async_client.delete(
            f"/api/projects/{project['id']}", headers=acme.admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert await count_rows(Project) == 0
        assert await count_rows(Task) == 0
        assert await audit_count("DELETE_PROJECT") == 1

    @pytest.mark.asyncio
    async def test_member_cannot_delete_admins_project(self, async_client, acme, count_rows):
        project = await create_project(async_client, acme.admin_headers)

        response = await async_client.delete(
            f"/api/projects/{project['id']}", headers=acme.member_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert await count_rows(Project) == 1
