"""
End-to-end scenarios across endpoint groups.
"""
import pytest
from fastapi import status

from tasknest.models.tenant import Tenant
from tasknest.models.user import User


class TestAcmeOnboarding:
    """Register, log in, plan a project and finish its first task."""

    @pytest.mark.asyncio
    async def test_completed_task_shows_in_project_counters(self, async_client, count_rows):
        register = await async_client.post(
            "/api/auth/register-tenant",
            json={
                "tenantName": "Acme",
                "subdomain": "acme",
                "adminEmail": "a@acme.com",
                "adminPassword": "Passw0rd!",
                "adminFullName": "Alice Admin",
            },
        )
        assert register.status_code == status.HTTP_201_CREATED
        assert await count_rows(Tenant) == 1

        login = await async_client.post(
            "/api/auth/login",
            json={"email": "a@acme.com", "password": "Passw0rd!", "tenantSubdomain": "acme"},
        )
        assert login.status_code == status.HTTP_200_OK
        headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

        project = await async_client.post("/api/projects", json={"name": "P1"}, headers=headers)
        assert project.status_code == status.HTTP_201_CREATED
        project_id = project.json()["data"]["id"]
        assert project.json()["data"]["task_count"] == 0

        task = await async_client.post(
            f"/api/projects/{project_id}/tasks", json={"title": "T1"}, headers=headers
        )
        assert task.status_code == status.HTTP_201_CREATED
        task_id = task.json()["data"]["id"]

        done = await async_client.patch(
            f"/api/tasks/{task_id}/status", json={"status": "completed"}, headers=headers
        )
        assert done.status_code == status.HTTP_200_OK

        projects = await async_client.get("/api/projects", headers=headers)
        item = projects.json()["data"]["items"][0]
        assert item["id"] == project_id
        assert item["task_count"] == 1
        assert item["completed_task_count"] == 1


class TestFreePlanUserLimit:
    """A free tenant holds five users; the sixth is refused."""

    @pytest.mark.asyncio
    async def test_sixth_user_is_refused(self, async_client, acme, count_rows):
        for n in range(3):
            added = await async_client.post(
                f"/api/tenants/{acme.tenant.id}/users",
                json={"email": f"u{n}@acme.com", "password": "Passw0rd!", "fullName": f"User {n}"},
                headers=acme.admin_headers,
            )
            assert added.status_code == status.HTTP_201_CREATED
        assert await count_rows(User, User.tenant_id == acme.tenant.id) == 5

        sixth = await async_client.post(
            f"/api/tenants/{acme.tenant.id}/users",
            json={"email": "u6@acme.com", "password": "Passw0rd!", "fullName": "User Six"},
            headers=acme.admin_headers,
        )

        assert sixth.status_code == status.HTTP_403_FORBIDDEN
        assert sixth.json()["success"] is False
        assert await count_rows(User, User.tenant_id == acme.tenant.id) == 5


class TestTenantIsolation:
    """Nothing crosses the tenant boundary."""

    @pytest.mark.asyncio
    async def test_globex_sees_nothing_of_acme(self, async_client, acme, globex):
        project = await async_client.post(
            "/api/projects", json={"name": "Secret"}, headers=acme.admin_headers
        )
        project_id = project.json()["data"]["id"]
        task = await async_client.post(
            f"/api/projects/{project_id}/tasks", json={"title": "Classified"}, headers=acme.admin_headers
        )
        task_id = task.json()["data"]["id"]
        intruder = globex.admin_headers

        responses = [
            await async_client.get(f"/api/tenants/{acme.tenant.id}", headers=intruder),
            await async_client.get(f"/api/tenants/{acme.tenant.id}/users", headers=intruder),
            await async_client.get(f"/api/projects/{project_id}", headers=intruder),
            await async_client.get(f"/api/projects/{project_id}/tasks", headers=intruder),
            await async_client.put(f"/api/projects/{project_id}", json={"name": "x"}, headers=intruder),
            await async_client.delete(f"/api/projects/{project_id}", headers=intruder),
            await async_client.put(f"/api/tasks/{task_id}", json={"title": "x"}, headers=intruder),
            await async_client.delete(f"/api/tasks/{task_id}", headers=intruder),
            await async_client.delete(f"/api/users/{acme.member.id}", headers=intruder),
        ]

        for response in responses:
            assert response.status_code in (
                status.HTTP_403_FORBIDDEN,
                status.HTTP_404_NOT_FOUND,
            ), response.request.url

        listing = await async_client.get("/api/projects", headers=intruder)
        assert listing.json()["data"]["total"] == 0
