"""Tests for projects and milestones."""

import uuid

from httpx import AsyncClient


class TestProjectCrud:
    async def test_admin_creates_project(self, client: AsyncClient, admin):
        response = await client.post("/api/v1/projects", headers=admin.headers, json={
            "title": "  Data Pipeline  ",
            "description": "ETL for intern metrics",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Data Pipeline"
        assert data["duration_weeks"] == 12
        assert data["created_by"] == str(admin.id)
        assert data["milestone_count"] == 0

    async def test_mentor_cannot_create(self, client: AsyncClient, mentor):
        response = await client.post("/api/v1/projects", headers=mentor.headers, json={"title": "Nope"})
        assert response.status_code == 403

    async def test_duration_bounds(self, client: AsyncClient, admin):
        response = await client.post("/api/v1/projects", headers=admin.headers, json={
            "title": "Too long",
            "duration_weeks": 0,
        })
        assert response.status_code == 422

    async def test_list_includes_milestone_counts(self, client: AsyncClient, intern, project_with_milestones):
        response = await client.get("/api/v1/projects", headers=intern.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["projects"][0]["milestone_count"] == 2

    async def test_update(self, client: AsyncClient, admin, project_with_milestones):
        project_id = project_with_milestones["project"]["id"]
        response = await client.patch(f"/api/v1/projects/{project_id}", headers=admin.headers, json={
            "duration_weeks": 10,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["duration_weeks"] == 10
        assert data["title"] == "Python API Platform"

    async def test_update_clears_description(self, client: AsyncClient, admin, project_with_milestones):
        project_id = project_with_milestones["project"]["id"]
        await client.patch(f"/api/v1/projects/{project_id}", headers=admin.headers, json={"description": "Old"})
        response = await client.patch(f"/api/v1/projects/{project_id}", headers=admin.headers, json={
            "description": None,
        })
        assert response.status_code == 200
        assert response.json()["description"] is None
        assert response.json()["title"] == "Python API Platform"

    async def test_update_rejects_null_title(self, client: AsyncClient, admin, project_with_milestones):
        project_id = project_with_milestones["project"]["id"]
        response = await client.patch(f"/api/v1/projects/{project_id}", headers=admin.headers, json={"title": None})
        assert response.status_code == 400
        assert response.json()["detail"] == "title cannot be null"

    async def test_update_unknown(self, client: AsyncClient, admin):
        response = await client.patch(f"/api/v1/projects/{uuid.uuid4()}", headers=admin.headers, json={"title": "x"})
        assert response.status_code == 404

    async def test_delete_removes_milestones(self, client: AsyncClient, admin, project_with_milestones):
        project_id = project_with_milestones["project"]["id"]
        milestone_id = project_with_milestones["milestones"][0]["id"]

        response = await client.delete(f"/api/v1/projects/{project_id}", headers=admin.headers)
        assert response.status_code == 204
        assert (await client.get(f"/api/v1/projects/{project_id}", headers=admin.headers)).status_code == 404
        assert (await client.get(f"/api/v1/milestones/{milestone_id}", headers=admin.headers)).status_code == 404


class TestMilestones:
    async def test_order_index_increments_from_one(self, project_with_milestones):
        indexes = [m["order_index"] for m in project_with_milestones["milestones"]]
        assert indexes == [1, 2]

    async def test_add_to_unknown_project(self, client: AsyncClient, admin):
        response = await client.post(
            f"/api/v1/projects/{uuid.uuid4()}/milestones",
            headers=admin.headers,
            json={"title": "Orphan"},
        )
        assert response.status_code == 404

    async def test_milestone_detail(self, client: AsyncClient, intern, project_with_milestones):
        milestone = project_with_milestones["milestones"][1]
        response = await client.get(f"/api/v1/milestones/{milestone['id']}", headers=intern.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Ship endpoints"
        assert data["project_title"] == "Python API Platform"

    async def test_due_date_round_trips(self, client: AsyncClient, admin, project_with_milestones):
        project_id = project_with_milestones["project"]["id"]
        response = await client.post(
            f"/api/v1/projects/{project_id}/milestones",
            headers=admin.headers,
            json={"title": "Demo day", "due_date": "2026-12-15"},
        )
        assert response.json()["due_date"] == "2026-12-15"
        assert response.json()["order_index"] == 3


class TestProjectView:
    async def test_intern_sees_own_status(self, client: AsyncClient, intern, project_with_milestones):
        first = project_with_milestones["milestones"][0]
        await client.post(f"/api/v1/milestones/{first['id']}/progress/start", headers=intern.headers)

        project_id = project_with_milestones["project"]["id"]
        response = await client.get(f"/api/v1/projects/{project_id}", headers=intern.headers)
        assert response.status_code == 200
        items = response.json()["milestones"]
        assert [m["title"] for m in items] == ["Design schema", "Ship endpoints"]
        assert items[0]["my_status"] == "in_progress"
        assert items[1]["my_status"] is None
        assert items[0]["progress_count"] is None

    async def test_staff_sees_counts(self, client: AsyncClient, mentor, intern, make_user, project_with_milestones):
        other = await make_user("intern")
        first = project_with_milestones["milestones"][0]
        await client.post(f"/api/v1/milestones/{first['id']}/progress/start", headers=intern.headers)
        await client.post(f"/api/v1/milestones/{first['id']}/progress/start", headers=other.headers)

        project_id = project_with_milestones["project"]["id"]
        response = await client.get(f"/api/v1/projects/{project_id}", headers=mentor.headers)
        items = response.json()["milestones"]
        assert items[0]["progress_count"] == 2
        assert items[0]["completed_count"] == 0
        assert items[1]["progress_count"] == 0
        assert items[0]["my_status"] is None
