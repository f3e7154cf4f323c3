"""Tests for certificate issuing, download and LinkedIn posts."""

import re

from httpx import AsyncClient

from loomero.certificates.service import DEFAULT_MENTOR_NAME


async def _complete_all(client: AsyncClient, intern, reviewer, milestones) -> None:
    for milestone in milestones:
        start = await client.post(f"/api/v1/milestones/{milestone['id']}/progress/start", headers=intern.headers)
        progress_id = start.json()["id"]
        await client.put(
            f"/api/v1/progress/{progress_id}/submission",
            headers=intern.headers,
            json={"notes": "done"},
        )
        await client.post(
            f"/api/v1/progress/{progress_id}/review",
            headers=reviewer.headers,
            json={"status": "approved"},
        )


class TestIssueCertificate:
    async def test_requires_all_milestones(self, client: AsyncClient, intern, mentor, project_with_milestones,
                                           mock_email_service):
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"][:1])
        response = await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
        })
        assert response.status_code == 400
        assert "All milestones must be approved" in response.json()["detail"]

    async def test_intern_issues_own_certificate(self, client: AsyncClient, intern, mentor,
                                                 project_with_milestones, mock_email_service):
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"])
        response = await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
        })
        assert response.status_code == 201
        cert = response.json()
        assert cert["status"] == "issued"
        assert cert["mentor_id"] == str(mentor.id)
        assert cert["issued_at"] is not None

        data = cert["certificate_data"]
        assert data["internName"] == "Ivy Intern"
        assert data["projectTitle"] == "Python API Platform"
        assert data["mentorName"] == "Max Mentor"
        assert re.fullmatch(r"CERT-\d+-[0-9A-Z]{6}", data["certificateId"])
        assert re.fullmatch(r"[A-Z][a-z]+ \d{1,2}, \d{4}", data["completionDate"])

    async def test_reissue_updates_same_row(self, client: AsyncClient, intern, mentor,
                                            project_with_milestones, mock_email_service):
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"])
        body = {"project_id": project_with_milestones["project"]["id"]}
        first = await client.post("/api/v1/certificates", headers=intern.headers, json=body)
        second = await client.post("/api/v1/certificates", headers=intern.headers, json=body)
        assert first.json()["id"] == second.json()["id"]

        listed = await client.get("/api/v1/certificates", headers=intern.headers)
        assert listed.json()["total"] == 1

    async def test_staff_must_name_intern(self, client: AsyncClient, intern, mentor,
                                          project_with_milestones, mock_email_service):
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"])
        project_id = project_with_milestones["project"]["id"]

        missing = await client.post("/api/v1/certificates", headers=mentor.headers, json={"project_id": project_id})
        assert missing.status_code == 400

        issued = await client.post("/api/v1/certificates", headers=mentor.headers, json={
            "project_id": project_id,
            "intern_id": str(intern.id),
        })
        assert issued.status_code == 201
        assert issued.json()["intern_id"] == str(intern.id)

    async def test_intern_cannot_issue_for_others(self, client: AsyncClient, intern, make_user,
                                                  project_with_milestones):
        other = await make_user("intern")
        response = await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
            "intern_id": str(other.id),
        })
        assert response.status_code == 403

    async def test_project_without_milestones_not_eligible(self, client: AsyncClient, admin, intern):
        project = await client.post("/api/v1/projects", headers=admin.headers, json={"title": "Empty"})
        response = await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project.json()["id"],
        })
        assert response.status_code == 400

    async def test_mentor_name_falls_back(self, client: AsyncClient, intern, make_user,
                                          project_with_milestones, mock_email_service):
        nameless = await make_user("mentor", full_name="")
        await _complete_all(client, intern, nameless, project_with_milestones["milestones"])
        response = await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
        })
        assert response.json()["certificate_data"]["mentorName"] == DEFAULT_MENTOR_NAME


class TestCertificateAccess:
    async def test_download_html(self, client: AsyncClient, intern, mentor, project_with_milestones,
                                 mock_email_service):
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"])
        cert = (await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
        })).json()

        response = await client.get(f"/api/v1/certificates/{cert['id']}/html", headers=intern.headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Certificate_Ivy_Intern_Python_API_Platform.html" in response.headers["content-disposition"]
        assert cert["certificate_data"]["certificateId"] in response.text

    async def test_other_intern_cannot_read(self, client: AsyncClient, intern, mentor, make_user,
                                            project_with_milestones, mock_email_service):
        other = await make_user("intern")
        await _complete_all(client, intern, mentor, project_with_milestones["milestones"])
        cert = (await client.post("/api/v1/certificates", headers=intern.headers, json={
            "project_id": project_with_milestones["project"]["id"],
        })).json()

        response = await client.get(f"/api/v1/certificates/{cert['id']}/html", headers=other.headers)
        assert response.status_code == 403
        assert (await client.get("/api/v1/certificates", headers=other.headers)).json()["total"] == 0
        assert (await client.get("/api/v1/certificates", headers=mentor.headers)).json()["total"] == 1


class TestLinkedInPost:
    async def test_generate_post(self, client: AsyncClient, intern):
        response = await client.post("/api/v1/linkedin-post", headers=intern.headers, json={
            "project_title": "React Dashboard",
            "badges": [{"name": "Team Leader", "badge_type": "achievement"}],
            "mentor_name": "Max Mentor",
        })
        assert response.status_code == 200
        data = response.json()
        assert "#React" in data["hashtags"]
        assert "#Leadership" in data["hashtags"]
        assert "Max Mentor" in data["post"]

    async def test_requires_profile(self, client: AsyncClient, identity):
        response = await client.post("/api/v1/linkedin-post", headers=identity().headers, json={
            "project_title": "React Dashboard",
        })
        assert response.status_code == 403
