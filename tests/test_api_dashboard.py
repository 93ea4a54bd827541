"""API tests for the dashboard, projects, commitments, reflections, export and health."""

from datetime import datetime, timedelta, timezone


class TestDashboardEndpoint:
    def test_shape_and_focus(self, client, headers, project):
        for title, importance in (("Low", 1), ("High", 5)):
            client.post("/api/v1/capture", json={
                "project_id": project.id, "kind": "commitment", "title": title, "importance": importance,
            }, headers=headers)
        client.post("/api/v1/capture", json={
            "project_id": project.id, "kind": "decision", "title": "Choose vendor",
        }, headers=headers)

        res = client.get("/api/v1/dashboard", headers=headers)
        assert res.status_code == 200
        body = res.get_json()
        assert set(body) == {"generated_at", "weekly_focus", "idle_projects", "pending", "stats", "recent_entries"}
        assert [c["title"] for c in body["weekly_focus"]] == ["High", "Low"]
        assert body["pending"]["decisions_needing_review"] == 1
        assert body["idle_projects"] == []
        assert {e["title"] for e in body["recent_entries"]} == {"Low", "High", "Choose vendor"}
        assert {e["project_name"] for e in body["recent_entries"]} == {"Apollo Migration"}

    def test_idle_project_listed_with_days(self, client, headers, make_project):
        make_project(name="Dormant", priority=5,
                     last_active_at=datetime.now(timezone.utc) - timedelta(days=90))
        body = client.get("/api/v1/dashboard", headers=headers).get_json()
        assert [p["name"] for p in body["idle_projects"]] == ["Dormant"]
        assert body["idle_projects"][0]["days_idle"] >= 89

    def test_users_are_isolated(self, client, headers, other_headers, project):
        client.post("/api/v1/capture", json={
            "project_id": project.id, "kind": "commitment", "title": "Mine",
        }, headers=headers)
        body = client.get("/api/v1/dashboard", headers=other_headers).get_json()
        assert body["weekly_focus"] == []
        assert body["stats"]["active_projects"] == 0

    def test_requires_user(self, client):
        assert client.get("/api/v1/dashboard").status_code == 401


class TestProjectsEndpoint:
    def test_create_list_get_update(self, client, headers):
        res = client.post("/api/v1/projects", json={"name": "Board prep", "type": "area", "priority": 5},
                          headers=headers)
        assert res.status_code == 201
        project = res.get_json()
        assert project["type"] == "area"
        assert project["last_active_at"] is not None

        listed = client.get("/api/v1/projects?type=area&min_priority=4", headers=headers).get_json()
        assert [p["id"] for p in listed["items"]] == [project["id"]]

        updated = client.put(f"/api/v1/projects/{project['id']}", json={"status": "archived"}, headers=headers)
        assert updated.get_json()["status"] == "archived"
        assert client.get(f"/api/v1/projects/{project['id']}", headers=headers).status_code == 200

    def test_invalid_project_400(self, client, headers):
        res = client.post("/api/v1/projects", json={"priority": 0}, headers=headers)
        assert res.status_code == 400
        assert set(res.get_json()["details"]) == {"name", "priority"}

    def test_prep_briefing(self, client, headers, project, provider, use_gateway):
        provider.queue({"briefing": "Prepare the budget.", "talkingPoints": ["Budget"]})
        res = client.get(f"/api/v1/projects/{project.id}/prep", headers=headers)
        assert res.status_code == 200
        assert res.get_json()["briefing"]["talking_points"] == ["Budget"]

    def test_prep_briefing_other_user_404(self, client, other_headers, project):
        assert client.get(f"/api/v1/projects/{project.id}/prep", headers=other_headers).status_code == 404


class TestCommitmentsEndpoint:
    def test_status_transitions(self, client, headers, project):
        created = client.post("/api/v1/commitments", json={
            "project_id": project.id, "title": "Send deck", "due_date": "2026-03-10",
        }, headers=headers)
        assert created.status_code == 201
        commitment_id = created.get_json()["id"]

        done = client.patch(f"/api/v1/commitments/{commitment_id}/status", json={"status": "done"}, headers=headers)
        assert done.status_code == 200
        assert done.get_json()["completed_at"] is not None

        reopened = client.patch(f"/api/v1/commitments/{commitment_id}/status", json={"status": "open"},
                                headers=headers)
        assert reopened.get_json()["completed_at"] is None

    def test_filters(self, client, headers, project):
        client.post("/api/v1/commitments", json={"project_id": project.id, "title": "Mine"}, headers=headers)
        client.post("/api/v1/commitments", json={
            "project_id": project.id, "title": "Theirs", "direction": "waiting_for",
        }, headers=headers)
        body = client.get("/api/v1/commitments?direction=waiting_for", headers=headers).get_json()
        assert [c["title"] for c in body["items"]] == ["Theirs"]
        assert client.get("/api/v1/commitments?status=lost", headers=headers).status_code == 400

    def test_other_user_404(self, client, headers, other_headers, project):
        commitment_id = client.post("/api/v1/commitments", json={
            "project_id": project.id, "title": "Mine",
        }, headers=headers).get_json()["id"]
        assert client.get(f"/api/v1/commitments/{commitment_id}", headers=other_headers).status_code == 404


class TestReflectionsEndpoint:
    def test_generate_then_save(self, client, headers, provider, use_gateway):
        provider.queue({"questions": ["What did you learn?"], "suggestions": []})
        generated = client.post("/api/v1/reflections/generate", json={
            "period_type": "week", "period_start": "2026-03-02", "period_end": "2026-03-08",
        }, headers=headers)
        assert generated.status_code == 200
        prompts = generated.get_json()

        saved = client.post("/api/v1/reflections", json={
            "period_type": prompts["period_type"],
            "period_start": prompts["period_start"],
            "period_end": prompts["period_end"],
            "stats": prompts["stats"],
            "ai_questions": prompts["questions"],
            "questions_and_answers": [{"question": "What did you learn?", "answer": "Delegate more"}],
        }, headers=headers)
        assert saved.status_code == 201

        listed = client.get("/api/v1/reflections?period_type=week", headers=headers).get_json()
        assert listed["total"] == 1
        assert listed["items"][0]["questions_and_answers"][0]["answer"] == "Delegate more"

    def test_generate_ai_failure_503(self, client, headers, provider, use_gateway):
        provider.queue(RuntimeError("quota exceeded"))
        res = client.post("/api/v1/reflections/generate", json={
            "period_type": "week", "period_start": "2026-03-02", "period_end": "2026-03-08",
        }, headers=headers)
        assert res.status_code == 503
        assert res.get_json()["details"]["operation"] == "reflection_prompts"

    def test_saved_reflection_has_no_edit_route(self, client, headers):
        saved = client.post("/api/v1/reflections", json={
            "questions_and_answers": [{"question": "What went well?", "answer": "Hiring"}],
        }, headers=headers).get_json()
        res = client.put(f"/api/v1/reflections/{saved['id']}", json={"stats": {"forged": 1}}, headers=headers)
        assert res.status_code == 404
        listed = client.get("/api/v1/reflections", headers=headers).get_json()
        assert listed["items"][0]["stats"] == {}

    def test_invalid_period_400(self, client, headers):
        res = client.post("/api/v1/reflections", json={
            "period_type": "week", "period_start": "2026-03-08", "period_end": "2026-03-01",
        }, headers=headers)
        assert res.status_code == 400


class TestHealthAndErrors:
    def test_ready_without_user(self, client):
        assert client.get("/api/v1/health/ready").status_code == 200

    def test_live_reports_database_and_ai(self, client):
        body = client.get("/api/v1/health/live").get_json()
        assert body["status"] == "ok"
        assert body["checks"]["database"]["status"] == "ok"
        assert body["checks"]["ai"]["provider"] == "local"

    def test_oversized_user_id_401(self, client):
        assert client.get("/api/v1/projects", headers={"X-User-Id": "u" * 65}).status_code == 401

    def test_unknown_route_404_json(self, client, headers):
        res = client.get("/api/v1/nothing-here", headers=headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Not found"


class TestExportEndpoint:
    def test_exports_everything_the_user_owns(self, client, headers, other_headers, project):
        client.post("/api/v1/capture", json={
            "project_id": project.id, "kind": "commitment", "title": "Send proposal",
        }, headers=headers)
        client.post("/api/v1/reflections", json={"stats": {"meetings": 1}}, headers=headers)

        res = client.get("/api/v1/export", headers=headers)
        assert res.status_code == 200
        body = res.get_json()
        assert set(body) == {"exported_at", "projects", "entries", "commitments", "reflections"}
        assert [p["name"] for p in body["projects"]] == ["Apollo Migration"]
        assert [e["title"] for e in body["entries"]] == ["Send proposal"]
        assert [c["title"] for c in body["commitments"]] == ["Send proposal"]
        assert [r["stats"] for r in body["reflections"]] == [{"meetings": 1}]

        other = client.get("/api/v1/export", headers=other_headers).get_json()
        assert other["projects"] == other["entries"] == other["commitments"] == other["reflections"] == []

    def test_requires_user(self, client):
        assert client.get("/api/v1/export").status_code == 401
