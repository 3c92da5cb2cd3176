"""End-to-end tests of the HTTP API over in-memory storage."""

import pytest
from fastapi.testclient import TestClient

from onboarding.auth.permissions import AdminScope, StaffRole
from onboarding.auth.schemas import LearnerIdentity


def create_module(client, headers, title, questions=2, **extra) -> dict:
    payload = {
        "title": title,
        "role": "TEACHER",
        "video_url": "https://videos.example.org/v.mp4",
        "questions": [
            {"text": f"Q{i}?", "options": ["yes", "no"], "correct_answer_index": 0}
            for i in range(questions)
        ],
        **extra,
    }
    response = client.post("/v1/admin/modules", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def admin_headers(auth_headers, hr_admin):
    return auth_headers(hr_admin)


@pytest.fixture
def learner_headers(auth_headers, teacher):
    return auth_headers(teacher)


class TestAuth:
    """Authentication and authorization."""

    def test_missing_token(self, client: TestClient):
        """Learner endpoints need a bearer token."""
        response = client.get("/v1/modules")
        assert response.status_code == 401
        body = response.json()
        assert body["error"] is True
        assert body["status_code"] == 401
        assert "request_id" in body

    def test_invalid_token(self, client: TestClient):
        """Garbage tokens are refused."""
        response = client.get(
            "/v1/modules", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401

    def test_learner_cannot_author(self, client, learner_headers):
        """Admin endpoints need an admin scope."""
        response = client.get("/v1/admin/modules", headers=learner_headers)
        assert response.status_code == 403

    def test_department_head_limited_to_role(self, client, auth_headers):
        """A department head cannot author another role's modules."""
        head = LearnerIdentity(
            learner_id="head@school.org",
            role=StaffRole.SECURITY,
            admin_scope=AdminScope.SECURITY,
        )
        response = client.post(
            "/v1/admin/modules",
            json={"title": "T", "role": "TEACHER", "video_url": "https://x.org/v"},
            headers=auth_headers(head),
        )
        assert response.status_code == 403


class TestCurriculumAdmin:
    """Module authoring endpoints."""

    def test_create_list_reorder_delete(self, client, admin_headers):
        """Modules can be added, reordered and removed."""
        first = create_module(client, admin_headers, "Safety")
        second = create_module(client, admin_headers, "Grading", folder="Academics")
        assert (first["ordinal"], second["ordinal"]) == (0, 1)

        response = client.put(
            "/v1/admin/modules/order",
            json={"role": "TEACHER", "module_ids": [second["id"], first["id"]]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert [m["title"] for m in response.json()["items"]] == ["Grading", "Safety"]

        response = client.delete(
            f"/v1/admin/modules/{first['id']}", headers=admin_headers
        )
        assert response.status_code == 204

        response = client.get(
            "/v1/admin/modules", params={"role": "TEACHER"}, headers=admin_headers
        )
        assert [m["id"] for m in response.json()["items"]] == [second["id"]]

    def test_invalid_question_rejected(self, client, admin_headers):
        """Answer indexes must point at an option."""
        response = client.post(
            "/v1/admin/modules",
            json={
                "title": "Bad",
                "role": "TEACHER",
                "video_url": "https://x.org/v",
                "questions": [
                    {"text": "Q?", "options": ["a", "b"], "correct_answer_index": 4}
                ],
            },
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["message"] == "Validation error"

    def test_delete_unknown_module(self, client, admin_headers):
        """Unknown modules are 404."""
        response = client.delete(
            "/v1/admin/modules/00000000-0000-0000-0000-000000000000",
            headers=admin_headers,
        )
        assert response.status_code == 404


class TestLearnerJourney:
    """Learner flow from dashboard to unlocked second module."""

    def test_full_flow(self, client, admin_headers, learner_headers):
        """Watch, fail, pass, unlock; progress shows up in reports."""
        first = create_module(client, admin_headers, "Safety", questions=2)
        second = create_module(client, admin_headers, "Grading", questions=1)

        response = client.get("/v1/modules", headers=learner_headers)
        assert response.status_code == 200
        dashboard = response.json()
        assert dashboard["total"] == 2
        assert dashboard["folders"][0]["name"] == "DEF Guidelines"
        statuses = [m["status"] for m in dashboard["folders"][0]["modules"]]
        assert statuses == ["video_required", "locked"]

        response = client.get(f"/v1/modules/{second['id']}", headers=learner_headers)
        assert response.status_code == 403

        response = client.post(
            f"/v1/quiz/{first['id']}/start", headers=learner_headers
        )
        assert response.status_code == 409

        response = client.post(
            f"/v1/progress/{first['id']}/video", headers=learner_headers
        )
        assert response.status_code == 200
        assert response.json()["video_watched"] is True

        # Failed attempt
        response = client.post(
            f"/v1/quiz/{first['id']}/start", headers=learner_headers
        )
        assert response.status_code == 201
        quiz = response.json()
        assert quiz["total_questions"] == 2
        assert "correct_answer_index" not in quiz["question"]

        response = client.get("/v1/quiz/current", headers=learner_headers)
        assert response.json()["question"]["options"] == ["yes", "no"]

        for _ in range(2):
            response = client.post(
                "/v1/quiz/current/answer",
                json={"selected_option": 1},
                headers=learner_headers,
            )
        result = response.json()
        assert result["finished"] is True
        assert result["result"]["score"] == 0
        assert result["result"]["attempts"] == 1

        # Passing attempt
        client.post(f"/v1/quiz/{first['id']}/start", headers=learner_headers)
        response = client.put(
            "/v1/quiz/current/selection", json={"option": 0}, headers=learner_headers
        )
        assert response.json()["selected_option"] == 0
        response = client.post(
            "/v1/quiz/current/answer", json={}, headers=learner_headers
        )
        assert response.json()["finished"] is False
        response = client.post(
            "/v1/quiz/current/answer",
            json={"selected_option": 0},
            headers=learner_headers,
        )
        result = response.json()["result"]
        assert result["passed"] is True
        assert result["score"] == 100
        assert result["attempts"] == 1

        response = client.get("/v1/quiz/current", headers=learner_headers)
        assert response.status_code == 404

        response = client.get(f"/v1/modules/{second['id']}", headers=learner_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "video_required"

        response = client.get("/v1/progress", headers=learner_headers)
        assert response.json()["total"] == 1

        response = client.get(
            "/v1/admin/reports/progress",
            params={"role": "TEACHER"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        rows = response.json()["items"]
        assert rows[0]["learner_id"] == "ana@school.org"
        assert rows[0]["label"] == "1/2 Completed"
        assert rows[0]["percent"] == 50

    def test_strike_out_and_rewatch(self, client, admin_headers, learner_headers):
        """Three failures close the quiz until the video is re-watched."""
        module = create_module(client, admin_headers, "Safety", questions=1)
        client.post(f"/v1/progress/{module['id']}/video", headers=learner_headers)

        for _ in range(3):
            client.post(f"/v1/quiz/{module['id']}/start", headers=learner_headers)
            response = client.post(
                "/v1/quiz/current/answer",
                json={"selected_option": 1},
                headers=learner_headers,
            )
        assert response.json()["result"]["strike_out"] is True

        response = client.post(
            f"/v1/quiz/{module['id']}/start", headers=learner_headers
        )
        assert response.status_code == 409

        response = client.post(
            f"/v1/progress/{module['id']}/rewatch", headers=learner_headers
        )
        assert response.json() | {"updated_at": None, "module_id": None} == {
            "module_id": None,
            "video_watched": False,
            "score": None,
            "passed": False,
            "attempts": 0,
            "updated_at": None,
        }

    def test_abandon_quiz(self, client, admin_headers, learner_headers):
        """Abandoning closes the session without counting an attempt."""
        module = create_module(client, admin_headers, "Safety")
        client.post(f"/v1/progress/{module['id']}/video", headers=learner_headers)
        client.post(f"/v1/quiz/{module['id']}/start", headers=learner_headers)

        response = client.delete("/v1/quiz/current", headers=learner_headers)
        assert response.status_code == 204

        response = client.get("/v1/progress", headers=learner_headers)
        assert response.json()["items"][0]["attempts"] == 0

    def test_module_without_quiz(self, client, admin_headers, learner_headers):
        """Quiz-less modules answer 409 module_not_configured."""
        module = create_module(client, admin_headers, "Draft", questions=0)
        client.post(f"/v1/progress/{module['id']}/video", headers=learner_headers)

        response = client.post(
            f"/v1/quiz/{module['id']}/start", headers=learner_headers
        )
        assert response.status_code == 409
        assert "no quiz" in response.json()["message"]

    def test_hr_deletes_learner_data(
        self, client, admin_headers, learner_headers
    ):
        """Account deletion clears the learner's progress."""
        module = create_module(client, admin_headers, "Safety")
        client.post(f"/v1/progress/{module['id']}/video", headers=learner_headers)

        response = client.delete(
            "/v1/admin/learners/ana@school.org/progress", headers=admin_headers
        )
        assert response.status_code == 204

        response = client.get("/v1/progress", headers=learner_headers)
        assert response.json()["total"] == 0
