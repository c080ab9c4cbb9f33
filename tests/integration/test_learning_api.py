# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the learning API.

Runs the full application (middleware, routers, services) against the
seeded in-memory learning store.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apexlms.api.dependencies import current_learning_store, get_learning_store
from apexlms.domains.errors import PersistenceError
from apexlms.infrastructure.storage import InMemoryLearningStore

pytestmark = pytest.mark.integration

QUIZ_DEFINITION = {
    "title": "Integration Quiz",
    "passing_score": 70,
    "questions": [
        {
            "text": "First?",
            "options": [{"text": "right", "is_correct": True}, {"text": "wrong"}],
        },
        {
            "text": "Second?",
            "options": [{"text": "wrong"}, {"text": "right", "is_correct": True}],
        },
    ],
}


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["storage_backend"] == "memory"
        assert data["components"]["storage"]["status"] == "healthy"

    def test_readiness(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True


class TestAuthentication:
    """Tests for authentication and roles."""

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/courses")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/courses", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401

    def test_learner_cannot_author(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post("/api/v1/quizzes", json=QUIZ_DEFINITION, headers=learner_headers)

        assert response.status_code == 403


class TestCourses:
    """Tests for course endpoints."""

    def test_list_published_courses(self, client: TestClient, learner_headers: dict) -> None:
        response = client.get("/api/v1/courses", headers=learner_headers)

        assert response.status_code == 200
        assert [c["title"] for c in response.json()] == [
            "DevOps Engineering",
            "Frontend Development",
            "Full Stack Development",
            "Python Programming",
        ]

    def test_learner_cannot_list_drafts(self, client: TestClient, learner_headers: dict) -> None:
        response = client.get(
            "/api/v1/courses",
            params={"include_unpublished": "true"},
            headers=learner_headers,
        )

        assert response.status_code == 403

    def test_course_content_gate_states(self, client: TestClient, learner_headers: dict) -> None:
        response = client.get("/api/v1/courses/frontend/content", headers=learner_headers)

        assert response.status_code == 200
        lessons = response.json()["modules"][0]["lessons"]
        assert [lesson["state"] for lesson in lessons] == ["UNLOCKED"] + ["LOCKED"] * 4
        assert lessons[-1]["quiz_id"] == "quiz-1"

    def test_unknown_course(self, client: TestClient, learner_headers: dict) -> None:
        response = client.get("/api/v1/courses/missing/content", headers=learner_headers)

        assert response.status_code == 404

    def test_instructor_creates_draft_course(self, client: TestClient, instructor_headers: dict) -> None:
        response = client.post(
            "/api/v1/courses",
            json={
                "title": "Async Python",
                "modules": [
                    {
                        "title": "Basics",
                        "lessons": [
                            {"title": "Event loop", "content_type": "TEXT", "content_body": "..."},
                            {"title": "Check", "content_type": "QUIZ", "quiz_id": "quiz-1"},
                        ],
                    }
                ],
            },
            headers=instructor_headers,
        )

        assert response.status_code == 201
        course = response.json()
        assert course["is_published"] is False

        drafts = client.get(
            "/api/v1/courses",
            params={"include_unpublished": "true"},
            headers=instructor_headers,
        ).json()
        assert course["id"] in [c["id"] for c in drafts]

    def test_course_with_unknown_quiz(self, client: TestClient, instructor_headers: dict) -> None:
        response = client.post(
            "/api/v1/courses",
            json={
                "title": "Broken",
                "modules": [
                    {"title": "M", "lessons": [{"title": "Q", "content_type": "QUIZ", "quiz_id": "nope"}]},
                ],
            },
            headers=instructor_headers,
        )

        assert response.status_code == 422


class TestCourseAdministration:
    """Tests for course update and delete endpoints."""

    def test_publish_authored_course(
        self,
        client: TestClient,
        instructor_headers: dict,
        learner_headers: dict,
    ) -> None:
        created = client.post(
            "/api/v1/courses",
            json={"title": "Async Python", "modules": []},
            headers=instructor_headers,
        ).json()

        response = client.put(
            f"/api/v1/courses/{created['id']}",
            json={"is_published": True, "description": "Coroutines end to end"},
            headers=instructor_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_published"] is True
        assert response.json()["title"] == "Async Python"
        visible = client.get("/api/v1/courses", headers=learner_headers).json()
        assert "Async Python" in [c["title"] for c in visible]

    def test_learner_cannot_update(self, client: TestClient, learner_headers: dict) -> None:
        response = client.put(
            "/api/v1/courses/frontend",
            json={"is_published": False},
            headers=learner_headers,
        )

        assert response.status_code == 403

    def test_update_unknown_course(self, client: TestClient, instructor_headers: dict) -> None:
        response = client.put(
            "/api/v1/courses/missing",
            json={"title": "Nothing"},
            headers=instructor_headers,
        )

        assert response.status_code == 404

    def test_delete_course(
        self,
        client: TestClient,
        instructor_headers: dict,
        learner_headers: dict,
    ) -> None:
        response = client.delete("/api/v1/courses/devops", headers=instructor_headers)

        assert response.status_code == 204
        assert client.get("/api/v1/courses/devops/content", headers=learner_headers).status_code == 404
        assert client.delete("/api/v1/courses/devops", headers=instructor_headers).status_code == 404

    def test_learner_cannot_delete(self, client: TestClient, learner_headers: dict) -> None:
        assert client.delete("/api/v1/courses/devops", headers=learner_headers).status_code == 403


class TestAdminStats:
    """Tests for the dashboard stats endpoint."""

    def test_stats_reflect_activity(
        self,
        client: TestClient,
        instructor_headers: dict,
        learner_headers: dict,
    ) -> None:
        client.post(
            "/api/v1/progress",
            json={"course_id": "frontend", "lesson_id": "lesson-frontend-0"},
            headers=learner_headers,
        )

        response = client.get("/api/v1/admin/stats", headers=instructor_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_courses"] == 4
        assert stats["published_courses"] == 4
        assert stats["total_learners"] == 1
        assert stats["lessons_completed"] == 1
        assert stats["total_submissions"] == 0
        assert stats["pass_rate"] == 0
        assert stats["active_users"] == 0

    def test_learner_forbidden(self, client: TestClient, learner_headers: dict) -> None:
        assert client.get("/api/v1/admin/stats", headers=learner_headers).status_code == 403


class TestProgress:
    """Tests for progress endpoints."""

    def test_completion_unlocks_next_lesson(self, client: TestClient, learner_headers: dict) -> None:
        body = {"course_id": "frontend", "lesson_id": "lesson-frontend-0"}

        first = client.post("/api/v1/progress", json=body, headers=learner_headers)
        second = client.post("/api/v1/progress", json=body, headers=learner_headers)

        assert first.status_code == 200
        assert first.json() == {"success": True}
        assert second.status_code == 200

        completed = client.get("/api/v1/progress/frontend", headers=learner_headers).json()
        assert completed == ["lesson-frontend-0"]

        content = client.get("/api/v1/courses/frontend/content", headers=learner_headers).json()
        states = [lesson["state"] for lesson in content["modules"][0]["lessons"]]
        assert states[:3] == ["COMPLETED", "UNLOCKED", "LOCKED"]

    def test_progress_is_per_learner(self, client: TestClient, make_headers) -> None:
        client.post(
            "/api/v1/progress",
            json={"course_id": "python", "lesson_id": "lesson-python-0"},
            headers=make_headers("ada"),
        )

        response = client.get("/api/v1/progress/python", headers=make_headers("grace"))

        assert response.json() == []

    def test_summary(self, client: TestClient, learner_headers: dict) -> None:
        client.post(
            "/api/v1/progress",
            json={"course_id": "devops", "lesson_id": "lesson-devops-0"},
            headers=learner_headers,
        )

        summary = client.get("/api/v1/progress/devops/summary", headers=learner_headers).json()

        assert summary["total_lessons"] == 4
        assert summary["completed_count"] == 1
        assert summary["percent_complete"] == 25
        assert summary["is_course_completed"] is False

    def test_unknown_lesson(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post(
            "/api/v1/progress",
            json={"course_id": "frontend", "lesson_id": "lesson-python-0"},
            headers=learner_headers,
        )

        assert response.status_code == 404

    def test_unknown_course(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post(
            "/api/v1/progress",
            json={"course_id": "missing", "lesson_id": "l1"},
            headers=learner_headers,
        )

        assert response.status_code == 404

    def test_malformed_body(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post("/api/v1/progress", json={"course_id": "frontend"}, headers=learner_headers)

        assert response.status_code == 422


class TestQuizzes:
    """Tests for quiz endpoints."""

    def test_sample_quiz_metadata(self, client: TestClient, learner_headers: dict) -> None:
        response = client.get("/api/v1/quizzes/quiz-1", headers=learner_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["randomize"] is True
        assert data["question_count"] == 20
        assert data["total_questions"] == 21

    def test_randomized_attempt(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post("/api/v1/quizzes/quiz-1/attempts", headers=learner_headers)

        assert response.status_code == 201
        attempt = response.json()
        assert len(attempt["questions"]) == 20
        assert all("is_correct" not in option for q in attempt["questions"] for option in q["options"])

    def test_randomized_submit_requires_attempt(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post(
            "/api/v1/quizzes/quiz-1/submit",
            json={"answers": {"quiz-1-q1": "quiz-1-q1-o3"}},
            headers=learner_headers,
        )

        assert response.status_code == 422

    def test_author_attempt_grade_flow(
        self,
        client: TestClient,
        learner_headers: dict,
        instructor_headers: dict,
    ) -> None:
        created = client.post("/api/v1/quizzes", json=QUIZ_DEFINITION, headers=instructor_headers)
        assert created.status_code == 201
        quiz_id = created.json()["id"]

        attempt = client.post(f"/api/v1/quizzes/{quiz_id}/attempts", headers=learner_headers).json()
        first, second = attempt["questions"]

        half = client.post(
            f"/api/v1/quizzes/{quiz_id}/submit",
            json={
                "attempt_id": attempt["attempt_id"],
                "answers": {first["id"]: first["options"][0]["id"], second["id"]: second["options"][0]["id"]},
            },
            headers=learner_headers,
        )
        assert half.status_code == 200
        assert half.json() == {"score": 50, "passed": False, "passing_score": 70}

        full = client.post(
            f"/api/v1/quizzes/{quiz_id}/submit",
            json={
                "attempt_id": attempt["attempt_id"],
                "answers": {first["id"]: first["options"][0]["id"], second["id"]: second["options"][1]["id"]},
            },
            headers=learner_headers,
        )
        assert full.json() == {"score": 100, "passed": True, "passing_score": 70}

        history = client.get(f"/api/v1/quizzes/{quiz_id}/submissions", headers=learner_headers).json()
        assert [s["score"] for s in history] == [50, 100]

    def test_non_randomized_submit_without_attempt(
        self,
        client: TestClient,
        learner_headers: dict,
        instructor_headers: dict,
    ) -> None:
        quiz_id = client.post("/api/v1/quizzes", json=QUIZ_DEFINITION, headers=instructor_headers).json()["id"]

        response = client.post(
            f"/api/v1/quizzes/{quiz_id}/submit",
            json={"answers": {}},
            headers=learner_headers,
        )

        assert response.json() == {"score": 0, "passed": False, "passing_score": 70}

    def test_invalid_quiz_definition(self, client: TestClient, instructor_headers: dict) -> None:
        response = client.post(
            "/api/v1/quizzes",
            json={**QUIZ_DEFINITION, "passing_score": 150},
            headers=instructor_headers,
        )

        assert response.status_code == 422

    def test_unknown_quiz(self, client: TestClient, learner_headers: dict) -> None:
        assert client.get("/api/v1/quizzes/missing", headers=learner_headers).status_code == 404
        assert client.post("/api/v1/quizzes/missing/attempts", headers=learner_headers).status_code == 404
        assert (
            client.post("/api/v1/quizzes/missing/submit", json={"answers": {}}, headers=learner_headers).status_code
            == 404
        )

    def test_unknown_attempt(self, client: TestClient, learner_headers: dict) -> None:
        response = client.post(
            "/api/v1/quizzes/quiz-1/submit",
            json={"answers": {}, "attempt_id": "missing"},
            headers=learner_headers,
        )

        assert response.status_code == 404


class TestStorageFailures:
    """Tests for storage failure reporting."""

    def test_read_failure_is_retryable(
        self,
        app: FastAPI,
        client: TestClient,
        learner_headers: dict,
    ) -> None:
        store = MagicMock()
        store.get_course = AsyncMock(side_effect=PersistenceError("Failed to load course"))
        app.dependency_overrides[get_learning_store] = lambda: store

        response = client.get("/api/v1/courses/frontend/content", headers=learner_headers)

        assert response.status_code == 503
        assert response.json() == {"detail": "Storage temporarily unavailable", "retryable": True}
        app.dependency_overrides.clear()

    def test_progress_write_failure_is_surfaced(
        self,
        client: TestClient,
        learner_headers: dict,
    ) -> None:
        store = current_learning_store()
        assert isinstance(store, InMemoryLearningStore)
        store.add_progress = AsyncMock(  # type: ignore[method-assign]
            side_effect=PersistenceError("Failed to record lesson progress"),
        )

        response = client.post(
            "/api/v1/progress",
            json={"course_id": "frontend", "lesson_id": "lesson-frontend-0"},
            headers=learner_headers,
        )

        assert response.status_code == 503
        assert response.json()["retryable"] is True

    def test_submission_write_failure_still_grades(
        self,
        client: TestClient,
        learner_headers: dict,
        instructor_headers: dict,
    ) -> None:
        quiz_id = client.post("/api/v1/quizzes", json=QUIZ_DEFINITION, headers=instructor_headers).json()["id"]

        store = current_learning_store()
        assert store is not None
        store.save_submission = AsyncMock(  # type: ignore[method-assign]
            side_effect=PersistenceError("Failed to save quiz submission"),
        )

        response = client.post(
            f"/api/v1/quizzes/{quiz_id}/submit",
            json={"answers": {}},
            headers=learner_headers,
        )

        assert response.status_code == 200
        assert response.json()["score"] == 0
