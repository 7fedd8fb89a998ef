"""Integration tests for the question endpoints."""

from repositories.db_models import Report


class TestCreateQuestion:
    """Tests for POST /api/questions"""

    def test_create_question(self, client, auth_headers, test_user):
        response = client.post(
            "/api/questions",
            json={"title": "Organic chemistry: SN1 vs SN2", "body": "<p>Which?</p>"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "organic-chemistry-sn1-vs-sn2"
        assert data["author_id"] == test_user.id

    def test_duplicate_title_conflict(self, client, auth_headers, other_auth_headers):
        first = client.post(
            "/api/questions",
            json={"title": "Calculus help", "body": "first"},
            headers=auth_headers,
        )
        second = client.post(
            "/api/questions",
            json={"title": "Calculus help", "body": "second"},
            headers=other_auth_headers,
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert "calculus-help" in second.json()["detail"]

    def test_non_latin_title(self, client, auth_headers):
        response = client.post(
            "/api/questions",
            json={"title": "Математика помощь", "body": "Как решить?"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["slug"] == "математика-помощь"
        fetched = client.get("/api/questions/математика-помощь")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == response.json()["id"]

    def test_requires_authentication(self, client):
        response = client.post(
            "/api/questions", json={"title": "Anon", "body": "question"}
        )

        assert response.status_code == 401

    def test_empty_body_rejected(self, client, auth_headers):
        response = client.post(
            "/api/questions",
            json={"title": "Blank", "body": "   "},
            headers=auth_headers,
        )

        assert response.status_code == 422


class TestReadQuestions:
    """Tests for GET /api/questions"""

    def test_get_by_slug_with_report_count(self, client, test_report):
        response = client.get("/api/questions/calculus-help")

        assert response.status_code == 200
        assert response.json()["report_count"] == 1

    def test_unknown_slug_404(self, client):
        assert client.get("/api/questions/does-not-exist").status_code == 404

    def test_list(self, client, test_question):
        response = client.get("/api/questions")

        assert response.status_code == 200
        assert [q["slug"] for q in response.json()] == ["calculus-help"]


class TestModifyQuestion:
    """Tests for PATCH and DELETE /api/questions/{id}"""

    def test_author_edits(self, client, test_question, auth_headers):
        response = client.patch(
            f"/api/questions/{test_question.id}",
            json={"title": "Calculus help (limits)"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Calculus help (limits)"
        assert response.json()["slug"] == "calculus-help"

    def test_other_user_cannot_edit(self, client, test_question, other_auth_headers):
        response = client.patch(
            f"/api/questions/{test_question.id}",
            json={"title": "Mine now"},
            headers=other_auth_headers,
        )

        assert response.status_code == 403

    def test_author_deletes_with_reports(
        self, client, db_session, test_report, auth_headers
    ):
        question_id = test_report.question_id

        response = client.delete(f"/api/questions/{question_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["reports_removed"] == 1
        assert db_session.query(Report).count() == 0
        assert client.get("/api/questions/calculus-help").status_code == 404


class TestReportQuestion:
    """Tests for POST /api/questions/{id}/reports"""

    def test_report_increments_count(self, client, test_question, other_auth_headers):
        url = f"/api/questions/{test_question.id}/reports"

        first = client.post(url, json={"reason": "Spam"}, headers=other_auth_headers)
        second = client.post(url, json={"reason": "Spam"}, headers=other_auth_headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] != second.json()["id"]
        assert client.get("/api/questions/calculus-help").json()["report_count"] == 2

    def test_report_missing_question(self, client, other_auth_headers):
        response = client.post(
            "/api/questions/9999/reports",
            json={"reason": "Spam"},
            headers=other_auth_headers,
        )

        assert response.status_code == 404
