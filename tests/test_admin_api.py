"""API tests for the admin review queue, author management and the manual sweep."""

from datetime import datetime, timedelta, timezone

from blogcms.models.blog import Article
from blogcms.services.scheduler import publish_scheduled_articles


def submit_for_review(client, headers, title="Pending piece"):
    response = client.post(
        "/api/articles", json={"title": title, "content": "Body", "status": "review"}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


def review(client, headers, article_id, **decision):
    return client.patch(f"/api/admin/articles/{article_id}/status", json=decision, headers=headers)


class TestReviewQueue:
    def test_lists_articles_waiting_for_review(self, client, author_headers, admin_headers):
        pending = submit_for_review(client, author_headers)
        client.post("/api/articles", json={"title": "D", "content": "C"}, headers=author_headers)

        response = client.get("/api/admin/articles", params={"status": "review"}, headers=admin_headers)
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [pending["id"]]

    def test_approve_publishes_now(self, client, author_headers, admin_headers, admin_user):
        pending = submit_for_review(client, author_headers)
        response = review(client, admin_headers, pending["id"], status="published")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "published"
        assert body["published"] is True
        assert body["reviewedBy"] == admin_user.id
        assert body["reviewedAt"] is not None

    def test_reject_without_remarks_is_400(self, client, author_headers, admin_headers):
        pending = submit_for_review(client, author_headers)
        for remarks in (None, "", "   "):
            response = review(client, admin_headers, pending["id"], status="draft", remarks=remarks)
            assert response.status_code == 400
            assert response.json()["message"] == "Validation error"

        still_pending = client.get(f"/api/articles/{pending['id']}", headers=author_headers).json()
        assert still_pending["status"] == "review"

    def test_reject_with_remarks_returns_to_draft(self, client, author_headers, admin_headers):
        pending = submit_for_review(client, author_headers)
        response = review(client, admin_headers, pending["id"], status="draft", remarks="Add sources")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "draft"
        assert body["published"] is False
        assert body["reviewRemarks"] == "Add sources"

    def test_scheduled_approval_goes_live_after_sweep(self, client, db, author_headers, admin_headers):
        pending = submit_for_review(client, author_headers)
        when = datetime.now(timezone.utc) + timedelta(hours=1)

        response = review(client, admin_headers, pending["id"], status="published", scheduledPublishAt=when.isoformat())
        body = response.json()
        assert body["status"] == "published"
        assert body["published"] is False
        assert body["publishedAt"] is None
        assert client.get(f"/api/articles/{pending['id']}/public").status_code == 404

        result = publish_scheduled_articles(db, now=when + timedelta(seconds=1))
        assert result["published"] == 1

        live = client.get(f"/api/articles/{pending['id']}/public")
        assert live.status_code == 200
        assert live.json()["publishedAt"] is not None
        db.expire_all()
        assert db.get(Article, pending["id"]).published is True

    def test_review_is_not_a_valid_decision(self, client, author_headers, admin_headers):
        pending = submit_for_review(client, author_headers)
        response = review(client, admin_headers, pending["id"], status="review")
        assert response.status_code == 400

    def test_review_of_missing_article_is_404(self, client, admin_headers):
        assert review(client, admin_headers, 4242, status="published").status_code == 404


class TestAuthorManagement:
    def test_create_and_list_authors(self, client, admin_headers):
        response = client.post(
            "/api/admin/authors",
            json={"name": "Linus Writer", "email": "linus@example.com", "password": "secret123", "canPublish": True},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["role"] == "author"
        assert response.json()["canPublish"] is True

        authors = client.get("/api/admin/authors", headers=admin_headers).json()
        assert [a["email"] for a in authors] == ["linus@example.com"]

    def test_duplicate_author_email_is_409(self, client, admin_headers, author_user):
        response = client.post(
            "/api/admin/authors",
            json={"name": "Dup", "email": author_user.email, "password": "secret123"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_grant_publish_permission(self, client, admin_headers, author_user, author_headers):
        response = client.patch(
            f"/api/admin/authors/{author_user.id}/permissions", json={"canPublish": True}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["canPublish"] is True

        created = client.post(
            "/api/articles", json={"title": "Now live", "content": "C", "status": "published"}, headers=author_headers
        )
        assert created.status_code == 201
        assert created.json()["published"] is True

    def test_permissions_for_admin_account_is_404(self, client, admin_headers, admin_user):
        response = client.patch(
            f"/api/admin/authors/{admin_user.id}/permissions", json={"canPublish": False}, headers=admin_headers
        )
        assert response.status_code == 404


class TestDashboardAndScheduler:
    def test_dashboard_counts(self, client, admin_headers, author_headers, publisher_headers):
        submit_for_review(client, author_headers)
        client.post("/api/articles", json={"title": "P", "content": "C", "status": "published"}, headers=publisher_headers)

        response = client.get("/api/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        stats = response.json()["stats"]
        assert stats["pendingReview"] == 1
        assert stats["articlesByStatus"] == {"draft": 0, "review": 1, "published": 1}
        assert stats["totalAuthors"] == 2
        assert len(response.json()["recentArticles"]) == 2

    def test_manual_sweep(self, client, admin_headers):
        response = client.post("/api/admin/scheduler/run", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {
            "success": True, "published": 0, "message": "No scheduled articles to publish",
        }

    def test_admin_profile_update(self, client, admin_headers):
        response = client.patch(
            "/api/admin/profile",
            json={"bio": "Editor in chief", "socialLinks": {"github": "https://github.com/ada"}},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["bio"] == "Editor in chief"
        assert response.json()["socialLinks"] == {"github": "https://github.com/ada"}
