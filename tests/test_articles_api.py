"""API tests for the article routes: creation, editing, status changes and public views."""

from datetime import datetime, timedelta, timezone

import pytest


def create(client, headers, **payload):
    body = {"title": "Hello World", "content": "First body"}
    body.update(payload)
    response = client.post("/api/articles", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def future(hours=1):
    return (datetime.now(timezone.utc) + timedelta(hours=hours)).isoformat()


class TestCreate:
    def test_created_draft_round_trips(self, client, author_headers, author_user):
        created = create(client, author_headers, status="draft")

        fetched = client.get(f"/api/articles/{created['id']}", headers=author_headers)
        assert fetched.status_code == 200
        body = fetched.json()
        assert body["title"] == "Hello World"
        assert body["content"] == "First body"
        assert body["status"] == "draft"
        assert body["published"] is False
        assert body["authorId"] == author_user.id
        assert body["slug"] == "hello-world"

    def test_submit_for_review_is_not_published(self, client, author_headers):
        created = create(client, author_headers, status="review")
        assert created["status"] == "review"
        assert created["published"] is False
        assert created["publishedAt"] is None

    def test_author_without_permission_cannot_publish(self, client, author_headers):
        response = client.post(
            "/api/articles", json={"title": "T", "content": "C", "status": "published"}, headers=author_headers
        )
        assert response.status_code == 403
        assert response.json()["message"] == "You don't have permission to publish articles"

    def test_author_with_permission_publishes_directly(self, client, publisher_headers):
        created = create(client, publisher_headers, status="published")
        assert created["published"] is True
        assert created["publishedAt"] is not None

    def test_admin_cannot_create_in_review(self, client, admin_headers):
        response = client.post(
            "/api/articles", json={"title": "T", "content": "C", "status": "review"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"

    def test_scheduled_creation_stays_offline(self, client, publisher_headers):
        created = create(client, publisher_headers, status="published", scheduledPublishAt=future())
        assert created["status"] == "published"
        assert created["published"] is False
        assert created["scheduledPublishAt"] is not None

    def test_schedule_with_draft_is_ignored(self, client, author_headers):
        created = create(client, author_headers, status="draft", scheduledPublishAt=future())
        assert created["scheduledPublishAt"] is None
        assert created["published"] is False

    def test_duplicate_titles_get_unique_slugs(self, client, author_headers):
        first = create(client, author_headers)
        second = create(client, author_headers)
        assert first["slug"] == "hello-world"
        assert second["slug"] == "hello-world-2"

    def test_explicit_duplicate_slug_is_rejected(self, client, author_headers):
        create(client, author_headers, slug="taken")
        response = client.post(
            "/api/articles", json={"title": "Other", "content": "C", "slug": "taken"}, headers=author_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["loc"] == ["body", "slug"]

    def test_unknown_category_is_rejected(self, client, author_headers):
        response = client.post(
            "/api/articles", json={"title": "T", "content": "C", "categoryIds": [404]}, headers=author_headers
        )
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        response = client.post("/api/articles", json={"title": "T", "content": "C"})
        assert response.status_code == 401


class TestEditing:
    def test_stranger_cannot_patch(self, client, author_headers, other_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}", json={"title": "Hijacked"}, headers=other_headers
        )
        assert response.status_code == 403

    def test_co_author_can_patch(self, client, author_headers, other_headers, other_author):
        created = create(client, author_headers, coAuthorIds=[other_author.id])
        response = client.patch(
            f"/api/articles/{created['id']}", json={"title": "Shared edit"}, headers=other_headers
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Shared edit"

    def test_admin_can_patch_any_article(self, client, author_headers, admin_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}", json={"excerpt": "Summary"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["excerpt"] == "Summary"

    def test_published_flag_is_not_editable(self, client, author_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}", json={"published": True}, headers=author_headers
        )
        assert response.status_code == 200
        assert response.json()["published"] is False

    def test_patch_to_review_through_update(self, client, author_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}", json={"status": "review"}, headers=author_headers
        )
        assert response.json()["status"] == "review"
        assert response.json()["published"] is False

    def test_full_view_includes_relations(self, client, author_headers, admin_headers, other_author):
        category = client.post("/api/categories", json={"name": "Python"}, headers=admin_headers).json()
        tag = client.post("/api/tags", json={"name": "FastAPI"}, headers=author_headers).json()
        created = create(
            client, author_headers,
            categoryIds=[category["id"]], tagIds=[tag["id"]], coAuthorIds=[other_author.id],
        )

        response = client.get(f"/api/articles/{created['id']}/full", headers=author_headers)
        assert response.status_code == 200
        body = response.json()
        assert [c["slug"] for c in body["categories"]] == ["python"]
        assert [t["slug"] for t in body["tags"]] == ["fastapi"]
        assert [a["id"] for a in body["coAuthors"]] == [other_author.id]
        assert body["author"]["name"] == "Alan Author"

    def test_missing_article_is_404(self, client, author_headers):
        response = client.get("/api/articles/9999", headers=author_headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Article not found"}


class TestStatusChanges:
    @pytest.mark.parametrize("target", ["draft", "review"])
    def test_unpublishing_clears_published(self, client, publisher_headers, target):
        created = create(client, publisher_headers, status="published")
        response = client.patch(
            f"/api/articles/{created['id']}/status", json={"status": target}, headers=publisher_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == target
        assert body["published"] is False
        assert body["publishedAt"] is None

    def test_author_cannot_publish_via_status_route(self, client, author_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}/status", json={"status": "published"}, headers=author_headers
        )
        assert response.status_code == 403

    def test_stranger_cannot_change_status(self, client, author_headers, other_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}/status", json={"status": "review"}, headers=other_headers
        )
        assert response.status_code == 403

    def test_invalid_status_value_is_400(self, client, author_headers):
        created = create(client, author_headers)
        response = client.patch(
            f"/api/articles/{created['id']}/status", json={"status": "archived"}, headers=author_headers
        )
        assert response.status_code == 400


class TestRescheduling:
    def approve_later(self, client, author_headers, admin_headers, **payload):
        pending = create(client, author_headers, status="review", **payload)
        response = client.patch(
            f"/api/admin/articles/{pending['id']}/status",
            json={"status": "published", "scheduledPublishAt": future(24 * 7)},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["published"] is False
        return response.json()

    def test_author_cannot_clear_admin_schedule(self, client, author_headers, admin_headers):
        scheduled = self.approve_later(client, author_headers, admin_headers)
        response = client.patch(
            f"/api/articles/{scheduled['id']}", json={"scheduledPublishAt": None}, headers=author_headers
        )
        assert response.status_code == 403

        current = client.get(f"/api/articles/{scheduled['id']}", headers=author_headers).json()
        assert current["published"] is False
        assert current["scheduledPublishAt"] is not None
        assert client.get(f"/api/articles/{scheduled['id']}/public").status_code == 404

    def test_co_author_cannot_move_schedule_to_the_past(
        self, client, author_headers, admin_headers, other_headers, other_author
    ):
        scheduled = self.approve_later(client, author_headers, admin_headers, coAuthorIds=[other_author.id])
        past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        response = client.patch(
            f"/api/articles/{scheduled['id']}", json={"scheduledPublishAt": past}, headers=other_headers
        )
        assert response.status_code == 403
        assert client.get(f"/api/articles/{scheduled['id']}/public").status_code == 404

    def test_author_can_still_edit_content_of_scheduled_article(self, client, author_headers, admin_headers):
        scheduled = self.approve_later(client, author_headers, admin_headers)
        response = client.patch(
            f"/api/articles/{scheduled['id']}", json={"title": "Polished"}, headers=author_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Polished"
        assert body["published"] is False
        assert body["scheduledPublishAt"] == scheduled["scheduledPublishAt"]

    def test_admin_moves_pending_schedule(self, client, author_headers, admin_headers):
        scheduled = self.approve_later(client, author_headers, admin_headers)
        response = client.patch(
            f"/api/articles/{scheduled['id']}", json={"scheduledPublishAt": future(48)}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "published"
        assert body["published"] is False
        assert body["publishedAt"] is None
        assert body["scheduledPublishAt"] != scheduled["scheduledPublishAt"]

    def test_admin_clearing_schedule_publishes_now(self, client, author_headers, admin_headers):
        scheduled = self.approve_later(client, author_headers, admin_headers)
        response = client.patch(
            f"/api/articles/{scheduled['id']}", json={"scheduledPublishAt": None}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["published"] is True
        assert body["publishedAt"] is not None
        assert body["scheduledPublishAt"] is None

    def test_publisher_reschedules_live_article(self, client, publisher_headers):
        live = create(client, publisher_headers, status="published")
        response = client.patch(
            f"/api/articles/{live['id']}", json={"scheduledPublishAt": future()}, headers=publisher_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "published"
        assert body["published"] is False
        assert body["publishedAt"] is None
        assert client.get(f"/api/articles/{live['id']}/public").status_code == 404

    def test_author_cannot_take_live_article_offline_by_scheduling(
        self, client, publisher_headers, other_headers, other_author
    ):
        live = create(client, publisher_headers, status="published", coAuthorIds=[other_author.id])
        response = client.patch(
            f"/api/articles/{live['id']}", json={"scheduledPublishAt": future()}, headers=other_headers
        )
        assert response.status_code == 403
        assert client.get(f"/api/articles/{live['id']}/public").status_code == 200


class TestPublicViews:
    def test_public_view_counts_visits(self, client, publisher_headers):
        created = create(client, publisher_headers, status="published")
        first = client.get(f"/api/articles/{created['id']}/public")
        second = client.get(f"/api/articles/{created['id']}/public")
        assert first.status_code == 200
        assert first.json()["viewCount"] == 1
        assert second.json()["viewCount"] == 2
        assert "reviewRemarks" not in first.json()

    def test_unpublished_article_is_hidden(self, client, author_headers):
        created = create(client, author_headers, status="review")
        assert client.get(f"/api/articles/{created['id']}/public").status_code == 404

    def test_preview_is_for_editors_only(self, client, author_headers, other_headers, admin_headers):
        created = create(client, author_headers)
        assert client.get(f"/api/articles/{created['id']}/preview", headers=author_headers).status_code == 200
        assert client.get(f"/api/articles/{created['id']}/preview", headers=admin_headers).status_code == 200
        assert client.get(f"/api/articles/{created['id']}/preview", headers=other_headers).status_code == 403

    def test_published_listing_only_has_live_articles(self, client, publisher_headers, author_headers):
        live = create(client, publisher_headers, title="Live", status="published")
        create(client, publisher_headers, title="Later", status="published", scheduledPublishAt=future())
        create(client, author_headers, title="Draft")

        response = client.get("/api/articles/published")
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == [live["id"]]

    def test_published_listing_filters_by_category(self, client, publisher_headers, admin_headers):
        category = client.post("/api/categories", json={"name": "News"}, headers=admin_headers).json()
        tagged = create(client, publisher_headers, title="In news", status="published", categoryIds=[category["id"]])
        create(client, publisher_headers, title="Elsewhere", status="published")

        response = client.get("/api/articles/published", params={"category": "news"})
        assert [a["id"] for a in response.json()] == [tagged["id"]]


class TestDelete:
    def test_only_primary_author_or_admin_deletes(
        self, client, author_headers, other_headers, admin_headers, other_author
    ):
        created = create(client, author_headers, coAuthorIds=[other_author.id])
        assert client.delete(f"/api/articles/{created['id']}", headers=other_headers).status_code == 403
        assert client.delete(f"/api/articles/{created['id']}", headers=author_headers).status_code == 204
        assert client.get(f"/api/articles/{created['id']}", headers=admin_headers).status_code == 404
