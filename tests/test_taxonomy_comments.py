"""API tests for categories, tags and reader comments."""

import pytest


@pytest.fixture
def live_article(client, publisher_headers):
    response = client.post(
        "/api/articles",
        json={"title": "Live story", "content": "Body", "status": "published"},
        headers=publisher_headers,
    )
    return response.json()


def comment(client, article_id, **overrides):
    body = {"content": "Great read", "authorName": "Reader", "authorEmail": "reader@example.com"}
    body.update(overrides)
    return client.post(f"/api/articles/{article_id}/comments", json=body)


class TestCategories:
    def test_admin_creates_category_with_generated_slug(self, client, admin_headers):
        response = client.post(
            "/api/categories", json={"name": "Ciencia y Tecnología", "description": "Notas"}, headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["slug"] == "ciencia-y-tecnologia"
        assert [c["name"] for c in client.get("/api/categories").json()] == ["Ciencia y Tecnología"]

    def test_authors_cannot_create_categories(self, client, author_headers):
        response = client.post("/api/categories", json={"name": "Opinion"}, headers=author_headers)
        assert response.status_code == 403

    def test_duplicate_name_is_400(self, client, admin_headers):
        client.post("/api/categories", json={"name": "Opinion"}, headers=admin_headers)
        response = client.post("/api/categories", json={"name": "Opinion"}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["msg"] == "A category with this name already exists"

    def test_update_and_delete(self, client, admin_headers):
        created = client.post("/api/categories", json={"name": "Opinion"}, headers=admin_headers).json()
        updated = client.patch(
            f"/api/categories/{created['id']}", json={"description": "Columns"}, headers=admin_headers
        )
        assert updated.status_code == 200
        assert updated.json()["description"] == "Columns"
        assert updated.json()["name"] == "Opinion"

        assert client.delete(f"/api/categories/{created['id']}", headers=admin_headers).status_code == 204
        assert client.delete(f"/api/categories/{created['id']}", headers=admin_headers).status_code == 404


class TestTags:
    def test_authors_create_tags_and_admin_deletes(self, client, author_headers, admin_headers):
        created = client.post("/api/tags", json={"name": "Machine Learning"}, headers=author_headers)
        assert created.status_code == 201
        assert created.json()["slug"] == "machine-learning"
        tag_id = created.json()["id"]

        assert client.delete(f"/api/tags/{tag_id}", headers=author_headers).status_code == 403
        assert client.delete(f"/api/tags/{tag_id}", headers=admin_headers).status_code == 204
        assert client.get("/api/tags").json() == []


class TestComments:
    def test_comment_on_published_article(self, client, live_article):
        response = comment(client, live_article["id"])
        assert response.status_code == 201
        body = response.json()
        assert body["content"] == "Great read"
        assert body["replyCount"] == 0
        assert "authorEmail" not in body

    def test_replies_are_threaded_and_counted(self, client, live_article):
        parent = comment(client, live_article["id"]).json()
        reply = comment(client, live_article["id"], content="Agreed", parentId=parent["id"])
        assert reply.status_code == 201

        threads = client.get(f"/api/articles/{live_article['id']}/comments").json()
        assert len(threads) == 1
        assert threads[0]["replyCount"] == 1
        assert [r["content"] for r in threads[0]["replies"]] == ["Agreed"]

    def test_reply_to_unknown_parent_is_400(self, client, live_article):
        response = comment(client, live_article["id"], parentId=999)
        assert response.status_code == 400

    def test_cannot_comment_on_draft(self, client, author_headers):
        draft = client.post("/api/articles", json={"title": "D", "content": "C"}, headers=author_headers).json()
        assert comment(client, draft["id"]).status_code == 404

    def test_invalid_email_is_400(self, client, live_article):
        assert comment(client, live_article["id"], authorEmail="nope").status_code == 400

    def test_admin_deletes_reply_and_counter_drops(self, client, live_article, admin_headers, author_headers):
        parent = comment(client, live_article["id"]).json()
        reply = comment(client, live_article["id"], parentId=parent["id"]).json()

        assert client.delete(f"/api/comments/{reply['id']}", headers=author_headers).status_code == 403
        assert client.delete(f"/api/comments/{reply['id']}", headers=admin_headers).status_code == 204

        threads = client.get(f"/api/articles/{live_article['id']}/comments").json()
        assert threads[0]["replyCount"] == 0
        assert threads[0]["replies"] == []
