"""API tests for articles: listing, lookup by id or slug, gating and lifecycle."""

from __future__ import annotations

from django.test import TestCase
from rest_framework.test import APIClient

from access_control.models import Group, Permission
from articles.models import Article
from comments.models import Comment
from tests.utils import create_article, create_comment, create_user, login, seed_groups


class ArticleApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        groups = seed_groups()
        cls.admin = create_user("root", "RootPass123", groups["admin"])
        cls.writer = create_user("writer", "WriterPass123", groups["author"])
        cls.rival = create_user("rival", "RivalPass123", groups["author"])
        cls.reader = create_user("reader", "ReaderPass123", groups["default"])
        editors = Group.objects.create(
            id="editor", description="Copy edits only.", permissions=[Permission.EDIT_FOREIGN_ARTICLE.value]
        )
        cls.editor = create_user("editor", "EditorPass123", editors)
        writers = Group.objects.create(
            id="writer-only", description="No removals.", permissions=[Permission.EDIT_ARTICLE.value]
        )
        cls.scribe = create_user("scribe", "ScribePass123", writers)

        cls.post = create_article(cls.writer, "first-post", content="# Title\n\nBody")
        cls.draft = create_article(cls.writer, "draft-post", visible=False)
        create_comment(cls.post, cls.reader, "visible")
        create_comment(cls.post, "Guest", "hidden", visible=False)

    def setUp(self):
        self.api_client = APIClient()

    def _as(self, user) -> APIClient:
        client = APIClient()
        login(client, user)
        return client

    def test_list_shows_published_only(self):
        resp = self.api_client.get("/api/articles/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["errors"], [])
        urls = [a["url"] for a in body["data"]]
        self.assertEqual(urls, ["first-post"])
        self.assertEqual(body["data"][0]["comment_count"], 1)

    def test_retrieve_by_slug_and_id(self):
        by_slug = self.api_client.get("/api/articles/first-post/")
        by_id = self.api_client.get(f"/api/articles/{self.post.pk}/")
        self.assertEqual(by_slug.status_code, 200)
        self.assertEqual(by_slug.json()["data"]["id"], by_id.json()["data"]["id"])
        self.assertIn("<h1>Title</h1>", by_slug.json()["data"]["html"])

    def test_draft_hidden_from_others(self):
        self.assertEqual(self.api_client.get("/api/articles/draft-post/").status_code, 404)
        self.assertEqual(self._as(self.reader).get("/api/articles/draft-post/").status_code, 404)
        self.assertEqual(self._as(self.writer).get("/api/articles/draft-post/").status_code, 200)
        self.assertEqual(self._as(self.admin).get("/api/articles/draft-post/").status_code, 200)

    def test_create_requires_permission(self):
        payload = {"title": "Mine", "url": "mine", "content": "text"}
        self.assertEqual(self.api_client.post("/api/articles/", payload, format="json").status_code, 403)
        self.assertEqual(self._as(self.reader).post("/api/articles/", payload, format="json").status_code, 403)

        resp = self._as(self.writer).post("/api/articles/", payload, format="json")
        self.assertEqual(resp.status_code, 201)
        data = resp.json()["data"]
        self.assertEqual(data["author"], "writer")
        self.assertFalse(data["visible"])

    def test_duplicate_slug_is_conflict(self):
        resp = self._as(self.writer).post(
            "/api/articles/", {"title": "Again", "url": "draft-post", "content": "x"}, format="json"
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(Article.objects.filter(url="draft-post").count(), 1)

    def test_illegal_slug_rejected(self):
        client = self._as(self.writer)
        for url in ("has space", "a/b", "what?", "100"):
            resp = client.post("/api/articles/", {"title": "T", "url": url, "content": "x"}, format="json")
            self.assertEqual(resp.status_code, 400, url)

    def test_validation_precedes_authorization(self):
        resp = self._as(self.reader).post(
            "/api/articles/", {"title": "T", "url": "bad slug", "content": "x"}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_edit_own_and_foreign(self):
        self.assertEqual(
            self._as(self.rival).patch("/api/articles/first-post/", {"title": "Mine now"}, format="json").status_code,
            403,
        )
        resp = self._as(self.writer).patch("/api/articles/first-post/", {"title": "Renamed"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["title"], "Renamed")

        resp = self._as(self.admin).patch(
            f"/api/articles/{self.post.pk}/", {"visible": False}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Article.objects.get(pk=self.post.pk).visible)

    def test_publish_draft(self):
        resp = self._as(self.writer).patch("/api/articles/draft-post/", {"visible": True}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.api_client.get("/api/articles/draft-post/").status_code, 200)

    def test_visibility_flip_needs_delete_permission(self):
        client = self._as(self.editor)
        self.assertEqual(client.delete("/api/articles/first-post/").status_code, 403)
        resp = client.patch("/api/articles/first-post/", {"visible": False}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(Article.objects.get(pk=self.post.pk).visible)

        Article.objects.filter(pk=self.post.pk).update(visible=False)
        self.assertEqual(client.post("/api/articles/first-post/restore/").status_code, 403)
        resp = client.patch("/api/articles/first-post/", {"visible": True}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(Article.objects.get(pk=self.post.pk).visible)

    def test_editor_keeps_copy_edit_rights(self):
        client = self._as(self.editor)
        resp = client.patch(
            "/api/articles/first-post/", {"title": "Tidied", "visible": True}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Article.objects.get(pk=self.post.pk).title, "Tidied")

    def test_own_article_removal_needs_delete_permission(self):
        own = create_article(self.scribe, "scribe-post")
        client = self._as(self.scribe)
        self.assertEqual(client.patch("/api/articles/scribe-post/", {"title": "Ok"}, format="json").status_code, 200)
        resp = client.patch("/api/articles/scribe-post/", {"visible": False}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(Article.objects.get(pk=own.pk).visible)

    def test_refused_edit_does_not_reveal_taken_slug(self):
        resp = self._as(self.rival).patch("/api/articles/first-post/", {"url": "draft-post"}, format="json")
        self.assertEqual(resp.status_code, 403)

        resp = self._as(self.writer).patch("/api/articles/first-post/", {"url": "draft-post"}, format="json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(Article.objects.get(pk=self.post.pk).url, "first-post")

    def test_refused_create_does_not_reveal_taken_slug(self):
        resp = self._as(self.reader).post(
            "/api/articles/", {"title": "T", "url": "draft-post", "content": "x"}, format="json"
        )
        self.assertEqual(resp.status_code, 403)

    def test_soft_delete_and_restore(self):
        client = self._as(self.writer)
        resp = client.delete("/api/articles/first-post/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.api_client.get("/api/articles/").json()["data"], [])
        self.assertEqual(self.api_client.get("/api/articles/first-post/").status_code, 404)

        stored = Article.objects.get(pk=self.post.pk)
        self.assertEqual(stored.content, "# Title\n\nBody")

        self.assertEqual(client.post("/api/articles/first-post/restore/").status_code, 200)
        self.assertEqual(self.api_client.get("/api/articles/first-post/").status_code, 200)

    def test_purge_needs_foreign_delete(self):
        self.assertEqual(self._as(self.writer).post("/api/articles/first-post/purge/").status_code, 403)

        resp = self._as(self.admin).post("/api/articles/first-post/purge/")
        self.assertEqual(resp.status_code, 204)
        self.assertFalse(Article.objects.filter(pk=self.post.pk).exists())
        self.assertFalse(Comment.objects.filter(article_id=self.post.pk).exists())
        self.assertEqual(self._as(self.admin).post("/api/articles/first-post/restore/").status_code, 404)

    def test_unknown_article(self):
        self.assertEqual(self.api_client.get("/api/articles/nope/").status_code, 404)
        self.assertEqual(self.api_client.get("/api/articles/424242/").status_code, 404)
