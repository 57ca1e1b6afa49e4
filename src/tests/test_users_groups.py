"""API tests for user administration, group management and gated-view checks."""

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from access_control.checks import gated_views_declare_actions
from access_control.models import Group
from articles.models import Article
from authentication.models import Session, User
from tests.utils import create_article, create_comment, create_user, login, seed_groups


class UserApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.groups = seed_groups()
        cls.admin = create_user("root", "RootPass123", cls.groups["admin"])
        cls.reader = create_user("reader", "ReaderPass123", cls.groups["default"])
        cls.other = create_user("other", "OtherPass123", cls.groups["default"])

        article = create_article(cls.admin, "visible-post")
        draft = create_article(cls.admin, "hidden-post", visible=False)
        create_comment(article, cls.reader, "on visible")
        create_comment(draft, cls.reader, "on hidden")

    def _as(self, user) -> APIClient:
        client = APIClient()
        login(client, user)
        return client

    def test_public_profile_hides_email(self):
        resp = APIClient().get("/api/users/reader/")
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("email", resp.json()["data"])

    def test_own_profile_shows_email(self):
        resp = self._as(self.reader).get("/api/users/reader/")
        self.assertEqual(resp.json()["data"]["email"], "reader@example.com")

    def test_edit_self_but_not_others(self):
        client = self._as(self.reader)
        self.assertEqual(client.patch("/api/users/reader/", {"name": "Me"}, format="json").status_code, 200)
        self.assertEqual(client.patch("/api/users/other/", {"name": "You"}, format="json").status_code, 403)

    def test_group_change_needs_foreign_edit(self):
        resp = self._as(self.reader).patch("/api/users/reader/", {"group": "admin"}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.reader.refresh_from_db()
        self.assertEqual(self.reader.group_id, "default")

        resp = self._as(self.admin).patch("/api/users/reader/", {"group": "author"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["group"], "author")

    def test_unknown_group_is_validation_error(self):
        resp = self._as(self.admin).patch("/api/users/reader/", {"group": "nope"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_admin_deactivates_user(self):
        login(APIClient(), self.other)
        resp = self._as(self.admin).delete("/api/users/other/")
        self.assertEqual(resp.status_code, 204)
        self.other.refresh_from_db()
        self.assertFalse(self.other.is_active)
        self.assertFalse(Session.objects.filter(user=self.other).exists())

    def test_user_cannot_deactivate_others(self):
        self.assertEqual(self._as(self.reader).delete("/api/users/other/").status_code, 403)

    def test_user_comments_skip_hidden_articles(self):
        resp = APIClient().get("/api/users/reader/comments/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([c["content"] for c in resp.json()["data"]], ["on visible"])

        resp = self._as(self.admin).get("/api/users/reader/comments/")
        self.assertEqual(len(resp.json()["data"]), 2)

    def test_unknown_user(self):
        self.assertEqual(APIClient().get("/api/users/ghost/").status_code, 404)


class GroupApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        groups = seed_groups()
        cls.admin = create_user("root", "RootPass123", groups["admin"])
        cls.writer = create_user("writer", "WriterPass123", groups["author"])

    def _as(self, user) -> APIClient:
        client = APIClient()
        login(client, user)
        return client

    def test_only_admins_manage_groups(self):
        self.assertEqual(APIClient().get("/api/groups/").status_code, 403)
        self.assertEqual(self._as(self.writer).get("/api/groups/").status_code, 403)

        resp = self._as(self.admin).get("/api/groups/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([g["id"] for g in resp.json()["data"]], ["admin", "author", "default"])

    def test_create_group_normalizes_permissions(self):
        resp = self._as(self.admin).post(
            "/api/groups/",
            {"id": "editor", "permissions": ["edit_foreign_article", "create_article", "create_article"]},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(
            Group.objects.get(pk="editor").permissions, ["create_article", "edit_foreign_article"]
        )

    def test_unknown_permission_rejected(self):
        resp = self._as(self.admin).post(
            "/api/groups/", {"id": "weird", "permissions": ["fly"]}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_group_with_members_cannot_be_deleted(self):
        self.assertEqual(self._as(self.admin).delete("/api/groups/author/").status_code, 409)
        self.assertTrue(Group.objects.filter(pk="author").exists())

    def test_empty_group_can_be_deleted(self):
        Group.objects.create(id="temp", permissions=[])
        self.assertEqual(self._as(self.admin).delete("/api/groups/temp/").status_code, 204)


class ProjectChecksTests(TestCase):
    def test_gated_views_declare_actions(self):
        self.assertEqual(gated_views_declare_actions(None), [])

    def test_seed_blog_command(self):
        call_command("seed_blog", stdout=StringIO())
        self.assertTrue(Article.objects.filter(url="hello-world", visible=True).exists())
        self.assertTrue(User.objects.filter(pk="admin", group_id="admin").exists())

        call_command("seed_blog", "--reset", stdout=StringIO())
        self.assertEqual(Article.objects.filter(url="hello-world").count(), 1)
