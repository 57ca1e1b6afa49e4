"""Permission matrix tests for the authorization gate. No database access."""

from __future__ import annotations

from django.test import SimpleTestCase

from access_control.gate import Action, Forbidden, authorize, group_has_permission, is_authorized
from access_control.models import Group, Permission
from scripts.management.commands.seed_blog import SEED_GROUPS
from tests.utils import make_context


def _group(group_id: str) -> Group:
    description, permissions = SEED_GROUPS[group_id]
    return Group(id=group_id, description=description, permissions=[p.value for p in permissions])


class GroupPermissionTests(SimpleTestCase):
    def test_all_implies_every_permission(self):
        admin = _group("admin")
        for permission in Permission:
            self.assertTrue(group_has_permission(admin, permission), permission)

    def test_membership_is_exact_without_all(self):
        default = _group("default")
        self.assertTrue(group_has_permission(default, Permission.CREATE_COMMENT))
        self.assertTrue(group_has_permission(default, "edit_comment"))
        self.assertFalse(group_has_permission(default, Permission.EDIT_FOREIGN_COMMENT))
        self.assertFalse(group_has_permission(default, Permission.CREATE_ARTICLE))

    def test_empty_group_holds_nothing(self):
        empty = Group(id="empty", permissions=[])
        for permission in Permission:
            self.assertFalse(group_has_permission(empty, permission))


class GateMatrixTests(SimpleTestCase):
    """Own/foreign decisions for each seeded group."""

    def setUp(self):
        self.anon = make_context(None, None)
        self.admin = make_context("root", _group("admin"))
        self.author = make_context("writer", _group("author"))
        self.reader = make_context("reader", _group("default"))

    def test_anonymous_is_forbidden_by_default(self):
        for action in Action:
            with self.assertRaises(Forbidden):
                authorize(self.anon, action, "someone")

    def test_anonymous_comment_needs_switch(self):
        self.assertTrue(is_authorized(self.anon, Action.CREATE_COMMENT, allow_anonymous=True))
        self.assertFalse(is_authorized(self.anon, Action.CREATE_COMMENT, allow_anonymous=False))

    def test_anonymous_switch_does_not_open_other_actions(self):
        self.assertFalse(is_authorized(self.anon, Action.EDIT_COMMENT, None, allow_anonymous=True))
        self.assertFalse(is_authorized(self.anon, Action.CREATE_ARTICLE, allow_anonymous=True))

    def test_reader_edits_and_deletes_own_comment_only(self):
        for action in (Action.EDIT_COMMENT, Action.DELETE_COMMENT, Action.RESTORE_COMMENT):
            self.assertTrue(is_authorized(self.reader, action, "reader"), action)
            self.assertFalse(is_authorized(self.reader, action, "writer"), action)
            self.assertFalse(is_authorized(self.reader, action, None), action)

    def test_own_permission_without_ownership_is_not_enough(self):
        # The author group holds edit_article but not edit_foreign_article.
        self.assertTrue(is_authorized(self.author, Action.EDIT_ARTICLE, "writer"))
        self.assertFalse(is_authorized(self.author, Action.EDIT_ARTICLE, "root"))

    def test_ownership_without_own_permission_is_not_enough(self):
        # Readers cannot edit an article even if they somehow own it.
        self.assertFalse(is_authorized(self.reader, Action.EDIT_ARTICLE, "reader"))

    def test_foreign_permission_overrides_ownership(self):
        self.assertTrue(is_authorized(self.author, Action.EDIT_COMMENT, "reader"))
        self.assertTrue(is_authorized(self.author, Action.DELETE_COMMENT, None))

    def test_admin_may_do_everything(self):
        for action in Action:
            self.assertTrue(is_authorized(self.admin, action, "someone-else"), action)

    def test_create_actions_need_own_permission(self):
        self.assertTrue(is_authorized(self.author, Action.CREATE_ARTICLE))
        self.assertFalse(is_authorized(self.reader, Action.CREATE_ARTICLE))
        self.assertTrue(is_authorized(self.reader, Action.CREATE_COMMENT))

    def test_restore_is_gated_like_delete(self):
        for ctx in (self.author, self.reader):
            for owner in ("writer", "reader", None):
                self.assertEqual(
                    is_authorized(ctx, Action.RESTORE_ARTICLE, owner),
                    is_authorized(ctx, Action.DELETE_ARTICLE, owner),
                )
                self.assertEqual(
                    is_authorized(ctx, Action.RESTORE_COMMENT, owner),
                    is_authorized(ctx, Action.DELETE_COMMENT, owner),
                )

    def test_purge_needs_foreign_delete(self):
        # Owning the article and holding delete_article does not allow a purge.
        self.assertFalse(is_authorized(self.author, Action.PURGE_ARTICLE, "writer"))
        self.assertTrue(is_authorized(self.author, Action.PURGE_COMMENT, "reader"))
        self.assertFalse(is_authorized(self.reader, Action.PURGE_COMMENT, "reader"))

    def test_users_may_manage_themselves(self):
        self.assertTrue(is_authorized(self.reader, Action.EDIT_USER, "reader"))
        self.assertTrue(is_authorized(self.reader, Action.DELETE_USER, "reader"))
        self.assertFalse(is_authorized(self.reader, Action.EDIT_USER, "writer"))
        self.assertTrue(is_authorized(self.admin, Action.DELETE_USER, "reader"))

    def test_manage_groups_is_admin_only(self):
        self.assertTrue(is_authorized(self.admin, Action.MANAGE_GROUPS))
        self.assertFalse(is_authorized(self.author, Action.MANAGE_GROUPS))

    def test_forbidden_message_is_generic(self):
        with self.assertRaises(Forbidden) as caught:
            authorize(self.reader, Action.EDIT_ARTICLE, "writer")
        self.assertEqual(str(caught.exception.detail), Forbidden.default_detail)

    def test_every_action_has_a_rule(self):
        for action in Action:
            self.assertIsNotNone(action.rule)
