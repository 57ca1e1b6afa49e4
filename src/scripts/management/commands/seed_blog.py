"""Seed permission groups, demo users, articles and a comment thread."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db.models import ProtectedError

from access_control.models import Group, Permission
from articles.models import Article
from comments.models import Comment
from comments.owner import Authored, Named

SEED_GROUPS = {
    "admin": ("Full access.", [Permission.ALL]),
    "author": (
        "Writes articles and moderates comments.",
        [
            Permission.CREATE_ARTICLE,
            Permission.EDIT_ARTICLE,
            Permission.DELETE_ARTICLE,
            Permission.CREATE_COMMENT,
            Permission.EDIT_COMMENT,
            Permission.EDIT_FOREIGN_COMMENT,
            Permission.DELETE_COMMENT,
            Permission.DELETE_FOREIGN_COMMENT,
        ],
    ),
    "default": (
        "Registered readers.",
        [Permission.CREATE_COMMENT, Permission.EDIT_COMMENT, Permission.DELETE_COMMENT],
    ),
}

# (id, password, name, group)
SEED_USERS = [
    ("admin", "adminpass", "Admin", "admin"),
    ("author", "authorpass", "Author", "author"),
    ("reader", "readerpass", "Reader", "default"),
]

SEED_ARTICLE_URLS = ["hello-world", "draft-notes"]


def create_seed_groups() -> dict:
    """Create or refresh the three base groups and return an id->Group map."""
    groups = {}
    for group_id, (description, permissions) in SEED_GROUPS.items():
        group, _ = Group.objects.update_or_create(
            id=group_id,
            defaults={"description": description, "permissions": [p.value for p in permissions]},
        )
        groups[group_id] = group
    return groups


def create_seed_users(groups: dict) -> dict:
    """Create demo users if missing and return an id->User map."""
    User = get_user_model()
    users = {}
    for user_id, password, name, group_id in SEED_USERS:
        user = User.objects.filter(pk=user_id).first()
        if user is None:
            user = User.objects.create_user(
                user_id,
                password,
                name=name,
                email=f"{user_id}@example.com",
                group=groups[group_id],
            )
        users[user_id] = user
    return users


def create_seed_content(users: dict) -> dict:
    """Create one published article with a short thread and one draft."""
    published, created = Article.objects.get_or_create(
        url="hello-world",
        defaults={
            "title": "Hello, world",
            "author": users["author"],
            "content": "First post.\n\nComments are *markdown* too.",
            "visible": True,
        },
    )
    if created:
        first = Comment(article=published, content="Nice post!")
        first.owner = Authored(users["reader"].pk)
        first.save()
        reply = Comment(article=published, parent=first, content="Thanks for reading.")
        reply.owner = Authored(users["author"].pk)
        reply.save()
        guest = Comment(article=published, parent=first, content="Agreed.")
        guest.owner = Named("Passer-by")
        guest.save()

    draft, _ = Article.objects.get_or_create(
        url="draft-notes",
        defaults={
            "title": "Draft notes",
            "author": users["author"],
            "content": "Not published yet.",
            "visible": False,
        },
    )
    return {"hello-world": published, "draft-notes": draft}


class Command(BaseCommand):
    """Management command to seed groups and sample content."""

    help = (
        "Seed permission groups, demo users, articles and comments. "
        "Use --reset to clear previously seeded demo data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users, articles and comments before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding blog data...")
        groups = create_seed_groups()
        users = create_seed_users(groups)
        create_seed_content(users)
        self.stdout.write(self.style.SUCCESS("Blog seed completed."))

    def _reset_seeded_data(self) -> None:
        """Remove demo content and users; the base groups are kept."""
        self.stdout.write("Resetting previously seeded demo data...")
        User = get_user_model()
        user_ids = [user_id for user_id, *_ in SEED_USERS]

        # Deleting articles cascades to their comments.
        Article.objects.filter(url__in=SEED_ARTICLE_URLS).delete()
        Article.objects.filter(author_id__in=user_ids).delete()
        for user in User.objects.filter(pk__in=user_ids):
            try:
                user.delete()
            except ProtectedError:
                self.stdout.write(self.style.WARNING(f"Kept user {user.pk}: they still own comments."))

        self.stdout.write(self.style.WARNING("Seeded demo data cleared."))
