from django.db import migrations

DEFAULT_GROUPS = {
    "admin": ("Full access.", ["all"]),
    "author": (
        "Writes articles and moderates comments.",
        [
            "create_article",
            "edit_article",
            "delete_article",
            "create_comment",
            "edit_comment",
            "edit_foreign_comment",
            "delete_comment",
            "delete_foreign_comment",
        ],
    ),
    "default": (
        "Registered readers.",
        ["create_comment", "edit_comment", "delete_comment"],
    ),
}


def seed_groups(apps, schema_editor):
    Group = apps.get_model("access_control", "Group")
    for group_id, (description, permissions) in DEFAULT_GROUPS.items():
        Group.objects.get_or_create(
            id=group_id,
            defaults={"description": description, "permissions": permissions},
        )


class Migration(migrations.Migration):
    dependencies = [
        ("access_control", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_groups, migrations.RunPython.noop),
    ]
