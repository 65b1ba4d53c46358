from django.db import migrations


def seed_marker(apps, schema_editor):
    Metadata = apps.get_model("countries", "Metadata")
    Metadata.objects.get_or_create(key_name="last_refreshed_at", defaults={"value": None})


def remove_marker(apps, schema_editor):
    Metadata = apps.get_model("countries", "Metadata")
    Metadata.objects.filter(key_name="last_refreshed_at").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("countries", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_marker, remove_marker),
    ]
