import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Environment",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(db_column="is_active", default=True)),
            ],
            options={
                "db_table": "config_environments",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Stack",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("enabled", models.BooleanField(default=False)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("config", models.JSONField(blank=True, null=True)),
                (
                    "environment",
                    models.ForeignKey(
                        db_column="environment_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stacks",
                        to="stacks.environment",
                    ),
                ),
            ],
            options={
                "db_table": "config_stacks",
                "ordering": ["environment_id", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("environment", "name"), name="uniq_stack_per_environment_name")
                ],
            },
        ),
        migrations.CreateModel(
            name="App",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("enabled", models.BooleanField(default=False)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("display_name", models.CharField(blank=True, max_length=200)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(blank=True, max_length=50)),
                ("version", models.CharField(default="latest", max_length=50)),
                ("default_image_repository", models.CharField(blank=True, max_length=255)),
                ("default_image_tag", models.CharField(default="latest", max_length=100)),
                ("default_config", models.JSONField(blank=True, null=True)),
                (
                    "dependencies",
                    models.JSONField(blank=True, help_text='App names, e.g. ["postgresql", "redis"].', null=True),
                ),
                ("default_ports", models.JSONField(blank=True, null=True)),
                ("default_resources", models.JSONField(blank=True, null=True)),
                ("health_check_path", models.CharField(blank=True, max_length=255)),
                ("readiness_check_path", models.CharField(blank=True, max_length=255)),
                ("documentation_url", models.URLField(blank=True)),
                ("icon_url", models.URLField(blank=True)),
                ("deployment_priority", models.IntegerField(default=100, help_text="Lower deploys first.")),
                (
                    "stack",
                    models.ForeignKey(
                        db_column="stack_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="apps",
                        to="stacks.stack",
                    ),
                ),
            ],
            options={
                "db_table": "config_apps",
                "ordering": ["deployment_priority", "name"],
            },
        ),
    ]
