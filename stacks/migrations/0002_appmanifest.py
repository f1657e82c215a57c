import django.db.models.deletion
from django.db import migrations, models

import stacks.models


class Migration(migrations.Migration):

    dependencies = [
        ("stacks", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="app",
            name="name",
            field=models.CharField(max_length=100, unique=True, validators=[stacks.models.validate_app_name]),
        ),
        migrations.CreateModel(
            name="AppManifest",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "manifest_type",
                    models.CharField(
                        choices=[
                            ("DEPLOYMENT", "Deployment"),
                            ("SERVICE", "Service"),
                            ("INGRESS", "Ingress"),
                            ("PERSISTENT_VOLUME_CLAIM", "PersistentVolumeClaim"),
                            ("CONFIG_MAP", "ConfigMap"),
                            ("SECRET", "Secret"),
                            ("SERVICE_ACCOUNT", "ServiceAccount"),
                            ("CLUSTER_ROLE", "ClusterRole"),
                            ("HPA", "HorizontalPodAutoscaler"),
                        ],
                        max_length=50,
                    ),
                ),
                ("required", models.BooleanField(default=True)),
                ("creation_priority", models.IntegerField(default=100, help_text="Lower is created first.")),
                ("default_config", models.JSONField(blank=True, null=True)),
                ("template_overrides", models.JSONField(blank=True, null=True)),
                (
                    "creation_condition",
                    models.CharField(
                        blank=True,
                        help_text='Values path gating an optional manifest, e.g. "persistence.enabled".',
                        max_length=255,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "app",
                    models.ForeignKey(
                        db_column="app_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="manifests",
                        to="stacks.app",
                    ),
                ),
            ],
            options={
                "db_table": "config_app_manifests",
                "ordering": ["app_id", "creation_priority", "manifest_type"],
                "constraints": [
                    models.UniqueConstraint(fields=("app", "manifest_type"), name="uniq_manifest_per_app_type")
                ],
            },
        ),
    ]
