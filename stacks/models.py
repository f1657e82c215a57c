"""
Deployment configuration entities.

    Environment 1──N Stack 1──N App 1──N AppManifest

- `Environment`: a deployment target (dev, qa, prod...).
- `Stack`: a named group of apps inside an environment, with a free-form JSON
  `config` document.
- `App`: one deployable application (n8n, postgresql, grafana...) with image,
  port, resource and health-check defaults used by `stacks.values`.
- `AppManifest`: one Kubernetes manifest (Deployment, Ingress...) an app's
  chart renders, required or gated by a `creation_condition`.

Deletes cascade down the graph: removing an environment removes its stacks,
removing a stack removes its apps, removing an app removes its manifests.
"""

from django.core.exceptions import ValidationError
from django.db import models

from core.models import TimestampedEntity


class Environment(TimestampedEntity):
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_column="is_active")

    class Meta:
        db_table = "config_environments"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class StackQuerySet(models.QuerySet):
    def for_environment(self, environment_id):
        return self.filter(environment_id=environment_id)

    def by_name(self, environment_id, name):
        """The stack called `name` in the environment, or None."""
        return self.for_environment(environment_id).filter(name=name).first()


class Stack(TimestampedEntity):
    environment = models.ForeignKey(
        Environment,
        on_delete=models.CASCADE,
        related_name="stacks",
        db_column="environment_id",
    )
    name = models.CharField(max_length=100)
    enabled = models.BooleanField(default=False)
    description = models.CharField(max_length=500, blank=True)
    config = models.JSONField(null=True, blank=True)

    objects = StackQuerySet.as_manager()

    class Meta:
        db_table = "config_stacks"
        ordering = ["environment_id", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["environment", "name"],
                name="uniq_stack_per_environment_name",
            )
        ]

    def __str__(self) -> str:
        return f"{self.environment_id}/{self.name}"


class AppCategory:
    """Known values of `App.category`; the column itself is free text."""
    DATABASE = "database"
    MONITORING = "monitoring"
    AUTOMATION = "automation"
    API = "api"


# Top-level keys of generated values that are not app blocks.
RESERVED_VALUES_KEY = "global"
STACK_KEY_SUFFIX = "Stack"


def validate_app_name(value: str) -> None:
    if value == RESERVED_VALUES_KEY or value.endswith(STACK_KEY_SUFFIX):
        raise ValidationError(
            f"'{value}' is reserved in generated values ('global' and names ending in 'Stack')."
        )


class AppQuerySet(models.QuerySet):
    def deployment_order(self):
        """Lower `deployment_priority` deploys first; ties break on name."""
        return self.order_by("deployment_priority", "name")

    def for_stack(self, environment_id, stack_name):
        return self.filter(stack__environment_id=environment_id, stack__name=stack_name).deployment_order()


class App(TimestampedEntity):
    stack = models.ForeignKey(
        Stack,
        on_delete=models.CASCADE,
        related_name="apps",
        db_column="stack_id",
    )
    enabled = models.BooleanField(default=False)

    name = models.CharField(max_length=100, unique=True, validators=[validate_app_name])
    display_name = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=50, blank=True)
    version = models.CharField(max_length=50, default="latest")

    default_image_repository = models.CharField(max_length=255, blank=True)
    default_image_tag = models.CharField(max_length=100, default="latest")

    default_config = models.JSONField(null=True, blank=True)
    dependencies = models.JSONField(null=True, blank=True, help_text='App names, e.g. ["postgresql", "redis"].')
    default_ports = models.JSONField(null=True, blank=True)
    default_resources = models.JSONField(null=True, blank=True)

    health_check_path = models.CharField(max_length=255, blank=True)
    readiness_check_path = models.CharField(max_length=255, blank=True)

    documentation_url = models.URLField(blank=True)
    icon_url = models.URLField(blank=True)

    deployment_priority = models.IntegerField(default=100, help_text="Lower deploys first.")

    objects = AppQuerySet.as_manager()

    class Meta:
        db_table = "config_apps"
        ordering = ["deployment_priority", "name"]

    def __str__(self) -> str:
        return self.display_name or self.name

    # ---- category helpers ----
    def is_database_app(self) -> bool:
        return self.category == AppCategory.DATABASE

    def is_monitoring_app(self) -> bool:
        return self.category == AppCategory.MONITORING

    def is_application_app(self) -> bool:
        return self.category in (AppCategory.AUTOMATION, AppCategory.API)

    # ---- config helpers ----
    def has_dependencies(self) -> bool:
        return bool(self.dependencies)

    def has_health_check(self) -> bool:
        return bool(self.health_check_path)

    def has_readiness_check(self) -> bool:
        return bool(self.readiness_check_path)

    @property
    def full_image_name(self) -> str:
        return f"{self.default_image_repository}:{self.default_image_tag}"

    def is_priority_app(self) -> bool:
        return self.deployment_priority is not None and self.deployment_priority < 50


class ManifestType(models.TextChoices):
    DEPLOYMENT = "DEPLOYMENT", "Deployment"
    SERVICE = "SERVICE", "Service"
    INGRESS = "INGRESS", "Ingress"
    PERSISTENT_VOLUME_CLAIM = "PERSISTENT_VOLUME_CLAIM", "PersistentVolumeClaim"
    CONFIG_MAP = "CONFIG_MAP", "ConfigMap"
    SECRET = "SECRET", "Secret"
    SERVICE_ACCOUNT = "SERVICE_ACCOUNT", "ServiceAccount"
    CLUSTER_ROLE = "CLUSTER_ROLE", "ClusterRole"
    HPA = "HPA", "HorizontalPodAutoscaler"


# Chart template rendering each manifest type.
TEMPLATE_FILES = {
    ManifestType.DEPLOYMENT: "deployments.yaml",
    ManifestType.SERVICE: "services.yaml",
    ManifestType.INGRESS: "ingresses.yaml",
    ManifestType.PERSISTENT_VOLUME_CLAIM: "persistentvolumeclaims.yaml",
    ManifestType.CONFIG_MAP: "configmaps.yaml",
    ManifestType.SECRET: "secret.yaml",
    ManifestType.SERVICE_ACCOUNT: "serviceaccounts.yaml",
    ManifestType.CLUSTER_ROLE: "clusterroles.yaml",
    ManifestType.HPA: "hpa.yaml",
}


class AppManifestQuerySet(models.QuerySet):
    def creation_order(self):
        """Lower `creation_priority` is created first; ties break on type."""
        return self.order_by("creation_priority", "manifest_type")


class AppManifest(TimestampedEntity):
    """A Kubernetes manifest an app's chart renders, with its value defaults."""

    app = models.ForeignKey(
        App,
        on_delete=models.CASCADE,
        related_name="manifests",
        db_column="app_id",
    )
    manifest_type = models.CharField(max_length=50, choices=ManifestType.choices)
    required = models.BooleanField(default=True)
    creation_priority = models.IntegerField(default=100, help_text="Lower is created first.")
    default_config = models.JSONField(null=True, blank=True)
    template_overrides = models.JSONField(null=True, blank=True)
    creation_condition = models.CharField(
        max_length=255,
        blank=True,
        help_text='Values path gating an optional manifest, e.g. "persistence.enabled".',
    )
    description = models.TextField(blank=True)

    objects = AppManifestQuerySet.as_manager()

    class Meta:
        db_table = "config_app_manifests"
        ordering = ["app_id", "creation_priority", "manifest_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["app", "manifest_type"],
                name="uniq_manifest_per_app_type",
            )
        ]

    def __str__(self) -> str:
        return f"{self.app_id}/{self.manifest_type}"

    def is_optional(self) -> bool:
        return not self.required

    def has_condition(self) -> bool:
        return bool(self.creation_condition)

    def has_default_config(self) -> bool:
        return bool(self.default_config)

    def has_template_overrides(self) -> bool:
        return bool(self.template_overrides)

    def is_high_priority(self) -> bool:
        return self.creation_priority is not None and self.creation_priority < 50

    @property
    def values_key(self) -> str:
        """Key of this manifest's block inside the app's values."""
        return self.manifest_type.lower()

    @property
    def kubernetes_kind(self) -> str:
        return ManifestType(self.manifest_type).label

    @property
    def template_file(self) -> str:
        return TEMPLATE_FILES[ManifestType(self.manifest_type)]

    def is_networking(self) -> bool:
        return self.manifest_type in (ManifestType.SERVICE, ManifestType.INGRESS)

    def is_security(self) -> bool:
        return self.manifest_type in (ManifestType.SECRET, ManifestType.SERVICE_ACCOUNT, ManifestType.CLUSTER_ROLE)

    def is_persistence(self) -> bool:
        return self.manifest_type == ManifestType.PERSISTENT_VOLUME_CLAIM
