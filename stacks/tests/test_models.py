"""
Environment → Stack → App relationship tests.

What these tests verify
-----------------------
- Deleting a `Stack` deletes its `App` rows; other stacks keep theirs.
- Deleting an `Environment` deletes its stacks and, through them, their apps.
- Stack names are unique per environment only.
- App names that clash with top-level values keys fail validation.
- Manifests: cascade with their app, one per type, kind/template lookups.
- App helpers: category predicates, health-check/dependency checks, image name and
  priority.
"""

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from stacks.models import App, AppManifest, Environment, ManifestType, Stack


class CascadeTests(TestCase):
    def setUp(self):
        self.env = Environment.objects.create(name="dev")
        self.core = Stack.objects.create(environment=self.env, name="core", enabled=True)
        self.monitoring = Stack.objects.create(environment=self.env, name="monitoring")
        App.objects.create(stack=self.core, name="postgresql", category="database")
        App.objects.create(stack=self.core, name="redis", category="database")
        App.objects.create(stack=self.monitoring, name="grafana", category="monitoring")

    def test_deleting_stack_cascades_to_apps(self):
        self.core.delete()
        self.assertFalse(App.objects.filter(name__in=["postgresql", "redis"]).exists())
        self.assertTrue(App.objects.filter(name="grafana").exists())

    def test_deleting_environment_cascades_to_stacks_and_apps(self):
        self.env.delete()
        self.assertEqual(Stack.objects.count(), 0)
        self.assertEqual(App.objects.count(), 0)

    def test_stack_name_unique_per_environment(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Stack.objects.create(environment=self.env, name="core")
        other = Environment.objects.create(name="prod")
        self.assertIsNotNone(Stack.objects.create(environment=other, name="core").pk)

    def test_query_helpers(self):
        self.assertEqual(
            list(Stack.objects.for_environment(self.env.id).values_list("name", flat=True)),
            ["core", "monitoring"],
        )
        self.assertEqual(Stack.objects.by_name(self.env.id, "core"), self.core)
        self.assertIsNone(Stack.objects.by_name(self.env.id, "missing"))

    def test_apps_in_deployment_order(self):
        App.objects.filter(name="redis").update(deployment_priority=10)
        names = list(App.objects.for_stack(self.env.id, "core").values_list("name", flat=True))
        self.assertEqual(names, ["redis", "postgresql"])


class AppHelperTests(TestCase):
    def setUp(self):
        env = Environment.objects.create(name="dev")
        self.stack = Stack.objects.create(environment=env, name="apps")

    def test_defaults(self):
        app = App.objects.create(stack=self.stack, name="n8n")
        self.assertFalse(app.enabled)
        self.assertEqual(app.version, "latest")
        self.assertEqual(app.default_image_tag, "latest")
        self.assertEqual(app.deployment_priority, 100)
        self.assertFalse(app.is_priority_app())
        self.assertFalse(app.has_dependencies())
        self.assertFalse(app.has_health_check())
        self.assertFalse(app.has_readiness_check())

    def test_helpers(self):
        app = App.objects.create(
            stack=self.stack,
            name="n8n",
            category="automation",
            default_image_repository="n8nio/n8n",
            default_image_tag="1.50",
            dependencies=["postgresql"],
            health_check_path="/healthz",
            readiness_check_path="/healthz/readiness",
            deployment_priority=20,
        )
        self.assertTrue(app.is_application_app())
        self.assertFalse(app.is_database_app())
        self.assertFalse(app.is_monitoring_app())
        self.assertTrue(app.has_dependencies())
        self.assertTrue(app.has_health_check())
        self.assertTrue(app.has_readiness_check())
        self.assertEqual(app.full_image_name, "n8nio/n8n:1.50")
        self.assertTrue(app.is_priority_app())

        app.category = "api"
        self.assertTrue(app.is_application_app())
        app.category = "monitoring"
        self.assertTrue(app.is_monitoring_app())

    def test_reserved_names_fail_validation(self):
        for name in ("global", "appsStack", "coreStack"):
            with self.subTest(name=name):
                with self.assertRaises(ValidationError) as ctx:
                    App(stack=self.stack, name=name).full_clean()
                self.assertIn("name", ctx.exception.message_dict)
        App(stack=self.stack, name="stackstorm").full_clean()


class AppManifestTests(TestCase):
    def setUp(self):
        env = Environment.objects.create(name="dev")
        stack = Stack.objects.create(environment=env, name="apps")
        self.app = App.objects.create(stack=stack, name="n8n")

    def test_defaults_and_lookups(self):
        manifest = AppManifest.objects.create(app=self.app, manifest_type=ManifestType.PERSISTENT_VOLUME_CLAIM)
        self.assertTrue(manifest.required)
        self.assertFalse(manifest.is_optional())
        self.assertEqual(manifest.creation_priority, 100)
        self.assertFalse(manifest.is_high_priority())
        self.assertFalse(manifest.has_condition())
        self.assertEqual(manifest.values_key, "persistent_volume_claim")
        self.assertEqual(manifest.kubernetes_kind, "PersistentVolumeClaim")
        self.assertEqual(manifest.template_file, "persistentvolumeclaims.yaml")
        self.assertTrue(manifest.is_persistence())
        self.assertFalse(manifest.is_networking())

    def test_one_manifest_per_type(self):
        AppManifest.objects.create(app=self.app, manifest_type=ManifestType.SERVICE)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                AppManifest.objects.create(app=self.app, manifest_type=ManifestType.SERVICE)

    def test_creation_order_and_cascade(self):
        AppManifest.objects.create(app=self.app, manifest_type=ManifestType.SERVICE, creation_priority=20)
        AppManifest.objects.create(app=self.app, manifest_type=ManifestType.SECRET, creation_priority=1)
        AppManifest.objects.create(app=self.app, manifest_type=ManifestType.DEPLOYMENT, creation_priority=10)
        types = list(self.app.manifests.creation_order().values_list("manifest_type", flat=True))
        self.assertEqual(types, ["SECRET", "DEPLOYMENT", "SERVICE"])

        self.app.delete()
        self.assertFalse(AppManifest.objects.exists())
