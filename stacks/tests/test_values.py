"""
Values generation tests.

What these tests verify
-----------------------
- `global` carries the namespace (with configured overrides) and timezone.
- The `<name>Stack` block lists every app with its enabled flag.
- Only enabled apps get a block; `default_config` is merged and optional
  sections are present only when set.
- Apps named like a top-level key (`global`, `<name>Stack`) are skipped with a
  warning instead of overwriting that key.
- Manifest blocks: required manifests always, optional ones only when their
  condition holds; per-type defaults with `default_config` layered on top.
- YAML output is parseable and keeps the same content.
"""

import yaml
from django.test import TestCase, override_settings

from stacks.models import App, AppManifest, Environment, ManifestType, Stack
from stacks.values import condition_holds, generate_stack_values, to_yaml


@override_settings(PEAHDB_TIMEZONE="Europe/Lisbon", PEAHDB_NAMESPACE_OVERRIDES={"prod": "lolmeida"})
class StackValuesTests(TestCase):
    def setUp(self):
        self.env = Environment.objects.create(name="dev")
        self.stack = Stack.objects.create(environment=self.env, name="core", enabled=True)
        App.objects.create(
            stack=self.stack,
            name="postgresql",
            enabled=True,
            default_image_repository="postgres",
            default_image_tag="16",
            default_config={"persistence": {"enabled": True}},
            default_ports=[{"name": "pg", "port": 5432}],
            default_resources={"limits": {"memory": "512Mi"}},
            health_check_path="/health",
            deployment_priority=10,
        )
        App.objects.create(stack=self.stack, name="redis", enabled=False, deployment_priority=20)
        App.objects.create(stack=self.stack, name="adminer", enabled=True, default_image_repository="adminer")

    def test_global_block(self):
        values = generate_stack_values(self.env, self.stack)
        self.assertEqual(values["global"], {"namespace": "dev", "timezone": "Europe/Lisbon"})

    def test_namespace_override(self):
        prod = Environment.objects.create(name="prod")
        stack = Stack.objects.create(environment=prod, name="core")
        self.assertEqual(generate_stack_values(prod, stack)["global"]["namespace"], "lolmeida")

    def test_stack_block_lists_all_apps_in_order(self):
        values = generate_stack_values(self.env, self.stack)
        stack_block = values["coreStack"]
        self.assertTrue(stack_block["enabled"])
        self.assertEqual(list(stack_block["apps"].items()), [("postgresql", True), ("redis", False), ("adminer", True)])

    def test_enabled_apps_get_blocks(self):
        values = generate_stack_values(self.env, self.stack)
        self.assertNotIn("redis", values)
        self.assertEqual(
            values["postgresql"],
            {
                "enabled": True,
                "persistence": {"enabled": True},
                "image": {"repository": "postgres", "tag": "16"},
                "ports": [{"name": "pg", "port": 5432}],
                "resources": {"limits": {"memory": "512Mi"}},
                "healthCheckPath": "/health",
            },
        )
        self.assertEqual(values["adminer"], {"enabled": True, "image": {"repository": "adminer", "tag": "latest"}})

    def test_yaml_output(self):
        values = generate_stack_values(self.env, self.stack)
        text = to_yaml(values)
        self.assertTrue(text.startswith("global:"))
        self.assertEqual(yaml.safe_load(text), values)

    def test_reserved_app_names_do_not_overwrite_top_level_keys(self):
        App.objects.create(stack=self.stack, name="global", enabled=True, deployment_priority=1)
        App.objects.create(stack=self.stack, name="coreStack", enabled=True, deployment_priority=2)

        with self.assertLogs("stacks.values", level="WARNING") as cap:
            values = generate_stack_values(self.env, self.stack)

        self.assertEqual(values["global"], {"namespace": "dev", "timezone": "Europe/Lisbon"})
        self.assertEqual(set(values["coreStack"]), {"enabled", "apps"})
        self.assertTrue(values["coreStack"]["apps"]["global"])
        self.assertEqual(len(cap.output), 2)
        self.assertIn("Skipping values for app 'global'", cap.output[0])


@override_settings(PEAHDB_INGRESS_DOMAIN="lolmeida.com")
class ManifestValuesTests(TestCase):
    def setUp(self):
        self.env = Environment.objects.create(name="dev")
        self.stack = Stack.objects.create(environment=self.env, name="automation", enabled=True)
        self.app = App.objects.create(
            stack=self.stack,
            name="n8n",
            enabled=True,
            default_image_repository="n8nio/n8n",
            default_config={"persistence": {"enabled": False}},
        )

    def manifest(self, manifest_type, **fields):
        return AppManifest.objects.create(app=self.app, manifest_type=manifest_type, **fields)

    def app_block(self):
        return generate_stack_values(self.env, self.stack)["n8n"]

    def test_required_and_conditional_manifests(self):
        self.manifest(ManifestType.DEPLOYMENT, creation_priority=10, default_config={"replicaCount": 2})
        self.manifest(ManifestType.SERVICE, creation_priority=20)
        self.manifest(ManifestType.PERSISTENT_VOLUME_CLAIM, required=False, creation_priority=5,
                      creation_condition="persistence.enabled")
        self.manifest(ManifestType.INGRESS, required=False, creation_priority=30, creation_condition="ingress.enabled")
        self.manifest(ManifestType.HPA, required=False, creation_condition="hpa.enabled")

        block = self.app_block()
        self.assertEqual(list(block)[-3:], ["deployment", "service", "ingress"])
        self.assertNotIn("persistent_volume_claim", block)
        self.assertNotIn("hpa", block)
        self.assertEqual(block["deployment"], {"enabled": True, "replicaCount": 2, "imagePullPolicy": "IfNotPresent"})
        self.assertEqual(block["service"], {"enabled": True, "type": "ClusterIP"})
        self.assertEqual(block["ingress"]["host"], "n8n.lolmeida.com")
        self.assertEqual(block["ingress"]["className"], "nginx")
        self.assertEqual(
            block["ingress"]["annotations"]["cert-manager.io/cluster-issuer"], "letsencrypt-prod"
        )

    def test_conditions_read_app_config(self):
        self.app.default_config = {"persistence": {"enabled": True}, "ingress": {"enabled": False}, "hpa": {"enabled": True}}
        self.app.save()
        self.manifest(ManifestType.PERSISTENT_VOLUME_CLAIM, required=False, creation_condition="persistence.enabled")
        self.manifest(ManifestType.INGRESS, required=False, creation_condition="ingress.enabled")
        self.manifest(ManifestType.HPA, required=False, creation_condition="hpa.enabled")

        block = self.app_block()
        self.assertEqual(block["persistent_volume_claim"], {"enabled": True, "accessMode": "ReadWriteOnce", "size": "2Gi"})
        self.assertEqual(block["ingress"], {"enabled": False})
        self.assertEqual(
            block["hpa"],
            {"enabled": True, "minReplicas": 1, "maxReplicas": 2, "targetCPUUtilizationPercentage": 70},
        )

    def test_required_manifest_ignores_condition(self):
        self.manifest(ManifestType.SECRET, required=True, creation_condition="auth.enabled",
                      default_config={"type": "Opaque"})
        self.assertEqual(self.app_block()["secret"], {"enabled": True, "type": "Opaque"})

    def test_disabled_app_manifests_not_emitted(self):
        self.manifest(ManifestType.DEPLOYMENT)
        self.app.enabled = False
        self.app.save()
        self.assertNotIn("n8n", generate_stack_values(self.env, self.stack))

    def test_condition_holds(self):
        cases = [
            ("", {}, True),
            ("ingress.enabled", {}, True),
            ("persistence.enabled", {}, False),
            ("metrics.enabled", {"metrics": {"enabled": "true"}}, True),
            ("metrics.enabled", {"metrics": {"enabled": "false"}}, False),
            ("serviceAccount.create", {"serviceAccount": True}, False),
        ]
        for condition, block, expected in cases:
            with self.subTest(condition=condition, block=block):
                self.assertEqual(condition_holds(condition, block), expected)
