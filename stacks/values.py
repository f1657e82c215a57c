"""
Helm-style values generation for a stack.

`generate_stack_values(environment, stack)` builds the document consumed by
the umbrella chart:

    global:
      namespace: <env name, or its configured override>
      timezone: Europe/Lisbon
    <stack>Stack:
      enabled: true
      apps: {n8n: true, redis: false}
    n8n:                      # one block per *enabled* app
      enabled: true
      ...default_config...
      image: {repository, tag}
      ports / resources / healthCheckPath   (when set)
      deployment: {enabled: true, replicaCount: 1, ...}   # one per manifest

Apps are visited in deployment order (priority, then name) and manifests in
creation order, so YAML output is stable across calls.

Manifest blocks
---------------
A manifest is emitted when it is `required`, or when its `creation_condition`
holds against the app block built so far. Conditions are dotted paths
(`persistence.enabled`); a missing value is false, except `ingress.enabled`
which defaults to true. Each block starts from the per-type defaults below,
then the manifest's own `default_config` is layered on top.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import yaml
from django.conf import settings

from .models import RESERVED_VALUES_KEY, App, AppManifest, Environment, ManifestType, Stack

logger = logging.getLogger(__name__)

# Value used when a condition path is absent from the app block.
CONDITION_DEFAULTS = {
    "ingress.enabled": True,
}


def namespace_for(environment: Environment) -> str:
    overrides = getattr(settings, "PEAHDB_NAMESPACE_OVERRIDES", {}) or {}
    return overrides.get(environment.name, environment.name)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def condition_holds(condition: str, block: Dict[str, Any]) -> bool:
    if not condition:
        return True
    current: Any = block
    for part in condition.split("."):
        if not isinstance(current, dict) or part not in current:
            return CONDITION_DEFAULTS.get(condition, False)
        current = current[part]
    if current is None:
        return CONDITION_DEFAULTS.get(condition, False)
    return _truthy(current)


def manifest_defaults(manifest_type: str, app: App) -> Dict[str, Any]:
    if manifest_type == ManifestType.DEPLOYMENT:
        return {"replicaCount": 1, "imagePullPolicy": "IfNotPresent"}
    if manifest_type == ManifestType.SERVICE:
        return {"type": "ClusterIP"}
    if manifest_type == ManifestType.INGRESS:
        return {
            "className": "nginx",
            "host": f"{app.name}.{settings.PEAHDB_INGRESS_DOMAIN}",
            "annotations": {
                "nginx.ingress.kubernetes.io/ssl-redirect": "true",
                "cert-manager.io/cluster-issuer": "letsencrypt-prod",
            },
        }
    if manifest_type == ManifestType.PERSISTENT_VOLUME_CLAIM:
        return {"accessMode": "ReadWriteOnce", "size": "2Gi"}
    if manifest_type == ManifestType.HPA:
        return {"minReplicas": 1, "maxReplicas": 2, "targetCPUUtilizationPercentage": 70}
    return {}


def manifest_values(manifest: AppManifest, app: App) -> Dict[str, Any]:
    block: Dict[str, Any] = {"enabled": True}
    block.update(manifest_defaults(manifest.manifest_type, app))
    if isinstance(manifest.default_config, dict):
        block.update(manifest.default_config)
    return block


def app_values(app: App) -> Dict[str, Any]:
    block: Dict[str, Any] = {"enabled": True}
    if isinstance(app.default_config, dict):
        block.update(app.default_config)
    block["image"] = {"repository": app.default_image_repository, "tag": app.default_image_tag}
    if app.default_ports is not None:
        block["ports"] = app.default_ports
    if app.default_resources is not None:
        block["resources"] = app.default_resources
    if app.has_health_check():
        block["healthCheckPath"] = app.health_check_path

    for manifest in app.manifests.creation_order():
        if manifest.required or condition_holds(manifest.creation_condition, block):
            block[manifest.values_key] = manifest_values(manifest, app)
    return block


def generate_stack_values(environment: Environment, stack: Stack) -> Dict[str, Any]:
    values: Dict[str, Any] = {
        "global": {
            "namespace": namespace_for(environment),
            "timezone": settings.PEAHDB_TIMEZONE,
        }
    }
    stack_key = f"{stack.name}Stack"
    stack_apps: Dict[str, bool] = {}
    values[stack_key] = {"enabled": stack.enabled, "apps": stack_apps}

    for app in stack.apps.deployment_order():
        stack_apps[app.name] = app.enabled
        if not app.enabled:
            continue
        if app.name in (RESERVED_VALUES_KEY, stack_key):
            logger.warning("Skipping values for app '%s': name clashes with a top-level key", app.name)
            continue
        values[app.name] = app_values(app)
    return values


def to_yaml(values: Dict[str, Any]) -> str:
    return yaml.safe_dump(values, default_flow_style=False, sort_keys=False, allow_unicode=True)
