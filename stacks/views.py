"""
Configuration API (`/api/config/`).

Environments → stacks → apps → manifests, browsed by environment id and stack/app name,
plus generated values for a stack (JSON and YAML).

Missing rows answer 404 `{"detail": "..."}` naming what was not found.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, permissions, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import App, AppManifest, Environment, ManifestType, Stack
from .serializers import (
    AppManifestSerializer,
    AppManifestUpdateSerializer,
    AppSerializer,
    AppUpdateSerializer,
    EnvironmentSerializer,
    StackSerializer,
    StackUpdateSerializer,
)
from .values import generate_stack_values, to_yaml

logger = logging.getLogger(__name__)

_NOT_FOUND = OpenApiResponse(description='{"detail": "... not found"}')


def get_environment(env_id: int) -> Environment:
    try:
        return Environment.objects.get(pk=env_id)
    except Environment.DoesNotExist:
        raise NotFound(f"Environment {env_id} not found")


def get_stack(env_id: int, stack_name: str) -> Stack:
    environment = get_environment(env_id)
    stack = Stack.objects.by_name(environment.pk, stack_name)
    if stack is None:
        raise NotFound(f"Stack '{stack_name}' not found in environment {env_id}")
    return stack


def get_app(env_id: int, stack_name: str, app_name: str) -> App:
    stack = get_stack(env_id, stack_name)
    try:
        return stack.apps.get(name=app_name)
    except App.DoesNotExist:
        raise NotFound(f"App '{app_name}' not found in stack '{stack_name}'")


def get_manifest(env_id: int, stack_name: str, app_name: str, manifest_type: str) -> AppManifest:
    """Manifest types match case-insensitively (`deployment`, `DEPLOYMENT`)."""
    app = get_app(env_id, stack_name, app_name)
    key = manifest_type.upper()
    if key not in ManifestType.values:
        raise NotFound(f"Unknown manifest type '{manifest_type}'")
    try:
        return app.manifests.get(manifest_type=key)
    except AppManifest.DoesNotExist:
        raise NotFound(f"Manifest '{key}' not found for app '{app_name}'")


class ConfigView(APIView):
    permission_classes = [permissions.AllowAny]


# ---- Environments ----

@extend_schema(tags=["Config"])
class EnvironmentListView(generics.ListCreateAPIView):
    """List environments (filter by `is_active`/`name`) or create one."""
    queryset = Environment.objects.all()
    serializer_class = EnvironmentSerializer
    permission_classes = [permissions.AllowAny]
    filterset_fields = ["is_active", "name"]
    ordering_fields = ["id", "name", "created_at"]
    search_fields = ["name", "description"]


class EnvironmentDetailView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_environment_detail", responses={200: EnvironmentSerializer, 404: _NOT_FOUND})
    def get(self, request, env_id: int, *args, **kwargs):
        return Response(EnvironmentSerializer(get_environment(env_id)).data)


# ---- Stacks ----

class StackListView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_stacks", responses={200: StackSerializer(many=True), 404: _NOT_FOUND})
    def get(self, request, env_id: int, *args, **kwargs):
        environment = get_environment(env_id)
        stacks = Stack.objects.for_environment(environment.pk)
        return Response(StackSerializer(stacks, many=True).data)


class StackDetailView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_stack_detail", responses={200: StackSerializer, 404: _NOT_FOUND})
    def get(self, request, env_id: int, stack_name: str, *args, **kwargs):
        return Response(StackSerializer(get_stack(env_id, stack_name)).data)

    @extend_schema(
        tags=["Config"],
        operation_id="config_stack_update",
        request=StackUpdateSerializer,
        responses={
            200: StackSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: _NOT_FOUND,
            409: OpenApiResponse(description="Stack name already used in this environment"),
        },
    )
    def put(self, request, env_id: int, stack_name: str, *args, **kwargs):
        stack = get_stack(env_id, stack_name)
        ser = StackUpdateSerializer(stack, data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                stack = ser.save()
        except IntegrityError:
            return Response(
                {"detail": f"Stack '{ser.validated_data['name']}' already exists in environment {env_id}"},
                status=status.HTTP_409_CONFLICT,
            )
        logger.info("Stack updated: env=%s stack=%s enabled=%s", env_id, stack.name, stack.enabled)
        return Response(StackSerializer(stack).data)


# ---- Apps ----

class AppListView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_apps", responses={200: AppSerializer(many=True), 404: _NOT_FOUND})
    def get(self, request, env_id: int, stack_name: str, *args, **kwargs):
        stack = get_stack(env_id, stack_name)
        return Response(AppSerializer(stack.apps.deployment_order(), many=True).data)


class AppDetailView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_app_detail", responses={200: AppSerializer, 404: _NOT_FOUND})
    def get(self, request, env_id: int, stack_name: str, app_name: str, *args, **kwargs):
        return Response(AppSerializer(get_app(env_id, stack_name, app_name)).data)

    @extend_schema(
        tags=["Config"],
        operation_id="config_app_update",
        request=AppUpdateSerializer,
        responses={200: AppSerializer, 400: OpenApiResponse(description="Validation error"), 404: _NOT_FOUND},
    )
    def put(self, request, env_id: int, stack_name: str, app_name: str, *args, **kwargs):
        app = get_app(env_id, stack_name, app_name)
        ser = AppUpdateSerializer(app, data=request.data)
        ser.is_valid(raise_exception=True)
        app = ser.save()
        logger.info("App updated: env=%s stack=%s app=%s enabled=%s", env_id, stack_name, app.name, app.enabled)
        return Response(AppSerializer(app).data)


# ---- Manifests ----

class AppManifestListView(ConfigView):
    @extend_schema(tags=["Config"], operation_id="config_app_manifests", responses={200: AppManifestSerializer(many=True), 404: _NOT_FOUND})
    def get(self, request, env_id: int, stack_name: str, app_name: str, *args, **kwargs):
        app = get_app(env_id, stack_name, app_name)
        return Response(AppManifestSerializer(app.manifests.creation_order(), many=True).data)


class AppManifestDetailView(ConfigView):
    @extend_schema(
        tags=["Config"],
        operation_id="config_app_manifest_update",
        request=AppManifestUpdateSerializer,
        responses={200: AppManifestSerializer, 400: OpenApiResponse(description="Validation error"), 404: _NOT_FOUND},
    )
    def put(self, request, env_id: int, stack_name: str, app_name: str, manifest_type: str, *args, **kwargs):
        manifest = get_manifest(env_id, stack_name, app_name, manifest_type)
        ser = AppManifestUpdateSerializer(manifest, data=request.data)
        ser.is_valid(raise_exception=True)
        manifest = ser.save()
        logger.info(
            "Manifest updated: env=%s stack=%s app=%s type=%s required=%s",
            env_id, stack_name, app_name, manifest.manifest_type, manifest.required,
        )
        return Response(AppManifestSerializer(manifest).data)


# ---- Values ----

class StackValuesView(ConfigView):
    @extend_schema(
        tags=["Config"],
        operation_id="config_stack_values",
        summary="Generated Helm values for a stack",
        responses={200: OpenApiTypes.OBJECT, 404: _NOT_FOUND},
    )
    def get(self, request, env_id: int, stack_name: str, *args, **kwargs):
        stack = get_stack(env_id, stack_name)
        return Response(generate_stack_values(stack.environment, stack))


class StackValuesYamlView(ConfigView):
    @extend_schema(
        tags=["Config"],
        operation_id="config_stack_values_yaml",
        summary="Generated Helm values for a stack, as YAML",
        responses={(200, "application/x-yaml"): OpenApiTypes.STR, 404: _NOT_FOUND},
    )
    def get(self, request, env_id: int, stack_name: str, *args, **kwargs):
        stack = get_stack(env_id, stack_name)
        body = to_yaml(generate_stack_values(stack.environment, stack))
        return HttpResponse(body, content_type="application/x-yaml")
