"""
Serializers for the configuration API (`/api/config/`).

- Read serializers expose every column; relations are plain ids.
- Write serializers accept only the fields a PUT may change:
    * Stack: `name`, `enabled` (required), `description`, `config`.
    * App:   `enabled` (required), `default_config`, `deployment_priority`.
    * AppManifest: `required` (required), `default_config`, `creation_condition`.
"""

from __future__ import annotations

from django.core.validators import RegexValidator
from rest_framework import serializers

from .models import App, AppManifest, Environment, Stack

stack_name_validator = RegexValidator(
    r"^[a-zA-Z0-9_-]+$",
    message="Stack name can only contain letters, numbers, underscores, and hyphens",
)


class EnvironmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Environment
        fields = ["id", "name", "description", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class StackSerializer(serializers.ModelSerializer):
    environment_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Stack
        fields = ["id", "environment_id", "name", "enabled", "description", "config", "created_at", "updated_at"]
        read_only_fields = fields


class StackUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(
        min_length=2,
        max_length=100,
        validators=[stack_name_validator],
        error_messages={
            "required": "Stack name is required",
            "blank": "Stack name is required",
            "min_length": "Stack name must be between 2 and 100 characters",
            "max_length": "Stack name must be between 2 and 100 characters",
        },
    )
    enabled = serializers.BooleanField(error_messages={"required": "Enabled status is required"})
    description = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        error_messages={"max_length": "Description must not exceed 500 characters"},
    )
    config = serializers.JSONField(required=False, allow_null=True)

    def update(self, instance: Stack, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class AppSerializer(serializers.ModelSerializer):
    stack_id = serializers.IntegerField(read_only=True)
    full_image_name = serializers.CharField(read_only=True)

    class Meta:
        model = App
        fields = [
            "id",
            "stack_id",
            "enabled",
            "name",
            "display_name",
            "description",
            "category",
            "version",
            "default_image_repository",
            "default_image_tag",
            "full_image_name",
            "default_config",
            "dependencies",
            "default_ports",
            "default_resources",
            "health_check_path",
            "readiness_check_path",
            "documentation_url",
            "icon_url",
            "deployment_priority",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppUpdateSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(error_messages={"required": "Enabled status is required"})
    default_config = serializers.JSONField(required=False, allow_null=True)
    deployment_priority = serializers.IntegerField(required=False, min_value=0)

    def update(self, instance: App, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class AppManifestSerializer(serializers.ModelSerializer):
    app_id = serializers.IntegerField(read_only=True)
    kubernetes_kind = serializers.CharField(read_only=True)
    template_file = serializers.CharField(read_only=True)

    class Meta:
        model = AppManifest
        fields = [
            "id",
            "app_id",
            "manifest_type",
            "kubernetes_kind",
            "template_file",
            "required",
            "creation_priority",
            "default_config",
            "template_overrides",
            "creation_condition",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppManifestUpdateSerializer(serializers.Serializer):
    required = serializers.BooleanField(error_messages={"required": "Required flag is required"})
    default_config = serializers.JSONField(required=False, allow_null=True)
    creation_condition = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def update(self, instance: AppManifest, validated_data):
        if validated_data.get("creation_condition", "") is None:
            validated_data["creation_condition"] = ""
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance
