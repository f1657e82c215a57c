"""
DRF serializers for the `User` entity.

- Field rules mirror the model validators so clients get field-level 400s
  before the database is touched.
- Uniqueness is not validated here: the view checks it and answers 409, which
  a `UniqueValidator` would turn into a 400.
- `password_hash` is write-only; it never appears in responses.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import User, email_validators, password_hash_validators, username_validators


def _as_drf_error(exc: DjangoValidationError) -> serializers.ValidationError:
    detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
    return serializers.ValidationError(detail)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email", "password_hash", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {
            "username": {
                "validators": username_validators,
                "error_messages": {"required": "Username is required", "blank": "Username is required"},
            },
            "email": {
                "validators": email_validators,
                "error_messages": {"required": "Email is required", "blank": "Email is required"},
            },
            "password_hash": {
                "write_only": True,
                "validators": password_hash_validators,
                "error_messages": {"required": "Password hash is required", "blank": "Password hash is required"},
            },
        }

    def create(self, validated_data):
        try:
            return super().create(validated_data)
        except DjangoValidationError as exc:
            raise _as_drf_error(exc)

    def update(self, instance, validated_data):
        try:
            return super().update(instance, validated_data)
        except DjangoValidationError as exc:
            raise _as_drf_error(exc)
