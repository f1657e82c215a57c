"""User entity (table `users`).

This is a plain credential-storage entity for the service API, not Django's
auth user: it holds a username, an email and an already-hashed password.

Validation
----------
- `username`: required, 3–50 chars, letters/digits/underscore only, unique.
- `email`: required, valid address, at most 100 chars, unique.
- `password_hash`: required, at least 8 chars.

`save()` runs `full_clean()` first, so an invalid row raises
`django.core.exceptions.ValidationError` before any SQL is issued. Bulk paths
that bypass `save()` (`QuerySet.update`, `bulk_create`) are not covered.
"""

from django.core.validators import EmailValidator, MaxLengthValidator, MinLengthValidator, RegexValidator
from django.db import models
from django.db.models import Q

from core.models import TimestampedEntity

username_validators = [
    MinLengthValidator(3, message="Username must be between 3 and 50 characters"),
    MaxLengthValidator(50, message="Username must be between 3 and 50 characters"),
    RegexValidator(
        r"^[a-zA-Z0-9_]+$",
        message="Username can only contain letters, numbers, and underscores",
    ),
]
email_validators = [
    EmailValidator(message="Email must be valid"),
    MaxLengthValidator(100, message="Email must not exceed 100 characters"),
]
password_hash_validators = [
    MinLengthValidator(8, message="Password hash must be at least 8 characters"),
]


class UserQuerySet(models.QuerySet):
    """Lookup helpers used by the users API."""

    def username_or_email_taken(self, username, email, exclude_id=None) -> bool:
        """True when another row already uses `username` or `email`."""
        qs = self.filter(Q(username=username) | Q(email=email))
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()


class User(TimestampedEntity):
    username = models.CharField(
        max_length=50,
        unique=True,
        validators=username_validators,
        error_messages={"blank": "Username is required", "unique": "Username already exists"},
    )
    email = models.CharField(
        max_length=100,
        unique=True,
        validators=email_validators,
        error_messages={"blank": "Email is required", "unique": "Email already exists"},
    )
    password_hash = models.CharField(
        max_length=255,
        db_column="password_hash",
        validators=password_hash_validators,
        error_messages={"blank": "Password hash is required"},
    )

    objects = UserQuerySet.as_manager()

    class Meta:
        db_table = "users"
        ordering = ("id",)

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.username
