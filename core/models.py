"""
Abstract base models shared by every entity in the project.

This module provides:
- `BaseEntity`: the common identity strategy. The primary key is an
  auto-incrementing integer generated by the database on insert (identity /
  AUTO_INCREMENT column), never a sequence table or a client-provided value.
- `TimestampedEntity`: `BaseEntity` plus `created_at` / `updated_at` audit
  timestamps maintained by the ORM.

Concrete models live in their own apps (`accounts.User`, `stacks.Environment`,
`stacks.Stack`, `stacks.App`) and inherit one of these bases.
"""

from django.db import models


class BaseEntity(models.Model):
    """
    Abstract base with a database-generated integer primary key.

    Invariants:
        - `id` is None until the row is inserted, non-null afterwards.
    """

    id = models.BigAutoField(primary_key=True)

    class Meta:
        abstract = True

    def __repr__(self) -> str:
        """Debug-friendly representation including the id."""
        return f"<{self.__class__.__name__} id={self.id}>"


class TimestampedEntity(BaseEntity):
    """
    Abstract base adding creation/update timestamps.

    Fields:
        created_at: set once when the row is inserted.
        updated_at: refreshed on every `save()`.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
