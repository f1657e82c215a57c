"""Admin registrations for the accounts app.

Notes
-----
- Admin is back-office only (not a public UI).
- `password_hash` is shown read-only in the change form and never in lists;
  edits go through the users API so validation and conflict checks apply.
"""

from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Listing of API users with lookup by username or email."""
    list_display = ("id", "username", "email", "created_at", "updated_at")
    search_fields = ("username", "email")
    readonly_fields = ("password_hash", "created_at", "updated_at")
    ordering = ("id",)
