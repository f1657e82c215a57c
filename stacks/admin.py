"""
Django admin registrations for deployment configuration.

- Back-office only; the `/api/config/` endpoints are the primary write path.
- Stacks and apps are editable inline under their parent so the cascade
  graph is visible in one page.
"""

from __future__ import annotations

from django.contrib import admin

from .models import App, AppManifest, Environment, Stack


class StackInline(admin.TabularInline):
    model = Stack
    extra = 0
    fields = ("name", "enabled", "description")


class AppInline(admin.TabularInline):
    model = App
    extra = 0
    fields = ("name", "enabled", "category", "deployment_priority")


class AppManifestInline(admin.TabularInline):
    model = AppManifest
    extra = 0
    fields = ("manifest_type", "required", "creation_priority", "creation_condition")


@admin.register(Environment)
class EnvironmentAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "description")
    inlines = [StackInline]


@admin.register(Stack)
class StackAdmin(admin.ModelAdmin):
    list_display = ("id", "environment", "name", "enabled", "updated_at")
    list_filter = ("enabled", "environment")
    search_fields = ("name", "environment__name")
    inlines = [AppInline]


@admin.register(App)
class AppAdmin(admin.ModelAdmin):
    """Apps in deployment order with category and image context."""
    list_display = ("id", "name", "stack", "category", "enabled", "deployment_priority", "full_image_name")
    list_filter = ("enabled", "category", "stack__environment")
    search_fields = ("name", "display_name", "stack__name")
    ordering = ("deployment_priority", "name")
    inlines = [AppManifestInline]


@admin.register(AppManifest)
class AppManifestAdmin(admin.ModelAdmin):
    list_display = ("id", "app", "manifest_type", "required", "creation_priority", "creation_condition")
    list_filter = ("manifest_type", "required")
    search_fields = ("app__name", "description")
    ordering = ("app__name", "creation_priority")
