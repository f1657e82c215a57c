from django.urls import path

from . import views

app_name = "stacks"

_STACK = "environments/<int:env_id>/stacks/<str:stack_name>/"

urlpatterns = [
    path("environments/", views.EnvironmentListView.as_view(), name="environment-list"),
    path("environments/<int:env_id>/", views.EnvironmentDetailView.as_view(), name="environment-detail"),
    path("environments/<int:env_id>/stacks/", views.StackListView.as_view(), name="stack-list"),
    path(_STACK, views.StackDetailView.as_view(), name="stack-detail"),
    path(_STACK + "apps/", views.AppListView.as_view(), name="app-list"),
    path(_STACK + "apps/<str:app_name>/", views.AppDetailView.as_view(), name="app-detail"),
    path(_STACK + "apps/<str:app_name>/manifests/", views.AppManifestListView.as_view(), name="app-manifest-list"),
    path(
        _STACK + "apps/<str:app_name>/manifests/<str:manifest_type>/",
        views.AppManifestDetailView.as_view(),
        name="app-manifest-detail",
    ),
    path(_STACK + "values/", views.StackValuesView.as_view(), name="stack-values"),
    path(_STACK + "values.yaml", views.StackValuesYamlView.as_view(), name="stack-values-yaml"),
]
