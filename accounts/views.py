"""
Users API (`/users/`).

Routes
------
- `GET    /users/`                      list
- `POST   /users/`                      create (server generates the id)
- `GET    /users/{id}/`                 detail
- `PUT    /users/{id}/`                 replace; every field required, `created_at` kept
- `PATCH  /users/{id}/`                 partial update; only provided fields change
- `DELETE /users/{id}/`                 delete
- `GET    /users/search/{key}/{value}/` first user whose `key` equals `value`

Status codes
------------
- 400 field validation errors (serializer shape), 404 unknown id,
  409 `{"detail": "Username or email already exists"}` when another user owns
  the username or email.
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema, extend_schema_view
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import User
from .serializers import UserSerializer

CONFLICT_DETAIL = "Username or email already exists"

# Fields accepted by the search route; anything else is a 400.
SEARCHABLE_FIELDS = ("id", "username", "email")

_CONFLICT = OpenApiResponse(description='{"detail": "Username or email already exists"}')


@extend_schema_view(
    create=extend_schema(responses={201: UserSerializer, 400: OpenApiResponse(description="Validation error"), 409: _CONFLICT}),
    update=extend_schema(responses={200: UserSerializer, 404: OpenApiResponse(description="Not found"), 409: _CONFLICT}),
    partial_update=extend_schema(responses={200: UserSerializer, 404: OpenApiResponse(description="Not found"), 409: _CONFLICT}),
    destroy=extend_schema(responses={200: OpenApiResponse(description="User deleted successfully"), 404: OpenApiResponse(description="Not found")}),
)
class UserViewSet(viewsets.ModelViewSet):
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [permissions.AllowAny]
    lookup_value_regex = r"\d+"
    ordering_fields = ["id", "username", "email", "created_at"]
    search_fields = ["username", "email"]

    def _conflict(self) -> Response:
        return Response({"detail": CONFLICT_DETAIL}, status=status.HTTP_409_CONFLICT)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if User.objects.username_or_email_taken(data["username"], data["email"]):
            return self._conflict()
        self.perform_create(serializer)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        # PATCH may leave either field out; compare against what the row will hold.
        data = serializer.validated_data
        username = data.get("username", instance.username)
        email = data.get("email", instance.email)
        if User.objects.username_or_email_taken(username, email, exclude_id=instance.pk):
            return self._conflict()

        self.perform_update(serializer)
        return Response(serializer.data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        instance.delete()
        return Response({"detail": "User deleted successfully"}, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="users_search",
        summary="Find the first user whose field equals a value",
        responses={200: UserSerializer, 400: OpenApiResponse(description="Unsupported key"), 404: OpenApiResponse(description="No match")},
    )
    @action(detail=False, methods=["get"], url_path=r"search/(?P<key>[^/.]+)/(?P<value>[^/]+)")
    def search(self, request, key: str, value: str, *args, **kwargs):
        if key not in SEARCHABLE_FIELDS:
            return Response(
                {"detail": f"Unsupported search key '{key}'. Use one of: {', '.join(SEARCHABLE_FIELDS)}."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if key == "id" and not value.isdigit():
            return Response({"detail": "id must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        user = get_object_or_404(User.objects.order_by("id"), **{key: value})
        return Response(self.get_serializer(user).data)
