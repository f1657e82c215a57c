"""Core utility views (unauthenticated).

Currently exposes the orchestrator health checks:
- `health_live`: liveness (process up).
- `health_ready`: readiness (database connection can be obtained).
- `health`: every check at once.

Response shape
--------------
    {"status": "UP"|"DOWN", "checks": [{"name", "status", "data": {"message"}}]}

200 when UP, 503 when any check is DOWN. The payload contains no sensitive
data and no per-request state; these views stay plain Django (no DRF auth or
throttling) so health checks keep working when the API layer is misconfigured.
"""

from django.http import JsonResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

from .health import LIVENESS_CHECKS, READINESS_CHECKS, UP, run_checks


def _render(checks) -> JsonResponse:
    status, results = run_checks(checks)
    payload = {"status": status, "checks": [r.to_dict() for r in results]}
    return JsonResponse(payload, status=200 if status == UP else 503)


@never_cache
@require_GET
def health_live(request):
    return _render(LIVENESS_CHECKS)


@never_cache
@require_GET
def health_ready(request):
    return _render(READINESS_CHECKS)


@never_cache
@require_GET
def health(request):
    """All liveness and readiness checks."""
    return _render(LIVENESS_CHECKS + READINESS_CHECKS)
