"""JSON API views for service status."""

from django.http import HttpRequest, JsonResponse

from server.apps.core.http import api_view
from server.apps.core.logic.health import db_is_alive, get_stats, redis_is_alive


@api_view(['GET'])
def status(request: HttpRequest) -> JsonResponse:
    """``GET /status``: connectivity of Redis and the database."""
    return JsonResponse({'redis': redis_is_alive(), 'db': db_is_alive()})


@api_view(['GET'])
def stats(request: HttpRequest) -> JsonResponse:
    """``GET /stats``: number of users and files."""
    return JsonResponse(get_stats())
