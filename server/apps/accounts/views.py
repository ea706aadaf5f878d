"""JSON API views for registration and sessions."""

from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.accounts.logic.auth_operations import (
    get_current_user,
    login,
    logout,
    register_user,
)
from server.apps.core.http import api_view, get_token, read_json


@api_view(['POST'])
def create_user(request: HttpRequest) -> JsonResponse:
    """``POST /users``: register a new account."""
    payload = read_json(request)
    user = register_user(payload.get('email'), payload.get('password'))
    return JsonResponse({'id': str(user.id), 'email': user.email}, status=201)


@api_view(['GET'])
def connect(request: HttpRequest) -> JsonResponse:
    """``GET /connect``: exchange Basic credentials for a token."""
    token = login(request.headers.get('Authorization'))
    return JsonResponse({'token': token})


@api_view(['GET'])
def disconnect(request: HttpRequest) -> HttpResponse:
    """``GET /disconnect``: revoke the current token."""
    logout(get_token(request))
    return HttpResponse(status=204)


@api_view(['GET'])
def me(request: HttpRequest) -> JsonResponse:
    """``GET /users/me``: describe the signed in user."""
    user = get_current_user(get_token(request))
    return JsonResponse({'id': str(user.id), 'email': user.email})
