"""JSON API views for the file hierarchy."""

from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.accounts.logic.auth_operations import resolve_session
from server.apps.core.exceptions import AuthError
from server.apps.core.http import api_view, get_token, read_json
from server.apps.files.logic.file_operations import (
    create_file,
    get_file,
    get_file_content,
    list_files,
    set_public,
)
from server.apps.files.models import ROOT_PARENT_ID


@api_view(['GET', 'POST'])
def files(request: HttpRequest) -> JsonResponse:
    """``GET /files`` lists a page of records, ``POST /files`` uploads."""
    owner_id = resolve_session(get_token(request))

    if request.method == 'POST':
        payload = read_json(request)
        file_instance = create_file(
            owner_id,
            name=payload.get('name'),
            file_type=payload.get('type'),
            parent_id=payload.get('parentId', ROOT_PARENT_ID),
            is_public=payload.get('isPublic', False),
            data=payload.get('data'),
        )
        return JsonResponse(file_instance.to_public_dict(), status=201)

    records = list_files(
        owner_id,
        parent_id=request.GET.get('parentId', ROOT_PARENT_ID),
        page=request.GET.get('page', 0),
    )
    return JsonResponse(
        [record.to_public_dict() for record in records],
        safe=False,
    )


@api_view(['GET'])
def file_detail(request: HttpRequest, file_id: str) -> JsonResponse:
    """``GET /files/:id``: one of the caller's records."""
    owner_id = resolve_session(get_token(request))
    return JsonResponse(get_file(owner_id, file_id).to_public_dict())


@api_view(['PUT'])
def publish(request: HttpRequest, file_id: str) -> JsonResponse:
    """``PUT /files/:id/publish``: make a record public."""
    owner_id = resolve_session(get_token(request))
    return JsonResponse(set_public(owner_id, file_id, True).to_public_dict())


@api_view(['PUT'])
def unpublish(request: HttpRequest, file_id: str) -> JsonResponse:
    """``PUT /files/:id/unpublish``: make a record private."""
    owner_id = resolve_session(get_token(request))
    return JsonResponse(set_public(owner_id, file_id, False).to_public_dict())


@api_view(['GET'])
def file_data(request: HttpRequest, file_id: str) -> HttpResponse:
    """``GET /files/:id/data?size=``: raw content, token optional."""
    try:
        viewer_id = resolve_session(get_token(request))
    except AuthError:
        viewer_id = None

    file_content = get_file_content(
        viewer_id,
        file_id,
        size=request.GET.get('size'),
    )
    return HttpResponse(
        file_content.content,
        content_type=file_content.content_type,
    )
