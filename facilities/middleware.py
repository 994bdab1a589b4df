import uuid

from django.http import JsonResponse


class OrganizationContextMiddleware:
    """Expose the ``X-Organization-Id`` header as ``request.organization_id``.

    The dashboard sends the organization it is currently showing with every
    request; views fall back to it when no explicit id is given.
    """
    HEADER = 'HTTP_X_ORGANIZATION_ID'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        raw = (request.META.get(self.HEADER) or '').strip()
        request.organization_id = None
        if raw:
            try:
                request.organization_id = uuid.UUID(raw)
            except ValueError:
                return JsonResponse(
                    {'success': False, 'message': 'Invalid X-Organization-Id header', 'data': {'code': 'invalid_header'}},
                    status=400,
                )
        return self.get_response(request)
