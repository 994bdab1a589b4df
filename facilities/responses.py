from rest_framework import status as http_status
from rest_framework.response import Response


def envelope(data=None, message: str = '', status: int = http_status.HTTP_200_OK) -> Response:
    """Wrap ``data`` in the ``{success, message, data}`` shape used by every endpoint."""
    return Response({'success': status < 400, 'message': message, 'data': data}, status=status)


def paginate(qs, page: int, limit: int):
    """Slice a queryset and return ``(items, pagination)``."""
    total = qs.count()
    start = (page - 1) * limit
    pages = (total + limit - 1) // limit if limit else 0
    return list(qs[start:start + limit]), {
        'current': page,
        'pages': pages,
        'total': total,
        'limit': limit,
    }
