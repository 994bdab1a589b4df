"""
Authentication views.

Login issues both a DRF token (``Authorization: Token <key>``) and a JWT
pair; refresh and logout work on the JWT refresh token.  These views live
outside ``facilities.authentication`` so DRF can import the
authentication class without pulling in the views.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from .responses import envelope
from .serializers.auth import LoginSerializer, LogoutSerializer
from .services.audit import log_action


def _client_ip(request):
    return request.META.get('REMOTE_ADDR')


def user_payload(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'role': user.role,
        'organizationId': str(user.organization_id) if user.organization_id else None,
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Username/password login.

    Failed attempts are audited with the submitted username only.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': _client_ip(request)})
        return envelope(None, 'Invalid username or password', status=400)

    log_action(user=user, action='login', organization=user.organization, object_type='user',
               object_id=user.id, detail={'result': 'ok', 'ip': _client_ip(request)})
    token, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return envelope({
        'token': token.key,
        'access': str(refresh.access_token),
        'refresh': str(refresh),
        'user': user_payload(user),
    }, 'Login successful')


login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Exchange a refresh token for a new access token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    return envelope(dict(s.validated_data))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            raise ValidationError({'refresh': [str(e)]})
        count = 1
    else:
        count = 0
        for outstanding in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
            count += int(created)
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return envelope({'blacklisted': count}, 'Logged out')
