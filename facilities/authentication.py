"""
Token authentication for the dashboard API.

Kept apart from the auth views so that REST framework can import the
authentication class from settings without pulling in view modules.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Token <key>`` authentication.

    Tokens are issued alongside the JWT pair at login; inactive users are
    rejected by the base class.
    """

    keyword = 'Token'
